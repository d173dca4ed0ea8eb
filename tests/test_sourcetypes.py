import struct

import pytest

from bspkit.sourcetypes import (
    HEADER_LUMPS,
    ColorRGBExp32,
    DispInfo,
    DispVert,
    Edge,
    EmitType,
    Face,
    GameLump,
    Leaf,
    Model,
    Node,
    Plane,
    TexData,
    TexInfo,
    WorldLight,
    parse_header,
    unpack_array,
)
from bspkit.vec import Vec3


def _header_bytes(special_index=5, special=(100, 200, 1, b"ABCD")):
    lumps = bytearray()
    for i in range(HEADER_LUMPS):
        values = special if i == special_index else (0, 0, 0, b"\0\0\0\0")
        lumps.extend(struct.pack("<3i4s", *values))
    return b"VBSP" + struct.pack("<i", 20) + bytes(lumps)


def test_parse_header_reads_directory():
    header = parse_header(_header_bytes())
    assert header.ident == int.from_bytes(b"VBSP", "little")
    assert header.version == 20
    assert len(header.lumps) == HEADER_LUMPS
    lump = header.lumps[5]
    assert (lump.file_ofs, lump.file_len, lump.version, lump.four_cc) == (100, 200, 1, b"ABCD")


def test_parse_header_too_short_raises():
    with pytest.raises(ValueError):
        parse_header(_header_bytes()[:-1])


def test_unpack_array_planes_ignores_partial_tail():
    data = struct.pack("<4fi", 0.0, 0.0, 1.0, 64.0, 2) + struct.pack("<4fi", 1.0, 0.0, 0.0, -32.0, 0)
    planes = unpack_array(Plane, data + b"\x01\x02")
    assert planes == [
        Plane(Vec3(0.0, 0.0, 1.0), 64.0, 2),
        Plane(Vec3(1.0, 0.0, 0.0), -32.0, 0),
    ]


def test_unpack_array_empty():
    assert unpack_array(Edge, b"") == []


def test_node_fields():
    data = struct.pack("<3i6h2H2h", 3, 1, -2, -10, -20, -30, 10, 20, 30, 7, 4, -1, 0)
    (node,) = unpack_array(Node, data)
    assert node.plane_num == 3
    assert node.children == (1, -2)
    assert node.mins == (-10, -20, -30)
    assert node.maxs == (10, 20, 30)
    assert (node.first_face, node.num_faces, node.area) == (7, 4, -1)


def _leaf_bytes(area_bits):
    ambient = b"".join(struct.pack("<3Bb", i, i + 1, i + 2, -i) for i in range(6))
    return struct.pack(
        "<ihH3h3h4Hh24sh", 1, 5, area_bits, -1, -2, -3, 1, 2, 3, 10, 11, 12, 13, -1, ambient, 0
    )


def test_leaf_bitfield_and_lighting():
    (leaf,) = unpack_array(Leaf, _leaf_bytes(5 | (3 << 9)))
    assert (leaf.contents, leaf.cluster) == (1, 5)
    assert (leaf.area, leaf.flags) == (5, 3)
    assert leaf.mins == (-1, -2, -3)
    assert leaf.maxs == (1, 2, 3)
    assert (leaf.first_leaf_face, leaf.num_leaf_faces) == (10, 11)
    assert (leaf.first_leaf_brush, leaf.num_leaf_brushes) == (12, 13)
    assert leaf.leaf_water_data_id == -1
    assert len(leaf.ambient_lighting) == 6
    assert leaf.ambient_lighting[2] == ColorRGBExp32(2, 3, 4, -2)


def test_leaf_negative_area():
    (leaf,) = unpack_array(Leaf, _leaf_bytes(0x1FF))
    assert leaf.area == -1
    assert leaf.flags == 0


@pytest.mark.parametrize("record, size", [(Face, 56), (Leaf, 56), (DispInfo, 176)])
def test_record_sizes_fixed_by_format(record, size):
    assert record.SIZE == size
    assert len(unpack_array(record, bytes(size * 2))) == 2
    assert len(unpack_array(record, bytes(size * 2 - 1))) == 1
    assert unpack_array(record, bytes(size - 1)) == []


def test_face_fields():
    data = struct.pack(
        "<Hbbi3hb4Bxif2i2ii2HI",
        9, 1, 0, 400, 4, 12, -1, 0, 0, 255, 255, 255, 96, 256.0, -2, 3, 8, 16, 9, 0, 0, 1,
    )
    (face,) = unpack_array(Face, data)
    assert face.plane_num == 9
    assert (face.side, face.on_node) == (1, 0)
    assert (face.first_edge, face.num_edges) == (400, 4)
    assert (face.tex_info, face.disp_info) == (12, -1)
    assert face.styles == (0, 255, 255, 255)
    assert face.light_ofs == 96
    assert face.area == 256.0
    assert face.lightmap_texture_mins_in_luxels == (-2, 3)
    assert face.lightmap_texture_size_in_luxels == (8, 16)
    assert face.orig_face == 9
    assert face.smoothing_groups == 1


def test_texinfo_and_texdata():
    floats = [1.0, 0.0, 0.0, 0.5, 0.0, 1.0, 0.0, 0.25, 0.0, 0.0, 1.0, 2.0, 1.0, 1.0, 0.0, 4.0]
    (info,) = unpack_array(TexInfo, struct.pack("<16f2i", *floats, 1024, 3))
    assert info.texture_vec_s == Vec3(1.0, 0.0, 0.0)
    assert info.texture_offset_t == 0.25
    assert info.lightmap_vec_t == Vec3(1.0, 1.0, 0.0)
    assert info.lightmap_offset_t == 4.0
    assert (info.flags, info.tex_data) == (1024, 3)

    (tex,) = unpack_array(TexData, struct.pack("<3f5i", 0.5, 0.25, 0.125, 7, 512, 256, 512, 256))
    assert tex.reflectivity == Vec3(0.5, 0.25, 0.125)
    assert (tex.name_string_table_id, tex.width, tex.height) == (7, 512, 256)
    assert (tex.view_width, tex.view_height) == (512, 256)


def test_edges_and_game_lumps():
    edges = unpack_array(Edge, struct.pack("<4H", 0, 1, 1, 65535))
    assert [edge.v for edge in edges] == [(0, 1), (1, 65535)]
    (lump,) = unpack_array(GameLump, struct.pack("<i2H2i", int.from_bytes(b"sprp", "big"), 0, 10, 5000, 300))
    assert lump.id == int.from_bytes(b"sprp", "big")
    assert (lump.flags, lump.version, lump.file_ofs, lump.file_len) == (0, 10, 5000, 300)


def test_model_and_dispvert():
    data = struct.pack("<9f3i", -64.0, -64.0, -8.0, 64.0, 64.0, 8.0, 0.0, 0.0, 0.0, 0, 2, 30)
    (model,) = unpack_array(Model, data)
    assert model.mins == Vec3(-64.0, -64.0, -8.0)
    assert model.maxs == Vec3(64.0, 64.0, 8.0)
    assert (model.head_node, model.first_face, model.num_faces) == (0, 2, 30)

    (vert,) = unpack_array(DispVert, struct.pack("<5f", 0.0, 0.0, 1.0, 12.5, 0.75))
    assert vert.pos == Vec3(0.0, 0.0, 1.0)
    assert (vert.distance, vert.alpha) == (12.5, 0.75)


def test_dispinfo_fields():
    neighbors = bytes(range(86))
    allowed = list(range(10, 20))
    data = struct.pack(
        "<3f4ifiH2x2i86s2x10I",
        1.0, 2.0, 3.0, 100, 200, 3, 0, 45.0, 1, 17, 5, 6, neighbors, *allowed,
    )
    (disp,) = unpack_array(DispInfo, data)
    assert disp.start_position == Vec3(1.0, 2.0, 3.0)
    assert (disp.disp_vert_start, disp.disp_tri_start, disp.power) == (100, 200, 3)
    assert disp.smoothing_angle == 45.0
    assert disp.map_face == 17
    assert (disp.lightmap_alpha_start, disp.lightmap_sample_position_start) == (5, 6)
    assert disp.neighbor_data == neighbors
    assert disp.allowed_verts == tuple(allowed)


def _world_light(type_value):
    return struct.pack(
        "<9f3i7f3i",
        0.0, 0.0, 128.0, 1.0, 0.5, 0.25, 0.0, 0.0, -1.0,
        4, type_value, 0,
        0.5, 0.25, 1.0, 0.0, 0.0, 1.0, 0.0,
        1, -1, 0,
    )


def test_world_light_fields():
    (light,) = unpack_array(WorldLight, _world_light(2))
    assert light.type is EmitType.SPOTLIGHT
    assert light.origin == Vec3(0.0, 0.0, 128.0)
    assert light.intensity == Vec3(1.0, 0.5, 0.25)
    assert light.normal == Vec3(0.0, 0.0, -1.0)
    assert light.cluster == 4
    assert (light.stopdot, light.stopdot2) == (0.5, 0.25)
    assert light.linear_attn == 1.0
    assert (light.flags, light.tex_info, light.owner) == (1, -1, 0)


def test_world_light_unknown_type_raises():
    with pytest.raises(ValueError):
        unpack_array(WorldLight, _world_light(42))