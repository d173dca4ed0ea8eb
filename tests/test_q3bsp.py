import struct

import pytest

from bspkit.q3bsp import BSPFormatError, Lump, Q3BSPAsset
from bspkit.vec import Vec3

LUMP_COUNT = 17
HEADER_SIZE = 8 + LUMP_COUNT * 8


def build_bsp(lumps, magic=b"IBSP", version=0x2E):
    directory = []
    body = b""
    offset = HEADER_SIZE
    for index in range(LUMP_COUNT):
        chunk = lumps.get(index, b"")
        directory.append(struct.pack("<2i", offset, len(chunk)))
        body += chunk
        offset += len(chunk)
    return magic + struct.pack("<i", version) + b"".join(directory) + body


def pack_vertex(pos, uv=(0.0, 0.0), lm=(0.0, 0.0), normal=(0.0, 0.0, 1.0), color=(1, 2, 3, 4)):
    return struct.pack("<10f4B", *pos, *uv, *lm, *normal, *color)


def pack_face(face_type, start_vert, num_verts, start_index, num_indices, size=(0, 0)):
    return struct.pack(
        "<12i12f2i",
        0, -1, face_type, start_vert, num_verts, start_index, num_indices, -1,
        0, 0, 0, 0,
        *([0.0] * 9), 0.0, 0.0, 1.0,
        *size,
    )


def full_lumps():
    texture = struct.pack("<64s2i", b"textures/base/floor", 4, 1)
    vis = struct.pack("<2i", 2, 1) + b"\x03\x01"
    return {
        Lump.ENTITIES: b'{ "classname" "worldspawn" }\x00',
        Lump.TEXTURES: texture,
        Lump.PLANES: struct.pack("<4f", 0.0, 0.0, 1.0, 16.0),
        Lump.NODES: struct.pack("<9i", 0, 1, -2, -8, -8, -8, 8, 8, 8),
        Lump.LEAFS: struct.pack("<12i", 5, 6, -1, -1, -1, 1, 1, 1, 0, 0, 0, 1),
        Lump.LEAF_BRUSHES: struct.pack("<2i", 0, 3),
        Lump.MODELS: struct.pack("<6f4i", -1, -2, -3, 4, 5, 6, 0, 1, 0, 1),
        Lump.BRUSHES: struct.pack("<3i", 0, 6, 0),
        Lump.BRUSH_SIDES: struct.pack("<2i", 0, 0) + struct.pack("<2i", 1, 0),
        Lump.VERTICES: b"".join(
            pack_vertex((float(x), float(y), 0.0)) for x, y in [(0, 0), (1, 0), (0, 1)]
        ),
        Lump.INDICES: struct.pack("<3i", 0, 1, 2),
        Lump.FACES: pack_face(1, 0, 3, 0, 3),
        Lump.LIGHTMAPS: bytes(range(256)) * 192,
        Lump.LIGHT_VOLUMES: bytes([10, 20, 30, 40, 50, 60, 70, 80]),
        Lump.VIS_DATA: vis,
    }


def test_round_trip_of_all_lumps():
    asset = Q3BSPAsset.from_bytes(build_bsp(full_lumps()))
    assert asset.version == 0x2E
    assert asset.entities == '{ "classname" "worldspawn" }'
    assert [t.name for t in asset.textures] == ["textures/base/floor"]
    assert asset.textures[0].flags == 4 and asset.textures[0].contents == 1
    assert asset.planes[0].normal == Vec3(0.0, 0.0, 1.0)
    assert asset.planes[0].distance == 16.0
    assert asset.nodes[0].children == (1, -2)
    assert asset.leafs[0].cluster == 5 and asset.leafs[0].num_leaf_brushes == 1
    assert asset.leaf_brushes == [0, 3]
    assert asset.models[0].mins == Vec3(-1, -2, -3)
    assert asset.models[0].maxs == Vec3(4, 5, 6)
    assert len(asset.brushes) == 1 and asset.brushes[0].num_brush_sides == 6
    assert [s.plane for s in asset.brush_sides] == [0, 1]
    assert [v.position for v in asset.verts] == [Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(0, 1, 0)]
    assert asset.verts[0].color == (1, 2, 3, 4)
    assert asset.indices == [0, 1, 2]
    assert asset.faces[0].num_indices == 3
    assert asset.lightmaps[0].image_bits == bytes(range(256)) * 192
    volume = asset.light_volumes[0]
    assert volume.ambient == (10, 20, 30)
    assert volume.directional == (40, 50, 60)
    assert volume.dir == (70, 80)


def test_vis_data_loaded():
    asset = Q3BSPAsset.from_bytes(build_bsp(full_lumps()))
    assert asset.clusters.num_clusters == 2
    assert asset.clusters.bytes_per_cluster == 1
    assert asset.clusters.bitsets == b"\x03\x01"
    assert asset.clusters.is_cluster_visible(0, 1) is True
    assert asset.clusters.is_cluster_visible(1, 1) is False


def test_patch_faces_are_tesselated_on_load():
    lumps = full_lumps()
    control = [(float(x), float(y)) for y in range(3) for x in range(3)]
    lumps[Lump.VERTICES] = b"".join(pack_vertex((x, y, 0.0)) for x, y in control)
    lumps[Lump.INDICES] = b""
    lumps[Lump.FACES] = pack_face(2, 0, 9, 0, 0, size=(3, 3))
    asset = Q3BSPAsset.from_bytes(build_bsp(lumps))
    face = asset.faces[0]
    assert face.start_vert_index == 9
    assert face.num_verts == 9 * 9
    assert len(asset.verts) == 9 + 9 * 9
    assert face.num_indices == len(asset.indices)


def test_empty_lumps_give_empty_asset():
    asset = Q3BSPAsset.from_bytes(build_bsp({}))
    assert asset.faces == [] and asset.verts == [] and asset.entities == ""
    assert asset.clusters.bitsets == b""


def test_wrong_magic_rejected():
    with pytest.raises(BSPFormatError):
        Q3BSPAsset.from_bytes(build_bsp(full_lumps(), magic=b"VBSP"))


def test_short_file_rejected():
    with pytest.raises(BSPFormatError):
        Q3BSPAsset.from_bytes(b"IBSP")
    with pytest.raises(BSPFormatError):
        Q3BSPAsset.from_bytes(build_bsp({})[:40])


def test_lump_past_end_rejected():
    data = bytearray(build_bsp({}))
    struct.pack_into("<2i", data, 8 + Lump.FACES * 8, HEADER_SIZE, 1000)
    with pytest.raises(BSPFormatError):
        Q3BSPAsset.from_bytes(bytes(data))


def test_truncated_vis_data_rejected():
    lumps = full_lumps()
    lumps[Lump.VIS_DATA] = struct.pack("<2i", 4, 4) + b"\x00"
    with pytest.raises(BSPFormatError):
        Q3BSPAsset.from_bytes(build_bsp(lumps))


def test_from_file(tmp_path):
    path = tmp_path / "map.bsp"
    path.write_bytes(build_bsp(full_lumps()))
    asset = Q3BSPAsset.from_file(path)
    assert asset.indices == [0, 1, 2]
    assert asset.textures[0].name == "textures/base/floor"