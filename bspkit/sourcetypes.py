"""Record types of the VBSP map format, decoded from little-endian bytes."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, TypeVar

from .vec import Vec3

HEADER_LUMPS = 64

_T = TypeVar("_T")


class EmitType(IntEnum):
    SURFACE = 0
    POINT = 1
    SPOTLIGHT = 2
    SKYLIGHT = 3
    QUAKELIGHT = 4
    SKYAMBIENT = 5


def _signed(value: int, bits: int) -> int:
    sign = 1 << (bits - 1)
    return value - (1 << bits) if value & sign else value


@dataclass(frozen=True)
class Lump:
    file_ofs: int
    file_len: int
    version: int
    four_cc: bytes

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<3i4s")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def _decode(cls, v: tuple) -> Lump:
        return cls(*v)


@dataclass(frozen=True)
class SourceHeader:
    ident: int
    version: int
    lumps: list[Lump]


_FILE_HEADER = struct.Struct("<2i")


def parse_header(data: bytes) -> SourceHeader:
    """Identifier, version and the lump directory at the start of a map file."""
    needed = _FILE_HEADER.size + HEADER_LUMPS * Lump.SIZE
    if len(data) < needed:
        raise ValueError(f"header needs {needed} bytes, got {len(data)}")
    ident, version = _FILE_HEADER.unpack_from(data)
    lumps = unpack_array(Lump, memoryview(data)[_FILE_HEADER.size:needed])
    return SourceHeader(ident=ident, version=version, lumps=lumps)


def unpack_array(cls: type[_T], data: bytes) -> list[_T]:
    """Every whole record of ``cls`` in ``data``; trailing partial bytes are ignored."""
    size = cls.SIZE
    usable = len(data) - len(data) % size
    return [cls._decode(values) for values in cls._STRUCT.iter_unpack(memoryview(data)[:usable])]


@dataclass(frozen=True)
class Plane:
    normal: Vec3
    dist: float
    type: int

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<4fi")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def _decode(cls, v: tuple) -> Plane:
        return cls(normal=Vec3(*v[0:3]), dist=v[3], type=v[4])


@dataclass(frozen=True)
class Node:
    plane_num: int
    children: tuple[int, int]
    mins: tuple[int, int, int]
    maxs: tuple[int, int, int]
    first_face: int
    num_faces: int
    area: int

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<3i6h2H2h")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def _decode(cls, v: tuple) -> Node:
        return cls(
            plane_num=v[0],
            children=(v[1], v[2]),
            mins=v[3:6],
            maxs=v[6:9],
            first_face=v[9],
            num_faces=v[10],
            area=v[11],
        )


@dataclass(frozen=True)
class ColorRGBExp32:
    r: int
    g: int
    b: int
    exponent: int

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<3Bb")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def _decode(cls, v: tuple) -> ColorRGBExp32:
        return cls(*v)


@dataclass(frozen=True)
class Leaf:
    contents: int
    cluster: int
    area: int
    flags: int
    mins: tuple[int, int, int]
    maxs: tuple[int, int, int]
    first_leaf_face: int
    num_leaf_faces: int
    first_leaf_brush: int
    num_leaf_brushes: int
    leaf_water_data_id: int
    ambient_lighting: tuple[ColorRGBExp32, ...]

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<ihH3h3h4Hh24sh")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def _decode(cls, v: tuple) -> Leaf:
        bits = v[2]
        return cls(
            contents=v[0],
            cluster=v[1],
            area=_signed(bits & 0x1FF, 9),
            flags=_signed(bits >> 9, 7),
            mins=v[3:6],
            maxs=v[6:9],
            first_leaf_face=v[9],
            num_leaf_faces=v[10],
            first_leaf_brush=v[11],
            num_leaf_brushes=v[12],
            leaf_water_data_id=v[13],
            ambient_lighting=tuple(unpack_array(ColorRGBExp32, v[14])),
        )


@dataclass(frozen=True)
class Face:
    plane_num: int
    side: int
    on_node: int
    first_edge: int
    num_edges: int
    tex_info: int
    disp_info: int
    surface_fog_volume_id: int
    styles: tuple[int, int, int, int]
    light_ofs: int
    area: float
    lightmap_texture_mins_in_luxels: tuple[int, int]
    lightmap_texture_size_in_luxels: tuple[int, int]
    orig_face: int
    num_prims: int
    first_prim_id: int
    smoothing_groups: int

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<Hbbi3hb4Bxif2i2ii2HI")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def _decode(cls, v: tuple) -> Face:
        return cls(
            plane_num=v[0],
            side=v[1],
            on_node=v[2],
            first_edge=v[3],
            num_edges=v[4],
            tex_info=v[5],
            disp_info=v[6],
            surface_fog_volume_id=v[7],
            styles=v[8:12],
            light_ofs=v[12],
            area=v[13],
            lightmap_texture_mins_in_luxels=v[14:16],
            lightmap_texture_size_in_luxels=v[16:18],
            orig_face=v[18],
            num_prims=v[19],
            first_prim_id=v[20],
            smoothing_groups=v[21],
        )


@dataclass(frozen=True)
class TexInfo:
    texture_vec_s: Vec3
    texture_offset_s: float
    texture_vec_t: Vec3
    texture_offset_t: float
    lightmap_vec_s: Vec3
    lightmap_offset_s: float
    lightmap_vec_t: Vec3
    lightmap_offset_t: float
    flags: int
    tex_data: int

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<16f2i")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def _decode(cls, v: tuple) -> TexInfo:
        return cls(
            texture_vec_s=Vec3(*v[0:3]),
            texture_offset_s=v[3],
            texture_vec_t=Vec3(*v[4:7]),
            texture_offset_t=v[7],
            lightmap_vec_s=Vec3(*v[8:11]),
            lightmap_offset_s=v[11],
            lightmap_vec_t=Vec3(*v[12:15]),
            lightmap_offset_t=v[15],
            flags=v[16],
            tex_data=v[17],
        )


@dataclass(frozen=True)
class TexData:
    reflectivity: Vec3
    name_string_table_id: int
    width: int
    height: int
    view_width: int
    view_height: int

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<3f5i")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def _decode(cls, v: tuple) -> TexData:
        return cls(Vec3(*v[0:3]), *v[3:8])


@dataclass(frozen=True)
class Edge:
    v: tuple[int, int]

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<2H")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def _decode(cls, v: tuple) -> Edge:
        return cls(v=(v[0], v[1]))


@dataclass(frozen=True)
class Model:
    mins: Vec3
    maxs: Vec3
    origin: Vec3
    head_node: int
    first_face: int
    num_faces: int

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<9f3i")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def _decode(cls, v: tuple) -> Model:
        return cls(
            mins=Vec3(*v[0:3]),
            maxs=Vec3(*v[3:6]),
            origin=Vec3(*v[6:9]),
            head_node=v[9],
            first_face=v[10],
            num_faces=v[11],
        )


@dataclass(frozen=True)
class DispInfo:
    start_position: Vec3
    disp_vert_start: int
    disp_tri_start: int
    power: int
    min_tess: int
    smoothing_angle: float
    contents: int
    map_face: int
    lightmap_alpha_start: int
    lightmap_sample_position_start: int
    neighbor_data: bytes
    allowed_verts: tuple[int, ...]

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<3f4ifiH2x2i86s2x10I")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def _decode(cls, v: tuple) -> DispInfo:
        return cls(
            start_position=Vec3(*v[0:3]),
            disp_vert_start=v[3],
            disp_tri_start=v[4],
            power=v[5],
            min_tess=v[6],
            smoothing_angle=v[7],
            contents=v[8],
            map_face=v[9],
            lightmap_alpha_start=v[10],
            lightmap_sample_position_start=v[11],
            neighbor_data=v[12],
            allowed_verts=v[13:23],
        )


@dataclass(frozen=True)
class DispVert:
    pos: Vec3
    distance: float
    alpha: float

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<5f")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def _decode(cls, v: tuple) -> DispVert:
        return cls(pos=Vec3(*v[0:3]), distance=v[3], alpha=v[4])


@dataclass(frozen=True)
class GameLump:
    id: int
    flags: int
    version: int
    file_ofs: int
    file_len: int

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<i2H2i")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def _decode(cls, v: tuple) -> GameLump:
        return cls(*v)


@dataclass(frozen=True)
class WorldLight:
    origin: Vec3
    intensity: Vec3
    normal: Vec3
    cluster: int
    type: EmitType
    style: int
    stopdot: float
    stopdot2: float
    exponent: float
    radius: float
    constant_attn: float
    linear_attn: float
    quadratic_attn: float
    flags: int
    tex_info: int
    owner: int

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<9f3i7f3i")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def _decode(cls, v: tuple) -> WorldLight:
        return cls(
            origin=Vec3(*v[0:3]),
            intensity=Vec3(*v[3:6]),
            normal=Vec3(*v[6:9]),
            cluster=v[9],
            type=EmitType(v[10]),
            style=v[11],
            stopdot=v[12],
            stopdot2=v[13],
            exponent=v[14],
            radius=v[15],
            constant_attn=v[16],
            linear_attn=v[17],
            quadratic_attn=v[18],
            flags=v[19],
            tex_info=v[20],
            owner=v[21],
        )