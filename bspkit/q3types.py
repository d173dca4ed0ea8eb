"""Record types of the IBSP map format, decoded from little-endian bytes."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar

from .vec import Vec3

LIGHTMAP_WIDTH = 128
LIGHTMAP_HEIGHT = 128


@dataclass
class BSPVertex:
    position: Vec3
    tex_coord: tuple[float, float]
    lightmap_coord: tuple[float, float]
    normal: Vec3
    color: tuple[int, int, int, int]

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<10f4B")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def from_buffer(cls, data, offset=0) -> BSPVertex:
        v = cls._STRUCT.unpack_from(data, offset)
        return cls(
            position=Vec3(*v[0:3]),
            tex_coord=(v[3], v[4]),
            lightmap_coord=(v[5], v[6]),
            normal=Vec3(*v[7:10]),
            color=(v[10], v[11], v[12], v[13]),
        )


@dataclass
class BSPFace:
    texture_id: int
    effect: int
    face_type: int
    start_vert_index: int
    num_verts: int
    start_index: int
    num_indices: int
    lightmap_id: int
    lightmap_corner: tuple[int, int]
    lightmap_size: tuple[int, int]
    lightmap_pos: Vec3
    lightmap_vecs: tuple[Vec3, Vec3]
    normal: Vec3
    size: tuple[int, int]

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<12i12f2i")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def from_buffer(cls, data, offset=0) -> BSPFace:
        v = cls._STRUCT.unpack_from(data, offset)
        return cls(
            texture_id=v[0],
            effect=v[1],
            face_type=v[2],
            start_vert_index=v[3],
            num_verts=v[4],
            start_index=v[5],
            num_indices=v[6],
            lightmap_id=v[7],
            lightmap_corner=(v[8], v[9]),
            lightmap_size=(v[10], v[11]),
            lightmap_pos=Vec3(*v[12:15]),
            lightmap_vecs=(Vec3(*v[15:18]), Vec3(*v[18:21])),
            normal=Vec3(*v[21:24]),
            size=(v[24], v[25]),
        )


@dataclass
class BSPTexture:
    name: str
    flags: int
    contents: int

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<64s2i")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def from_buffer(cls, data, offset=0) -> BSPTexture:
        raw, flags, contents = cls._STRUCT.unpack_from(data, offset)
        name = raw.split(b"\0", 1)[0].decode("latin-1")
        return cls(name=name, flags=flags, contents=contents)


@dataclass
class BSPLightmap:
    """A 128x128 RGB lightmap image."""

    image_bits: bytes

    SIZE: ClassVar[int] = LIGHTMAP_WIDTH * LIGHTMAP_HEIGHT * 3

    @classmethod
    def from_buffer(cls, data, offset=0) -> BSPLightmap:
        chunk = bytes(data[offset:offset + cls.SIZE])
        if len(chunk) != cls.SIZE:
            raise struct.error(f"lightmap needs {cls.SIZE} bytes, got {len(chunk)}")
        return cls(image_bits=chunk)


@dataclass
class BSPNode:
    plane: int
    children: tuple[int, int]
    mins: tuple[int, int, int]
    maxs: tuple[int, int, int]

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<9i")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def from_buffer(cls, data, offset=0) -> BSPNode:
        v = cls._STRUCT.unpack_from(data, offset)
        return cls(plane=v[0], children=(v[1], v[2]), mins=v[3:6], maxs=v[6:9])


@dataclass
class BSPLeaf:
    cluster: int
    area: int
    mins: tuple[int, int, int]
    maxs: tuple[int, int, int]
    leaf_face: int
    num_leaf_faces: int
    leaf_brush: int
    num_leaf_brushes: int

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<12i")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def from_buffer(cls, data, offset=0) -> BSPLeaf:
        v = cls._STRUCT.unpack_from(data, offset)
        return cls(
            cluster=v[0],
            area=v[1],
            mins=v[2:5],
            maxs=v[5:8],
            leaf_face=v[8],
            num_leaf_faces=v[9],
            leaf_brush=v[10],
            num_leaf_brushes=v[11],
        )


@dataclass
class BSPPlane:
    normal: Vec3
    distance: float

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<4f")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def from_buffer(cls, data, offset=0) -> BSPPlane:
        v = cls._STRUCT.unpack_from(data, offset)
        return cls(normal=Vec3(*v[0:3]), distance=v[3])


@dataclass
class BSPBrush:
    brush_side: int
    num_brush_sides: int
    texture_id: int

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<3i")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def from_buffer(cls, data, offset=0) -> BSPBrush:
        return cls(*cls._STRUCT.unpack_from(data, offset))


@dataclass
class BSPBrushSide:
    plane: int
    texture_id: int

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<2i")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def from_buffer(cls, data, offset=0) -> BSPBrushSide:
        return cls(*cls._STRUCT.unpack_from(data, offset))


@dataclass
class BSPModel:
    mins: Vec3
    maxs: Vec3
    face_index: int
    num_faces: int
    brush_index: int
    num_brushes: int

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<6f4i")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def from_buffer(cls, data, offset=0) -> BSPModel:
        v = cls._STRUCT.unpack_from(data, offset)
        return cls(
            mins=Vec3(*v[0:3]),
            maxs=Vec3(*v[3:6]),
            face_index=v[6],
            num_faces=v[7],
            brush_index=v[8],
            num_brushes=v[9],
        )


@dataclass
class BSPLightVolume:
    ambient: tuple[int, int, int]
    directional: tuple[int, int, int]
    dir: tuple[int, int]

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<8B")
    SIZE: ClassVar[int] = _STRUCT.size

    @classmethod
    def from_buffer(cls, data, offset=0) -> BSPLightVolume:
        v = cls._STRUCT.unpack_from(data, offset)
        return cls(ambient=v[0:3], directional=v[3:6], dir=v[6:8])


@dataclass
class VisData:
    """Potentially visible set: one bitset of clusters per cluster."""

    num_clusters: int = 0
    bytes_per_cluster: int = 0
    bitsets: bytes = b""

    def is_cluster_visible(self, current: int, test: int) -> bool:
        if not self.bitsets or current < 0:
            return True
        vis_set = self.bitsets[current * self.bytes_per_cluster + test // 8]
        return bool(vis_set & (1 << (test & 7)))