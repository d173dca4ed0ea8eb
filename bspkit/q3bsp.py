"""Loader for IBSP map files."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass, field
from enum import IntEnum

from .bezier import tesselate_bezier_patches
from .q3types import (
    BSPBrush,
    BSPBrushSide,
    BSPFace,
    BSPLeaf,
    BSPLightmap,
    BSPLightVolume,
    BSPModel,
    BSPNode,
    BSPPlane,
    BSPTexture,
    BSPVertex,
    VisData,
)

MAGIC = b"IBSP"
TESSELATION_LEVEL = 9

_HEADER = struct.Struct("<4si")
_LUMP = struct.Struct("<2i")
_VIS_HEADER = struct.Struct("<2i")
_INT_SIZE = 4


class Lump(IntEnum):
    ENTITIES = 0
    TEXTURES = 1
    PLANES = 2
    NODES = 3
    LEAFS = 4
    LEAF_FACES = 5
    LEAF_BRUSHES = 6
    MODELS = 7
    BRUSHES = 8
    BRUSH_SIDES = 9
    VERTICES = 10
    INDICES = 11
    SHADERS = 12
    FACES = 13
    LIGHTMAPS = 14
    LIGHT_VOLUMES = 15
    VIS_DATA = 16


class BSPFormatError(ValueError):
    """The data is not a well-formed IBSP file."""


def _lump_bytes(data: bytes, lumps: list[tuple[int, int]], which: Lump) -> bytes:
    offset, length = lumps[which]
    if offset < 0 or length < 0 or offset + length > len(data):
        raise BSPFormatError(f"lump {which.name.lower()} lies outside the file")
    return data[offset:offset + length]


def _records(chunk: bytes, record_cls):
    size = record_cls.SIZE
    return [record_cls.from_buffer(chunk, k * size) for k in range(len(chunk) // size)]


def _ints(chunk: bytes) -> list[int]:
    count = len(chunk) // _INT_SIZE
    return list(struct.unpack_from(f"<{count}i", chunk))


def _vis_data(chunk: bytes) -> VisData:
    if len(chunk) < _VIS_HEADER.size:
        return VisData()
    num_clusters, bytes_per_cluster = _VIS_HEADER.unpack_from(chunk)
    size = num_clusters * bytes_per_cluster
    if size < 0 or _VIS_HEADER.size + size > len(chunk):
        raise BSPFormatError("visibility data is truncated")
    return VisData(
        num_clusters=num_clusters,
        bytes_per_cluster=bytes_per_cluster,
        bitsets=bytes(chunk[_VIS_HEADER.size:_VIS_HEADER.size + size]),
    )


@dataclass
class Q3BSPAsset:
    """All lumps of an IBSP map, with Bezier patches already tesselated."""

    version: int = 0
    entities: str = ""
    faces: list[BSPFace] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)
    verts: list[BSPVertex] = field(default_factory=list)
    textures: list[BSPTexture] = field(default_factory=list)
    lightmaps: list[BSPLightmap] = field(default_factory=list)
    nodes: list[BSPNode] = field(default_factory=list)
    leafs: list[BSPLeaf] = field(default_factory=list)
    planes: list[BSPPlane] = field(default_factory=list)
    brushes: list[BSPBrush] = field(default_factory=list)
    brush_sides: list[BSPBrushSide] = field(default_factory=list)
    leaf_brushes: list[int] = field(default_factory=list)
    models: list[BSPModel] = field(default_factory=list)
    light_volumes: list[BSPLightVolume] = field(default_factory=list)
    clusters: VisData = field(default_factory=VisData)

    @classmethod
    def from_bytes(cls, data: bytes) -> Q3BSPAsset:
        data = bytes(data)
        if len(data) < _HEADER.size:
            raise BSPFormatError("file is too short for a header")
        magic, version = _HEADER.unpack_from(data)
        if magic != MAGIC:
            raise BSPFormatError("not an IBSP file")
        directory_end = _HEADER.size + _LUMP.size * len(Lump)
        if len(data) < directory_end:
            raise BSPFormatError("lump directory is truncated")
        lumps = [
            _LUMP.unpack_from(data, _HEADER.size + k * _LUMP.size) for k in range(len(Lump))
        ]

        def lump(which: Lump) -> bytes:
            return _lump_bytes(data, lumps, which)

        asset = cls(
            version=version,
            entities=lump(Lump.ENTITIES).decode("latin-1").rstrip("\0"),
            faces=_records(lump(Lump.FACES), BSPFace),
            indices=_ints(lump(Lump.INDICES)),
            verts=_records(lump(Lump.VERTICES), BSPVertex),
            textures=_records(lump(Lump.TEXTURES), BSPTexture),
            lightmaps=_records(lump(Lump.LIGHTMAPS), BSPLightmap),
            nodes=_records(lump(Lump.NODES), BSPNode),
            leafs=_records(lump(Lump.LEAFS), BSPLeaf),
            planes=_records(lump(Lump.PLANES), BSPPlane),
            brushes=_records(lump(Lump.BRUSHES), BSPBrush),
            brush_sides=_records(lump(Lump.BRUSH_SIDES), BSPBrushSide),
            leaf_brushes=_ints(lump(Lump.LEAF_BRUSHES)),
            models=_records(lump(Lump.MODELS), BSPModel),
            light_volumes=_records(lump(Lump.LIGHT_VOLUMES), BSPLightVolume),
            clusters=_vis_data(lump(Lump.VIS_DATA)),
        )
        tesselate_bezier_patches(asset.faces, asset.verts, asset.indices, TESSELATION_LEVEL)
        return asset

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> Q3BSPAsset:
        with open(path, "rb") as handle:
            return cls.from_bytes(handle.read())