"""Reader for the studio model header: names, texture paths and the mesh hierarchy."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass, field

# id, version, checksum, name, dataLength, 18 floats of eye/illum/hull/view
# boxes, flags, then the 21 count/offset ints up to and including the body parts.
_HEADER = struct.Struct("<2iI64si18fi21i")
_TEXTURE = struct.Struct("<2i14i")
_TEXTURE_DIR = struct.Struct("<i")
_BODYPART = struct.Struct("<4i")
_MODEL = struct.Struct("<64sif9i10i")
_MESH = struct.Struct("<I8i3f17i")

_CHECKSUM = 2
_NAME = 3
_TEXTURE_COUNT = 36
_TEXTURE_OFFSET = 37
_TEXTURE_DIR_COUNT = 38
_TEXTURE_DIR_OFFSET = 39
_BODYPART_COUNT = 43
_BODYPART_OFFSET = 44


def _unpack(layout: struct.Struct, data: bytes, offset: int, what: str) -> tuple:
    if offset < 0 or offset + layout.size > len(data):
        raise ValueError(f"{what} at offset {offset} lies outside the buffer")
    return layout.unpack_from(data, offset)


def _cstring(data: bytes, offset: int, what: str) -> str:
    if offset < 0 or offset >= len(data):
        raise ValueError(f"{what} string at offset {offset} lies outside the buffer")
    end = data.find(b"\0", offset)
    if end == -1:
        end = len(data)
    return data[offset:end].decode("latin-1")


def _fixed_string(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("latin-1")


@dataclass
class MDLMesh:
    skinref_index: int
    vertex_offset: int


@dataclass
class MDLModel:
    name: str
    meshes: list[MDLMesh] = field(default_factory=list)


@dataclass
class MDLBodyPart:
    name: str
    models: list[MDLModel] = field(default_factory=list)


@dataclass
class MDLFile:
    """Names, texture lookup paths and body part / model / mesh layout of a model."""

    checksum: int = 0
    name: str = ""
    texture_names: list[str] = field(default_factory=list)
    texture_dirs: list[str] = field(default_factory=list)
    bodyparts: list[MDLBodyPart] = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data: bytes) -> MDLFile:
        data = bytes(data)
        header = _unpack(_HEADER, data, 0, "header")

        texture_names = []
        for i in range(header[_TEXTURE_COUNT]):
            address = header[_TEXTURE_OFFSET] + i * _TEXTURE.size
            name_offset = _unpack(_TEXTURE, data, address, "texture")[0]
            texture_names.append(_cstring(data, address + name_offset, "texture name"))

        texture_dirs = []
        for i in range(header[_TEXTURE_DIR_COUNT]):
            address = header[_TEXTURE_DIR_OFFSET] + i * _TEXTURE_DIR.size
            (dir_offset,) = _unpack(_TEXTURE_DIR, data, address, "texture directory")
            texture_dirs.append(_cstring(data, dir_offset, "texture directory"))

        bodyparts = [
            _read_bodypart(data, header[_BODYPART_OFFSET] + i * _BODYPART.size)
            for i in range(header[_BODYPART_COUNT])
        ]

        return cls(
            checksum=header[_CHECKSUM],
            name=_fixed_string(header[_NAME]),
            texture_names=texture_names,
            texture_dirs=texture_dirs,
            bodyparts=bodyparts,
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> MDLFile:
        with open(path, "rb") as handle:
            return cls.from_bytes(handle.read())


def _read_bodypart(data: bytes, address: int) -> MDLBodyPart:
    name_index, num_models, _base, model_index = _unpack(_BODYPART, data, address, "body part")
    part = MDLBodyPart(name=_cstring(data, address + name_index, "body part name"))
    for m in range(num_models):
        part.models.append(_read_model(data, address + model_index + m * _MODEL.size))
    return part


def _read_model(data: bytes, address: int) -> MDLModel:
    values = _unpack(_MODEL, data, address, "model")
    raw_name, num_meshes, mesh_index = values[0], values[3], values[4]
    model = MDLModel(name=_fixed_string(raw_name))
    for k in range(num_meshes):
        mesh = _unpack(_MESH, data, address + mesh_index + k * _MESH.size, "mesh")
        model.meshes.append(
            MDLMesh(skinref_index=mesh[0], vertex_offset=mesh[3] & 0xFFFFFFFF)
        )
    return model