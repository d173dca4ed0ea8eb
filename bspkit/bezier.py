"""Tesselation of quadratic Bezier patch faces into triangle meshes."""

from __future__ import annotations

from collections.abc import Sequence

from .q3types import BSPFace, BSPVertex
from .vec import Vec3

PATCH_FACE_TYPE = 2


def _lerp2(a: tuple[float, float], b: tuple[float, float], t: float) -> tuple[float, float]:
    return (a[0] * (1.0 - t) + b[0] * t, a[1] * (1.0 - t) + b[1] * t)


def _mix(a: BSPVertex, b: BSPVertex, t: float) -> BSPVertex:
    """Blend position and both texture coordinates; normal and colour are zeroed."""
    return BSPVertex(
        position=a.position.lerp(b.position, t),
        tex_coord=_lerp2(a.tex_coord, b.tex_coord, t),
        lightmap_coord=_lerp2(a.lightmap_coord, b.lightmap_coord, t),
        normal=Vec3(),
        color=(0, 0, 0, 0),
    )


def _quadratic_bezier(a: BSPVertex, b: BSPVertex, c: BSPVertex, t: float) -> BSPVertex:
    return _mix(_mix(a, b, t), _mix(b, c, t), t)


def count_bezier_patches(faces: Sequence[BSPFace]) -> int:
    """Number of 3x3 control-point patches described by the patch faces."""
    return sum(
        int((face.size[0] - 1) * (face.size[1] - 1) / 4)
        for face in faces
        if face.face_type == PATCH_FACE_TYPE
    )


def _add_patch(
    verts: list[BSPVertex],
    indices: list[int],
    first: int,
    stride: int,
    level: int,
    base_vertex: int,
) -> None:
    relative_base = len(verts) - base_vertex
    step = 1.0 / (level - 1)

    rows = [verts[first + row * stride:first + row * stride + 3] for row in range(3)]
    columns = [
        [_quadratic_bezier(*row, ix * step) for row in rows] for ix in range(level)
    ]
    verts.extend(
        _quadratic_bezier(*columns[ix], iy * step)
        for iy in range(level)
        for ix in range(level)
    )

    for j in range(level - 1):
        for i in range(level - 1):
            ix0 = relative_base + i + j * level
            ix1 = ix0 + 1
            ix2 = ix0 + level
            ix3 = ix2 + 1
            indices.extend((ix0, ix3, ix1, ix0, ix2, ix3))


def tesselate_bezier_patches(
    faces: Sequence[BSPFace],
    verts: list[BSPVertex],
    indices: list[int],
    level: int,
) -> None:
    """Append a ``level`` x ``level`` grid per patch and repoint each patch face at it.

    Indices of a tesselated face are relative to its new ``start_vert_index``.
    """
    if level < 2:
        raise ValueError("tesselation level must be at least 2")

    for face in faces:
        if face.face_type != PATCH_FACE_TYPE:
            continue

        base_vertex = len(verts)
        base_index = len(indices)
        stride = face.size[0]
        i_size = int((face.size[0] - 1) / 2)
        j_size = int((face.size[1] - 1) / 2)

        for i in range(i_size):
            for j in range(j_size):
                first = face.start_vert_index + 2 * (i + j * stride)
                _add_patch(verts, indices, first, stride, level, base_vertex)

        face.start_vert_index = base_vertex
        face.start_index = base_index
        face.num_verts = len(verts) - base_vertex
        face.num_indices = len(indices) - base_index