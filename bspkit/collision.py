"""Swept axis-aligned box traces against the solid brushes of an IBSP map."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from .q3bsp import Q3BSPAsset
from .q3types import BSPBrush, BSPPlane
from .vec import Vec3

SURF_CLIP_EPSILON = 0.125
CONTENTS_SOLID = 1
_NONAXIAL_OFFSET = 2048.0


class PlaneType(IntEnum):
    X = 0
    Y = 1
    Z = 2
    NONAXIAL = 3


@dataclass(frozen=True)
class _Plane:
    normal: Vec3
    distance: float
    signbits: int
    type: PlaneType

    @classmethod
    def from_bsp(cls, plane: BSPPlane) -> _Plane:
        normal = plane.normal
        signbits = sum(1 << axis for axis, value in enumerate(normal) if value < 0)
        if normal.x == 1.0:
            plane_type = PlaneType.X
        elif normal.y == 1.0:
            plane_type = PlaneType.Y
        elif normal.z == 1.0:
            plane_type = PlaneType.Z
        else:
            plane_type = PlaneType.NONAXIAL
        return cls(normal, plane.distance, signbits, plane_type)


@dataclass
class HitResult:
    """Outcome of a trace: how far the box got and what it hit."""

    endpos: Vec3
    normal: Vec3
    fraction: float
    startsolid: bool
    allsolid: bool
    texture_id: int
    surface_flags: int


@dataclass
class _TraceWork:
    start: Vec3
    end: Vec3
    mins: Vec3
    maxs: Vec3
    offsets: list[Vec3]
    frac: float = 1.0
    startsolid: bool = False
    allsolid: bool = False
    normal: Vec3 = field(default_factory=Vec3)
    surface_flags: int = 0
    texture: int = -1


class Q3BspCollision:
    """Collision world built from the BSP tree and brushes of a map."""

    def __init__(self, bsp: Q3BSPAsset) -> None:
        self._nodes = list(bsp.nodes)
        self._leafs = list(bsp.leafs)
        self._brushes = list(bsp.brushes)
        self._brush_sides = list(bsp.brush_sides)
        self._leaf_brushes = list(bsp.leaf_brushes)
        self._planes = [_Plane.from_bsp(plane) for plane in bsp.planes]
        self._textures = list(bsp.textures)

    def trace(self, start: Vec3, end: Vec3, mins: Vec3, maxs: Vec3) -> HitResult:
        """Sweep the box ``mins``..``maxs`` from ``start`` to ``end``."""
        offset = (mins + maxs) * 0.5
        box_mins = mins - offset
        box_maxs = maxs - offset
        offsets = [
            Vec3(
                box_maxs.x if k & 1 else box_mins.x,
                box_maxs.y if k & 2 else box_mins.y,
                box_maxs.z if k & 4 else box_mins.z,
            )
            for k in range(8)
        ]
        work = _TraceWork(
            start=start + offset,
            end=end + offset,
            mins=box_mins,
            maxs=box_maxs,
            offsets=offsets,
        )

        self._trace_node(work, 0, 0.0, 1.0, work.start, work.end)

        if work.frac == 1:
            endpos = end
        else:
            endpos = start + (end - start) * work.frac

        return HitResult(
            endpos=endpos,
            normal=work.normal,
            fraction=work.frac,
            startsolid=work.startsolid,
            allsolid=work.allsolid,
            texture_id=work.texture,
            surface_flags=work.surface_flags,
        )

    def find_cluster_area(self, pos: Vec3) -> tuple[int, int]:
        """Visibility cluster and area of the leaf that contains ``pos``."""
        index = 0
        while index >= 0:
            node = self._nodes[index]
            plane = self._planes[node.plane]
            distance = plane.normal.dot(pos) - plane.distance
            index = node.children[0] if distance >= 0 else node.children[1]
        leaf = self._leafs[~index]
        return leaf.cluster, leaf.area

    def _trace_node(
        self,
        work: _TraceWork,
        index: int,
        start_frac: float,
        end_frac: float,
        start: Vec3,
        end: Vec3,
    ) -> None:
        if index < 0:
            self._trace_leaf(work, -(index + 1))
            return

        node = self._nodes[index]
        plane = self._planes[node.plane]

        if plane.type < PlaneType.NONAXIAL:
            axis = int(plane.type)
            start_distance = start[axis] - plane.distance
            end_distance = end[axis] - plane.distance
            offset = work.maxs[axis]
        else:
            start_distance = start.dot(plane.normal) - plane.distance
            end_distance = end.dot(plane.normal) - plane.distance
            offset = 0.0 if work.mins == work.maxs else _NONAXIAL_OFFSET

        if start_distance >= offset + 1 and end_distance >= offset + 1:
            self._trace_node(work, node.children[0], start_frac, end_frac, start, end)
            return

        if start_distance < -offset - 1 and end_distance < -offset - 1:
            self._trace_node(work, node.children[1], start_frac, end_frac, start, end)
            return

        if start_distance < end_distance:
            inv = 1.0 / (start_distance - end_distance)
            frac1 = (start_distance - offset + SURF_CLIP_EPSILON) * inv
            frac2 = (start_distance + offset + SURF_CLIP_EPSILON) * inv
            side = 1
        elif start_distance > end_distance:
            inv = 1.0 / (start_distance - end_distance)
            frac1 = (start_distance + offset + SURF_CLIP_EPSILON) * inv
            frac2 = (start_distance - offset - SURF_CLIP_EPSILON) * inv
            side = 0
        else:
            frac1 = 1.0
            frac2 = 0.0
            side = 0

        frac1 = max(0.0, min(1.0, frac1))
        frac2 = max(0.0, min(1.0, frac2))

        mid_frac = start_frac + (end_frac - start_frac) * frac1
        mid = start + (end - start) * frac1
        self._trace_node(work, node.children[side], start_frac, mid_frac, start, mid)

        mid_frac = start_frac + (end_frac - start_frac) * frac2
        mid = start + (end - start) * frac2
        self._trace_node(work, node.children[side ^ 1], mid_frac, end_frac, mid, end)

    def _trace_leaf(self, work: _TraceWork, index: int) -> None:
        leaf = self._leafs[index]
        first = leaf.leaf_brush
        for brush_index in self._leaf_brushes[first:first + leaf.num_leaf_brushes]:
            brush = self._brushes[brush_index]
            if self._textures[brush.texture_id].contents & CONTENTS_SOLID:
                self._trace_brush(work, brush)
                if not work.frac:
                    return

    def _trace_brush(self, work: _TraceWork, brush: BSPBrush) -> None:
        start_frac = -1.0
        end_frac = 1.0
        closest_plane: _Plane | None = None
        texture = -1
        surface_flags = 0
        getout = False
        startout = False

        first = brush.brush_side
        for side in self._brush_sides[first:first + brush.num_brush_sides]:
            plane = self._planes[side.plane]
            dist = plane.distance - work.offsets[plane.signbits].dot(plane.normal)
            start_distance = work.start.dot(plane.normal) - dist
            end_distance = work.end.dot(plane.normal) - dist

            if start_distance > 0:
                startout = True
            if end_distance > 0:
                getout = True

            if start_distance > 0 and (
                end_distance >= SURF_CLIP_EPSILON or end_distance >= start_distance
            ):
                return

            if start_distance <= 0 and end_distance <= 0:
                continue

            if start_distance > end_distance:
                frac = (start_distance - SURF_CLIP_EPSILON) / (start_distance - end_distance)
                if frac > start_frac:
                    start_frac = frac
                    closest_plane = plane
                    texture = side.texture_id
                    surface_flags = self._textures[texture].flags
            else:
                frac = (start_distance + SURF_CLIP_EPSILON) / (start_distance - end_distance)
                end_frac = min(end_frac, frac)

        if not startout:
            work.startsolid = True
            if not getout:
                work.allsolid = True
                work.frac = 0.0
            return

        if start_frac < end_frac and start_frac > -1 and start_frac < work.frac:
            work.frac = max(start_frac, 0.0)
            if closest_plane is not None:
                work.normal = closest_plane.normal
            work.surface_flags = surface_flags
            work.texture = texture