"""Ambient and directional light volumes sampled by world position."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from .q3bsp import Q3BSPAsset
from .vec import Vec3

CELL_SIZE_XY = 64.0
CELL_SIZE_Z = 128.0


@dataclass(frozen=True)
class LightSample:
    ambient: Vec3
    color: Vec3
    direction: Vec3


def _cell(value: float, minimum: float, cell_size: float) -> int:
    return math.floor(value / cell_size) - math.ceil(minimum / cell_size) + 1


@dataclass
class LightGrid:
    """Light volumes laid out over the bounds of the world model."""

    mins: Vec3 = field(default_factory=Vec3)
    maxs: Vec3 = field(default_factory=Vec3)
    size_x: int = 0
    size_y: int = 0
    size_z: int = 0
    ambients: list[Vec3] = field(default_factory=list)
    directionals: list[Vec3] = field(default_factory=list)
    directions: list[Vec3] = field(default_factory=list)

    @classmethod
    def from_bsp(cls, bsp: Q3BSPAsset) -> LightGrid:
        if not bsp.models:
            raise ValueError("map has no world model")
        world = bsp.models[0]
        grid = cls(
            mins=world.mins,
            maxs=world.maxs,
            size_x=_cell(world.maxs.x, world.mins.x, CELL_SIZE_XY),
            size_y=_cell(world.maxs.y, world.mins.y, CELL_SIZE_XY),
            size_z=_cell(world.maxs.z, world.mins.z, CELL_SIZE_Z),
        )
        for volume in bsp.light_volumes:
            grid.ambients.append(Vec3(*(c / 255.0 for c in volume.ambient)))
            grid.directionals.append(Vec3(*(c / 255.0 for c in volume.directional)))
            latitude = math.radians(volume.dir[1] * 360.0 / 255.0)
            longitude = math.radians(volume.dir[0] * 360.0 / 255.0)
            grid.directions.append(
                Vec3(
                    math.cos(latitude) * math.sin(longitude),
                    math.sin(latitude) * math.sin(longitude),
                    math.cos(longitude),
                )
            )
        return grid

    def index_for_cell(self, x: int, y: int, z: int) -> int:
        """Flat index of a cell, each coordinate clamped to ``[0, size]``."""
        cx = min(max(x, 0), self.size_x)
        cy = min(max(y, 0), self.size_y)
        cz = min(max(z, 0), self.size_z)
        return cx + cy * self.size_x + cz * self.size_x * self.size_y

    def sample(self, pos: Vec3) -> LightSample | None:
        """Light at ``pos``, or None when the grid has no volume there."""
        if not self.ambients:
            return None
        index = self.index_for_cell(
            _cell(pos.x, self.mins.x, CELL_SIZE_XY),
            _cell(pos.y, self.mins.y, CELL_SIZE_XY),
            _cell(pos.z, self.mins.z, CELL_SIZE_Z),
        )
        if index >= len(self.ambients):
            return None
        return LightSample(
            ambient=self.ambients[index],
            color=self.directionals[index],
            direction=self.directions[index],
        )