"""Timed debug line list producing vertex data for line rendering."""

from __future__ import annotations

from dataclasses import dataclass, field

from .vec import Vec3


@dataclass
class DebugLine:
    start: Vec3
    end: Vec3
    color: Vec3
    life_span: float


@dataclass
class DebugLineList:
    """Lines that expire after their life span runs out."""

    lines: list[DebugLine] = field(default_factory=list)
    dirty: bool = True

    def __len__(self) -> int:
        return len(self.lines)

    def add_line(self, start: Vec3, end: Vec3, color: Vec3, life_span: float) -> None:
        self.lines.append(DebugLine(start, end, color, life_span))
        self.dirty = True

    def update(self, dt: float) -> None:
        """Age every line by ``dt`` and drop those whose life span has run out."""
        for line in self.lines:
            line.life_span -= dt
        alive = [line for line in self.lines if line.life_span > 0.0]
        if len(alive) != len(self.lines):
            self.dirty = True
        self.lines = alive

    def vertex_data(self) -> list[float]:
        """Flat xyz pairs for every line; clears the dirty flag."""
        self.dirty = False
        return [c for line in self.lines for c in (*line.start, *line.end)]