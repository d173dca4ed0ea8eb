"""Perspective and view matrices for a first-person camera."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from .vec import Vec3

Mat4 = tuple[tuple[float, float, float, float], ...]
"""A 4x4 matrix stored as four rows (mathematical row-major order)."""

IDENTITY: Mat4 = (
    (1.0, 0.0, 0.0, 0.0),
    (0.0, 1.0, 0.0, 0.0),
    (0.0, 0.0, 1.0, 0.0),
    (0.0, 0.0, 0.0, 1.0),
)

WORLD_FOV_DEGREES = 55.0
WORLD_NEAR = 0.1
WORLD_FAR = 8192.0
WEAPON_FOV_DEGREES = 54.0
WEAPON_NEAR = 0.1
WEAPON_FAR = 256.0


def perspective(fovy: float, aspect: float, near: float, far: float) -> Mat4:
    """Right-handed perspective projection mapping depth to [-1, 1]."""
    if aspect == 0:
        raise ValueError("aspect ratio must be non-zero")
    if near == far:
        raise ValueError("near and far planes must differ")
    tan_half = math.tan(fovy / 2.0)
    return (
        (1.0 / (aspect * tan_half), 0.0, 0.0, 0.0),
        (0.0, 1.0 / tan_half, 0.0, 0.0),
        (0.0, 0.0, -(far + near) / (far - near), -(2.0 * far * near) / (far - near)),
        (0.0, 0.0, -1.0, 0.0),
    )


def look_at(eye: Vec3, center: Vec3, up: Vec3) -> Mat4:
    """Right-handed view matrix looking from ``eye`` towards ``center``."""
    f = (center - eye).normalized()
    s = f.cross(up).normalized()
    u = s.cross(f)
    return (
        (s.x, s.y, s.z, -s.dot(eye)),
        (u.x, u.y, u.z, -u.dot(eye)),
        (-f.x, -f.y, -f.z, f.dot(eye)),
        (0.0, 0.0, 0.0, 1.0),
    )


@dataclass
class Camera:
    """Holds world and weapon projections plus the current view."""

    projection: Mat4 = IDENTITY
    view: Mat4 = IDENTITY
    weapon_projection: Mat4 = IDENTITY
    position: Vec3 = field(default_factory=Vec3)
    forward: Vec3 = field(default_factory=Vec3)
    right: Vec3 = field(default_factory=Vec3)
    up: Vec3 = field(default_factory=Vec3)

    def set_aspect_ratio(self, aspect_ratio: float) -> None:
        self.projection = perspective(
            math.radians(WORLD_FOV_DEGREES), aspect_ratio, WORLD_NEAR, WORLD_FAR
        )
        self.weapon_projection = perspective(
            math.radians(WEAPON_FOV_DEGREES), aspect_ratio, WEAPON_NEAR, WEAPON_FAR
        )

    def set_transform(self, position: Vec3, forward: Vec3, right: Vec3, up: Vec3) -> None:
        self.position = position
        self.forward = forward
        self.right = right
        self.up = up
        self.view = look_at(position, position + forward, up)