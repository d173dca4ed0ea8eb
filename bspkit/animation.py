"""Skeletal animation playback: sequences of per-bone frames and pose blending."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence as SequenceType

from .camera import IDENTITY, Mat4
from .vec import Vec3

Quat = tuple[float, float, float, float]
"""A quaternion stored as (w, x, y, z)."""


def quat_from_euler(angles: SequenceType[float]) -> Quat:
    """Quaternion for Euler angles (pitch about x, yaw about y, roll about z) in radians."""
    ax, ay, az = angles
    cx, cy, cz = math.cos(ax * 0.5), math.cos(ay * 0.5), math.cos(az * 0.5)
    sx, sy, sz = math.sin(ax * 0.5), math.sin(ay * 0.5), math.sin(az * 0.5)
    return (
        cx * cy * cz + sx * sy * sz,
        sx * cy * cz - cx * sy * sz,
        cx * sy * cz + sx * cy * sz,
        cx * cy * sz - sx * sy * cz,
    )


def quat_to_mat4(q: Quat) -> Mat4:
    """Rotation matrix of ``q`` (rows); the quaternion is used as given, unnormalised."""
    w, x, y, z = q
    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z
    return (
        (1.0 - 2.0 * (yy + zz), 2.0 * (xy - wz), 2.0 * (xz + wy), 0.0),
        (2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz), 2.0 * (yz - wx), 0.0),
        (2.0 * (xz - wy), 2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy), 0.0),
        (0.0, 0.0, 0.0, 1.0),
    )


def mat4_mul(a: Mat4, b: Mat4) -> Mat4:
    """Matrix product ``a @ b``."""
    columns = list(zip(*b))
    return tuple(
        tuple(sum(r * c for r, c in zip(row, column)) for column in columns) for row in a
    )


def _with_translation(m: Mat4, position: Vec3) -> Mat4:
    return tuple(
        (*row[:3], position[r]) if r < 3 else row for r, row in enumerate(m)
    )


def _blend_quat(a: Quat, b: Quat, t: float) -> Quat:
    return tuple(p * (1.0 - t) + q * t for p, q in zip(a, b))


@dataclass
class Frame:
    """Pose of every bone at one key frame."""

    rotations: list[Quat] = field(default_factory=list)
    positions: list[Vec3] = field(default_factory=list)


@dataclass
class Sequence:
    name: str = ""
    frames: list[Frame] = field(default_factory=list)
    fps: float = 0.0
    ground_speed: float = 0.0
    bbmin: Vec3 = field(default_factory=Vec3)
    bbmax: Vec3 = field(default_factory=Vec3)


@dataclass
class Animation:
    """Sequences plus the parent index of each bone (-1 for a root)."""

    sequences: list[Sequence] = field(default_factory=list)
    bones: list[int] = field(default_factory=list)


class Animator:
    """Plays one sequence of an animation and keeps the bone transforms."""

    def __init__(self, animation: Animation | None = None) -> None:
        self.animation = animation
        self.frame = 0.0
        self.frame_time = 0.0
        self.anim_duration = 0.0
        self.seq_index = 0
        self.transforms: list[Mat4] = []

    def set_seq_index(self, index: int) -> None:
        self.seq_index = index
        self.frame_time = 0.0
        self.frame = 0.0

    def num_sequences(self) -> int:
        if self.animation is None:
            return 0
        return len(self.animation.sequences)

    def _current(self) -> Sequence:
        if self.animation is None:
            raise ValueError("animator has no animation")
        return self.animation.sequences[self.seq_index]

    def min_bounds(self) -> Vec3:
        return self._current().bbmin

    def max_bounds(self) -> Vec3:
        return self._current().bbmax

    def update(self, dt: float) -> None:
        """Pose the bones at the current frame, then advance the clock by ``dt``."""
        if self.animation is None:
            return
        if self.seq_index >= len(self.animation.sequences):
            return
        seq = self.animation.sequences[self.seq_index]
        if not seq.frames:
            return

        count = len(seq.frames)
        self.anim_duration = count / seq.fps if seq.fps else math.inf

        self._update_pose(seq)

        self.frame_time += dt
        if self.frame_time >= self.anim_duration:
            self.frame_time = 0.0

        self.frame = count * (self.frame_time / self.anim_duration)

    def _update_pose(self, seq: Sequence) -> None:
        bones = self.animation.bones
        if len(self.transforms) < len(bones):
            self.transforms.extend([IDENTITY] * (len(bones) - len(self.transforms)))

        curr_index = int(self.frame)
        next_index = (curr_index + 1) % len(seq.frames)
        factor = self.frame - math.floor(self.frame)

        curr = seq.frames[curr_index]
        nxt = seq.frames[next_index]

        for i, parent in enumerate(bones):
            rotation = _blend_quat(curr.rotations[i], nxt.rotations[i], factor)
            position = curr.positions[i].lerp(nxt.positions[i], factor)
            transform = _with_translation(quat_to_mat4(rotation), position)
            if parent != -1:
                transform = mat4_mul(self.transforms[parent], transform)
            self.transforms[i] = transform


@dataclass
class ModelInstance:
    """An animated model placed in the world."""

    animator: Animator = field(default_factory=Animator)
    position: Vec3 = field(default_factory=Vec3)
    yaw: float = 0.0