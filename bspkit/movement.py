"""Player physics: ground detection, acceleration, friction, jumping and sliding."""

from __future__ import annotations

from enum import IntFlag
from typing import Protocol

from .collision import HitResult
from .vec import Vec3

CL_FORWARDSPEED = 400.0
CL_SIDESPEED = 350.0
CL_MOVEMENT_ACCELERATE = 15.0
CL_MOVEMENT_AIRACCELERATE = 7.0
CL_MOVEMENT_FRICTION = 8.0
SV_GRAVITY = 800.0
SV_MAX_SPEED = 320.0
CL_STOP_SPEED = 200.0
CPM_AIR_STOP_ACCELERATION = 2.5
CPM_AIR_CONTROL_AMOUNT = 150.0
CPM_STRAFE_ACCELERATION = 70.0
CPM_WISH_SPEED = 30.0

MAX_CLIP_PLANES = 5
OVERCLIP = 1.001
STEPSIZE = 18.0
JUMP_VELOCITY = 270.0
GROUND_PROBE_DEPTH = 0.25

PLAYER_MINS = Vec3(-15.0, -15.0, -24.0)
PLAYER_MAXS = Vec3(15.0, 15.0, 32.0)

_MAX_BUMPS = 4
_ZERO = Vec3()
_UP = Vec3(0.0, 0.0, 1.0)


class MovementBits(IntFlag):
    NONE = 0
    JUMP = 1 << 1
    JUMP_THIS_FRAME = 1 << 2
    JUMPING = 1 << 3


class Collision(Protocol):
    def trace(self, start: Vec3, end: Vec3, mins: Vec3, maxs: Vec3) -> HitResult: ...


def _with_z(v: Vec3, z: float) -> Vec3:
    return Vec3(v.x, v.y, z)


def clip_velocity(velocity: Vec3, normal: Vec3, overbounce: float = OVERCLIP) -> Vec3:
    """Remove the part of ``velocity`` going into the plane, scaled by ``overbounce``."""
    backoff = velocity.dot(normal)
    if backoff < 0:
        backoff *= overbounce
    else:
        backoff /= overbounce
    return velocity - normal * backoff


class PlayerMovement:
    """Moves a player-sized box through a collision world."""

    def __init__(self, collision: Collision) -> None:
        self._collision = collision
        self.noclip = False
        self.position = Vec3()
        self.forward = Vec3()
        self.right = Vec3()
        self.up = Vec3()
        self.velocity = Vec3()
        self.ground_normal = Vec3()
        self.surface_flags = 0
        self.on_ground = False
        self._forwardmove = 0.0
        self._rightmove = 0.0
        self._bits = MovementBits.NONE

    def set_transform(self, position: Vec3, forward: Vec3, right: Vec3, up: Vec3) -> None:
        self.position = position
        self.forward = forward.normalized()
        self.right = right.normalized()
        self.up = up

    def set_input_movement(self, forward: float, right: float, jump: bool) -> None:
        self._forwardmove = forward
        self._rightmove = right
        if jump:
            self._bits |= MovementBits.JUMP
        else:
            self._bits &= ~MovementBits.JUMP

    def is_walking(self) -> bool:
        return self.on_ground and self.velocity.length() > 0.1

    def update(self, dt: float) -> None:
        """Advance the simulation by ``dt`` seconds and consume the input."""
        if not self.noclip:
            self._trace_ground()
            self._apply_inputs(dt)
            gravity = bool(self._bits & MovementBits.JUMPING)
            self._step_slide(gravity, dt)
        else:
            direction = (
                self.forward * self._forwardmove * CL_FORWARDSPEED
                + self.right * self._rightmove * CL_FORWARDSPEED
            )
            self.position = self.position + direction * dt

        self._bits &= ~MovementBits.JUMP_THIS_FRAME
        self._forwardmove = 0.0
        self._rightmove = 0.0

    def _trace(self, start: Vec3, end: Vec3) -> HitResult:
        return self._collision.trace(start, end, PLAYER_MINS, PLAYER_MAXS)

    def _trace_ground(self) -> None:
        point = _with_z(self.position, self.position.z - GROUND_PROBE_DEPTH)
        result = self._trace(self.position, point)
        if result.fraction == 1 or self._bits & MovementBits.JUMP_THIS_FRAME:
            self._bits |= MovementBits.JUMPING
            self.ground_normal = Vec3()
            self.surface_flags = 0
            self.on_ground = False
        else:
            self._bits &= ~MovementBits.JUMPING
            self.ground_normal = result.normal
            self.surface_flags = result.surface_flags
            self.on_ground = True

    def _airborne(self) -> bool:
        return bool(self._bits & (MovementBits.JUMPING | MovementBits.JUMP_THIS_FRAME))

    def _apply_inputs(self, dt: float) -> None:
        forward = _with_z(self.forward, 0.0)
        right = _with_z(self.right, 0.0)
        direction = (
            forward * self._forwardmove * CL_FORWARDSPEED
            + right * self._rightmove * CL_SIDESPEED
        )

        wishspeed = min(direction.length(), SV_MAX_SPEED)
        if wishspeed >= 0.0001:
            direction = direction / wishspeed

        self._apply_jump()
        self._apply_friction(dt)

        acceleration = CL_MOVEMENT_ACCELERATE
        base_wishspeed = wishspeed

        if self.noclip or self._airborne():
            if self.velocity.dot(direction) < 0:
                acceleration = CPM_AIR_STOP_ACCELERATION
            else:
                acceleration = CL_MOVEMENT_AIRACCELERATE
            if self._rightmove != 0 and self._forwardmove == 0:
                wishspeed = min(wishspeed, CPM_WISH_SPEED)
                acceleration = CPM_STRAFE_ACCELERATION

        self._apply_acceleration(direction, wishspeed, acceleration, dt)
        self._apply_air_control(direction, base_wishspeed)

    def _apply_air_control(self, direction: Vec3, wishspeed: float) -> None:
        if self._forwardmove == 0 or wishspeed == 0:
            return
        falling_speed = self.velocity.z
        velocity = _with_z(self.velocity, 0.0)
        speed = velocity.length()
        if speed >= 0.0001:
            velocity = velocity / speed
        if velocity.dot(direction) > 0:
            velocity = (velocity * speed).normalized()
        velocity = velocity * speed
        self.velocity = _with_z(velocity, falling_speed)

    def _apply_acceleration(
        self, direction: Vec3, wishspeed: float, acceleration: float, dt: float
    ) -> None:
        if not self.noclip and self._bits & MovementBits.JUMPING:
            wishspeed = min(CPM_WISH_SPEED, wishspeed)
        add_speed = wishspeed - self.velocity.dot(direction)
        if add_speed <= 0:
            return
        accel_speed = min(acceleration * dt * wishspeed, add_speed)
        self.velocity = self.velocity + direction * accel_speed

    def _apply_friction(self, dt: float) -> None:
        if not self.noclip and self._airborne():
            return
        speed = self.velocity.length()
        if speed < 1:
            self.velocity = Vec3(0.0, 0.0, self.velocity.z)
            return
        control = CL_STOP_SPEED if speed < CL_STOP_SPEED else speed
        new_speed = speed - control * CL_MOVEMENT_FRICTION * dt
        self.velocity = self.velocity * (max(0.0, new_speed) / speed)

    def _apply_jump(self) -> None:
        if not self._bits & MovementBits.JUMP:
            return
        if self._bits & MovementBits.JUMPING and not self.noclip:
            return
        self._bits |= MovementBits.JUMP_THIS_FRAME
        self._bits &= ~MovementBits.JUMP
        self.velocity = _with_z(self.velocity, JUMP_VELOCITY)

    def _step_slide(self, gravity: bool, dt: float) -> None:
        start_o = self.position
        start_v = self.velocity

        if not self._slide(gravity, dt):
            return

        down = _with_z(start_o, start_o.z - STEPSIZE)
        result = self._trace(start_o, down)

        if self.velocity.z > 0 and (result.fraction == 1.0 or result.normal.dot(_UP) < 0.7):
            return

        up = _with_z(start_o, start_o.z + STEPSIZE)
        result = self._trace(up, up)
        if result.allsolid:
            return

        self.position = up
        self.velocity = start_v
        self._slide(gravity, dt)

        down = _with_z(self.position, self.position.z - STEPSIZE)
        result = self._trace(self.position, down)
        if not result.allsolid:
            self.position = result.endpos
        if result.fraction < 1.0:
            self.velocity = clip_velocity(self.velocity, result.normal, OVERCLIP)

    def _slide(self, gravity: bool, dt: float) -> bool:
        end_velocity = Vec3()
        if gravity:
            end_velocity = _with_z(self.velocity, self.velocity.z - SV_GRAVITY * dt)
            self.velocity = _with_z(self.velocity, (end_velocity.z + self.velocity.z) * 0.5)
            if self.on_ground:
                self.velocity = clip_velocity(self.velocity, self.ground_normal, OVERCLIP)

        planes: list[Vec3] = []
        if self.on_ground:
            planes.append(self.ground_normal)
        planes.append(self.velocity.normalized())

        time_left = dt
        for bumps in range(_MAX_BUMPS):
            end = self.position + self.velocity * time_left
            work = self._trace(self.position, end)

            if work.allsolid:
                self.velocity = _with_z(self.velocity, 0.0)
                return False

            if work.fraction > 0:
                self.position = work.endpos

            if work.fraction == 1:
                break

            time_left -= time_left * work.fraction

            if len(planes) >= MAX_CLIP_PLANES:
                self.velocity = _ZERO
                return False

            if any(work.normal.dot(plane) > 0.99 for plane in planes):
                self.velocity = self.velocity + work.normal
                continue

            planes.append(work.normal)

            for i, plane_i in enumerate(planes):
                if self.velocity.dot(plane_i) >= 0.1:
                    continue

                clipped = clip_velocity(self.velocity, plane_i, OVERCLIP)
                end_clipped = clip_velocity(end_velocity, plane_i, OVERCLIP)

                for j, plane_j in enumerate(planes):
                    if j == i or clipped.dot(plane_j) >= 0.1:
                        continue

                    clipped = clip_velocity(clipped, plane_j, OVERCLIP)
                    end_clipped = clip_velocity(end_clipped, plane_j, OVERCLIP)

                    if clipped.dot(plane_i) >= 0:
                        continue

                    direction = plane_i.cross(plane_j).normalized()
                    clipped = direction * direction.dot(self.velocity)
                    end_clipped = direction * direction.dot(end_velocity)

                    for k, plane_k in enumerate(planes):
                        if k in (i, j) or clipped.dot(plane_k) >= 0.1:
                            continue
                        self.velocity = _ZERO
                        return False

                self.velocity = clipped
                end_velocity = end_clipped
                break
        else:
            bumps = _MAX_BUMPS

        if gravity:
            self.velocity = end_velocity

        return bumps > 0