"""Player, free-flying debug player and monster actors."""

from __future__ import annotations

import math
from typing import Callable

from .animation import ModelInstance
from .input import KEY_A, KEY_C, KEY_D, KEY_S, KEY_SPACE, KEY_W, InputState
from .movement import PlayerMovement
from .vec import Vec3

MOUSE_SENSITIVITY = 0.15
PITCH_LIMIT = 1.5
DEBUG_FLY_SPEED = 400.0
DEFAULT_POSITION = Vec3(0.0, 128.0, 256.0)
DEFAULT_PITCH = -0.5
DEFAULT_YAW = -1.57
MONSTER_MODEL_OFFSET = Vec3(0.0, 0.0, -24.0)

_WORLD_UP = Vec3(0.0, 0.0, 1.0)


def _clamp_pitch(pitch: float) -> float:
    return max(-PITCH_LIMIT, min(PITCH_LIMIT, pitch))


def _orientation(pitch: float, yaw: float) -> tuple[Vec3, Vec3, Vec3]:
    forward = Vec3(
        math.cos(pitch) * math.cos(yaw),
        math.cos(pitch) * math.sin(yaw),
        -math.sin(pitch),
    ).normalized()
    right = forward.cross(_WORLD_UP).normalized()
    up = right.cross(forward).normalized()
    return forward, right, up


def _axis(input_state: InputState, positive: int, negative: int) -> int:
    return int(input_state.is_key_pressed(positive)) - int(input_state.is_key_pressed(negative))


class Player:
    """Mouse-look player driven by a movement simulation."""

    def __init__(
        self,
        movement: PlayerMovement | None,
        input_state: InputState,
        model_instance: ModelInstance | None = None,
    ) -> None:
        self.movement = movement
        self.input_state = input_state
        self.model_instance = model_instance
        self.position = DEFAULT_POSITION
        self.forward = Vec3()
        self.right = Vec3()
        self.up = Vec3()
        self.pitch = DEFAULT_PITCH
        self.yaw = DEFAULT_YAW

    def update(self, dt: float) -> None:
        if self.movement is None:
            return
        inp = self.input_state

        self.yaw -= inp.mouse_offset_x * MOUSE_SENSITIVITY * dt
        self.pitch = _clamp_pitch(self.pitch + inp.mouse_offset_y * MOUSE_SENSITIVITY * dt)
        self.forward, self.right, self.up = _orientation(self.pitch, self.yaw)

        forwardmove = _axis(inp, KEY_W, KEY_S)
        rightmove = _axis(inp, KEY_D, KEY_A)
        jump = inp.is_key_pressed(KEY_SPACE)

        self.movement.set_transform(self.position, self.forward, self.right, self.up)
        self.movement.set_input_movement(forwardmove, rightmove, jump)
        self.movement.update(dt)
        self.position = self.movement.position

        if self.model_instance is not None:
            self.model_instance.animator.update(dt)


class PlayerDebug:
    """Free-flying camera; looks around while the left mouse button is held."""

    def __init__(
        self,
        input_state: InputState,
        set_cursor_enabled: Callable[[bool], None] | None = None,
    ) -> None:
        self.input_state = input_state
        self.set_cursor_enabled = set_cursor_enabled
        self.position = DEFAULT_POSITION
        self.forward = Vec3()
        self.right = Vec3()
        self.up = Vec3()
        self.pitch = DEFAULT_PITCH
        self.yaw = DEFAULT_YAW

    def _cursor(self, enabled: bool) -> None:
        if self.set_cursor_enabled is not None:
            self.set_cursor_enabled(enabled)

    def update(self, dt: float) -> None:
        inp = self.input_state
        if inp.is_left_mouse_button_pressed():
            self._cursor(False)
            self.yaw -= inp.mouse_offset_x * MOUSE_SENSITIVITY * dt
            self.pitch += inp.mouse_offset_y * MOUSE_SENSITIVITY * dt
        else:
            self._cursor(True)

        self.pitch = _clamp_pitch(self.pitch)
        self.forward, self.right, self.up = _orientation(self.pitch, self.yaw)

        forwardmove = _axis(inp, KEY_W, KEY_S)
        rightmove = _axis(inp, KEY_D, KEY_A)
        upmove = _axis(inp, KEY_SPACE, KEY_C)

        direction = (
            self.forward * forwardmove * DEBUG_FLY_SPEED
            + self.right * rightmove * DEBUG_FLY_SPEED
            + self.up * upmove * DEBUG_FLY_SPEED
        )
        self.position = self.position + direction * dt


class Monster:
    """An animated model that follows its own position and heading."""

    def __init__(self, model_instance: ModelInstance) -> None:
        self.model_instance = model_instance
        self.position = Vec3()
        self.yaw = 0.0

    def update(self, dt: float) -> None:
        self.model_instance.animator.update(dt)
        self.model_instance.position = self.position + MONSTER_MODEL_OFFSET
        self.model_instance.yaw = self.yaw