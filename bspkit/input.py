"""Keyboard and mouse state, polled once per frame."""

from __future__ import annotations

from typing import Iterable

KEY_SPACE = 32
KEY_A = 65
KEY_C = 67
KEY_D = 68
KEY_S = 83
KEY_W = 87

KEY_COUNT = 256
_FIRST_POLLED_KEY = 32


class InputState:
    """Current and previous frame input, with click detection on release."""

    def __init__(self) -> None:
        self._keys = [False] * KEY_COUNT
        self._prev_keys = [False] * KEY_COUNT
        self._left = False
        self._prev_left = False
        self._right = False
        self._prev_right = False
        self.mouse_x = 0.0
        self.mouse_y = 0.0
        self.mouse_offset_x = 0.0
        self.mouse_offset_y = 0.0
        self._first_frame = True

    def update(
        self,
        keys_down: Iterable[int],
        left_button: bool,
        right_button: bool,
        mouse_x: float,
        mouse_y: float,
    ) -> None:
        """Advance one frame given the keys held, buttons held and cursor position."""
        down = frozenset(keys_down)
        self._prev_keys = list(self._keys)
        self._keys = self._keys[:_FIRST_POLLED_KEY] + [
            code in down for code in range(_FIRST_POLLED_KEY, KEY_COUNT)
        ]

        self._prev_left, self._left = self._left, bool(left_button)
        self._prev_right, self._right = self._right, bool(right_button)

        if self._first_frame:
            self.mouse_offset_x = 0.0
            self.mouse_offset_y = 0.0
        else:
            self.mouse_offset_x = mouse_x - self.mouse_x
            self.mouse_offset_y = mouse_y - self.mouse_y
        self.mouse_x = mouse_x
        self.mouse_y = mouse_y
        self._first_frame = False

    def is_key_pressed(self, key: int) -> bool:
        if not 0 <= key < KEY_COUNT:
            return False
        return self._keys[key]

    def is_key_clicked(self, key: int) -> bool:
        """True on the frame a key was released."""
        if not 0 <= key < KEY_COUNT:
            return False
        return not self._keys[key] and self._prev_keys[key]

    def is_left_mouse_button_pressed(self) -> bool:
        return self._left

    def is_right_mouse_button_pressed(self) -> bool:
        return self._right

    def is_left_mouse_button_clicked(self) -> bool:
        return not self._left and self._prev_left

    def is_right_mouse_button_clicked(self) -> bool:
        return not self._right and self._prev_right