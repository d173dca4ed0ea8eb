"""Parser for brace-delimited, quoted key/value entity blocks."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterator

from .vec import Vec3

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass
class KeyValueEntry:
    """One ``{ ... }`` block of key/value properties."""

    properties: dict[str, str] = field(default_factory=dict)

    def get_int(self, name: str) -> int | None:
        """Leading integer of the value, 0 if it has none; None if the key is absent."""
        text = self.properties.get(name)
        if text is None:
            return None
        match = _INT_PREFIX.match(text)
        return int(match.group(1)) if match else 0

    def get_vec3(self, name: str) -> Vec3 | None:
        """Up to three whitespace-separated floats; missing components are 0."""
        text = self.properties.get(name)
        if text is None:
            return None
        components: list[float] = []
        pos = 0
        while len(components) < 3:
            match = _FLOAT_PREFIX.match(text, pos)
            if not match:
                break
            components.append(float(match.group(1)))
            pos = match.end()
        components.extend([0.0] * (3 - len(components)))
        return Vec3(*components)

    def format(self) -> str:
        lines = "".join(f'  {key}: "{value}"\n' for key, value in self.properties.items())
        return "{\n" + lines + "}\n"


def _quoted_pairs(text: str, pos: int, end: int) -> Iterator[tuple[str, str]]:
    while pos < end:
        quotes = []
        cursor = pos
        for _ in range(4):
            cursor = text.find('"', cursor, end)
            if cursor == -1:
                return
            quotes.append(cursor)
            cursor += 1
        key_start, key_end, value_start, value_end = quotes
        yield text[key_start + 1:key_end], text[value_start + 1:value_end]
        pos = value_end + 1


@dataclass
class KeyValueCollection:
    """An ordered list of key/value entries."""

    entries: list[KeyValueEntry] = field(default_factory=list)

    def init_from_string(self, text: str) -> None:
        """Append every complete ``{ ... }`` block found in ``text``."""
        pos = 0
        while pos < len(text):
            pos = text.find("{", pos)
            if pos == -1:
                break
            pos += 1
            end = text.find("}", pos)
            if end == -1:
                break
            entry = KeyValueEntry()
            entry.properties.update(_quoted_pairs(text, pos, end))
            self.entries.append(entry)
            pos = end + 1

    def all_with_key_value(self, key: str, value: str) -> list[KeyValueEntry]:
        return [entry for entry in self.entries if entry.properties.get(key) == value]

    def format(self) -> str:
        return "".join(entry.format() for entry in self.entries)