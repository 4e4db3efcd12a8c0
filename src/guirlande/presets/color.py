import re
from typing import Tuple

import numpy as np

from ..common.exceptions import ValidationError

_HEX_COLOR = re.compile(r"#?([0-9a-fA-F]{6})")


def _clamp(value: float) -> int:
    return int(np.clip(int(value), 0, 255))


class Color:
    """RGB color with channels clamped to [0, 255].

    Colors are mutable: every operation updates this color in place and
    returns it for chaining. Call `copy()` when a caller must not share it.
    """

    def __init__(self, r: float = 0, g: float = 0, b: float = 0):
        self.r = r
        self.g = g
        self.b = b

    @property
    def r(self) -> int:
        return self._r

    @r.setter
    def r(self, value: float) -> None:
        self._r = _clamp(value)

    @property
    def g(self) -> int:
        return self._g

    @g.setter
    def g(self, value: float) -> None:
        self._g = _clamp(value)

    @property
    def b(self) -> int:
        return self._b

    @b.setter
    def b(self, value: float) -> None:
        self._b = _clamp(value)

    def set(self, r: float, g: float, b: float) -> "Color":
        self.r, self.g, self.b = r, g, b
        return self

    def set_color(self, other: "Color") -> "Color":
        return self.set(other.r, other.g, other.b)

    def add(self, r: float = 0, g: float = 0, b: float = 0) -> "Color":
        return self.set(self.r + r, self.g + g, self.b + b)

    def add_color(self, other: "Color") -> "Color":
        return self.add(other.r, other.g, other.b)

    def subtract(self, r: float = 0, g: float = 0, b: float = 0) -> "Color":
        return self.set(self.r - r, self.g - g, self.b - b)

    def subtract_color(self, other: "Color") -> "Color":
        return self.subtract(other.r, other.g, other.b)

    def multiply(self, r: float = 1, g: float = 1, b: float = 1) -> "Color":
        return self.set(self.r * r, self.g * g, self.b * b)

    def multiply_color(self, other: "Color") -> "Color":
        return self.multiply(other.r, other.g, other.b)

    def distance(self, other: "Color") -> "Color":
        """Per-channel absolute difference, as a new color"""
        return Color(*np.abs(self.to_array() - other.to_array()))

    def equals(self, r: int = 0, g: int = 0, b: int = 0) -> bool:
        return self.r == r and self.g == g and self.b == b

    def equals_color(self, other: "Color") -> bool:
        return self.equals(other.r, other.g, other.b)

    def copy(self) -> "Color":
        return Color(self.r, self.g, self.b)

    def to_tuple(self) -> Tuple[int, int, int]:
        return (self.r, self.g, self.b)

    def to_array(self) -> np.ndarray:
        return np.array(self.to_tuple(), dtype=np.int64)

    def to_hex(self) -> str:
        return "#{:02X}{:02X}{:02X}".format(*self.to_tuple())

    @classmethod
    def from_hex(cls, text: str) -> "Color":
        match = _HEX_COLOR.fullmatch(text.strip()) if isinstance(text, str) else None
        if match is None:
            raise ValidationError.for_field("color", f"Invalid hexadecimal color: {text}")
        value = match.group(1)
        return cls(int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Color):
            return NotImplemented
        return self.equals_color(other)

    def __repr__(self) -> str:
        return f"Color({self.r}, {self.g}, {self.b})"
