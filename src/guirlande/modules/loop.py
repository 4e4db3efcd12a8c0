"""LED strip loop scripts.

A loop is a sequence of parts the device repeats forever:

- ``c(r,g,b)``: set a color
- ``w(ms)``: hold the current color
- ``t(r,g,b,ms)``: fade from the current color to another one

Parts are joined with ``|``, e.g. ``c(255,0,0)|w(500)|t(0,0,255,1000)``.
"""

import re
from dataclasses import dataclass
from numbers import Integral
from typing import List, Optional, Union

from ..common.exceptions import LoopParseError

_COLOR = re.compile(r"c\((\d{1,3}),(\d{1,3}),(\d{1,3})\)")
_WAIT = re.compile(r"w\((\d+)\)")
_FADE = re.compile(r"t\((\d{1,3}),(\d{1,3}),(\d{1,3}),(\d+)\)")


@dataclass(frozen=True)
class ColorPart:
    r: int
    g: int
    b: int

    def build(self) -> str:
        return f"c({self.r},{self.g},{self.b})"


@dataclass(frozen=True)
class WaitPart:
    time: int

    def build(self) -> str:
        return f"w({self.time})"


@dataclass(frozen=True)
class FadePart:
    r: int
    g: int
    b: int
    time: int

    def build(self) -> str:
        return f"t({self.r},{self.g},{self.b},{self.time})"


LoopPart = Union[ColorPart, WaitPart, FadePart]


def _is_int(value) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def parse_part(token: str) -> LoopPart:
    """Parse one loop token, raising LoopParseError when it matches no part"""
    match = _COLOR.fullmatch(token)
    if match:
        return ColorPart(*map(int, match.groups()))
    match = _WAIT.fullmatch(token)
    if match:
        return WaitPart(int(match.group(1)))
    match = _FADE.fullmatch(token)
    if match:
        return FadePart(*map(int, match.groups()))
    raise LoopParseError(token)


class Loop:
    """Ordered list of loop parts with chainable builders"""

    def __init__(self, data: Optional[str] = None):
        self.parts: List[LoopPart] = [] if data is None else self._load(data)

    @classmethod
    def parse(cls, text: str) -> "Loop":
        return cls(text)

    def color(self, r: int, g: int, b: int) -> "Loop":
        return self._append(ColorPart(r, g, b), (r, g, b))

    def wait(self, time: int) -> "Loop":
        return self._append(WaitPart(time), times=(time,))

    def to(self, r: int, g: int, b: int, time: int) -> "Loop":
        return self._append(FadePart(r, g, b, time), (r, g, b), (time,))

    def _append(self, part: LoopPart, channels: tuple = (), times: tuple = ()) -> "Loop":
        """Append a part, rejecting values the parser would not read back"""
        valid = all(_is_int(c) and 0 <= c <= 255 for c in channels) and all(
            _is_int(t) and t >= 0 for t in times
        )
        if not valid:
            raise LoopParseError(part.build())
        self.parts.append(part)
        return self

    def build(self) -> str:
        return "|".join(part.build() for part in self.parts)

    @staticmethod
    def _load(data: str) -> List[LoopPart]:
        if data == "":
            return []
        return [parse_part(token) for token in data.split("|")]

    def __len__(self) -> int:
        return len(self.parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Loop):
            return NotImplemented
        return self.parts == other.parts

    def __repr__(self) -> str:
        return f"Loop({self.build()!r})"
