"""Value types stored in element fields and style maps."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

_EM_PATTERN = re.compile(r"^\s*(-?\d+(?:\.\d+)?|-?\.\d+)\s*em\s*$")


@dataclass(frozen=True)
class Em:
    """A length relative to the current font size."""

    value: float

    @classmethod
    def parse(cls, raw: Any) -> Em:
        """Parse an em length.

        Accepts an existing Em, a bare number, or a string such as "1.4em".

        Raises:
            ValueError: If the value is not an em length
        """
        if isinstance(raw, Em):
            return raw
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return cls(float(raw))
        if isinstance(raw, str):
            match = _EM_PATTERN.match(raw)
            if match:
                return cls(float(match.group(1)))
        raise ValueError(f"Invalid em length: {raw!r}")

    def at(self, font_size: float) -> float:
        """Resolve to an absolute length for the given font size."""
        return self.value * font_size

    def __str__(self) -> str:
        return f"{self.value:g}em"


@dataclass(frozen=True, order=True)
class FontWeight:
    """Numeric font weight from 100 (thin) to 900 (black)."""

    value: int

    REGULAR: ClassVar[FontWeight]
    BOLD: ClassVar[FontWeight]

    @classmethod
    def parse(cls, raw: Any) -> FontWeight:
        """Parse a weight from a name ("bold") or a number (700)."""
        if isinstance(raw, FontWeight):
            return raw
        if isinstance(raw, str) and raw.lower() in _WEIGHT_NAMES:
            return cls(_WEIGHT_NAMES[raw.lower()])
        if isinstance(raw, int) and not isinstance(raw, bool) and 100 <= raw <= 900:  # noqa: PLR2004
            return cls(raw)
        raise ValueError(f"Invalid font weight: {raw!r}")

    def __str__(self) -> str:
        for name, value in _WEIGHT_NAMES.items():
            if value == self.value:
                return name
        return str(self.value)


_WEIGHT_NAMES = {
    "thin": 100,
    "light": 300,
    "regular": 400,
    "medium": 500,
    "semibold": 600,
    "bold": 700,
    "black": 900,
}

FontWeight.REGULAR = FontWeight(400)
FontWeight.BOLD = FontWeight(700)


class FontStyle(str, Enum):
    """Font posture."""

    NORMAL = "normal"
    ITALIC = "italic"


@dataclass(frozen=True)
class Span:
    """Source location of a piece of content."""

    source: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.source}:{self.line}:{self.column}"
