"""The world capability: read-only resource lookups for show and finalize."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from .exceptions import FontNotFoundError


@dataclass(frozen=True)
class FontMetrics:
    """Vertical metrics of a font family, in font units."""

    family: str
    units_per_em: int = 1000
    ascender: int = 800
    descender: int = -200
    cap_height: int = 700

    def to_em(self, units: int) -> float:
        """Convert font units to a fraction of the em size."""
        return units / self.units_per_em


class World(Protocol):
    """Resource access needed while realizing content.

    Implementations must be safe for concurrent reads and must not block
    indefinitely. Lookup failures raise ordinary Strata errors.
    """

    def font(self, family: str) -> FontMetrics:
        """Metrics of a font family.

        Raises:
            FontNotFoundError: If the family is unknown
        """
        ...


class StaticWorld:
    """A world backed by a fixed set of fonts."""

    def __init__(self, fonts: Iterable[FontMetrics] = ()):
        self._fonts = {metrics.family.lower(): metrics for metrics in fonts}

    def font(self, family: str) -> FontMetrics:
        try:
            return self._fonts[family.lower()]
        except KeyError:
            raise FontNotFoundError(family) from None

    @property
    def families(self) -> list[str]:
        return sorted(metrics.family for metrics in self._fonts.values())
