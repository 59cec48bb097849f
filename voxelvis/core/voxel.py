from __future__ import annotations
from dataclasses import dataclass, field
from typing import NamedTuple, Tuple


class Color(NamedTuple):
    """8-bit RGBA color. Alpha defaults to opaque."""
    r: int
    g: int
    b: int
    a: int = 255

    def to_rgba(self) -> Tuple[float, float, float, float]:
        return (self.r / 255.0, self.g / 255.0, self.b / 255.0, self.a / 255.0)


@dataclass
class TsdfVoxel:
    """Truncated signed distance sample. Observed iff ``weight > 0``."""
    distance: float = 0.0
    weight: float = 0.0
    color: Color = field(default_factory=lambda: Color(0, 0, 0))


@dataclass
class EsdfVoxel:
    """Euclidean signed distance sample. Valid iff ``observed``."""
    distance: float = 0.0
    observed: bool = False
