from __future__ import annotations
from dataclasses import dataclass
import math
from typing import Callable

from .voxel import Color

ColorMap = Callable[[float], Color]

FALLBACK_COLOR = Color(255, 127, 127)


def rainbow_color_map(h: float) -> Color:
    """Map a scalar to a fully saturated hue; the scale wraps every 1.0.

    Defined for every float: NaN and infinities map to :data:`FALLBACK_COLOR`.
    """
    h = float(h)
    if not math.isfinite(h):
        return FALLBACK_COLOR
    s = 1.0
    v = 1.0
    h -= math.floor(h)
    h *= 6.0
    i = int(math.floor(h))
    f = h - i
    if not (i & 1):
        f = 1.0 - f
    m = v * (1.0 - s)
    n = v * (1.0 - s * f)
    if i in (0, 6):
        rgb = (v, n, m)
    elif i == 1:
        rgb = (n, v, m)
    elif i == 2:
        rgb = (m, v, n)
    elif i == 3:
        rgb = (m, n, v)
    elif i == 4:
        rgb = (n, m, v)
    elif i == 5:
        rgb = (v, m, n)
    else:  # pragma: no cover - unreachable for finite input
        return FALLBACK_COLOR
    r, g, b = (int(255.0 * c) for c in rgb)
    return Color(r, g, b)


def matplotlib_color_map(name: str) -> ColorMap:
    """Wrap a named matplotlib colormap; input wraps every 1.0 like the rainbow map."""
    import matplotlib

    try:
        cmap = matplotlib.colormaps[name]
    except KeyError:
        raise ValueError(f"Unknown matplotlib colormap '{name}'") from None

    def _map(h: float) -> Color:
        h = float(h)
        if not math.isfinite(h):
            return FALLBACK_COLOR
        r, g, b, a = cmap(h - math.floor(h))
        return Color(int(255.0 * r), int(255.0 * g), int(255.0 * b), int(255.0 * a))

    return _map


@dataclass(frozen=True)
class HeightColoring:
    """Color a point by its height: ``color_map((z - offset) * scale)``."""
    offset: float = 5.0
    scale: float = 10.0
    color_map: ColorMap = rainbow_color_map

    def __call__(self, z: float) -> Color:
        return self.color_map((float(z) - self.offset) * self.scale)


DEFAULT_HEIGHT_COLORING = HeightColoring()
