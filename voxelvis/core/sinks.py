"""Output containers filled by the extraction engine.

Sinks are owned by the caller. The engine clears a sink before filling it,
then only appends, so entries keep visitation order.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

import numpy as np

from .pointcloud import PointBatch
from .utils import stack_points
from .voxel import Color


@dataclass
class ColorPointSink:
    points: List[np.ndarray] = field(default_factory=list)
    colors: List[Color] = field(default_factory=list)

    def append(self, point: np.ndarray, color: Color) -> None:
        self.points.append(np.asarray(point, dtype=np.float64))
        self.colors.append(Color(*color))

    def clear(self) -> None:
        self.points.clear()
        self.colors.clear()

    def __len__(self) -> int:
        return len(self.points)

    def to_batch(self) -> PointBatch:
        rgb = np.array([c[:3] for c in self.colors], dtype=np.uint8).reshape(-1, 3)
        return PointBatch(xyz=stack_points(self.points), attrs={"rgb": rgb})


@dataclass
class IntensityPointSink:
    points: List[np.ndarray] = field(default_factory=list)
    intensities: List[float] = field(default_factory=list)

    def append(self, point: np.ndarray, intensity: float) -> None:
        self.points.append(np.asarray(point, dtype=np.float64))
        self.intensities.append(float(intensity))

    def clear(self) -> None:
        self.points.clear()
        self.intensities.clear()

    def __len__(self) -> int:
        return len(self.points)

    def to_batch(self) -> PointBatch:
        intensity = np.asarray(self.intensities, dtype=np.float32)
        return PointBatch(xyz=stack_points(self.points), attrs={"intensity": intensity})


CUBE_LIST = "CUBE_LIST"
ADD = "ADD"


@dataclass
class Marker:
    """One batched marker: a list of equally sized cubes.

    ``points`` and ``colors`` are parallel lists.
    """
    frame_id: str
    scale: Tuple[float, float, float]
    ns: str = "occupied_voxels"
    id: int = 0
    type: str = CUBE_LIST
    action: str = ADD
    points: List[np.ndarray] = field(default_factory=list)
    colors: List[Color] = field(default_factory=list)

    @property
    def uniform_scale(self) -> float:
        return float(self.scale[0])

    def add_cube(self, center: np.ndarray, color: Color) -> None:
        self.points.append(np.asarray(center, dtype=np.float64))
        self.colors.append(color)

    def points_array(self) -> np.ndarray:
        return stack_points(self.points)

    def colors_rgba(self) -> np.ndarray:
        return np.array([c.to_rgba() for c in self.colors], dtype=np.float32).reshape(-1, 4)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frame_id": self.frame_id,
            "ns": self.ns,
            "id": int(self.id),
            "type": self.type,
            "action": self.action,
            "scale": [float(s) for s in self.scale],
            "points": [[float(v) for v in p] for p in self.points],
            "colors": [[float(v) for v in c.to_rgba()] for c in self.colors],
        }


@dataclass
class MarkerArray:
    markers: List[Marker] = field(default_factory=list)

    def append(self, marker: Marker) -> None:
        self.markers.append(marker)

    def clear(self) -> None:
        self.markers.clear()

    def __len__(self) -> int:
        return len(self.markers)
