"""Per-voxel classifiers deciding what gets visualized.

A classifier is a pure callable ``(voxel, coord) -> decision``. Color and
intensity classifiers return :class:`Accepted` carrying the auxiliary value,
or :data:`REJECTED`. Marker classifiers return a plain ``bool``.

Default (never written) voxels are passed to classifiers like any other;
rejecting them is the classifier's job.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Generic, TypeVar, Union

import numpy as np

from .voxel import Color, EsdfVoxel, TsdfVoxel

T = TypeVar("T")
V = TypeVar("V")

# Below this weight a TSDF voxel is considered unobserved for distance queries.
MIN_OBSERVED_WEIGHT = 1e-3


@dataclass(frozen=True)
class Accepted(Generic[T]):
    value: T
    accepted: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Rejected:
    accepted: bool = field(default=False, init=False)


REJECTED = Rejected()

Decision = Union[Accepted[T], Rejected]
ColorClassifier = Callable[[V, np.ndarray], Decision[Color]]
IntensityClassifier = Callable[[V, np.ndarray], Decision[float]]
MarkerClassifier = Callable[[V, np.ndarray], bool]


def visualize_near_surface_tsdf_voxels(
    voxel: TsdfVoxel, coord: np.ndarray, surface_distance: float
) -> Decision[Color]:
    if voxel.weight > 0 and abs(voxel.distance) < surface_distance:
        return Accepted(voxel.color)
    return REJECTED


def visualize_distance_intensity_tsdf_voxels(voxel: TsdfVoxel, coord: np.ndarray) -> Decision[float]:
    if voxel.weight > MIN_OBSERVED_WEIGHT:
        return Accepted(float(voxel.distance))
    return REJECTED


def visualize_distance_intensity_esdf_voxels(voxel: EsdfVoxel, coord: np.ndarray) -> Decision[float]:
    if voxel.observed:
        return Accepted(float(voxel.distance))
    return REJECTED


def visualize_occupied_tsdf_voxels(voxel: TsdfVoxel, coord: np.ndarray) -> bool:
    return voxel.weight > MIN_OBSERVED_WEIGHT and voxel.distance <= 0


def near_surface_classifier(surface_distance: float) -> ColorClassifier[TsdfVoxel]:
    """Bind ``surface_distance`` so the result fits the color classifier contract."""
    return partial(visualize_near_surface_tsdf_voxels, surface_distance=float(surface_distance))
