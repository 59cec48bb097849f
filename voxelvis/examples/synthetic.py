from __future__ import annotations

from pathlib import Path
from typing import Callable, Tuple

import numpy as np

from ..core.layer import Layer
from ..core.layer_io import AnyLayer, save_layer
from ..core.voxel import Color, EsdfVoxel, TsdfVoxel

SignedDistance = Callable[[np.ndarray], np.ndarray]


def _block_range(lo: np.ndarray, hi: np.ndarray, block_size: float) -> Tuple[np.ndarray, np.ndarray]:
    return np.floor(lo / block_size).astype(np.int64), np.floor(hi / block_size).astype(np.int64)


def _fill_layer(
    layer: AnyLayer,
    sdf: SignedDistance,
    lo: np.ndarray,
    hi: np.ndarray,
    truncation: float,
    color: Tuple[int, int, int],
) -> AnyLayer:
    b_lo, b_hi = _block_range(lo, hi, layer.block_size)
    is_tsdf = layer.voxel_factory is TsdfVoxel
    for bx in range(b_lo[0], b_hi[0] + 1):
        for by in range(b_lo[1], b_hi[1] + 1):
            for bz in range(b_lo[2], b_hi[2] + 1):
                block = layer.allocate_block((bx, by, bz))
                centers = np.array([block.compute_coordinates_from_linear_index(i) for i in range(block.num_voxels)])
                dist = sdf(centers)
                for voxel, d in zip(block.voxels, dist):
                    if is_tsdf:
                        if abs(d) < truncation:
                            voxel.distance = float(d)
                            voxel.weight = 1.0
                            voxel.color = Color(*color)
                    else:
                        voxel.distance = float(d)
                        voxel.observed = True
    return layer


def sphere_layer(
    kind: str = "tsdf",
    radius: float = 1.0,
    center: Tuple[float, float, float] = (0.0, 0.0, 0.0),
    voxel_size: float = 0.1,
    voxels_per_side: int = 8,
    truncation: float | None = None,
    color: Tuple[int, int, int] = (200, 160, 120),
) -> AnyLayer:
    c = np.asarray(center, dtype=np.float64)
    trunc = truncation if truncation is not None else 3.0 * voxel_size
    margin = radius + trunc
    layer = _new_layer(kind, voxel_size, voxels_per_side)

    def sdf(p: np.ndarray) -> np.ndarray:
        return np.linalg.norm(p - c, axis=1) - radius

    return _fill_layer(layer, sdf, c - margin, c + margin, trunc, color)


def plane_layer(
    kind: str = "tsdf",
    size: float = 4.0,
    height: float = 0.0,
    voxel_size: float = 0.1,
    voxels_per_side: int = 8,
    truncation: float | None = None,
    color: Tuple[int, int, int] = (180, 200, 180),
) -> AnyLayer:
    trunc = truncation if truncation is not None else 3.0 * voxel_size
    layer = _new_layer(kind, voxel_size, voxels_per_side)
    half = size / 2.0
    lo = np.array([-half, -half, height - trunc])
    hi = np.array([half, half, height + trunc])

    def sdf(p: np.ndarray) -> np.ndarray:
        return p[:, 2] - height

    return _fill_layer(layer, sdf, lo, hi, trunc, color)


def _new_layer(kind: str, voxel_size: float, voxels_per_side: int) -> AnyLayer:
    kind = kind.lower()
    if kind == "tsdf":
        return Layer(voxel_size, voxels_per_side, TsdfVoxel)
    if kind == "esdf":
        return Layer(voxel_size, voxels_per_side, EsdfVoxel)
    raise ValueError(f"Unknown layer kind '{kind}'.")


def generate_layer(preset: str, kind: str, size: float, path: Path, voxel_size: float = 0.1) -> AnyLayer:
    preset = preset.lower()
    if preset == "sphere":
        layer = sphere_layer(kind=kind, radius=size / 2.0, voxel_size=voxel_size)
    elif preset == "plane":
        layer = plane_layer(kind=kind, size=size, voxel_size=voxel_size)
    else:
        raise ValueError(f"Unknown synthetic layer preset '{preset}'.")
    save_layer(layer, path)
    return layer
