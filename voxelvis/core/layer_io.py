from __future__ import annotations
from pathlib import Path
from typing import Dict, Literal, Union

import numpy as np

from .layer import Layer
from .voxel import Color, EsdfVoxel, TsdfVoxel
from .utils import get_logger

_log = get_logger()

LayerKind = Literal["tsdf", "esdf"]
AnyLayer = Union[Layer[TsdfVoxel], Layer[EsdfVoxel]]


def layer_kind(layer: AnyLayer) -> LayerKind:
    if layer.voxel_factory is TsdfVoxel:
        return "tsdf"
    if layer.voxel_factory is EsdfVoxel:
        return "esdf"
    raise ValueError(f"Unsupported voxel type {layer.voxel_factory!r}")


def save_layer(layer: AnyLayer, path: str | Path) -> Path:
    """Store a TSDF or ESDF layer as a compressed ``.npz``.

    Blocks are written in the layer's listing order.
    """
    kind = layer_kind(layer)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    indices = layer.get_all_allocated_blocks()
    m = layer.voxels_per_side ** 3
    blocks = [layer.get_block_by_index(i) for i in indices]

    out: Dict[str, np.ndarray] = {
        "kind": np.asarray(kind),
        "voxel_size": np.asarray(layer.voxel_size, dtype=np.float64),
        "voxels_per_side": np.asarray(layer.voxels_per_side, dtype=np.int64),
        "block_indices": np.asarray(indices, dtype=np.int64).reshape(-1, 3),
        "distance": np.array([[v.distance for v in b.voxels] for b in blocks], dtype=np.float32).reshape(-1, m),
    }
    if kind == "tsdf":
        out["weight"] = np.array([[v.weight for v in b.voxels] for b in blocks], dtype=np.float32).reshape(-1, m)
        out["color"] = np.array([[tuple(v.color) for v in b.voxels] for b in blocks], dtype=np.uint8).reshape(-1, m, 4)
    else:
        out["observed"] = np.array([[v.observed for v in b.voxels] for b in blocks], dtype=bool).reshape(-1, m)
    np.savez_compressed(path, **out)
    _log.info("Saved %s layer with %d blocks to %s", kind, len(indices), path.name)
    return path


def load_layer(path: str | Path) -> AnyLayer:
    path = Path(path)
    with np.load(path) as data:
        kind = str(data["kind"])
        voxel_size = float(data["voxel_size"])
        vps = int(data["voxels_per_side"])
        indices = data["block_indices"].reshape(-1, 3)
        distance = data["distance"]
        m = vps ** 3
        if distance.shape != (len(indices), m):
            raise ValueError(f"'distance' has shape {distance.shape}, expected {(len(indices), m)}")
        if kind == "tsdf":
            weight = data["weight"]
            color = data["color"]
            layer: AnyLayer = Layer(voxel_size, vps, TsdfVoxel)
            for b, index in enumerate(indices):
                block = layer.allocate_block(index)
                for i, voxel in enumerate(block.voxels):
                    voxel.distance = float(distance[b, i])
                    voxel.weight = float(weight[b, i])
                    voxel.color = Color(*(int(c) for c in color[b, i]))
        elif kind == "esdf":
            observed = data["observed"]
            layer = Layer(voxel_size, vps, EsdfVoxel)
            for b, index in enumerate(indices):
                block = layer.allocate_block(index)
                for i, voxel in enumerate(block.voxels):
                    voxel.distance = float(distance[b, i])
                    voxel.observed = bool(observed[b, i])
        else:
            raise ValueError(f"Unknown layer kind '{kind}' in {path}")
    _log.info("Loaded %s layer with %d blocks from %s", kind, len(indices), path.name)
    return layer
