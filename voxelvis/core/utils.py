from __future__ import annotations
import logging
from typing import Sequence

import numpy as np

def get_logger(name: str = "voxelvis") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter("[%(levelname)s] %(message)s")
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger

def as_block_index(index: Sequence[int]) -> tuple[int, int, int]:
    if len(index) != 3:
        raise ValueError(f"Block index must have 3 components, got {len(index)}")
    return (int(index[0]), int(index[1]), int(index[2]))

def stack_points(points: Sequence[np.ndarray]) -> np.ndarray:
    if not points:
        return np.zeros((0, 3), dtype=np.float64)
    return np.vstack(points).astype(np.float64, copy=False)
