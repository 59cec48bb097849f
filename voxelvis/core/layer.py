from __future__ import annotations
from typing import Callable, Dict, Generic, List, Protocol, Sequence, TypeVar

import numpy as np

from .utils import as_block_index

V = TypeVar("V")
V_co = TypeVar("V_co", covariant=True)

BlockIndex = tuple[int, int, int]


class BlockView(Protocol[V_co]):
    """Read-only block interface the extraction engine consumes."""
    def compute_coordinates_from_linear_index(self, linear_index: int) -> np.ndarray: ...
    def get_voxel_by_linear_index(self, linear_index: int) -> V_co: ...


class LayerView(Protocol[V_co]):
    """Read-only layer interface the extraction engine consumes."""
    @property
    def voxels_per_side(self) -> int: ...
    @property
    def voxel_size(self) -> float: ...
    def get_all_allocated_blocks(self) -> List[BlockIndex]: ...
    def get_block_by_index(self, index: BlockIndex) -> BlockView[V_co]: ...


class Block(Generic[V]):
    """Dense cube of ``voxels_per_side**3`` voxels.

    Voxels are stored in linear order with x varying fastest:
    ``i = x + N * (y + N * z)``.
    """

    def __init__(
        self,
        voxels_per_side: int,
        voxel_size: float,
        origin: Sequence[float],
        voxel_factory: Callable[[], V],
    ) -> None:
        if voxels_per_side <= 0:
            raise ValueError(f"voxels_per_side must be positive, got {voxels_per_side}")
        if voxel_size <= 0:
            raise ValueError(f"voxel_size must be positive, got {voxel_size}")
        self.voxels_per_side = int(voxels_per_side)
        self.voxel_size = float(voxel_size)
        self.origin = np.asarray(origin, dtype=np.float64).reshape(3)
        self.voxels: List[V] = [voxel_factory() for _ in range(self.num_voxels)]

    @property
    def num_voxels(self) -> int:
        return self.voxels_per_side ** 3

    def compute_voxel_index_from_linear_index(self, linear_index: int) -> tuple[int, int, int]:
        n = self.voxels_per_side
        x = linear_index % n
        y = (linear_index // n) % n
        z = linear_index // (n * n)
        return (x, y, z)

    def compute_linear_index_from_voxel_index(self, voxel_index: Sequence[int]) -> int:
        n = self.voxels_per_side
        x, y, z = (int(v) for v in voxel_index)
        return x + n * (y + n * z)

    def compute_coordinates_from_linear_index(self, linear_index: int) -> np.ndarray:
        idx = np.asarray(self.compute_voxel_index_from_linear_index(linear_index), dtype=np.float64)
        return self.origin + (idx + 0.5) * self.voxel_size

    def get_voxel_by_linear_index(self, linear_index: int) -> V:
        return self.voxels[linear_index]


class Layer(Generic[V]):
    """In-memory sparse layer of blocks keyed by integer block index.

    Blocks are listed in allocation order. Callers should not rely on that
    order being spatially meaningful.
    """

    def __init__(self, voxel_size: float, voxels_per_side: int, voxel_factory: Callable[[], V]) -> None:
        if voxel_size <= 0:
            raise ValueError(f"voxel_size must be positive, got {voxel_size}")
        if voxels_per_side <= 0:
            raise ValueError(f"voxels_per_side must be positive, got {voxels_per_side}")
        self._voxel_size = float(voxel_size)
        self._voxels_per_side = int(voxels_per_side)
        self.voxel_factory = voxel_factory
        self._blocks: Dict[BlockIndex, Block[V]] = {}

    @property
    def voxel_size(self) -> float:
        return self._voxel_size

    @property
    def voxels_per_side(self) -> int:
        return self._voxels_per_side

    @property
    def block_size(self) -> float:
        return self._voxel_size * self._voxels_per_side

    def __len__(self) -> int:
        return len(self._blocks)

    def allocate_block(self, index: Sequence[int]) -> Block[V]:
        key = as_block_index(index)
        block = self._blocks.get(key)
        if block is None:
            origin = np.asarray(key, dtype=np.float64) * self.block_size
            block = Block(self._voxels_per_side, self._voxel_size, origin, self.voxel_factory)
            self._blocks[key] = block
        return block

    def get_all_allocated_blocks(self) -> List[BlockIndex]:
        return list(self._blocks.keys())

    def get_block_by_index(self, index: Sequence[int]) -> Block[V]:
        key = as_block_index(index)
        try:
            return self._blocks[key]
        except KeyError:
            raise KeyError(f"Block {key} is not allocated") from None
