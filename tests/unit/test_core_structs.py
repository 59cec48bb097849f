import numpy as np
import pytest

from voxelvis.core.layer import Block, Layer
from voxelvis.core.pointcloud import PointBatch
from voxelvis.core.voxel import Color, EsdfVoxel, TsdfVoxel

def test_block_linear_index_runs_x_fastest() -> None:
    block = Block(4, 0.5, (0.0, 0.0, 0.0), TsdfVoxel)
    assert block.compute_voxel_index_from_linear_index(0) == (0, 0, 0)
    assert block.compute_voxel_index_from_linear_index(1) == (1, 0, 0)
    assert block.compute_voxel_index_from_linear_index(4) == (0, 1, 0)
    assert block.compute_voxel_index_from_linear_index(16) == (0, 0, 1)
    for i in range(block.num_voxels):
        assert block.compute_linear_index_from_voxel_index(block.compute_voxel_index_from_linear_index(i)) == i

def test_block_coordinates_are_voxel_centers() -> None:
    block = Block(2, 0.2, (1.0, -1.0, 0.4), TsdfVoxel)
    np.testing.assert_allclose(block.compute_coordinates_from_linear_index(0), [1.1, -0.9, 0.5])
    np.testing.assert_allclose(block.compute_coordinates_from_linear_index(7), [1.3, -0.7, 0.7])

def test_layer_allocates_blocks_at_block_origin() -> None:
    layer = Layer(0.1, 4, EsdfVoxel)
    block = layer.allocate_block((1, -2, 0))
    np.testing.assert_allclose(block.origin, [0.4, -0.8, 0.0])
    assert layer.allocate_block((1, -2, 0)) is block
    assert layer.get_all_allocated_blocks() == [(1, -2, 0)]
    assert all(not v.observed for v in block.voxels)

def test_layer_missing_block_raises_key_error() -> None:
    layer = Layer(0.1, 4, TsdfVoxel)
    with pytest.raises(KeyError):
        layer.get_block_by_index((0, 0, 0))
    assert len(layer) == 0

def test_layer_rejects_bad_geometry() -> None:
    with pytest.raises(ValueError):
        Layer(0.0, 4, TsdfVoxel)
    with pytest.raises(ValueError):
        Layer(0.1, 0, TsdfVoxel)

def test_color_to_rgba() -> None:
    assert Color(255, 0, 51).to_rgba() == (1.0, 0.0, 0.2, 1.0)

def test_pointbatch_rejects_mismatched_attribute_lengths() -> None:
    xyz = np.zeros((2, 3), dtype=np.float64)
    with pytest.raises(ValueError):
        PointBatch(xyz=xyz, attrs={"intensity": np.array([1.0], dtype=np.float32)})
