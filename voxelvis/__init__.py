"""voxelvis – sparse voxel layer → visualization primitives.

This package contains:
- Voxel kinds & Color (core.voxel)
- Block-sparse Layer and its read-only query protocol (core.layer)
- Classifier contract + stock classifiers (core.classifiers)
- Point and marker sinks (core.sinks)
- The extraction engine (core.extraction)
- Height color maps (core.colormap)
- PLY/NPZ/LAS writers and marker output (core.exporter)
- Layer persistence (core.layer_io)
"""

from .core.voxel import Color, TsdfVoxel, EsdfVoxel
from .core.layer import Block, Layer, LayerView, BlockView
from .core.classifiers import (
    Accepted, Rejected, REJECTED,
    visualize_near_surface_tsdf_voxels, visualize_distance_intensity_tsdf_voxels,
    visualize_distance_intensity_esdf_voxels, visualize_occupied_tsdf_voxels,
    near_surface_classifier,
)
from .core.sinks import ColorPointSink, IntensityPointSink, Marker, MarkerArray
from .core.extraction import (
    extract_colored, extract_intensity, extract_marked,
    create_surface_pointcloud_from_tsdf_layer, create_distance_pointcloud_from_tsdf_layer,
    create_distance_pointcloud_from_esdf_layer, create_occupancy_blocks_from_tsdf_layer,
)
from .core.colormap import HeightColoring, rainbow_color_map
from .core.pointcloud import PointBatch
from .core.exporter import LasWriter, PlyWriter, NpzWriter, write_markers
from .core.layer_io import load_layer, save_layer
