from __future__ import annotations
from typing import Any, Callable, Optional

from .classifiers import (
    ColorClassifier,
    IntensityClassifier,
    MarkerClassifier,
    near_surface_classifier,
    visualize_distance_intensity_esdf_voxels,
    visualize_distance_intensity_tsdf_voxels,
    visualize_occupied_tsdf_voxels,
)
from .colormap import DEFAULT_HEIGHT_COLORING, HeightColoring
from .layer import LayerView
from .sinks import ColorPointSink, IntensityPointSink, Marker, MarkerArray
from .voxel import EsdfVoxel, TsdfVoxel
from .utils import get_logger

_log = get_logger()


def _require(**kwargs: Any) -> None:
    for name, value in kwargs.items():
        if value is None:
            raise ValueError(f"{name} must not be None")


def _visit_layer(layer: LayerView, visit: Callable[[Any, Any], bool]) -> None:
    """Call ``visit(voxel, coord)`` for every slot of every allocated block.

    Blocks come in whatever order the layer lists them; slots inside a block
    in ascending linear index. ``visit`` returns whether the voxel was kept.
    """
    vps = layer.voxels_per_side
    num_voxels_per_block = vps * vps * vps
    blocks = layer.get_all_allocated_blocks()
    accepted = 0
    for index in blocks:
        block = layer.get_block_by_index(index)
        for linear_index in range(num_voxels_per_block):
            coord = block.compute_coordinates_from_linear_index(linear_index)
            if visit(block.get_voxel_by_linear_index(linear_index), coord):
                accepted += 1
    _log.debug("Visited %d blocks (%d voxels each), kept %d voxels",
               len(blocks), num_voxels_per_block, accepted)


def extract_colored(layer: LayerView, classifier: ColorClassifier, sink: ColorPointSink) -> ColorPointSink:
    """Fill ``sink`` with every voxel center the classifier accepts, colored by its value.

    The sink is cleared first. Exceptions from ``classifier`` propagate; points
    appended before the failure stay in the sink.
    """
    _require(layer=layer, classifier=classifier, sink=sink)
    sink.clear()

    def visit(voxel: Any, coord: Any) -> bool:
        decision = classifier(voxel, coord)
        if decision.accepted:
            sink.append(coord, decision.value)
        return decision.accepted

    _visit_layer(layer, visit)
    return sink


def extract_intensity(layer: LayerView, classifier: IntensityClassifier, sink: IntensityPointSink) -> IntensityPointSink:
    """Like :func:`extract_colored` but with a scalar intensity per point."""
    _require(layer=layer, classifier=classifier, sink=sink)
    sink.clear()

    def visit(voxel: Any, coord: Any) -> bool:
        decision = classifier(voxel, coord)
        if decision.accepted:
            sink.append(coord, decision.value)
        return decision.accepted

    _visit_layer(layer, visit)
    return sink


def extract_marked(
    layer: LayerView,
    classifier: MarkerClassifier,
    frame_id: str,
    sink: MarkerArray,
    height_coloring: Optional[HeightColoring] = None,
) -> MarkerArray:
    """Replace the contents of ``sink`` with a single cube-list marker.

    Each accepted voxel becomes one cube of edge ``layer.voxel_size``, colored
    by its height through ``height_coloring`` (``rainbow((z - 5) * 10)`` by
    default), independent of the voxel payload.
    """
    _require(layer=layer, classifier=classifier, sink=sink)
    coloring = height_coloring if height_coloring is not None else DEFAULT_HEIGHT_COLORING
    sink.clear()
    voxel_size = float(layer.voxel_size)
    marker = Marker(frame_id=frame_id, scale=(voxel_size, voxel_size, voxel_size))

    def visit(voxel: Any, coord: Any) -> bool:
        if classifier(voxel, coord):
            marker.add_cube(coord, coloring(coord[2]))
            return True
        return False

    _visit_layer(layer, visit)
    sink.append(marker)
    return sink


# Shortcuts for the stock voxel kinds.

def create_surface_pointcloud_from_tsdf_layer(
    layer: LayerView[TsdfVoxel], surface_distance: float, sink: ColorPointSink
) -> ColorPointSink:
    return extract_colored(layer, near_surface_classifier(surface_distance), sink)


def create_distance_pointcloud_from_tsdf_layer(
    layer: LayerView[TsdfVoxel], sink: IntensityPointSink
) -> IntensityPointSink:
    return extract_intensity(layer, visualize_distance_intensity_tsdf_voxels, sink)


def create_distance_pointcloud_from_esdf_layer(
    layer: LayerView[EsdfVoxel], sink: IntensityPointSink
) -> IntensityPointSink:
    return extract_intensity(layer, visualize_distance_intensity_esdf_voxels, sink)


def create_occupancy_blocks_from_tsdf_layer(
    layer: LayerView[TsdfVoxel],
    frame_id: str,
    sink: MarkerArray,
    height_coloring: Optional[HeightColoring] = None,
) -> MarkerArray:
    return extract_marked(layer, visualize_occupied_tsdf_voxels, frame_id, sink, height_coloring)
