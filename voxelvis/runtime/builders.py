from __future__ import annotations

from pathlib import Path

from ..config import ExtractionConfig
from ..core.colormap import HeightColoring, matplotlib_color_map, rainbow_color_map
from ..core.exporter import LasWriter, NpzWriter, PlyWriter, write_markers
from ..core.extraction import (
    create_distance_pointcloud_from_esdf_layer,
    create_distance_pointcloud_from_tsdf_layer,
    create_occupancy_blocks_from_tsdf_layer,
    create_surface_pointcloud_from_tsdf_layer,
)
from ..core.layer_io import AnyLayer, layer_kind
from ..core.sinks import ColorPointSink, IntensityPointSink, MarkerArray


def build_height_coloring(cfg: ExtractionConfig) -> HeightColoring:
    hc = cfg.height_coloring
    if hc.colormap == "rainbow":
        color_map = rainbow_color_map
    else:
        color_map = matplotlib_color_map(hc.colormap)
    return HeightColoring(offset=hc.offset, scale=hc.scale, color_map=color_map)


def build_writer(cfg: ExtractionConfig):
    out_cfg = cfg.output
    format_lower = out_cfg.format.lower()
    if format_lower in {"las", "laz"}:
        compress = out_cfg.compress
        if compress is None:
            compress = format_lower == "laz"
        return LasWriter(
            str(out_cfg.path),
            point_format=out_cfg.point_format,
            compress=compress,
        )
    if format_lower == "npz":
        return NpzWriter(str(out_cfg.path))
    if format_lower == "ply":
        return PlyWriter(str(out_cfg.path))
    raise ValueError(f"Unsupported point output format: {out_cfg.format}")


def run_extraction(cfg: ExtractionConfig, layer: AnyLayer) -> int:
    """Extract from ``layer`` per ``cfg.mode`` and write the result.

    Returns the number of emitted points (cubes for occupancy).
    """
    kind = layer_kind(layer)
    if cfg.mode in {"surface", "occupancy"} and kind != "tsdf":
        raise ValueError(f"Mode '{cfg.mode}' requires a TSDF layer, got '{kind}'")

    if cfg.mode == "occupancy":
        markers = create_occupancy_blocks_from_tsdf_layer(
            layer, cfg.frame_id, MarkerArray(), build_height_coloring(cfg)
        )
        write_markers(Path(cfg.output.path), markers.markers)
        return sum(len(m.points) for m in markers.markers)

    if cfg.mode == "surface":
        sink = create_surface_pointcloud_from_tsdf_layer(layer, cfg.surface_distance, ColorPointSink())
    elif kind == "tsdf":
        sink = create_distance_pointcloud_from_tsdf_layer(layer, IntensityPointSink())
    else:
        sink = create_distance_pointcloud_from_esdf_layer(layer, IntensityPointSink())

    writer = build_writer(cfg)
    try:
        writer.write_batch(sink.to_batch())
    finally:
        writer.close()
    return len(sink)
