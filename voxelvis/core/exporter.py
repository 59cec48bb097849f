from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
import numpy as np
import pathlib

import laspy  # type: ignore
import yaml

from .pointcloud import PointBatch
from .sinks import Marker
from .utils import get_logger, stack_points

_log = get_logger()

@dataclass
class LasWriter:
    """LAS/LAZ writer using laspy (v2+).

    Header is created lazily on the first batch so the extra dimension for
    ``intensity`` is only declared when the batch carries one. ``rgb`` goes to
    the standard color fields (point format must have them).
    """
    path: str
    point_format: int = 7
    compress: bool = False
    scale: tuple[float, float, float] = (1e-3, 1e-3, 1e-3)
    offset: Optional[tuple[float, float, float]] = None

    def __post_init__(self) -> None:
        self._fh: Optional[laspy.LasWriter] = None  # type: ignore
        self._header: Optional[laspy.LasHeader] = None  # type: ignore

    def write_batch(self, batch: PointBatch) -> None:
        if self._fh is None:
            self._init_header_from_batch(batch)
        if len(batch) == 0:
            return
        assert self._fh is not None and self._header is not None
        self._fh.write_points(self._point_record_from_batch(batch, self._header))

    def close(self) -> None:
        if self._fh is None:
            # Nothing was written; still produce a valid zero-point file.
            self._init_header_from_batch(None)
        assert self._fh is not None
        self._fh.close()
        self._fh = None

    def _init_header_from_batch(self, batch: Optional[PointBatch]) -> None:
        hdr = laspy.LasHeader(point_format=laspy.PointFormat(self.point_format), version="1.4")
        hdr.scales = self.scale
        if self.offset is not None:
            hdr.offsets = self.offset
        elif batch is not None and len(batch) > 0:
            mn = np.min(batch.xyz, axis=0)
            hdr.offsets = (float(mn[0]), float(mn[1]), float(mn[2]))
        else:
            hdr.offsets = (0.0, 0.0, 0.0)
        if batch is not None and "intensity" in batch.attrs:
            # LAS intensity is unsigned 16 bit; signed distances need a float field
            hdr.add_extra_dim(laspy.ExtraBytesParams(name="distance", type="float32"))

        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = laspy.open(path, mode="w", header=hdr, do_compress=self.compress)
        self._header = hdr
        _log.info("Opened %s (PF=%d, compress=%s)", path.name, self.point_format, self.compress)

    def _point_record_from_batch(self, batch: PointBatch, header: "laspy.LasHeader") -> "laspy.ScaleAwarePointRecord":
        pts = laspy.ScaleAwarePointRecord.zeros(len(batch), header=header)
        pts.x = batch.xyz[:, 0]
        pts.y = batch.xyz[:, 1]
        pts.z = batch.xyz[:, 2]

        names = pts.point_format.dimension_names
        if "rgb" in batch.attrs and all(nm in names for nm in ("red", "green", "blue")):
            rgb = batch.attrs["rgb"].astype(np.uint16) * 257  # 0..255 -> 0..65535
            pts.red = rgb[:, 0]
            pts.green = rgb[:, 1]
            pts.blue = rgb[:, 2]
        if "intensity" in batch.attrs and "distance" in names:
            pts["distance"] = batch.attrs["intensity"].astype(np.float32, copy=False)
        return pts


class PlyWriter:
    """Buffered ASCII PLY writer. Colors and intensities become vertex properties."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._batches: List[PointBatch] = []

    def write_batch(self, batch: PointBatch) -> None:
        self._batches.append(batch)

    def close(self) -> None:
        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        xyz = stack_points([b.xyz for b in self._batches])
        rgb = self._concat("rgb")
        intensity = self._concat("intensity")
        with open(path, "w", encoding="utf-8") as f:
            f.write("ply\nformat ascii 1.0\n")
            f.write(f"element vertex {len(xyz)}\n")
            f.write("property float x\nproperty float y\nproperty float z\n")
            if rgb is not None:
                f.write("property uchar red\nproperty uchar green\nproperty uchar blue\n")
            if intensity is not None:
                f.write("property float intensity\n")
            f.write("end_header\n")
            for i, (x, y, z) in enumerate(xyz):
                row = [f"{float(x)}", f"{float(y)}", f"{float(z)}"]
                if rgb is not None:
                    row.extend(str(int(c)) for c in rgb[i])
                if intensity is not None:
                    row.append(f"{float(intensity[i])}")
                f.write(" ".join(row) + "\n")
        _log.info("Wrote %d points to %s", len(xyz), path.name)
        self._batches.clear()

    def _concat(self, key: str) -> Optional[np.ndarray]:
        if not self._batches or not all(key in b.attrs for b in self._batches):
            return None
        return np.concatenate([b.attrs[key] for b in self._batches], axis=0)


class NpzWriter:
    def __init__(self, path: str) -> None:
        self.path = path
        self._batches: List[PointBatch] = []

    def write_batch(self, batch: PointBatch) -> None:
        self._batches.append(batch)

    def close(self) -> None:
        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        xyz = stack_points([b.xyz for b in self._batches])
        out: Dict[str, np.ndarray] = {"xyz": xyz}
        for k in sorted({k for b in self._batches for k in b.attrs}):
            vals: List[np.ndarray] = []
            ref = next(b.attrs[k] for b in self._batches if k in b.attrs)
            for b in self._batches:
                if k in b.attrs:
                    vals.append(b.attrs[k].astype(ref.dtype, copy=False))
                else:
                    vals.append(np.zeros((len(b),) + ref.shape[1:], dtype=ref.dtype))
            out[k] = np.concatenate(vals, axis=0)
        np.savez_compressed(path, **out)
        _log.info("Wrote %d points to %s", len(xyz), path.name)
        self._batches.clear()


def write_markers(path: str | pathlib.Path, markers: Sequence[Marker]) -> pathlib.Path:
    """Write cube-list markers to ``.npz`` (first marker) or ``.yaml`` (all)."""
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    ext = path.suffix.lower()
    if ext == ".yaml" or ext == ".yml":
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump({"markers": [m.to_dict() for m in markers]}, f, sort_keys=False)
    elif ext == ".npz":
        if len(markers) != 1:
            raise ValueError(f"NPZ marker output holds exactly one marker, got {len(markers)}")
        m = markers[0]
        np.savez_compressed(
            path,
            points=m.points_array(),
            colors=m.colors_rgba(),
            scale=np.asarray(m.scale, dtype=np.float64),
            frame_id=np.asarray(m.frame_id),
        )
    else:
        raise ValueError(f"Unsupported marker output extension '{ext}'")
    _log.info("Wrote %d marker(s) to %s", len(markers), path.name)
    return path
