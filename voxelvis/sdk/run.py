from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..config import ExtractionConfig, load_config
from ..core.layer_io import load_layer
from ..runtime.builders import run_extraction

_POINT_FORMATS = {".las", ".laz", ".npz", ".ply"}
_MARKER_FORMATS = {".npz", ".yaml", ".yml"}


@dataclass(frozen=True)
class ExtractionResult:
    """Summary of an extraction driven by a configuration file."""

    count: int
    output_path: Path
    config: ExtractionConfig


def apply_output_override(cfg: ExtractionConfig, output: Path) -> None:
    out_path = Path(output).resolve()
    ext = out_path.suffix.lower()
    allowed = _MARKER_FORMATS if cfg.mode == "occupancy" else _POINT_FORMATS
    if ext not in allowed:
        raise ValueError(f"Unsupported output extension '{ext}' for mode '{cfg.mode}'")
    cfg.output.path = out_path
    cfg.output.format = "yaml" if ext == ".yml" else ext.lstrip(".")
    if ext == ".las":
        cfg.output.compress = False
    elif ext == ".laz":
        cfg.output.compress = True


def extract_from_config(
    config: Union[str, Path, ExtractionConfig],
    *,
    output: Optional[Path] = None,
    mode: Optional[str] = None,
) -> ExtractionResult:
    """Run an extraction described by a configuration file or object.

    Parameters
    ----------
    config:
        Path to a YAML file or a pre-loaded :class:`~voxelvis.config.schema.ExtractionConfig`.
    output:
        Optional override for the output file. The extension drives the format
        (``.las``, ``.laz``, ``.npz``, ``.ply`` for points; ``.npz``, ``.yaml``
        for occupancy markers).
    mode:
        Optional override for the extraction mode.

    Returns
    -------
    ExtractionResult
        Number of emitted points, the resolved output path, and the resolved
        configuration used for the run.
    """

    cfg = load_config(config) if not isinstance(config, ExtractionConfig) else config.model_copy(deep=True)

    if mode is not None:
        cfg = ExtractionConfig.model_validate({**cfg.model_dump(), "mode": mode, "output": _output_for_mode(cfg, mode)})
    if output is not None:
        apply_output_override(cfg, output)

    out_path = Path(cfg.output.path).resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    cfg.output.path = out_path

    layer = load_layer(cfg.layer.path)
    count = run_extraction(cfg, layer)
    return ExtractionResult(count=count, output_path=out_path, config=cfg)


def _output_for_mode(cfg: ExtractionConfig, mode: str) -> dict:
    out = cfg.output.model_dump()
    # Swap to a format the new mode can write, keeping the file stem.
    if mode == "occupancy" and out["format"] not in {"npz", "yaml"}:
        out["format"] = "npz"
        out["path"] = Path(out["path"]).with_suffix(".npz")
    elif mode != "occupancy" and out["format"] == "yaml":
        out["format"] = "ply"
        out["path"] = Path(out["path"]).with_suffix(".ply")
    return out
