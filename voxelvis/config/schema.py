from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


ExtractionMode = Literal["surface", "distance", "occupancy"]


class LayerConfig(BaseModel):
    path: Path


class HeightColoringConfig(BaseModel):
    offset: float = 5.0
    scale: float = 10.0
    colormap: str = "rainbow"

    @field_validator("colormap")
    @classmethod
    def _known_colormap(cls, value: str) -> str:
        if value == "rainbow":
            return value
        import matplotlib

        if value not in matplotlib.colormaps:
            raise ValueError(f"Unknown colormap '{value}'; use 'rainbow' or a matplotlib colormap name")
        return value


class OutputConfig(BaseModel):
    path: Path
    format: Literal["las", "laz", "npz", "ply", "yaml"] = "ply"
    compress: Optional[bool] = None
    point_format: int = 7

    @model_validator(mode="after")
    def _validate_format(self) -> "OutputConfig":
        if self.format == "laz" and self.compress is False:
            raise ValueError("format 'laz' implies compress=True")
        return self


class ExtractionConfig(BaseModel):
    layer: LayerConfig
    mode: ExtractionMode = "surface"
    surface_distance: float = Field(0.1, gt=0.0)
    frame_id: str = "world"
    height_coloring: HeightColoringConfig = HeightColoringConfig()
    output: OutputConfig

    @model_validator(mode="after")
    def _check_output_for_mode(self) -> "ExtractionConfig":
        if self.mode == "occupancy":
            if self.output.format not in {"npz", "yaml"}:
                raise ValueError("Occupancy mode writes markers; output format must be 'npz' or 'yaml'")
        elif self.output.format == "yaml":
            raise ValueError(f"Mode '{self.mode}' writes points; 'yaml' output is only for occupancy markers")
        return self


def load_config(path: str | Path) -> ExtractionConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping.")
    cfg = ExtractionConfig.model_validate(data)
    if not cfg.output.path.is_absolute():
        cfg.output.path = (path.parent / cfg.output.path).resolve()
    if not cfg.layer.path.is_absolute():
        cfg.layer.path = (path.parent / cfg.layer.path).resolve()
    return cfg
