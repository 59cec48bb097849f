"""Configuration loading utilities for voxelvis."""

from .schema import (
    ExtractionConfig,
    load_config,
)

__all__ = ["ExtractionConfig", "load_config"]
