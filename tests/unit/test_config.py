from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from voxelvis.config import load_config


def _write(path: Path, data: dict) -> Path:
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f)
    return path


def test_load_config_resolves_relative_paths(tmp_path: Path) -> None:
    cfg = load_config(_write(tmp_path / "cfg.yaml", {
        "layer": {"path": "layer.npz"},
        "output": {"path": "out/surface.ply"},
    }))
    assert cfg.mode == "surface"
    assert cfg.surface_distance == 0.1
    assert cfg.layer.path == (tmp_path / "layer.npz").resolve()
    assert cfg.output.path == (tmp_path / "out" / "surface.ply").resolve()
    assert cfg.height_coloring.offset == 5.0
    assert cfg.height_coloring.scale == 10.0


def test_occupancy_requires_marker_output(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        load_config(_write(tmp_path / "cfg.yaml", {
            "layer": {"path": "layer.npz"},
            "mode": "occupancy",
            "output": {"path": "out.ply", "format": "ply"},
        }))


def test_point_modes_reject_yaml_output(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        load_config(_write(tmp_path / "cfg.yaml", {
            "layer": {"path": "layer.npz"},
            "mode": "distance",
            "output": {"path": "out.yaml", "format": "yaml"},
        }))


def test_surface_distance_must_be_positive(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        load_config(_write(tmp_path / "cfg.yaml", {
            "layer": {"path": "layer.npz"},
            "surface_distance": 0.0,
            "output": {"path": "out.ply"},
        }))


def test_config_root_must_be_mapping(tmp_path: Path) -> None:
    path = tmp_path / "cfg.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_unknown_colormap_is_rejected_at_load(tmp_path: Path) -> None:
    with pytest.raises(ValidationError, match="colormap"):
        load_config(_write(tmp_path / "cfg.yaml", {
            "layer": {"path": "layer.npz"},
            "height_coloring": {"colormap": "nope"},
            "output": {"path": "out.ply"},
        }))


def test_matplotlib_colormap_name_is_accepted(tmp_path: Path) -> None:
    cfg = load_config(_write(tmp_path / "cfg.yaml", {
        "layer": {"path": "layer.npz"},
        "height_coloring": {"colormap": "viridis"},
        "output": {"path": "out.ply"},
    }))
    assert cfg.height_coloring.colormap == "viridis"
