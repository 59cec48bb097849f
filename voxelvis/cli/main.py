from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from ..core.layer_io import load_layer
from ..examples.synthetic import generate_layer
from ..sdk.run import extract_from_config

app = typer.Typer(help="voxelvis layer visualization utilities")
layer_app = typer.Typer(help="Synthetic layer helpers")
app.add_typer(layer_app, name="layer")

MODES = ("surface", "distance", "occupancy")


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="[%(levelname)s] %(message)s")
    logging.getLogger("voxelvis").setLevel(numeric)


def _execute_extract(
    config: Path,
    output_override: Optional[Path],
    mode_override: Optional[str],
    log_level: str,
) -> None:
    _configure_logging(log_level)
    if mode_override is not None and mode_override not in MODES:
        raise typer.BadParameter(f"mode must be one of {list(MODES)}.", param_hint="--mode")
    try:
        result = extract_from_config(config, output=output_override, mode=mode_override)
    except ValueError as exc:
        if output_override is not None and "extension" in str(exc):
            raise typer.BadParameter(str(exc), param_hint="--output") from exc
        raise
    unit = "cubes" if result.config.mode == "occupancy" else "points"
    typer.echo(f"Extracted {result.count} {unit} ({result.config.mode}) → {result.output_path}")


@app.command("extract")
def extract(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML configuration file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Override output path (extension sets format)."),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Override extraction mode (surface, distance, occupancy)."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Extract points or occupancy markers from a layer as described by a YAML config."""

    _execute_extract(config, output, mode, log_level)


@app.command("run")
def run(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML configuration file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Override output path (extension sets format)."),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Override extraction mode (surface, distance, occupancy)."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Alias for `extract`"""

    _execute_extract(config, output, mode, log_level)


@layer_app.command("generate")
def layer_generate(
    output: Path = typer.Argument(..., help="Output layer path (.npz)."),
    preset: str = typer.Option("sphere", "--preset", help="Synthetic layer preset (sphere, plane)."),
    kind: str = typer.Option("tsdf", "--kind", help="Voxel kind (tsdf, esdf)."),
    size: float = typer.Option(2.0, "--size", help="Scene extent in metres."),
    voxel_size: float = typer.Option(0.1, "--voxel-size", help="Voxel edge length in metres."),
) -> None:
    """Generate a synthetic layer useful for extraction demos."""

    if voxel_size <= 0:
        raise typer.BadParameter("voxel size must be positive.", param_hint="--voxel-size")
    out = output.resolve()
    try:
        layer = generate_layer(preset=preset, kind=kind, size=size, path=out, voxel_size=voxel_size)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Wrote synthetic {kind} layer ({len(layer)} blocks) to {out}")


@layer_app.command("info")
def layer_info(
    path: Path = typer.Argument(..., exists=True, readable=True, help="Layer file (.npz)."),
) -> None:
    """Print a short summary of a stored layer."""

    layer = load_layer(path)
    typer.echo(
        f"blocks={len(layer)} voxels_per_side={layer.voxels_per_side} voxel_size={layer.voxel_size}"
    )


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
