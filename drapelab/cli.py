# SPDX-License-Identifier: Apache-2.0
"""CLI entrypoints."""
from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import numpy as np
import typer

from .errors import DrapeLabError
from .imaging import load_image, save_image
from .drape import render_drape
from .logging_utils import get_logger
from .palette import parse_palette
from .pipeline import AnalysisSession
from .samples import make_synthetic_face
from .types import DeviceCapability, LightMode, MetalType, Swatch
from .utils.io import ensure_dir, read_json, write_json

LOGGER = get_logger(__name__)

app = typer.Typer(help="Drape preview, palette ranking and pigment analysis.")


def _run(session: AnalysisSession, out: Path, metal: MetalType, top: int,
         palette: Optional[List[Swatch]] = None) -> dict:
    ensure_dir(out)
    report = session.report(metal, k=top, palette=palette)
    best = report["adjusted_best_colors"][0]["color"] if report["adjusted_best_colors"] else None
    if best is not None:
        preview = render_drape(session.image, Swatch.from_hex(best), session.mask, metal, session.config)
        save_image(preview, out / "drape_best.png")
    for mode in LightMode:
        save_image(session.heatmap(mode), out / f"heatmap_{mode.value}.png")
    write_json(out / "analysis.json", report)
    LOGGER.info("outputs_written", out=str(out))
    return report


def _read_landmarks(path: Path) -> List[tuple]:
    """Parse a JSON list of [x, y] points; raises ValueError when malformed."""
    try:
        pts = np.asarray(read_json(path), dtype=float)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{path.name} is not a list of [x, y] points") from e
    if pts.ndim != 2 or pts.shape[1] < 2:
        raise ValueError(f"{path.name} must hold [x, y] pairs, got shape {pts.shape}")
    return [tuple(p[:2]) for p in pts.tolist()]


@app.command()
def demo(
    out: Path = typer.Option(Path("runs/demo"), help="Output folder"),
    palette_size: int = typer.Option(16, help="Palette size: 16, 64 or 128"),
    metal: MetalType = typer.Option(MetalType.GOLD, help="Metal accessory to simulate"),
    top: int = typer.Option(5, help="Number of best colors to keep"),
    size: int = typer.Option(256, help="Edge length of the synthetic portrait"),
):
    """Run the full analysis on a synthetic portrait."""
    image, landmarks = make_synthetic_face(size, size)
    try:
        with AnalysisSession(image, landmarks, DeviceCapability(palette_size=palette_size)) as session:
            report = _run(session, out, metal, top)
    except DrapeLabError as e:
        typer.echo(f"analysis failed: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(report["insight"]))
    typer.echo(f"Results stored in {out}")


@app.command()
def analyze(
    image: Path = typer.Argument(..., exists=True, help="Portrait image"),
    landmarks: Path = typer.Argument(..., exists=True, help="JSON list of [x, y] contour points"),
    out: Path = typer.Option(Path("runs/analyze"), help="Output folder"),
    tier: str = typer.Option("mid", help="Device tier: low, mid or high"),
    palette_size: Optional[int] = typer.Option(None, help="Override the tier palette size"),
    metal: MetalType = typer.Option(MetalType.NONE, help="Metal accessory to simulate"),
    top: int = typer.Option(5, help="Number of best colors to keep"),
    colors: Optional[str] = typer.Option(None, help="Comma-separated hex colors to rank instead of the generated palette"),
):
    """Analyze a portrait with a supplied face contour."""
    try:
        points = _read_landmarks(landmarks)
    except ValueError as e:
        typer.echo(f"bad landmarks file: {e}", err=True)
        raise typer.Exit(code=2)
    capability = DeviceCapability(tier=tier, palette_size=palette_size)
    try:
        swatches = parse_palette(colors.split(",")) if colors else None
    except ValueError as e:
        typer.echo(f"bad --colors value: {e}", err=True)
        raise typer.Exit(code=2)
    try:
        with AnalysisSession(load_image(image), points, capability) as session:
            report = _run(session, out, metal, top, swatches)
    except DrapeLabError as e:
        typer.echo(f"analysis failed: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(report["insight"]))
    typer.echo(f"Results stored in {out}")


def main() -> None:  # pragma: no cover
    app()
