"""Typer-based CLI entry point."""

from __future__ import annotations

import asyncio
import functools
import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from .errors import MapLayersError, RenderError, ViewError
from .filters import FilterRange
from .hexagons import load_hex_bins
from .scene import build_scene, initial_state, update_state
from .settings import load_settings
from .stylist import AGRI_GRADE_STYLIST
from .tile_index import TileGrid, fetch_zoom, resolve_tiles, zoom_offset_for
from .utils.console_logger import ensure_console_logger
from .viewport import create_viewport

_LOGGER = logging.getLogger(__name__)

app = typer.Typer(help="Layered tile map rendering: basemap, vector overlay and H3 bins")


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except MapLayersError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log tile activity")) -> None:
    ensure_console_logger(
        logging.getLogger("maplayers"),
        "maplayers-cli",
        level=logging.DEBUG if verbose else logging.WARNING,
    )


@app.command()
@_handle_errors
def tiles(
    latitude: float = typer.Option(..., help="Camera latitude"),
    longitude: float = typer.Option(..., help="Camera longitude"),
    zoom: float = typer.Option(..., help="Camera zoom"),
    width: int = typer.Option(1024, help="Viewport width in pixels"),
    height: int = typer.Option(768, help="Viewport height in pixels"),
    bearing: float = typer.Option(0.0, help="Camera bearing in degrees"),
    tile_size: int = typer.Option(256, help="Tile size in pixels"),
    min_zoom: int = typer.Option(0, help="Lowest tile zoom level"),
    max_zoom: int = typer.Option(19, help="Highest tile zoom level"),
    device_pixel_ratio: float = typer.Option(1.0, help="Display pixel ratio"),
) -> None:
    """List the tiles needed to cover a viewport."""

    try:
        viewport = create_viewport(latitude, longitude, zoom, width=width, height=height, bearing=bearing)
        grid = TileGrid(
            tile_size=tile_size,
            min_zoom=min_zoom,
            max_zoom=max_zoom,
            zoom_offset=zoom_offset_for(device_pixel_ratio),
        )
    except ValueError as exc:
        raise ViewError(str(exc)) from exc
    coords = resolve_tiles(viewport, grid)

    table = Table(title=f"{len(coords)} tiles at z={fetch_zoom(viewport, grid)}")
    table.add_column("z", justify="right")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    for coord in coords:
        table.add_row(str(coord.z), str(coord.x), str(coord.y))
    Console().print(table)


@app.command()
def classify(value: str = typer.Argument(..., help="Agri_Grade category")) -> None:
    """Print the fill color assigned to an Agri_Grade value."""

    color = AGRI_GRADE_STYLIST.classify(value)
    print(f"{value!r} -> {list(color)}")


@app.command()
@_handle_errors
def render(
    output: Path = typer.Argument(..., help="PNG file to write"),
    settings: Optional[Path] = typer.Option(None, help="Settings JSON file"),
    hexbins: Optional[Path] = typer.Option(None, help="CSV with H3 cell ids and weights"),
    latitude: Optional[float] = typer.Option(None, help="Override camera latitude"),
    longitude: Optional[float] = typer.Option(None, help="Override camera longitude"),
    zoom: Optional[float] = typer.Option(None, help="Override camera zoom"),
    width: Optional[int] = typer.Option(None, help="Override viewport width"),
    height: Optional[int] = typer.Option(None, help="Override viewport height"),
    show_outline: Optional[bool] = typer.Option(None, "--show-outline/--no-outline", help="Outline basemap tiles"),
    filter_min: Optional[float] = typer.Option(None, help="Lower bound of the vector filter"),
    filter_max: Optional[float] = typer.Option(None, help="Upper bound of the vector filter"),
    timeout: float = typer.Option(30.0, help="Seconds to wait for tiles"),
) -> None:
    """Fetch the tiles of one view and save the composed map as an image."""

    config = load_settings(settings)
    dataset = hexbins or config["hexagons"]["dataset"]
    bins = []
    if dataset:
        bins = load_hex_bins(
            dataset,
            id_column=config["hexagons"]["id_column"],
            value_column=config["hexagons"]["value_column"],
        )

    try:
        state = initial_state(
            config, latitude=latitude, longitude=longitude, zoom=zoom, width=width, height=height
        )
        if show_outline is not None:
            state = update_state(state, show_outline=show_outline)
        if filter_min is not None or filter_max is not None:
            current = state.filter_range
            state = update_state(
                state,
                filter_range=FilterRange(
                    current.min if filter_min is None else filter_min,
                    current.max if filter_max is None else filter_max,
                ),
            )
    except ValueError as exc:
        raise ViewError(str(exc)) from exc

    primitives = asyncio.run(_collect_frame(config, state, bins, timeout))

    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtGui import QGuiApplication

    from .painter import PrimitivePainter

    qt_app = QGuiApplication.instance() or QGuiApplication([])  # noqa: F841 - held while painting
    image = PrimitivePainter(state.viewport, tile_size=config["basemap"]["tile_size"]).render_image(primitives)
    if not image.save(str(output)):
        raise RenderError(f"Could not write image to {output}")
    print(f"[green]Wrote {len(primitives)} primitives to {output}")


async def _collect_frame(config, state, bins, timeout):
    scene = build_scene(config, hex_bins=bins, state=state)
    try:
        scene.refresh()
        try:
            await asyncio.wait_for(scene.wait_idle(), timeout)
        except asyncio.TimeoutError:
            _LOGGER.warning("Timed out after %ss waiting for tiles; rendering what arrived", timeout)
        return scene.frame()
    finally:
        await scene.close()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    app()
