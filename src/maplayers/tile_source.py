"""Transports that deliver raw tile payloads for a tile coordinate.

Two implementations are provided:

* :class:`HttpTileSource` downloads tiles from one or more URL templates using
  :mod:`aiohttp`.  Requests are regular coroutines, so cancelling the task
  that awaits them aborts the download.
* :class:`FileTileSource` reads a ``{z}/{x}/{y}`` folder hierarchy, such as the
  output of MapTiler or tippecanoe.  Reads are short and synchronous, which
  means an in-flight read cannot be interrupted.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

import aiohttp

from .config import DEFAULT_FETCH_TIMEOUT_SEC, USER_AGENT
from .errors import TileFetchError
from .viewport import TileCoordinate

_LOGGER = logging.getLogger(__name__)


class TileSource(Protocol):
    """Structural interface used by :class:`~maplayers.tile_manager.TileManager`."""

    @property
    def supports_cancellation(self) -> bool:
        ...

    async def fetch(self, coord: TileCoordinate) -> bytes:
        ...

    async def close(self) -> None:
        ...


def expand_template(template: str, coord: TileCoordinate) -> str:
    """Substitute ``{x}``, ``{y}``, ``{z}`` and the TMS row ``{-y}``."""

    tms_y = (1 << coord.z) - 1 - coord.y
    return (
        template.replace("{x}", str(coord.x))
        .replace("{-y}", str(tms_y))
        .replace("{y}", str(coord.y))
        .replace("{z}", str(coord.z))
    )


def select_template(templates: Sequence[str], coord: TileCoordinate) -> str:
    """Spread requests across mirrors while keeping a tile on one host."""

    if not templates:
        raise ValueError("At least one URL template is required")
    return templates[abs(coord.x + coord.y) % len(templates)]


class HttpTileSource:
    """Download tiles over HTTP(S) from a list of URL templates."""

    supports_cancellation = True

    def __init__(
        self,
        templates: str | Sequence[str],
        *,
        session: aiohttp.ClientSession | None = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT_SEC,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._templates: tuple[str, ...] = (templates,) if isinstance(templates, str) else tuple(templates)
        if not self._templates:
            raise ValueError("At least one URL template is required")
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._headers = {"user-agent": USER_AGENT, **(headers or {})}

    @property
    def templates(self) -> tuple[str, ...]:
        return self._templates

    def url_for(self, coord: TileCoordinate) -> str:
        return expand_template(select_template(self._templates, coord), coord)

    async def fetch(self, coord: TileCoordinate) -> bytes:
        url = self.url_for(coord)
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)

        _LOGGER.debug("GET %s", url)
        try:
            async with self._session.get(url, headers=self._headers, timeout=self._timeout) as resp:
                if resp.status != 200:
                    raise TileFetchError(
                        f"HTTP {resp.status} for tile {coord.z}/{coord.x}/{coord.y}",
                        status_code=resp.status,
                        url=url,
                    )
                return await resp.read()
        except TileFetchError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TileFetchError(
                f"Request for tile {coord.z}/{coord.x}/{coord.y} failed: {exc!r}",
                url=url,
            ) from exc

    async def close(self) -> None:
        """Close the HTTP session when this source created it."""

        if self._owns_session and self._session is not None:
            await self._session.close()
        self._session = None


class FileTileSource:
    """Read tiles from a ``{z}/{x}/{y}.<suffix>`` folder hierarchy.

    Parameters
    ----------
    tile_root:
        Folder containing the tile pyramid.
    suffix:
        File extension including the dot, for example ``".pbf"`` or ``".png"``.
    tms:
        ``True`` when rows are stored in the TMS scheme, where the Y axis is
        flipped compared to the XYZ layout.
    """

    supports_cancellation = False

    def __init__(self, tile_root: Path | str, *, suffix: str = ".pbf", tms: bool = False) -> None:
        self.tile_root = Path(tile_root)
        if not self.tile_root.is_dir():
            raise TileFetchError(f"Tile directory '{self.tile_root}' does not exist")
        self._suffix = suffix
        self._tms = tms

    def path_for(self, coord: TileCoordinate) -> Path:
        n = 1 << coord.z
        row = (n - 1) - coord.y if self._tms else coord.y
        return self.tile_root / str(coord.z) / str(coord.x % n) / f"{row}{self._suffix}"

    async def fetch(self, coord: TileCoordinate) -> bytes:
        path = self.path_for(coord)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise TileFetchError(f"Tile {coord.z}/{coord.x}/{coord.y} not found at {path}") from exc
        except OSError as exc:
            raise TileFetchError(f"Unable to read tile {coord.z}/{coord.x}/{coord.y} from disk") from exc

    async def close(self) -> None:
        return None


__all__ = [
    "FileTileSource",
    "HttpTileSource",
    "TileSource",
    "expand_template",
    "select_template",
]
