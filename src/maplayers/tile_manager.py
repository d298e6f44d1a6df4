"""Asynchronous tile loading and caching infrastructure."""

from __future__ import annotations

import asyncio
import enum
import logging
from collections import OrderedDict
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from PySide6.QtCore import QObject, Signal

from .config import DEFAULT_CACHE_LIMIT, DEFAULT_MAX_REQUESTS
from .errors import TileLoadingError
from .tile_decoder import TileDecoder
from .tile_source import TileSource
from .viewport import TileBounds, TileCoordinate, tile_bounds

_LOGGER = logging.getLogger(__name__)


class TileStatus(enum.Enum):
    PENDING = "pending"
    LOADED = "loaded"
    ERRORED = "errored"


@dataclass(frozen=True)
class TileRecord:
    """Snapshot of one fetch attempt for ``coord``.

    Records are never mutated: every state transition stores a new record in
    the cache slot of its coordinate.
    """

    coord: TileCoordinate
    bbox: TileBounds
    status: TileStatus
    attempt: int
    payload: Any = None
    error: str | None = None


class TileManager(QObject):
    """Manage tile fetching, caching and stale request cancellation.

    ``request_tiles`` must be called from a running asyncio event loop.  Every
    newly needed tile is scheduled as a task before control returns to the
    loop, and at most ``max_requests`` of those tasks talk to the source at
    the same time.  Fetch and decode failures mark the tile as errored and are
    otherwise swallowed so a flaky tile server never takes the view down.
    """

    tile_loaded = Signal(tuple)
    tile_errored = Signal(tuple)
    tile_removed = Signal(tuple)
    tiles_changed = Signal()

    def __init__(
        self,
        source: TileSource,
        decoder: TileDecoder,
        *,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        cache_limit: int = DEFAULT_CACHE_LIMIT,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        if max_requests < 1:
            raise ValueError(f"max_requests must be at least 1, got {max_requests}")
        self._source = source
        self._decoder = decoder
        self._max_requests = max_requests
        self._cache_limit = cache_limit

        self._records: OrderedDict[TileCoordinate, TileRecord] = OrderedDict()
        self._tasks: dict[TileCoordinate, asyncio.Task[None]] = {}
        self._attempts: dict[TileCoordinate, int] = {}
        self._queued: set[TileCoordinate] = set()
        self._needed: tuple[TileCoordinate, ...] = ()
        self._admission = asyncio.Semaphore(max_requests)

    # ------------------------------------------------------------------
    @property
    def max_requests(self) -> int:
        return self._max_requests

    # ------------------------------------------------------------------
    @property
    def needed(self) -> tuple[TileCoordinate, ...]:
        """Coordinates from the most recent :meth:`request_tiles` call."""

        return self._needed

    # ------------------------------------------------------------------
    def request_tiles(self, coords: Iterable[TileCoordinate]) -> None:
        """Make ``coords`` the needed set and schedule the tiles that lack data."""

        ordered = tuple(dict.fromkeys(coords))
        previously_needed = set(self._needed)
        needed = set(ordered)
        self._needed = ordered

        for coord in list(self._tasks):
            if coord not in needed:
                self._drop_stale(coord)

        for coord in ordered:
            if coord in self._tasks:
                continue
            record = self._records.get(coord)
            if record is not None:
                if record.status is TileStatus.LOADED:
                    self._records.move_to_end(coord)
                    continue
                # Errored tiles are retried only after they left the view.
                if record.status is TileStatus.ERRORED and coord in previously_needed:
                    continue
            self._schedule(coord)

        self._evict()

    # ------------------------------------------------------------------
    def get_tile(self, coord: TileCoordinate) -> TileRecord | None:
        """Return the cached record, updating the LRU ordering when found."""

        record = self._records.get(coord)
        if record is not None:
            self._records.move_to_end(coord)
        return record

    # ------------------------------------------------------------------
    def visible_records(self) -> list[TileRecord]:
        """Return loaded records of the needed set in request order."""

        records: list[TileRecord] = []
        for coord in self._needed:
            record = self._records.get(coord)
            if record is not None and record.status is TileStatus.LOADED:
                records.append(record)
        return records

    # ------------------------------------------------------------------
    def pending_tiles(self) -> set[TileCoordinate]:
        """Expose the set of in-flight requests for diagnostics/testing."""

        return {coord for coord, record in self._records.items() if record.status is TileStatus.PENDING}

    # ------------------------------------------------------------------
    def queued_tiles(self) -> set[TileCoordinate]:
        """Tiles scheduled but still waiting for a free request slot."""

        return set(self._queued)

    # ------------------------------------------------------------------
    def is_tile_errored(self, coord: TileCoordinate) -> bool:
        record = self._records.get(coord)
        return record is not None and record.status is TileStatus.ERRORED

    # ------------------------------------------------------------------
    async def wait_idle(self) -> None:
        """Wait until every scheduled fetch has settled."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    # ------------------------------------------------------------------
    async def shutdown(self) -> None:
        """Cancel outstanding fetches and release the tile source."""

        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._queued.clear()
        await self._source.close()

    # ------------------------------------------------------------------
    def _schedule(self, coord: TileCoordinate) -> None:
        attempt = self._attempts.get(coord, 0) + 1
        self._attempts[coord] = attempt
        self._queued.add(coord)
        self._tasks[coord] = asyncio.get_running_loop().create_task(self._load(coord, attempt))

    # ------------------------------------------------------------------
    def _drop_stale(self, coord: TileCoordinate) -> None:
        """Abandon the fetch for a tile that left the needed set."""

        if not self._source.supports_cancellation:
            # The late result is still cached; it is simply not rendered.
            return

        task = self._tasks.pop(coord)
        task.cancel()
        self._queued.discard(coord)
        record = self._records.get(coord)
        if record is not None and record.status is TileStatus.PENDING:
            del self._records[coord]
        _LOGGER.debug("Cancelled stale tile %s/%s/%s", coord.z, coord.x, coord.y)

    # ------------------------------------------------------------------
    async def _load(self, coord: TileCoordinate, attempt: int) -> None:
        bbox = tile_bounds(coord)
        try:
            async with self._admission:
                if self._tasks.get(coord) is asyncio.current_task():
                    self._queued.discard(coord)
                self._store(TileRecord(coord, bbox, TileStatus.PENDING, attempt))
                try:
                    data = await self._source.fetch(coord)
                    payload = self._decoder.decode(data, coord)
                except TileLoadingError as exc:
                    _LOGGER.warning(
                        "Tile %s/%s/%s could not be loaded: %s",
                        coord.z,
                        coord.x,
                        coord.y,
                        exc,
                    )
                    self._resolve(TileRecord(coord, bbox, TileStatus.ERRORED, attempt, error=str(exc)))
                    return
                self._resolve(TileRecord(coord, bbox, TileStatus.LOADED, attempt, payload=payload))
        finally:
            if self._tasks.get(coord) is asyncio.current_task():
                self._queued.discard(coord)
                del self._tasks[coord]

    # ------------------------------------------------------------------
    def _store(self, record: TileRecord) -> None:
        self._records[record.coord] = record
        self._records.move_to_end(record.coord)

    # ------------------------------------------------------------------
    def _resolve(self, record: TileRecord) -> None:
        """Store the outcome of an attempt unless a newer attempt superseded it."""

        coord = record.coord
        if self._attempts.get(coord) != record.attempt:
            _LOGGER.debug("Discarding superseded result for tile %s/%s/%s", coord.z, coord.x, coord.y)
            return

        self._store(record)
        if record.status is TileStatus.LOADED:
            self.tile_loaded.emit(coord)
        else:
            self.tile_errored.emit(coord)
        self._evict()
        self.tiles_changed.emit()

    # ------------------------------------------------------------------
    def _evict(self) -> None:
        """Drop least recently used records that are neither needed nor in flight."""

        excess = len(self._records) - self._cache_limit
        if excess <= 0:
            return

        needed = set(self._needed)
        for coord in list(self._records):
            if excess <= 0:
                break
            record = self._records[coord]
            if coord in needed or record.status is TileStatus.PENDING:
                continue
            del self._records[coord]
            excess -= 1
            _LOGGER.debug("Evicted tile %s/%s/%s", coord.z, coord.x, coord.y)
            self.tile_removed.emit(coord)


__all__ = ["TileManager", "TileRecord", "TileStatus"]
