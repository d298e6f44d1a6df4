import asyncio
import io
import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Qt must never try to reach a display server while the suite runs.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from maplayers.errors import TileFetchError  # noqa: E402
from maplayers.viewport import TileCoordinate  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    QtGui = pytest.importorskip("PySide6.QtGui", reason="PySide6 not available")
    app = QtGui.QGuiApplication.instance()
    if app is None:
        app = QtGui.QGuiApplication([])
    yield app


class FakeTileSource:
    """In-memory tile source whose fetches can be held open with a gate."""

    def __init__(
        self,
        payloads: dict[TileCoordinate, bytes] | None = None,
        *,
        cancellable: bool = True,
        blocked: bool = False,
        failing: set[TileCoordinate] | None = None,
        default: bytes | None = None,
    ) -> None:
        self.supports_cancellation = cancellable
        self.payloads = payloads or {}
        self.failing = set(failing or ())
        self.default = default
        self.gate = asyncio.Event()
        if not blocked:
            self.gate.set()
        self.calls: list[TileCoordinate] = []
        self.cancelled: list[TileCoordinate] = []
        self.in_flight = 0
        self.peak = 0
        self.closed = False

    async def fetch(self, coord: TileCoordinate) -> bytes:
        self.calls.append(coord)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await self.gate.wait()
        except asyncio.CancelledError:
            self.cancelled.append(coord)
            raise
        finally:
            self.in_flight -= 1
        if coord in self.failing:
            raise TileFetchError(f"HTTP 500 for tile {coord.z}/{coord.x}/{coord.y}", status_code=500)
        if coord in self.payloads:
            return self.payloads[coord]
        if self.default is not None:
            return self.default
        return f"{coord.z}/{coord.x}/{coord.y}".encode()

    async def close(self) -> None:
        self.closed = True


class EchoDecoder:
    def decode(self, data: bytes, coord: TileCoordinate) -> bytes:
        return data


async def settle(rounds: int = 5) -> None:
    """Let freshly scheduled tasks run up to their first blocking await."""

    for _ in range(rounds):
        await asyncio.sleep(0)


def png_bytes(size: tuple[int, int] = (4, 4), color: str = "red", mode: str = "RGB") -> bytes:
    from PIL import Image

    buffer = io.BytesIO()
    Image.new(mode, size, color=color if mode == "RGB" else 128).save(buffer, format="PNG")
    return buffer.getvalue()


def mvt_bytes() -> bytes:
    """One graded polygon of 150 ha and one ungraded point of 20 ha."""

    import mapbox_vector_tile

    return mapbox_vector_tile.encode(
        [
            {
                "name": "groundmountpv",
                "features": [
                    {
                        "geometry": "POLYGON ((1024 1024, 3072 1024, 3072 3072, 1024 3072, 1024 1024))",
                        "properties": {"Agri_Grade": "Grade 3", "Area_Ha": 150.5},
                        "id": 7,
                    },
                    {
                        "geometry": "POINT (2048 2048)",
                        "properties": {"Agri_Grade": "urban", "Area_Ha": 20},
                    },
                ],
            }
        ],
        default_options={"y_coord_down": True},
    )
