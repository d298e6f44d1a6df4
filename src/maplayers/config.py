"""Default configuration values for maplayers."""

from __future__ import annotations

from typing import Final

MERCATOR_LAT_BOUND: Final[float] = 85.05112878

# ---------------------------------------------------------------------------
# Tile grid defaults
# ---------------------------------------------------------------------------

DEFAULT_TILE_SIZE: Final[int] = 256
DEFAULT_MIN_ZOOM: Final[int] = 0
# https://wiki.openstreetmap.org/wiki/Zoom_levels
DEFAULT_MAX_ZOOM: Final[int] = 19
# Vector tiles are authored against a 512px grid.
VECTOR_TILE_SIZE: Final[int] = 512
# Tile servers speak HTTP/2, so requests share a connection instead of queueing
# behind the six-per-host limit of HTTP/1.1.
DEFAULT_MAX_REQUESTS: Final[int] = 20
DEFAULT_CACHE_LIMIT: Final[int] = 256
DEFAULT_FETCH_TIMEOUT_SEC: Final[float] = 15.0
USER_AGENT: Final[str] = "maplayers/0.1 (+https://www.openstreetmap.org/copyright)"

# https://wiki.openstreetmap.org/wiki/Slippy_map_tilenames#Tile_servers
OSM_TILE_URLS: Final[tuple[str, ...]] = (
    "https://a.tile.openstreetmap.org/{z}/{x}/{y}.png",
    "https://b.tile.openstreetmap.org/{z}/{x}/{y}.png",
    "https://c.tile.openstreetmap.org/{z}/{x}/{y}.png",
)

GROUNDMOUNT_PV_TILE_URL: Final[str] = (
    "https://geo-server.advanced-infrastructure.co.uk/geoserver/gwc/service/wmts"
    "?REQUEST=GetTile&SERVICE=WMTS&VERSION=1.0.0&LAYER=oxford:groundmountpv&STYLE="
    "&TILEMATRIX=EPSG:900913:{z}&TILEMATRIXSET=EPSG:900913"
    "&FORMAT=application/vnd.mapbox-vector-tile&TILECOL={x}&TILEROW={y}"
)

# ---------------------------------------------------------------------------
# Camera defaults (Oxford)
# ---------------------------------------------------------------------------

INITIAL_LATITUDE: Final[float] = 51.753
INITIAL_LONGITUDE: Final[float] = -1.245
INITIAL_ZOOM: Final[float] = 10.5
VIEW_MAX_ZOOM: Final[float] = 20.0
VIEW_MAX_PITCH: Final[float] = 89.0
VIEW_WIDTH: Final[int] = 1024
VIEW_HEIGHT: Final[int] = 768

# ---------------------------------------------------------------------------
# Styling
# ---------------------------------------------------------------------------

BACKGROUND_COLOR: Final[str] = "#88a8c2"
OUTLINE_COLOR: Final[tuple[int, int, int]] = (255, 0, 0)
OUTLINE_MIN_WIDTH_PIXELS: Final[float] = 4.0
VECTOR_LINE_COLOR: Final[tuple[int, int, int]] = (192, 192, 192)
VECTOR_LINE_WIDTH: Final[float] = 1.0
HEXAGON_FILL_COLOR: Final[tuple[int, int, int]] = (255, 250, 0)
HEXAGON_ELEVATION_SCALE: Final[float] = 20.0

CLASSIFY_ATTRIBUTE: Final[str] = "Agri_Grade"
FILTER_ATTRIBUTE: Final[str] = "Area_Ha"
FILTER_RANGE: Final[tuple[float, float]] = (0.0, 300.0)

HEXAGON_ID_COLUMN: Final[str] = "h3_polyfill"
HEXAGON_VALUE_COLUMN: Final[str] = "index"
