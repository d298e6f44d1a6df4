"""Rasterize frame primitives with :class:`QPainter`."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from PIL import Image
from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QBrush, QColor, QImage, QPainter, QPainterPath, QPen

from .config import BACKGROUND_COLOR, DEFAULT_TILE_SIZE
from .geometry import LonLat
from .primitives import BitmapPrimitive, Color, PathPrimitive, PointPrimitive, PolygonPrimitive, Primitive
from .viewport import ViewportState, lonlat_to_world


def _qcolor(color: Color) -> QColor:
    if len(color) >= 4:
        return QColor(int(color[0]), int(color[1]), int(color[2]), int(color[3]))
    return QColor(int(color[0]), int(color[1]), int(color[2]))


def pil_to_qimage(image: Image.Image) -> QImage:
    """Copy a Pillow image into a detached :class:`QImage`."""

    rgba = image.convert("RGBA")
    data = rgba.tobytes("raw", "RGBA")
    qimage = QImage(data, rgba.width, rgba.height, rgba.width * 4, QImage.Format.Format_RGBA8888)
    return qimage.copy()


class PrimitivePainter:
    """Draw primitives for a single viewport.

    Positions are projected with Web-Mercator at the viewport zoom and the
    camera bearing is applied as a rotation around the view center.  Pitch
    is not simulated; tilted views are drawn as seen from straight above.
    """

    def __init__(
        self,
        viewport: ViewportState,
        *,
        tile_size: int = DEFAULT_TILE_SIZE,
        background: str = BACKGROUND_COLOR,
    ) -> None:
        self._viewport = viewport
        self._background = QColor(background)
        self._world_size = viewport.world_size(tile_size)
        center_x, center_y = viewport.center_world(tile_size)
        self._top_left_x = center_x - viewport.width / 2.0
        self._top_left_y = center_y - viewport.height / 2.0

    # ------------------------------------------------------------------
    def project(self, lon: float, lat: float) -> QPointF:
        """Return the unrotated screen position of ``lon``/``lat``."""

        world_x, world_y = lonlat_to_world(lon, lat, self._world_size)

        # Pick the world copy closest to the view center so features near the
        # antimeridian are not drawn a full world width away.
        center_x = self._top_left_x + self._viewport.width / 2.0
        half_world = self._world_size / 2.0
        delta_x = world_x - center_x
        if delta_x > half_world:
            world_x -= self._world_size
        elif delta_x < -half_world:
            world_x += self._world_size
        return QPointF(world_x - self._top_left_x, world_y - self._top_left_y)

    # ------------------------------------------------------------------
    def paint(self, painter: QPainter, primitives: Iterable[Primitive]) -> None:
        """Draw ``primitives`` in order; later primitives end up on top."""

        width = self._viewport.width
        height = self._viewport.height
        painter.fillRect(0, 0, width, height, self._background)

        painter.save()
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        if self._viewport.bearing:
            painter.translate(width / 2.0, height / 2.0)
            painter.rotate(-self._viewport.bearing)
            painter.translate(-width / 2.0, -height / 2.0)

        for primitive in primitives:
            if isinstance(primitive, BitmapPrimitive):
                self._draw_bitmap(painter, primitive)
            elif isinstance(primitive, PolygonPrimitive):
                self._draw_polygon(painter, primitive)
            elif isinstance(primitive, PathPrimitive):
                self._draw_path(painter, primitive)
            elif isinstance(primitive, PointPrimitive):
                self._draw_point(painter, primitive)
        painter.restore()

    # ------------------------------------------------------------------
    def render_image(self, primitives: Iterable[Primitive]) -> QImage:
        """Paint ``primitives`` into a new ARGB image the size of the viewport."""

        image = QImage(self._viewport.width, self._viewport.height, QImage.Format.Format_ARGB32_Premultiplied)
        painter = QPainter(image)
        try:
            self.paint(painter, primitives)
        finally:
            painter.end()
        return image

    # ------------------------------------------------------------------
    def _draw_bitmap(self, painter: QPainter, primitive: BitmapPrimitive) -> None:
        image = primitive.image
        if isinstance(image, Image.Image):
            image = pil_to_qimage(image)
        if not isinstance(image, QImage) or image.isNull():
            return

        west, south, east, north = primitive.bounds
        top_left = self.project(west, north)
        bottom_right = self.project(east, south)
        if bottom_right.x() < top_left.x():
            # The tile sits on the antimeridian seam; unwrap its east edge.
            bottom_right.setX(bottom_right.x() + self._world_size)
        painter.drawImage(QRectF(top_left, bottom_right), image)

    # ------------------------------------------------------------------
    def _ring_path(self, path: QPainterPath, ring: Sequence[LonLat], *, close: bool) -> None:
        if not ring:
            return
        path.moveTo(self.project(*ring[0]))
        for lon, lat in ring[1:]:
            path.lineTo(self.project(lon, lat))
        if close:
            path.closeSubpath()

    # ------------------------------------------------------------------
    def _draw_polygon(self, painter: QPainter, primitive: PolygonPrimitive) -> None:
        path = QPainterPath()
        path.setFillRule(Qt.FillRule.OddEvenFill)
        for ring in primitive.rings:
            self._ring_path(path, ring, close=True)

        painter.save()
        painter.setBrush(QBrush(_qcolor(primitive.fill_color)))
        if primitive.line_color is not None:
            pen = QPen(_qcolor(primitive.line_color))
            pen.setCosmetic(True)
            pen.setWidthF(primitive.line_width)
            painter.setPen(pen)
        else:
            painter.setPen(Qt.PenStyle.NoPen)
        painter.drawPath(path)
        painter.restore()

    # ------------------------------------------------------------------
    def _draw_path(self, painter: QPainter, primitive: PathPrimitive) -> None:
        path = QPainterPath()
        self._ring_path(path, primitive.path, close=False)

        pen = QPen(_qcolor(primitive.color))
        pen.setCosmetic(True)
        pen.setWidthF(primitive.width_min_pixels)
        pen.setJoinStyle(Qt.PenJoinStyle.MiterJoin)

        painter.save()
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.setPen(pen)
        painter.drawPath(path)
        painter.restore()

    # ------------------------------------------------------------------
    def _draw_point(self, painter: QPainter, primitive: PointPrimitive) -> None:
        painter.save()
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(_qcolor(primitive.color))
        radius = primitive.radius_pixels
        painter.drawEllipse(self.project(*primitive.position), radius, radius)
        painter.restore()


__all__ = ["PrimitivePainter", "pil_to_qimage"]
