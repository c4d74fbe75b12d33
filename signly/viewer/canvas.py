"""Interactive PDF page canvas for field placement and dragging."""

from __future__ import annotations

import logging
import math

from PySide6.QtCore import QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QFont, QImage, QPainter, QPen
from PySide6.QtWidgets import QWidget

from signly.config import Settings
from signly.model.field import FIELD_STYLES, Field, FieldType, sample_value
from signly.model.geometry import Viewport, marker_top_left
from signly.state.field_store import FieldStore
from signly.state.navigator import PageNavigator
from signly.viewer.drag import DragController
from signly.viewer.placement import PlacementController
from signly.viewer.render_cache import PageRenderCache, RenderSession

logger = logging.getLogger(__name__)

_EMPTY_SIZE = (500, 600)


class _MouseGrab:
    """Pointer capture backed by ``QWidget.grabMouse``."""

    def __init__(self, widget: QWidget) -> None:
        self._widget = widget
        self._grabbed = False

    def attach(self) -> None:
        if self._widget.isVisible():
            self._widget.grabMouse(Qt.CursorShape.ClosedHandCursor)
            self._grabbed = True

    def detach(self) -> None:
        if self._grabbed:
            self._widget.releaseMouse()
            self._grabbed = False


class PageCanvas(QWidget):
    field_placed = Signal(object)
    field_removed = Signal(str)

    def __init__(
        self,
        store: FieldStore,
        navigator: PageNavigator,
        cache: PageRenderCache,
        settings: Settings | None = None,
    ) -> None:
        super().__init__()
        self._settings = settings or Settings()
        self._store = store
        self._navigator = navigator
        self._cache = cache
        self._scale = self._settings.render_scale
        self._viewport: Viewport | None = None
        self._image: QImage | None = None
        self._image_page: int | None = None
        self._read_only = False
        self._show_sample_data = False
        self._gesture_consumed = False

        self.placement = PlacementController(store, navigator)
        self.drag = DragController(
            store,
            self.placement,
            marker_size=self._settings.marker_size,
            capture=_MouseGrab(self),
        )

        store.fields_changed.connect(self.update)
        navigator.active_page_changed.connect(self._on_active_page_changed)

        self.setCursor(Qt.CursorShape.CrossCursor)
        self.setFixedSize(*_EMPTY_SIZE)

    @property
    def viewport(self) -> Viewport | None:
        return self._viewport

    @property
    def image(self) -> QImage | None:
        return self._image

    @property
    def read_only(self) -> bool:
        return self._read_only

    def set_read_only(self, read_only: bool) -> None:
        self._read_only = read_only
        self.placement.read_only = read_only
        self.drag.read_only = read_only
        if read_only:
            self._cancel_drag()
        cursor = Qt.CursorShape.ArrowCursor if read_only else Qt.CursorShape.CrossCursor
        self.setCursor(cursor)
        self.update()

    def set_show_sample_data(self, show: bool) -> None:
        self._show_sample_data = show
        self.update()

    def set_field_type(self, field_type: FieldType) -> None:
        self.placement.field_type = field_type

    def set_scale(self, scale: float) -> None:
        if scale <= 0 or scale == self._scale:
            return
        self._scale = scale
        self.refresh()

    def refresh(self) -> None:
        """Request a render of the active page at the current scale."""
        self._cancel_drag()
        page = self._navigator.active_page
        viewport = self._cache.render_page(self, page, self._scale)
        if viewport is None:
            self.clear_page()
            return

        if self._image_page != page:
            self._image = None
            self._image_page = None
        self._set_viewport(viewport)
        self.update()

    def clear_page(self) -> None:
        self._cache.cancel_target(self)
        self._cancel_drag()
        self._image = None
        self._image_page = None
        self._set_viewport(None)
        self.update()

    def paint(self, image: QImage, session: RenderSession) -> None:
        if session.page != self._navigator.active_page:
            logger.debug("Ignoring paint for inactive page %d", session.page)
            return
        self._image = image
        self._image_page = session.page
        self.update()

    def paintEvent(self, event) -> None:  # type: ignore[override]
        del event
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor("#e9eaee"))

        if self._viewport is None:
            return

        page_rect = QRectF(0, 0, self._viewport.width, self._viewport.height)
        painter.fillRect(page_rect, QColor("#ffffff"))
        if self._image is not None:
            painter.drawImage(page_rect, self._image)

        sample_mode = self._read_only and self._show_sample_data
        for field in self._store.list_for_page(self._navigator.active_page):
            rect = self._marker_rect(field)
            if sample_mode:
                self._paint_sample(painter, field, rect)
            else:
                self._paint_marker(painter, field, rect)

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if event.button() != Qt.MouseButton.LeftButton or self._viewport is None:
            return

        self._gesture_consumed = False
        self.placement.reset()
        pos = event.position()
        hit = self._field_at(pos)
        if hit is None:
            return

        field, on_remove = hit
        if on_remove and not self._read_only:
            self._gesture_consumed = True
            if self._store.remove(field.id):
                self.field_removed.emit(field.id)
            event.accept()
            return

        self.drag.press(field.id, pos.x(), pos.y())

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        if self.drag.is_active:
            pos = event.position()
            self.drag.move(pos.x(), pos.y())

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        if event.button() != Qt.MouseButton.LeftButton:
            return
        if self._gesture_consumed:
            self._gesture_consumed = False
            return

        was_dragging = self.drag.is_active
        self.drag.release()

        pos = event.position()
        if not (was_dragging or self._contains_page_point(pos)):
            return
        field = self.placement.click(pos.x(), pos.y())
        if field is not None:
            self.field_placed.emit(field)

    def _cancel_drag(self) -> None:
        # the release that ends an interrupted drag must not place a field
        if self.drag.is_active:
            self._gesture_consumed = True
            self.drag.cancel()

    def _on_active_page_changed(self, page: int) -> None:
        del page
        self.refresh()

    def _set_viewport(self, viewport: Viewport | None) -> None:
        self._viewport = viewport
        self.placement.viewport = viewport
        self.drag.viewport = viewport
        if viewport is None:
            self.setFixedSize(*_EMPTY_SIZE)
        else:
            self.setFixedSize(math.ceil(viewport.width), math.ceil(viewport.height))

    def _contains_page_point(self, pos: QPointF) -> bool:
        if self._viewport is None:
            return False
        return 0 <= pos.x() <= self._viewport.width and 0 <= pos.y() <= self._viewport.height

    def _marker_rect(self, field: Field) -> QRectF:
        size = float(self._settings.marker_size)
        left, top = marker_top_left(field.x, field.y, self._viewport, size)
        return QRectF(left, top, size, size)

    def _remove_rect(self, marker_rect: QRectF) -> QRectF:
        size = float(self._settings.remove_handle_size)
        return QRectF(
            marker_rect.right() - size / 2.0,
            marker_rect.top() - size / 2.0,
            size,
            size,
        )

    def _field_at(self, pos: QPointF) -> tuple[Field, bool] | None:
        fields = self._store.list_for_page(self._navigator.active_page)
        for field in reversed(fields):
            rect = self._marker_rect(field)
            if not self._read_only and self._remove_rect(rect).contains(pos):
                return field, True
            if rect.contains(pos):
                return field, False
        return None

    def _paint_marker(self, painter: QPainter, field: Field, rect: QRectF) -> None:
        style = FIELD_STYLES[field.type]
        color = QColor(style.color)
        fill = QColor(color)
        fill.setAlpha(50)
        dragging = self.drag.field_id == field.id

        pen = QPen(color)
        pen.setWidth(3 if dragging else 2)
        painter.setPen(pen)
        painter.setBrush(fill)
        painter.drawRoundedRect(rect, 6, 6)

        font = QFont(painter.font())
        font.setBold(True)
        painter.setFont(font)
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, style.label)

        if self._read_only:
            return
        handle = self._remove_rect(rect)
        painter.setPen(QPen(QColor("#ef4444")))
        painter.setBrush(QColor(255, 255, 255, 220))
        painter.drawEllipse(handle)
        painter.drawText(handle, Qt.AlignmentFlag.AlignCenter, "✕")

    def _paint_sample(self, painter: QPainter, field: Field, rect: QRectF) -> None:
        style = FIELD_STYLES[field.type]
        pen = QPen(QColor("#cbd5e1"))
        pen.setWidthF(1.5)
        painter.setPen(pen)
        painter.setBrush(QColor("#f8fafc"))
        painter.drawRoundedRect(rect, 6, 6)

        font = QFont(painter.font())
        font.setBold(True)
        font.setItalic(style.cursive)
        if style.cursive:
            font.setStyleHint(QFont.StyleHint.Cursive)
        painter.setFont(font)
        painter.setPen(QColor("#334155"))
        text = sample_value(
            field.type,
            self._settings.sample_full_name,
            self._settings.date_format,
        )
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, text)
