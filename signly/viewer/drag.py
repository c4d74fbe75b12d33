"""Press/move/release state machine for repositioning placed fields."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Protocol

from signly.model.geometry import Viewport, marker_center, marker_top_left, to_normalized
from signly.state.field_store import FieldStore
from signly.viewer.placement import PlacementController

logger = logging.getLogger(__name__)


class DragState(str, Enum):
    AT_REST = "at_rest"
    PRESSED = "pressed"
    DRAGGING = "dragging"


class PointerCapture(Protocol):
    """Routes every pointer move/release to the drag while it is attached."""

    def attach(self) -> None: ...

    def detach(self) -> None: ...


class _NoCapture:
    def attach(self) -> None:
        pass

    def detach(self) -> None:
        pass


class DragController:
    """Single shared drag controller, parameterized by the captured field.

    Each move writes straight to the store, there is no separate commit.
    Gestures that arrive in the wrong state are ignored.
    """

    def __init__(
        self,
        store: FieldStore,
        placement: PlacementController,
        marker_size: float = 64.0,
        capture: PointerCapture | None = None,
    ) -> None:
        self.store = store
        self.placement = placement
        self.marker_size = marker_size
        self.capture: PointerCapture = capture or _NoCapture()
        self.read_only = False
        self.viewport: Viewport | None = None
        self._state = DragState.AT_REST
        self._field_id: str | None = None
        self._grab_offset = (0.0, 0.0)

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def field_id(self) -> str | None:
        return self._field_id

    @property
    def is_active(self) -> bool:
        return self._state is not DragState.AT_REST

    def press(self, field_id: str, pointer_x: float, pointer_y: float) -> bool:
        if self.read_only or self.is_active:
            return False
        if self.viewport is None or not self.viewport.is_valid:
            return False
        field = self.store.get(field_id)
        if field is None:
            logger.debug("Press on unknown field %s ignored", field_id)
            return False

        left, top = marker_top_left(field.x, field.y, self.viewport, self.marker_size)
        self._grab_offset = (pointer_x - left, pointer_y - top)
        self._field_id = field_id
        self._state = DragState.PRESSED
        self.capture.attach()
        return True

    def move(self, pointer_x: float, pointer_y: float) -> None:
        if not self.is_active or self.viewport is None:
            return
        center_x, center_y = marker_center(
            pointer_x, pointer_y, self._grab_offset, self.marker_size
        )
        x, y = to_normalized(center_x, center_y, self.viewport)
        if self.store.update(self._field_id, x=x, y=y) is None:
            logger.debug("Captured field %s disappeared mid-drag", self._field_id)
            self.release()
            return
        self._state = DragState.DRAGGING

    def release(self) -> None:
        if not self.is_active:
            return
        self._end()
        self.placement.suppress()

    def cancel(self) -> None:
        if self.is_active:
            self._end()

    def _end(self) -> None:
        self.capture.detach()
        self._state = DragState.AT_REST
        self._field_id = None
        self._grab_offset = (0.0, 0.0)
