"""Click-to-place handling for new fields."""

from __future__ import annotations

from enum import Enum
import logging

from signly.model.field import Field, FieldType
from signly.model.geometry import Viewport, to_normalized
from signly.state.field_store import FieldStore
from signly.state.navigator import PageNavigator

logger = logging.getLogger(__name__)


class PlacementState(str, Enum):
    IDLE = "idle"
    SUPPRESSED = "suppressed"


class PlacementController:
    """Turns a click on the page surface into a new field.

    A drag release puts the controller into ``SUPPRESSED`` so the click that
    trails the release is swallowed instead of creating a field under the
    pointer.
    """

    def __init__(self, store: FieldStore, navigator: PageNavigator) -> None:
        self.store = store
        self.navigator = navigator
        self.field_type = FieldType.SIGNATURE
        self.read_only = False
        self.viewport: Viewport | None = None
        self._state = PlacementState.IDLE

    @property
    def state(self) -> PlacementState:
        return self._state

    def suppress(self) -> None:
        self._state = PlacementState.SUPPRESSED

    def reset(self) -> None:
        """Close any suppression window left over from a previous gesture."""
        self._state = PlacementState.IDLE

    def click(self, pixel_x: float, pixel_y: float) -> Field | None:
        if self.read_only:
            return None
        if self._state is PlacementState.SUPPRESSED:
            self._state = PlacementState.IDLE
            logger.debug("Click at (%.1f, %.1f) swallowed after drag", pixel_x, pixel_y)
            return None
        if self.viewport is None or not self.viewport.is_valid:
            return None

        page = self.navigator.active_page
        if page < 1 or page > self.navigator.page_count:
            return None

        x, y = to_normalized(pixel_x, pixel_y, self.viewport)
        return self.store.add(Field(page=page, x=x, y=y, type=self.field_type))
