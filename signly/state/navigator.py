"""Active page tracking for the loaded document."""

from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)


class PageNavigator(QObject):
    active_page_changed = Signal(int)

    def __init__(self, page_count: int = 0, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._page_count = max(0, page_count)
        self._active_page = 1

    @property
    def active_page(self) -> int:
        return self._active_page

    @property
    def page_count(self) -> int:
        return self._page_count

    def reset(self, page_count: int) -> None:
        self._page_count = max(0, page_count)
        self._active_page = 1
        self.active_page_changed.emit(self._active_page)

    def select_page(self, page: int) -> bool:
        if page < 1 or page > self._page_count:
            logger.debug("Ignoring selection of page %d (page count %d)", page, self._page_count)
            return False
        if page == self._active_page:
            return False
        self._active_page = page
        self.active_page_changed.emit(page)
        return True

    def next_page(self) -> bool:
        return self.select_page(self._active_page + 1)

    def previous_page(self) -> bool:
        return self.select_page(self._active_page - 1)
