"""Document model for decoded PDF handles and their pages."""

from __future__ import annotations

from dataclasses import dataclass

import fitz

from signly.model.geometry import Viewport


@dataclass(slots=True)
class PdfPage:
    number: int
    handle: fitz.Page

    def viewport(self, scale: float) -> Viewport:
        rect = self.handle.rect
        return Viewport(width=float(rect.width) * scale, height=float(rect.height) * scale)


@dataclass(slots=True)
class PdfDocument:
    handle: fitz.Document
    name: str = ""
    data: bytes = b""

    @property
    def page_count(self) -> int:
        return self.handle.page_count

    @property
    def is_closed(self) -> bool:
        return self.handle.is_closed

    def page(self, number: int) -> PdfPage:
        """Load page *number* (1-based)."""
        if number < 1 or number > self.page_count:
            raise IndexError(f"Page out of range: {number} (document has {self.page_count})")
        return PdfPage(number=number, handle=self.handle.load_page(number - 1))

    def close(self) -> None:
        if not self.handle.is_closed:
            self.handle.close()
