"""PDF rendering helpers using PyMuPDF."""

from __future__ import annotations

import fitz
from PySide6.QtGui import QImage

from signly.model.document import PdfPage


class PdfRenderError(RuntimeError):
    """Raised when a page cannot be rendered."""


def render_page_image(page: PdfPage, scale: float = 1.5) -> QImage:
    if scale <= 0:
        raise PdfRenderError(f"Render scale must be positive: {scale}")

    try:
        matrix = fitz.Matrix(scale, scale)
        pix = page.handle.get_pixmap(matrix=matrix, alpha=False, annots=False)
    except Exception as exc:
        raise PdfRenderError(f"Failed to render page {page.number}") from exc

    image = QImage(pix.samples, pix.width, pix.height, pix.stride, QImage.Format.Format_RGB888)
    return image.copy()
