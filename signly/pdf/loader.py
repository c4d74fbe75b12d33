"""PDF intake and decoding helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import fitz

from signly.model.document import PdfDocument

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"


class PdfLoadError(RuntimeError):
    """Raised when a PDF cannot be opened."""


class PdfIntakeError(PdfLoadError):
    """Raised when a file is rejected before decoding."""


class PdfDecodeError(PdfLoadError):
    """Raised when bytes cannot be parsed as a PDF document."""


def read_pdf_file(path: str | Path) -> bytes:
    source_path = Path(path)
    if not source_path.is_file():
        raise PdfIntakeError(f"File not found: {source_path}")
    if source_path.suffix.lower() != ".pdf":
        raise PdfIntakeError(f"Please upload a valid PDF file: {source_path.name}")

    try:
        data = source_path.read_bytes()
    except OSError as exc:
        raise PdfIntakeError(f"Failed to read file: {source_path}") from exc

    if not data.startswith(PDF_MAGIC):
        raise PdfIntakeError(f"Please upload a valid PDF file: {source_path.name}")
    return data


def load_pdf(data: bytes, name: str = "") -> PdfDocument:
    if not data:
        raise PdfDecodeError("Failed to load PDF: the file is empty.")

    try:
        handle = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:
        logger.warning("PyMuPDF failed to open %s: %s", name or "<bytes>", exc)
        raise PdfDecodeError("Failed to load PDF. Please try another file.") from exc

    if handle.page_count < 1:
        handle.close()
        raise PdfDecodeError("Failed to load PDF. The document has no pages.")

    logger.info("Loaded %s (%d page(s))", name or "<bytes>", handle.page_count)
    return PdfDocument(handle=handle, name=name, data=data)
