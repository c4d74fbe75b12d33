"""Shared fixtures: offscreen Qt, in-memory PDFs and a manual render scheduler."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import fitz
import pytest
from PySide6.QtWidgets import QApplication

from signly.model.geometry import Viewport


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """One QApplication for the whole run (QObject signals, widgets, QImage)."""
    app = QApplication.instance() or QApplication([])
    yield app


class ManualScheduler:
    """Collects posted callbacks so tests decide when the event loop 'runs'."""

    def __init__(self):
        self.pending = []

    def __call__(self, callback):
        self.pending.append(callback)

    def run_next(self):
        callback = self.pending.pop(0)
        callback()

    def run_all(self):
        while self.pending:
            self.run_next()


@pytest.fixture
def scheduler():
    return ManualScheduler()


def build_pdf(page_count=3, width=400, height=800):
    doc = fitz.open()
    for number in range(1, page_count + 1):
        page = doc.new_page(width=width, height=height)
        page.insert_text((72, 72), f"Page {number}")
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def pdf_bytes():
    """A 3-page, 400x800 pt document."""
    return build_pdf()


@pytest.fixture
def pdf_path(tmp_path, pdf_bytes):
    path = tmp_path / "contract.pdf"
    path.write_bytes(pdf_bytes)
    return path


class FakePage:
    def __init__(self, number, width=400.0, height=800.0):
        self.number = number
        self.width = width
        self.height = height

    def viewport(self, scale):
        return Viewport(self.width * scale, self.height * scale)


class FakeDocument:
    """Stands in for PdfDocument: page_count plus 1-based page()."""

    def __init__(self, page_count=3):
        self.page_count = page_count

    def page(self, number):
        if number < 1 or number > self.page_count:
            raise IndexError(number)
        return FakePage(number)


class RecordingRasterizer:
    """Returns a tagged string per (page, scale); raises for failing pages."""

    def __init__(self, failing=()):
        self.calls = []
        self.failing = set(failing)
        self.during = None

    def __call__(self, page, scale):
        from signly.pdf.renderer import PdfRenderError

        self.calls.append((page.number, scale))
        if self.during is not None:
            self.during(page.number)
        if page.number in self.failing:
            raise PdfRenderError(f"Failed to render page {page.number}")
        return f"image-{page.number}@{scale}"


class RecordingTarget:
    def __init__(self):
        self.painted = []

    def paint(self, image, session):
        self.painted.append((session.page, image))


@pytest.fixture
def fake_document():
    return FakeDocument()


@pytest.fixture
def rasterizer():
    return RecordingRasterizer()


@pytest.fixture
def target():
    return RecordingTarget()


@pytest.fixture
def make_target():
    return RecordingTarget


@pytest.fixture
def make_fake_document():
    return FakeDocument
