"""Widget-level tests: mouse gestures on the page canvas and page switching."""

import pytest
from PySide6.QtCore import QEvent, QPointF, Qt
from PySide6.QtGui import QMouseEvent

from signly.model.field import Field, FieldType
from signly.model.geometry import Viewport
from signly.pdf.loader import load_pdf
from signly.state.field_store import LocalFieldStore
from signly.state.navigator import PageNavigator
from signly.viewer.canvas import PageCanvas
from signly.viewer.render_cache import PageRenderCache


def _mouse(kind, x, y, button=Qt.MouseButton.LeftButton):
    buttons = Qt.MouseButton.NoButton if kind == QEvent.Type.MouseButtonRelease else Qt.MouseButton.LeftButton
    point = QPointF(x, y)
    return QMouseEvent(kind, point, point, button, buttons, Qt.KeyboardModifier.NoModifier)


def press(canvas, x, y):
    canvas.mousePressEvent(_mouse(QEvent.Type.MouseButtonPress, x, y))


def move(canvas, x, y):
    canvas.mouseMoveEvent(_mouse(QEvent.Type.MouseMove, x, y, button=Qt.MouseButton.NoButton))


def release(canvas, x, y):
    canvas.mouseReleaseEvent(_mouse(QEvent.Type.MouseButtonRelease, x, y))


def click(canvas, x, y):
    press(canvas, x, y)
    release(canvas, x, y)


@pytest.fixture
def document(pdf_bytes):
    doc = load_pdf(pdf_bytes, name="contract.pdf")
    yield doc
    doc.close()


@pytest.fixture
def store():
    return LocalFieldStore()


@pytest.fixture
def navigator(document):
    return PageNavigator(document.page_count)


@pytest.fixture
def cache(document, scheduler):
    render_cache = PageRenderCache(schedule=scheduler)
    render_cache.set_document(document)
    return render_cache


@pytest.fixture
def canvas(store, navigator, cache, scheduler):
    widget = PageCanvas(store, navigator, cache)
    widget.refresh()
    scheduler.run_all()
    yield widget
    widget.deleteLater()


def test_refresh_sizes_canvas_to_viewport(canvas):
    assert canvas.viewport == Viewport(600, 1200)
    assert (canvas.width(), canvas.height()) == (600, 1200)
    assert canvas.image is not None
    assert canvas.image.width() == 600


def test_click_places_field_at_normalized_point(canvas, store):
    placed = []
    canvas.field_placed.connect(placed.append)
    canvas.set_field_type(FieldType.DATE)

    click(canvas, 150, 150)

    assert len(store) == 1
    field = store.fields()[0]
    assert (field.page, field.x, field.y, field.type) == (1, 0.25, 0.125, FieldType.DATE)
    assert placed == [field]


def test_dragging_moves_field_without_placing(canvas, store):
    field = store.add(Field(page=1, x=0.5, y=0.5))

    press(canvas, 300, 600)
    move(canvas, 200, 450)
    move(canvas, 150, 300)
    release(canvas, 150, 300)

    assert len(store) == 1
    moved = store.get(field.id)
    assert (moved.x, moved.y) == (0.25, 0.25)
    assert not canvas.drag.is_active

    click(canvas, 450, 900)
    assert len(store) == 2


def test_remove_handle_deletes_field(canvas, store):
    field = store.add(Field(page=1, x=0.5, y=0.5))
    removed = []
    canvas.field_removed.connect(removed.append)

    # marker is 64px centered on (300, 600); handle sits on its top-right corner
    click(canvas, 332, 568)

    assert len(store) == 0
    assert removed == [field.id]


def test_read_only_canvas_ignores_gestures(canvas, store):
    field = store.add(Field(page=1, x=0.5, y=0.5))
    canvas.set_read_only(True)

    click(canvas, 150, 150)
    press(canvas, 300, 600)
    move(canvas, 100, 100)
    release(canvas, 100, 100)
    click(canvas, 332, 568)

    assert store.fields() == [field]


def test_fields_from_other_pages_are_not_hit(canvas, store, navigator, scheduler):
    store.add(Field(page=1, x=0.5, y=0.5))
    navigator.select_page(2)
    scheduler.run_all()

    click(canvas, 300, 600)

    assert [f.page for f in store.fields()] == [1, 2]


def test_page_switch_cancels_pending_render(store, navigator, cache, scheduler):
    widget = PageCanvas(store, navigator, cache)
    widget.refresh()
    navigator.select_page(3)

    assert cache.session_for(widget).page == 3
    scheduler.run_all()

    assert cache.cached_image(1, 1.5) is None
    assert cache.cached_image(3, 1.5) is not None
    assert widget.image is not None


def test_release_outside_page_does_not_place(canvas, store):
    click(canvas, 700, 50)
    assert len(store) == 0


def test_paint_smoke_in_edit_and_sample_modes(canvas, store):
    store.add(Field(page=1, x=0.2, y=0.2, type=FieldType.SIGNATURE))
    store.add(Field(page=1, x=0.8, y=0.8, type=FieldType.INITIALS))

    assert not canvas.grab().isNull()
    canvas.set_read_only(True)
    canvas.set_show_sample_data(True)
    assert canvas.grab().size().width() == 600


def test_clearing_document_resets_canvas(canvas, cache):
    cache.set_document(None)
    canvas.refresh()

    assert canvas.viewport is None
    assert canvas.image is None
    assert (canvas.width(), canvas.height()) == (500, 600)


def test_page_change_mid_drag_does_not_place_on_release(canvas, store, navigator, scheduler):
    field = store.add(Field(page=1, x=0.5, y=0.5))

    press(canvas, 300, 600)
    move(canvas, 320, 620)
    navigator.select_page(2)
    scheduler.run_all()
    release(canvas, 320, 620)

    assert store.fields() == [store.get(field.id)]
    assert store.list_for_page(2) == []
    assert not canvas.drag.is_active

    click(canvas, 150, 150)
    assert [f.page for f in store.list_for_page(2)] == [2]
