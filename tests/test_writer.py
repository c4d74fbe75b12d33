"""Unit tests for the hand-off payload and prepared PDF export."""

import pytest
from pypdf import PdfReader

from signly.model.field import Field, FieldType
from signly.pdf.writer import PdfWriteError, fields_payload, widget_rect, write_pdf_with_fields


@pytest.fixture
def fields():
    return [
        Field(page=1, x=0.25, y=0.125, type=FieldType.SIGNATURE, id="a"),
        Field(page=1, x=0.5, y=0.5, type=FieldType.DATE, id="b"),
        Field(page=3, x=0.9, y=0.9, type=FieldType.INITIALS, id="c"),
    ]


def test_payload_lists_fields_in_order(fields):
    payload = fields_payload(fields)
    assert [item["id"] for item in payload] == ["a", "b", "c"]
    assert payload[0] == {"page": 1, "x": 0.25, "y": 0.125, "type": "signature", "id": "a"}


def test_widget_rect_centers_on_field():
    field = Field(page=1, x=0.25, y=0.125)
    left, bottom, side = widget_rect(field, 400, 800, 40)
    assert side == 40
    assert left == pytest.approx(80)
    assert bottom == pytest.approx(800 - 100 - 20)


def test_widget_rect_stays_on_page():
    corner = Field(page=1, x=1.0, y=0.0)
    left, bottom, side = widget_rect(corner, 400, 800, 40)
    assert (left, bottom) == (360, 760)


def test_export_adds_one_widget_per_field(tmp_path, pdf_bytes, fields):
    output = tmp_path / "prepared.pdf"

    write_pdf_with_fields(pdf_bytes, output, fields, marker_size=64, render_scale=1.5)

    reader = PdfReader(str(output))
    assert len(reader.pages) == 3
    form_fields = reader.get_fields()
    assert set(form_fields) == {"signature_1", "date_1", "initials_1"}

    widgets_per_page = [
        len([annot for annot in (page.get("/Annots") or []) if annot.get_object().get("/Subtype") == "/Widget"])
        for page in reader.pages
    ]
    assert widgets_per_page == [2, 0, 1]


def test_export_without_fields_copies_pages(tmp_path, pdf_path):
    output = tmp_path / "copy.pdf"
    write_pdf_with_fields(pdf_path, output, [])
    assert len(PdfReader(str(output)).pages) == 3


def test_export_failure_is_wrapped(tmp_path, fields):
    with pytest.raises(PdfWriteError):
        write_pdf_with_fields(b"not a pdf", tmp_path / "out.pdf", fields)
