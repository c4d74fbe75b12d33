"""Hand-off output: field payloads and PDFs with fillable widgets.

Widgets are drawn with reportlab's AcroForm support on an overlay document,
then cloned into the source pages with pypdf.
"""

from __future__ import annotations

from collections import defaultdict
from io import BytesIO
from pathlib import Path

from pypdf import PageObject, PdfReader, PdfWriter
from pypdf.generic import ArrayObject, BooleanObject, DictionaryObject, IndirectObject, NameObject
from reportlab.lib import colors
from reportlab.pdfgen import canvas

from signly.model.field import FIELD_STYLES, Field


class PdfWriteError(RuntimeError):
    """Raised when output generation fails."""


def fields_payload(fields: list[Field]) -> list[dict]:
    return [field.to_payload() for field in fields]


def write_pdf_with_fields(
    source: bytes | str | Path,
    output_path: str | Path,
    fields: list[Field],
    marker_size: float = 64.0,
    render_scale: float = 1.5,
) -> None:
    """Copy *source* to *output_path* with one empty form widget per field.

    The widget side is the on-screen marker size in PDF points, so the widget
    covers the same share of the page as the marker did.
    """
    output = Path(output_path)

    try:
        reader = PdfReader(BytesIO(source) if isinstance(source, bytes) else str(source))
        writer = PdfWriter()
        for page in reader.pages:
            writer.add_page(page)

        if fields:
            overlay = PdfReader(_build_overlay_pdf(reader, fields, marker_size / render_scale))
            widget_refs: list[IndirectObject] = []
            for page_index in sorted({field.page - 1 for field in fields}):
                widget_refs.extend(
                    _copy_widgets(overlay.pages[page_index], writer.pages[page_index], writer)
                )
            _register_form_fields(writer, widget_refs)

        with output.open("wb") as handle:
            writer.write(handle)
    except Exception as exc:
        raise PdfWriteError(f"Failed to write output PDF: {output}") from exc


def widget_rect(
    field: Field,
    page_width: float,
    page_height: float,
    size: float,
) -> tuple[float, float, float]:
    """Return ``(left, bottom, side)`` of a field's widget in PDF points.

    PDF space has its origin at the bottom-left corner, field coordinates at
    the top-left.
    """
    side = min(size, page_width, page_height)
    left = field.x * page_width - side / 2.0
    bottom = (1.0 - field.y) * page_height - side / 2.0
    return (
        max(0.0, min(left, page_width - side)),
        max(0.0, min(bottom, page_height - side)),
        side,
    )


def _build_overlay_pdf(reader: PdfReader, fields: list[Field], widget_size: float) -> BytesIO:
    by_page: dict[int, list[Field]] = defaultdict(list)
    for field in fields:
        by_page[field.page - 1].append(field)

    buffer = BytesIO()
    report = canvas.Canvas(buffer)
    numbering: dict[str, int] = defaultdict(int)

    for page_index, page in enumerate(reader.pages):
        box = page.mediabox
        width, height = float(box.width), float(box.height)
        report.setPageSize((width, height))

        for field in by_page.get(page_index, []):
            style = FIELD_STYLES[field.type]
            kind = field.type.value
            numbering[kind] += 1
            left, bottom, side = widget_rect(field, width, height, widget_size)
            report.acroForm.textfield(
                name=f"{kind}_{numbering[kind]}",
                tooltip=style.title,
                x=float(box.left) + left,
                y=float(box.bottom) + bottom,
                width=side,
                height=side,
                value="",
                forceBorder=True,
                borderWidth=1,
                fillColor=None,
                borderColor=colors.HexColor(style.color),
                textColor=colors.black,
            )

        report.showPage()

    report.save()
    buffer.seek(0)
    return buffer


def _copy_widgets(
    overlay_page: PageObject,
    target_page: PageObject,
    writer: PdfWriter,
) -> list[IndirectObject]:
    existing = target_page.get("/Annots")
    annots = ArrayObject() if existing is None else existing.get_object()
    copied: list[IndirectObject] = []

    for annot_ref in overlay_page.get("/Annots") or []:
        widget = annot_ref.get_object()
        if widget.get("/Subtype") != "/Widget":
            continue

        clone = widget.clone(writer)
        ref = clone.indirect_reference or writer._add_object(clone)
        if target_page.indirect_reference is not None:
            clone[NameObject("/P")] = target_page.indirect_reference
        mk = clone.get("/MK")
        if mk is not None:
            mk.get_object().pop("/BG", None)
        annots.append(ref)
        copied.append(ref)

    target_page[NameObject("/Annots")] = annots
    return copied


def _register_form_fields(writer: PdfWriter, widget_refs: list[IndirectObject]) -> None:
    root = writer._root_object
    if "/AcroForm" in root:
        form = root["/AcroForm"].get_object()
    else:
        form = DictionaryObject()
        root[NameObject("/AcroForm")] = writer._add_object(form)

    current = form.get("/Fields")
    form_fields = ArrayObject(current.get_object() if current is not None else [])
    form_fields.extend(widget_refs)
    form[NameObject("/Fields")] = form_fields
    form[NameObject("/NeedAppearances")] = BooleanObject(True)
