"""Main application window: document intake, field wizard and hand-off."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from PySide6.QtCore import QSize, Qt
from PySide6.QtGui import QAction, QActionGroup, QFont, QIcon, QPixmap
from PySide6.QtWidgets import (
    QFileDialog,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QScrollArea,
    QSplitter,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from signly.config import Settings
from signly.model.field import FIELD_STYLES, FieldType, sample_value
from signly.pdf.loader import PdfLoadError, load_pdf, read_pdf_file
from signly.pdf.writer import PdfWriteError, fields_payload, write_pdf_with_fields
from signly.state.navigator import PageNavigator
from signly.state.session import DocumentSession, WizardStep
from signly.viewer.canvas import PageCanvas
from signly.viewer.render_cache import PageRenderCache

logger = logging.getLogger(__name__)

_SAMPLE_ORDER = (FieldType.NAME, FieldType.SIGNATURE, FieldType.INITIALS, FieldType.DATE)


class MainWindow(QMainWindow):
    def __init__(self, settings: Settings | None = None) -> None:
        super().__init__()
        self.setWindowTitle("Signly")
        self.resize(1300, 900)
        self.setAcceptDrops(True)

        self._settings = settings or Settings()
        self._session = DocumentSession()
        self._store = self._session.make_store()
        self._navigator = PageNavigator()
        self._cache = PageRenderCache()

        self.page_list = QListWidget()
        self.page_list.setIconSize(QSize(72, 96))
        self.page_list.currentRowChanged.connect(self._on_page_selected)

        self.canvas = PageCanvas(self._store, self._navigator, self._cache, self._settings)
        self.canvas.field_placed.connect(self._on_field_placed)
        self.canvas.field_removed.connect(self._on_field_removed)

        self._store.fields_changed.connect(self._on_fields_changed)
        self._navigator.active_page_changed.connect(self._on_active_page_changed)
        self._cache.thumbnail_ready.connect(self._on_thumbnail_ready)

        self.scroll_area = QScrollArea()
        self.scroll_area.setWidgetResizable(False)
        self.scroll_area.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.scroll_area.setWidget(self.canvas)

        self.sample_panel = self._build_sample_panel()
        self.payload_view = QPlainTextEdit()
        self.payload_view.setReadOnly(True)

        side_panel = QWidget()
        side_layout = QVBoxLayout(side_panel)
        side_layout.addWidget(self.sample_panel)
        side_layout.addWidget(self.payload_view)
        side_layout.addStretch(1)

        splitter = QSplitter()
        splitter.addWidget(self.page_list)
        splitter.addWidget(self.scroll_area)
        splitter.addWidget(side_panel)
        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 5)
        splitter.setStretchFactor(2, 2)
        self.setCentralWidget(splitter)

        self._build_toolbar()
        self._apply_step()
        self.statusBar().showMessage("Drag & drop a PDF here, or use Open PDF")

    def _build_toolbar(self) -> None:
        toolbar = QToolBar("Main Toolbar")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        open_action = QAction("Open PDF", self)
        open_action.setShortcut("Ctrl+O")
        open_action.triggered.connect(self.open_pdf)
        toolbar.addAction(open_action)

        self._export_action = QAction("Export PDF", self)
        self._export_action.triggered.connect(self.export_pdf)
        toolbar.addAction(self._export_action)

        toolbar.addSeparator()

        self._back_action = QAction("Back", self)
        self._back_action.triggered.connect(self.previous_step)
        toolbar.addAction(self._back_action)

        self._next_action = QAction("Next", self)
        self._next_action.triggered.connect(self.next_step)
        toolbar.addAction(self._next_action)

        self.step_label = QLabel()
        toolbar.addWidget(self.step_label)

        toolbar.addSeparator()

        prev_action = QAction("Previous Page", self)
        prev_action.triggered.connect(self._navigator.previous_page)
        toolbar.addAction(prev_action)

        next_action = QAction("Next Page", self)
        next_action.triggered.connect(self._navigator.next_page)
        toolbar.addAction(next_action)

        toolbar.addSeparator()

        type_group = QActionGroup(self)
        type_group.setExclusive(True)
        self._type_actions: list[QAction] = []
        for field_type, style in FIELD_STYLES.items():
            action = QAction(style.title, self)
            action.setCheckable(True)
            action.setChecked(field_type is FieldType.SIGNATURE)
            action.triggered.connect(lambda _checked=False, t=field_type: self._set_field_type(t))
            type_group.addAction(action)
            toolbar.addAction(action)
            self._type_actions.append(action)

    def _build_sample_panel(self) -> QWidget:
        panel = QWidget()
        layout = QVBoxLayout(panel)

        title = QLabel("Sample Data")
        font = QFont(title.font())
        font.setBold(True)
        title.setFont(font)
        layout.addWidget(title)

        for field_type in _SAMPLE_ORDER:
            value = sample_value(
                field_type,
                self._settings.sample_full_name,
                self._settings.date_format,
            )
            style = FIELD_STYLES[field_type]
            shown = f"<i>{value}</i>" if style.cursive else value
            layout.addWidget(QLabel(f"<b>{style.title}:</b> {shown}"))

        reset_button = QPushButton("Reset")
        reset_button.clicked.connect(self.reset_fields)
        layout.addWidget(reset_button)
        return panel

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._close_document()
        super().closeEvent(event)

    def dragEnterEvent(self, event) -> None:  # type: ignore[override]
        if self._dropped_path(event) is not None:
            event.acceptProposedAction()
        else:
            event.ignore()

    def dropEvent(self, event) -> None:  # type: ignore[override]
        path = self._dropped_path(event)
        if path is None:
            event.ignore()
            return
        event.acceptProposedAction()
        self.load_file(path)

    def open_pdf(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Open PDF",
            str(Path.home()),
            "PDF Files (*.pdf)",
        )
        if not file_path:
            return
        self.load_file(file_path)

    def load_file(self, file_path: str | Path) -> bool:
        path = Path(file_path)
        try:
            document = load_pdf(read_pdf_file(path), name=path.name)
        except PdfLoadError as exc:
            logger.warning("Rejected %s: %s", path, exc)
            QMessageBox.critical(self, "Open Failed", str(exc))
            return False

        self._close_document()
        self._session.document = document
        self._store.clear()
        self._cache.set_document(document)
        self._populate_page_list(document.page_count)
        self._navigator.reset(document.page_count)
        self._cache.render_thumbnails(self._settings.thumbnail_scale)
        self._apply_step()
        self.statusBar().showMessage(f"Loaded: {path} ({document.page_count} page(s))")
        return True

    def export_pdf(self) -> None:
        document = self._session.document
        if document is None:
            QMessageBox.information(self, "No Document", "Open a PDF first.")
            return

        stem = Path(document.name or "document.pdf").stem
        output_path, _ = QFileDialog.getSaveFileName(
            self,
            "Export Prepared PDF",
            str(Path.home() / f"{stem}_prepared.pdf"),
            "PDF Files (*.pdf)",
        )
        if not output_path:
            return

        try:
            write_pdf_with_fields(
                source=document.data,
                output_path=output_path,
                fields=self._store.fields(),
                marker_size=self._settings.marker_size,
                render_scale=self._settings.render_scale,
            )
        except PdfWriteError as exc:
            logger.exception("Export failed")
            QMessageBox.critical(self, "Export Failed", str(exc))
            return
        self.statusBar().showMessage(f"Exported: {output_path}")

    def next_step(self) -> None:
        if self._session.next_step():
            self._apply_step()

    def previous_step(self) -> None:
        if self._session.previous_step():
            self._apply_step()

    def reset_fields(self) -> None:
        self._store.clear()
        self._session.step = WizardStep.ADD_FIELDS
        self._apply_step()

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        if event.key() == Qt.Key.Key_PageDown:
            self._navigator.next_page()
            event.accept()
            return
        if event.key() == Qt.Key.Key_PageUp:
            self._navigator.previous_page()
            event.accept()
            return
        super().keyPressEvent(event)

    def _set_field_type(self, field_type: FieldType) -> None:
        self.canvas.set_field_type(field_type)
        self.statusBar().showMessage(f"Placing: {FIELD_STYLES[field_type].title}")

    def _apply_step(self) -> None:
        step = self._session.step
        has_document = self._session.document is not None
        self.canvas.set_read_only(self._session.read_only)
        self.canvas.set_show_sample_data(self._session.show_sample_data)
        for action in self._type_actions:
            action.setEnabled(not self._session.read_only)
        self._back_action.setEnabled(step is not WizardStep.ADD_FIELDS)
        self._next_action.setEnabled(has_document and step is not WizardStep.SEND)
        self._export_action.setEnabled(has_document and step is WizardStep.SEND)
        self.sample_panel.setVisible(step is WizardStep.PREVIEW)
        self.payload_view.setVisible(step is WizardStep.SEND)
        self.step_label.setText(f"  Step {step + 1} of {len(WizardStep)}: {step.label}  ")
        self._refresh_payload()

    def _populate_page_list(self, page_count: int) -> None:
        self.page_list.blockSignals(True)
        self.page_list.clear()
        for page_number in range(1, page_count + 1):
            self.page_list.addItem(QListWidgetItem(f"Page {page_number}"))
        self.page_list.setCurrentRow(0)
        self.page_list.blockSignals(False)

    def _on_page_selected(self, row: int) -> None:
        if row < 0:
            return
        self._navigator.select_page(row + 1)

    def _on_active_page_changed(self, page: int) -> None:
        if self.page_list.currentRow() != page - 1:
            self.page_list.setCurrentRow(page - 1)
        if self._navigator.page_count:
            self.statusBar().showMessage(f"Page {page}/{self._navigator.page_count}")

    def _on_thumbnail_ready(self, page: int, image) -> None:
        item = self.page_list.item(page - 1)
        if item is not None:
            item.setIcon(QIcon(QPixmap.fromImage(image)))

    def _on_field_placed(self, field) -> None:
        self.statusBar().showMessage(
            f"Placed {FIELD_STYLES[field.type].title} on page {field.page}"
        )

    def _on_field_removed(self, field_id: str) -> None:
        del field_id
        self.statusBar().showMessage(f"Removed field. {len(self._store)} field(s) left")

    def _on_fields_changed(self) -> None:
        self._refresh_payload()

    def _refresh_payload(self) -> None:
        if self._session.step is not WizardStep.SEND:
            return
        payload = fields_payload(self._store.fields())
        self.payload_view.setPlainText(json.dumps(payload, indent=2))

    def _dropped_path(self, event) -> Path | None:
        mime = event.mimeData()
        if not mime.hasUrls():
            return None
        for url in mime.urls():
            if url.isLocalFile() and url.toLocalFile().lower().endswith(".pdf"):
                return Path(url.toLocalFile())
        return None

    def _close_document(self) -> None:
        self._cache.set_document(None)
        self.canvas.clear_page()
        self._session.close()
        self._navigator.reset(0)
        self.page_list.clear()
