"""Workflow state owned by the wizard shell across its steps."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from signly.model.document import PdfDocument
from signly.model.field import Field
from signly.state.field_store import SharedFieldStore


class WizardStep(IntEnum):
    ADD_FIELDS = 0
    PREVIEW = 1
    SEND = 2

    @property
    def label(self) -> str:
        return _STEP_LABELS[self]


_STEP_LABELS = {
    WizardStep.ADD_FIELDS: "Add Your Fields",
    WizardStep.PREVIEW: "Preview",
    WizardStep.SEND: "Send & Manage",
}


@dataclass(slots=True)
class DocumentSession:
    document: PdfDocument | None = None
    fields: list[Field] = field(default_factory=list)
    step: WizardStep = WizardStep.ADD_FIELDS

    @property
    def read_only(self) -> bool:
        return self.step is not WizardStep.ADD_FIELDS

    @property
    def show_sample_data(self) -> bool:
        return self.step is WizardStep.PREVIEW

    def get_fields(self) -> list[Field]:
        return self.fields

    def set_fields(self, fields: list[Field]) -> None:
        self.fields = fields

    def make_store(self) -> SharedFieldStore:
        return SharedFieldStore(self.get_fields, self.set_fields)

    def next_step(self) -> bool:
        if self.step is WizardStep.SEND:
            return False
        self.step = WizardStep(self.step + 1)
        return True

    def previous_step(self) -> bool:
        if self.step is WizardStep.ADD_FIELDS:
            return False
        self.step = WizardStep(self.step - 1)
        return True

    def close(self) -> None:
        if self.document is not None:
            self.document.close()
            self.document = None
        self.step = WizardStep.ADD_FIELDS
