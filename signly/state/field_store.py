"""Ordered, id-keyed collection of placed fields.

Two interchangeable stores share the same CRUD contract:

* ``LocalFieldStore`` keeps the list itself.
* ``SharedFieldStore`` reads and writes a list owned by the caller, so a
  workflow shell can keep fields alive across its own steps.

Fields are frozen dataclasses; consumers receive snapshots and mutate only
through ``add``, ``remove`` and ``update``.
"""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Callable
import uuid

from PySide6.QtCore import QObject, Signal

from signly.model.field import Field
from signly.model.geometry import clamp_unit

logger = logging.getLogger(__name__)

_MUTABLE_KEYS = frozenset({"x", "y"})


def new_field_id() -> str:
    return uuid.uuid4().hex


class FieldStore(QObject):
    fields_changed = Signal()

    def _load(self) -> list[Field]:
        raise NotImplementedError

    def _store(self, fields: list[Field]) -> None:
        raise NotImplementedError

    def fields(self) -> list[Field]:
        return list(self._load())

    def __len__(self) -> int:
        return len(self._load())

    def get(self, field_id: str) -> Field | None:
        for field in self._load():
            if field.id == field_id:
                return field
        return None

    def list_for_page(self, page: int) -> list[Field]:
        return [field for field in self._load() if field.page == page]

    def add(self, field: Field) -> Field:
        current = self._load()
        taken = {existing.id for existing in current}
        field_id = field.id
        if not field_id or field_id in taken:
            field_id = new_field_id()
            while field_id in taken:
                field_id = new_field_id()

        page = field.page
        if page < 1:
            logger.warning("Field page %d is below 1, storing it on page 1", page)
            page = 1

        stored = replace(
            field, id=field_id, page=page, x=clamp_unit(field.x), y=clamp_unit(field.y)
        )
        self._store([*current, stored])
        logger.debug("Added %s field %s on page %d", stored.type.value, stored.id, stored.page)
        self.fields_changed.emit()
        return stored

    def remove(self, field_id: str) -> bool:
        current = self._load()
        kept = [field for field in current if field.id != field_id]
        if len(kept) == len(current):
            return False
        self._store(kept)
        logger.debug("Removed field %s", field_id)
        self.fields_changed.emit()
        return True

    def update(self, field_id: str, **patch: float) -> Field | None:
        unknown = set(patch) - _MUTABLE_KEYS
        if unknown:
            raise TypeError(f"Only x and y can be updated, got: {sorted(unknown)}")

        current = self._load()
        for index, field in enumerate(current):
            if field.id != field_id:
                continue
            changes = {key: clamp_unit(value) for key, value in patch.items()}
            updated = replace(field, **changes)
            if updated == field:
                return field
            self._store([*current[:index], updated, *current[index + 1 :]])
            self.fields_changed.emit()
            return updated
        return None

    def clear(self) -> None:
        if not self._load():
            return
        self._store([])
        self.fields_changed.emit()


class LocalFieldStore(FieldStore):
    def __init__(self, fields: list[Field] | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._fields: list[Field] = []
        for field in fields or []:
            self.add(field)

    def _load(self) -> list[Field]:
        return self._fields

    def _store(self, fields: list[Field]) -> None:
        self._fields = fields


class SharedFieldStore(FieldStore):
    def __init__(
        self,
        get_fields: Callable[[], list[Field]],
        set_fields: Callable[[list[Field]], None],
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._get_fields = get_fields
        self._set_fields = set_fields

    def _load(self) -> list[Field]:
        return list(self._get_fields())

    def _store(self, fields: list[Field]) -> None:
        self._set_fields(list(fields))
