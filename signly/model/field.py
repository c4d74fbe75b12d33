"""Signing field model definitions."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from enum import Enum


class FieldType(str, Enum):
    SIGNATURE = "signature"
    NAME = "name"
    DATE = "date"
    INITIALS = "initials"


@dataclass(frozen=True, slots=True)
class Field:
    page: int
    x: float
    y: float
    type: FieldType = FieldType.SIGNATURE
    id: str = ""

    def to_payload(self) -> dict:
        payload = asdict(self)
        payload["type"] = self.type.value
        return payload


@dataclass(frozen=True, slots=True)
class FieldStyle:
    label: str
    title: str
    color: str
    cursive: bool = False


FIELD_STYLES: dict[FieldType, FieldStyle] = {
    FieldType.SIGNATURE: FieldStyle(label="Sign", title="Signature", color="#1d4ed8", cursive=True),
    FieldType.NAME: FieldStyle(label="Name", title="Full Name", color="#15803d"),
    FieldType.DATE: FieldStyle(label="Date", title="Signing Date", color="#7e22ce"),
    FieldType.INITIALS: FieldStyle(label="Init", title="Initials", color="#be185d"),
}


def initials_for(full_name: str) -> str:
    parts = [part for part in full_name.split() if part]
    return ".".join(part[0].upper() for part in parts)


def sample_value(
    field_type: FieldType,
    full_name: str,
    date_format: str,
    today: date | None = None,
) -> str:
    """Return the placeholder shown for *field_type* in preview mode."""
    if field_type is FieldType.INITIALS:
        return initials_for(full_name)
    if field_type is FieldType.DATE:
        return (today or date.today()).strftime(date_format)
    return full_name
