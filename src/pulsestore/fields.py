"""Custom-field values: stored as strings, coerced to typed values at the read boundary."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from pulsestore.errors import FieldValueError
from pulsestore.types import CustomFieldDefinition, FieldType

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

FieldValue = str | int | float | bool | date | None

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_TRUE_STRINGS = frozenset({"true", "yes", "1", "on"})
_FALSE_STRINGS = frozenset({"false", "no", "0", "off"})

DEFAULT_DEFINITIONS: tuple[tuple[str, FieldType, tuple[str, ...]], ...] = (
    ("Project Code", FieldType.TEXT, ()),
    ("Approval Status", FieldType.DROPDOWN, ("Pending", "Approved", "Rejected", "Under Review")),
    ("Expiry Date", FieldType.DATE, ()),
    ("Document Owner", FieldType.TEXT, ()),
    ("Revision Number", FieldType.NUMBER, ()),
    ("External Reference", FieldType.URL, ()),
    ("Requires Signature", FieldType.CHECKBOX, ()),
    ("Notes", FieldType.MULTILINE, ()),
)


def default_definitions() -> tuple[CustomFieldDefinition, ...]:
    """Return the schema seeded into an empty custom-field store."""
    return tuple(
        CustomFieldDefinition(name=name, type=field_type, options=options)
        for name, field_type, options in DEFAULT_DEFINITIONS
    )


def _number(raw: str) -> int | float:
    try:
        return int(raw)
    except ValueError:
        return float(raw)


def _date(raw: str) -> date:
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return datetime.fromisoformat(raw).date()


def _checkbox(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    msg = f"not a checkbox value: {raw!r}"
    raise ValueError(msg)


def _url(raw: str) -> str:
    parsed = urlparse(raw)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        msg = f"not an http(s) URL: {raw!r}"
        raise ValueError(msg)
    return raw


def _email(raw: str) -> str:
    if not _EMAIL_PATTERN.match(raw):
        msg = f"not an email address: {raw!r}"
        raise ValueError(msg)
    return raw


def coerce_value(definition: CustomFieldDefinition, raw: str | None) -> FieldValue:
    """Coerce one stored string into the definition's declared type.

    Empty values come back as ``None`` (or ``False`` for checkboxes) unless the
    field is required, in which case they are rejected.
    """
    text = (raw or "").strip()
    if not text:
        if definition.is_required:
            raise FieldValueError(definition.id, definition.type.value, raw or "")
        return False if definition.type is FieldType.CHECKBOX else None

    try:
        if definition.type is FieldType.NUMBER:
            value: FieldValue = _number(text)
        elif definition.type is FieldType.DATE:
            value = _date(text)
        elif definition.type is FieldType.CHECKBOX:
            value = _checkbox(text)
        elif definition.type is FieldType.URL:
            value = _url(text)
        elif definition.type is FieldType.EMAIL:
            value = _email(text)
        elif definition.type is FieldType.DROPDOWN:
            if definition.options and text not in definition.options:
                msg = f"{text!r} is not one of {list(definition.options)!r}"
                raise ValueError(msg)
            value = text
        else:
            value = raw
    except ValueError as exc:
        raise FieldValueError(definition.id, definition.type.value, text) from exc
    return value


def to_wire(value: FieldValue) -> str:
    """Serialize a typed value back to its stored string form."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def coerce_values(
    definitions: Iterable[CustomFieldDefinition],
    values: Mapping[str, str],
) -> dict[str, FieldValue]:
    """Coerce every value with a live definition; orphaned values are skipped."""
    result: dict[str, FieldValue] = {}
    for definition in definitions:
        result[definition.id] = coerce_value(definition, values.get(definition.id, definition.default_value))
    return result
