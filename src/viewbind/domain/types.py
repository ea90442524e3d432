"""Binding enums shared across the domain and service layers."""

from __future__ import annotations

from enum import StrEnum


class FormatterKind(StrEnum):
    """Display formatters a field or cell can be routed through."""

    CURRENCY = "currency"
    NUMBER = "number"
    DATE = "date"
    DATE_RANGE = "date_range"
    MEASUREMENT = "measurement"
    JOINED_LIST = "joined_list"
    RAW = "raw"
    COUNT = "count"
    FLAG = "flag"


class ValueKind(StrEnum):
    """Value shapes a Record accessor can expect at a path."""

    ANY = "any"
    NUMBER = "number"
    TEXT = "text"
    BOOLEAN = "boolean"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


class Presence(StrEnum):
    """Outcome of resolving a path against a Record."""

    PRESENT = "present"
    ABSENT = "absent"
    MISTYPED = "mistyped"


class CellKind(StrEnum):
    """How a row cell renders its bound value."""

    TEXT = "text"
    ITEMS = "items"
    LINK = "link"


class RenderState(StrEnum):
    """Per-page-load lifecycle: ``idle -> loading -> rendered | failed``."""

    IDLE = "idle"
    LOADING = "loading"
    RENDERED = "rendered"
    FAILED = "failed"


# Which value kind each formatter expects from its lookup.
EXPECTED_KIND: dict[FormatterKind, ValueKind] = {
    FormatterKind.CURRENCY: ValueKind.NUMBER,
    FormatterKind.NUMBER: ValueKind.NUMBER,
    FormatterKind.MEASUREMENT: ValueKind.NUMBER,
    FormatterKind.DATE: ValueKind.ANY,
    FormatterKind.DATE_RANGE: ValueKind.ANY,
    FormatterKind.JOINED_LIST: ValueKind.SEQUENCE,
    FormatterKind.RAW: ValueKind.ANY,
    FormatterKind.COUNT: ValueKind.SEQUENCE,
    FormatterKind.FLAG: ValueKind.BOOLEAN,
}
