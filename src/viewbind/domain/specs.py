"""Static binding configuration: field, cell, row and view specs.

Specs are frozen pydantic models so they can be declared in Python presets
or loaded from the ``[view]`` section of ``viewbind.toml`` with the same
validation. Paths may be given as dotted strings (``"contract.tariff"``) or
key lists; both normalise to tuples.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from viewbind.domain.formatting import FormatOptions
from viewbind.domain.record import parse_path
from viewbind.domain.rows import TAG_PATTERN
from viewbind.domain.types import CellKind, FormatterKind


def _coerce_path(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (str, list, tuple)):
        return parse_path(value)
    return value


def _check_tag(value: str) -> str:
    if not TAG_PATTERN.match(value):
        msg = f"Invalid element tag: {value!r}"
        raise ValueError(msg)
    return value


class FieldSpec(BaseModel):
    """Binds one record path to one text slot.

    Attributes:
        slot: Logical slot name resolved through the view's SlotResolver.
        path: Keys walked from the record root.
        format: Formatter applied to the resolved value.
        fallback: Replaces the fallback glyph for this field.
        options: Unit, fraction digits and flag labels.
        end_path: Second endpoint for ``date_range`` fields.
        template: Wraps a present value, e.g. ``"Avg: {value}"``.
    """

    model_config = {"frozen": True}

    slot: str
    path: tuple[str | int, ...]
    format: FormatterKind = FormatterKind.RAW
    fallback: str | None = None
    options: FormatOptions = Field(default_factory=FormatOptions)
    end_path: tuple[str | int, ...] | None = None
    template: str | None = None

    @field_validator("path", "end_path", mode="before")
    @classmethod
    def _normalise_paths(cls, value: Any) -> Any:
        return _coerce_path(value)

    @model_validator(mode="after")
    def _range_needs_end(self) -> FieldSpec:
        if self.format is FormatterKind.DATE_RANGE and self.end_path is None:
            msg = f"date_range field '{self.slot}' requires end_path"
            raise ValueError(msg)
        return self


class CellSpec(BaseModel):
    """One cell of a repeated row, bound relative to the row element.

    ``kind="items"`` renders each element of a nested sequence as its own
    child element (chips, bullet points). ``kind="link"`` renders an anchor
    whose href comes from ``href_path``. Optional cells are omitted when the
    value is absent rather than showing the fallback. A ``flag`` cell with
    ``flag_classes`` takes the first class when true and the second when false.
    """

    model_config = {"frozen": True}

    path: tuple[str | int, ...] = ()
    format: FormatterKind = FormatterKind.RAW
    kind: CellKind = CellKind.TEXT
    fallback: str | None = None
    options: FormatOptions = Field(default_factory=FormatOptions)
    end_path: tuple[str | int, ...] | None = None
    template: str | None = None
    tag: str = "span"
    css_class: str = ""
    label: str = ""
    optional: bool = False
    text: str | None = None
    href_path: tuple[str | int, ...] | None = None
    limit: int | None = None
    item_tag: str = "span"
    item_class: str = ""
    flag_classes: tuple[str, str] | None = None

    @field_validator("path", "end_path", "href_path", mode="before")
    @classmethod
    def _normalise_paths(cls, value: Any) -> Any:
        return _coerce_path(value)

    @field_validator("tag", "item_tag")
    @classmethod
    def _valid_tags(cls, value: str) -> str:
        return _check_tag(value)

    @model_validator(mode="after")
    def _link_needs_href(self) -> CellSpec:
        if self.kind is CellKind.LINK and self.href_path is None:
            msg = "link cells require href_path"
            raise ValueError(msg)
        return self


class RowTemplate(BaseModel):
    """Markup shell and cells for one generated row."""

    model_config = {"frozen": True}

    tag: str = "div"
    css_class: str = ""
    cells: tuple[CellSpec, ...] = ()

    @field_validator("tag")
    @classmethod
    def _valid_tag(cls, value: str) -> str:
        return _check_tag(value)


class RepeatedSpec(BaseModel):
    """Binds a record sequence to a container slot, one row per element.

    Attributes:
        slot: Container slot name.
        path: Path to the sequence (or mapping, with ``iterate_values``).
        row: Template applied to each element.
        empty_message: Text of the single row written for an empty section.
        limit: Render at most this many elements.
        iterate_values: Accept a mapping and iterate its values in order.
    """

    model_config = {"frozen": True}

    slot: str
    path: tuple[str | int, ...]
    row: RowTemplate = Field(default_factory=RowTemplate)
    empty_message: str = "No entries"
    limit: int | None = None
    iterate_values: bool = False

    @field_validator("path", mode="before")
    @classmethod
    def _normalise_path(cls, value: Any) -> Any:
        return _coerce_path(value)


class ViewSpec(BaseModel):
    """Everything the binder needs for one page: fields, sections, error slots."""

    model_config = {"frozen": True}

    name: str = "custom"
    description: str = ""
    fields: tuple[FieldSpec, ...] = ()
    repeated: tuple[RepeatedSpec, ...] = ()
    status_slot: str = "status"
    error_slot: str = "main"
    failed_status: str = "Load failed"
    loading_status: str | None = None
    rendered_status: str | None = None
    error_title: str = "Error"
    error_message: str = "Failed to load data. Please refresh the page."

    @model_validator(mode="after")
    def _slots_written_once(self) -> ViewSpec:
        seen: set[str] = set()
        for slot in [f.slot for f in self.fields] + [r.slot for r in self.repeated]:
            if slot in seen:
                msg = f"Slot '{slot}' is bound more than once"
                raise ValueError(msg)
            seen.add(slot)
        return self

    @property
    def slots(self) -> tuple[str, ...]:
        """Every data slot this view writes, in binding order."""
        return tuple(f.slot for f in self.fields) + tuple(r.slot for r in self.repeated)
