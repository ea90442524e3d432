"""Binder: executes one render pass of a ViewSpec against a Record.

A pass is two-phase. :meth:`Binder.plan` resolves every path, formats every
value and serialises every row without touching the view; :meth:`Binder.apply`
then commits the planned writes to the slots. Nothing is written until the
whole plan exists, so a pass either renders completely or not at all.

INVARIANT: Field-level problems never raise. Absent and mistyped values
render their fallback; mistyped ones are also reported as warnings.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from viewbind.domain.formatting import Formatter
from viewbind.domain.record import Lookup, Record, is_sequence
from viewbind.domain.rows import Cell, Row, banner, empty_row, serialize_row
from viewbind.domain.types import EXPECTED_KIND, CellKind, ValueKind
from viewbind.errors import RecordLoadError
from viewbind.services.result import RenderError, RenderResult
from viewbind.services.telemetry import traced

if TYPE_CHECKING:
    from viewbind.domain.specs import CellSpec, FieldSpec, RepeatedSpec, RowTemplate, ViewSpec
    from viewbind.infrastructure.view import SlotResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TextWrite:
    """Replace a text slot's content."""

    slot: str
    text: str


@dataclass(frozen=True)
class RowsWrite:
    """Clear a container slot, then append serialised rows in order."""

    slot: str
    rows: tuple[str, ...]
    empty: bool = False


@dataclass
class RenderPlan:
    """Every write one render pass will perform, computed up front."""

    view: str
    texts: list[TextWrite] = field(default_factory=list)
    sections: list[RowsWrite] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def summary(self) -> dict[str, Any]:
        return {
            "view": self.view,
            "fields": {w.slot: w.text for w in self.texts},
            "sections": {w.slot: 0 if w.empty else len(w.rows) for w in self.sections},
        }


class Binder:
    """Binds records to a view's slots according to a static ViewSpec.

    Usage::

        binder = Binder(spec, Formatter(get_locale("en-AE")))
        result = binder.render(record, view)
    """

    def __init__(self, spec: ViewSpec, formatter: Formatter | None = None) -> None:
        self.spec = spec
        self.formatter = formatter or Formatter()

    # ── Planning ─────────────────────────────────────────────────────

    def plan(self, record: Record) -> RenderPlan:
        """Compute every slot write for *record* without touching any slot."""
        plan = RenderPlan(view=self.spec.name)
        for spec in self.spec.fields:
            text, lookups = self._format(spec, record)
            self._note_mistyped(spec.slot, lookups, plan.warnings)
            plan.texts.append(TextWrite(slot=spec.slot, text=text))
        for section in self.spec.repeated:
            plan.sections.append(self._plan_section(section, record, plan.warnings))
        return plan

    def _format(self, spec: FieldSpec | CellSpec, record: Record) -> tuple[str, list[Lookup]]:
        expected = EXPECTED_KIND[spec.format]
        lookups = [record.lookup(spec.path, expected)]
        if spec.end_path is not None:
            lookups.append(record.lookup(spec.end_path, expected))
        end = lookups[1] if len(lookups) > 1 else None
        text = self.formatter.format(
            spec.format, lookups[0], spec.options, end=end, fallback=spec.fallback
        )
        if spec.template and all(lookup.present for lookup in lookups):
            text = spec.template.replace("{value}", text)
        return text, lookups

    @staticmethod
    def _note_mistyped(where: str, lookups: list[Lookup], warnings: list[str]) -> None:
        for lookup in lookups:
            if lookup.mistyped:
                message = f"{where}: {lookup.describe()}"
                logger.debug("Field rendered with fallback: %s", message)
                warnings.append(message)

    def _elements(self, section: RepeatedSpec, record: Record, warnings: list[str]) -> list[Any]:
        lookup = record.lookup(section.path)
        value = lookup.value
        if section.iterate_values and lookup.present and isinstance(value, Mapping):
            elements = list(value.values())
        elif is_sequence(value):
            elements = list(value)
        else:
            if lookup.present:
                self._note_mistyped(section.slot, [lookup.expect(ValueKind.SEQUENCE)], warnings)
            elements = []
        if section.limit is not None:
            elements = elements[: section.limit]
        return elements

    def _plan_section(
        self, section: RepeatedSpec, record: Record, warnings: list[str]
    ) -> RowsWrite:
        elements = self._elements(section, record, warnings)
        if not elements:
            placeholder = empty_row(
                section.empty_message,
                tag=section.row.tag,
                columns=len(section.row.cells),
            )
            return RowsWrite(slot=section.slot, rows=(serialize_row(placeholder),), empty=True)
        rows = tuple(
            serialize_row(
                self._build_row(section.row, Record(element), f"{section.slot}[{i}]", warnings)
            )
            for i, element in enumerate(elements)
        )
        return RowsWrite(slot=section.slot, rows=rows)

    def _build_row(
        self, template: RowTemplate, element: Record, where: str, warnings: list[str]
    ) -> Row:
        cells: list[Cell] = []
        for spec in template.cells:
            cell = self._build_cell(spec, element, where, warnings)
            if cell is not None:
                cells.append(cell)
        return Row(cells=tuple(cells), tag=template.tag, css_class=template.css_class)

    def _build_cell(
        self, spec: CellSpec, element: Record, where: str, warnings: list[str]
    ) -> Cell | None:
        if spec.kind is CellKind.LINK:
            href = element.text(spec.href_path or ())
            if not href.present:
                self._note_mistyped(where, [href], warnings)
                return None
            text = spec.text if spec.text is not None else self._format(spec, element)[0]
            return Cell(text=text, css_class=spec.css_class, href=href.value)

        if spec.kind is CellKind.ITEMS:
            lookup = element.sequence(spec.path)
            self._note_mistyped(where, [lookup], warnings)
            if not lookup.present and spec.optional:
                return None
            items = [item for item in (lookup.value if lookup.present else []) if item is not None]
            if spec.limit is not None:
                items = items[: spec.limit]
            formatted = tuple(
                self.formatter.format(spec.format, item, spec.options) for item in items
            )
            fallback = spec.fallback if spec.fallback is not None else self.formatter.fallback
            return Cell(
                text=fallback,
                tag=spec.tag,
                css_class=spec.css_class,
                label=spec.label,
                items=formatted,
                item_tag=spec.item_tag,
                item_class=spec.item_class,
            )

        text, lookups = self._format(spec, element)
        if spec.optional and not all(lookup.present for lookup in lookups):
            return None
        self._note_mistyped(where, lookups, warnings)
        css_class = spec.css_class
        flag = lookups[0]
        if spec.flag_classes and flag.present and isinstance(flag.value, bool):
            css_class = spec.flag_classes[0] if flag.value else spec.flag_classes[1]
        return Cell(text=text, tag=spec.tag, css_class=css_class, label=spec.label)

    # ── Committing ───────────────────────────────────────────────────

    def apply(self, plan: RenderPlan, view: SlotResolver) -> list[str]:
        """Commit *plan* to *view*; returns warnings for slots the view lacks."""
        warnings: list[str] = []
        for write in plan.texts:
            slot = view.text_slot(write.slot)
            if slot is None:
                warnings.append(self._missing(write.slot))
                continue
            slot.set_text(write.text)
        for section in plan.sections:
            container = view.container_slot(section.slot)
            if container is None:
                warnings.append(self._missing(section.slot))
                continue
            container.clear()
            for markup in section.rows:
                container.append_html(markup)
        return warnings

    @staticmethod
    def _missing(slot: str) -> str:
        logger.warning("Slot '%s' not found in view; skipping", slot)
        return f"{slot}: slot not found in view"

    def write_status(self, view: SlotResolver, word: str | None) -> None:
        """Write a status word to the view's status slot, if both exist."""
        if word is None:
            return
        slot = view.text_slot(self.spec.status_slot)
        if slot is not None:
            slot.set_text(word)

    # ── Render passes ────────────────────────────────────────────────

    @traced
    def render(self, record: Record, view: SlotResolver) -> RenderResult:
        """Run a full render pass: plan every write, then commit them."""
        plan = self.plan(record)
        warnings = plan.warnings + self.apply(plan, view)
        self.write_status(view, self.spec.rendered_status)
        logger.info(
            "Rendered view '%s': %d fields, %d sections",
            self.spec.name,
            len(plan.texts),
            len(plan.sections),
        )
        return RenderResult(ok=True, op="render", data=plan.summary(), warnings=warnings)

    @traced
    def render_failure(self, error: Exception, view: SlotResolver) -> RenderResult:
        """The single error-path write: status word plus a prepended banner.

        No field slot is touched.
        """
        logger.error("Error loading record: %s", error)
        warnings: list[str] = []
        status = view.text_slot(self.spec.status_slot)
        if status is None:
            warnings.append(self._missing(self.spec.status_slot))
        else:
            status.set_text(self.spec.failed_status)
        container = view.container_slot(self.spec.error_slot)
        if container is None:
            warnings.append(self._missing(self.spec.error_slot))
        else:
            container.prepend_html(banner(self.spec.error_title, self.spec.error_message))
        return RenderResult(
            ok=False,
            op="render_failure",
            data={"view": self.spec.name, "status": self.spec.failed_status},
            warnings=warnings,
            error=_render_error(error),
        )


def _render_error(error: Exception) -> RenderError:
    if isinstance(error, RecordLoadError):
        detail: Mapping[str, Any] = {"source": error.source, **error.detail}
        clean = {k: v for k, v in detail.items() if v not in (None, "")}
        return RenderError(code=error.code, message=error.message, detail=clean)
    return RenderError(code="INTERNAL", message=str(error) or type(error).__name__)
