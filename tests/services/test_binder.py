"""Tests for Binder — planning, committing and the error path."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from viewbind.domain.formatting import FormatOptions, Formatter
from viewbind.domain.record import Record
from viewbind.domain.specs import CellSpec, FieldSpec, RepeatedSpec, RowTemplate, ViewSpec
from viewbind.domain.types import CellKind, FormatterKind
from viewbind.errors import DecodeError, TransportError
from viewbind.infrastructure.view import MemoryView
from viewbind.services.binder import Binder
from viewbind.services.result import RenderResult

# ── Helpers ───────────────────────────────────────────────────────────

CHARGES = RepeatedSpec(
    slot="charges",
    path="charges",
    empty_message="No charges recorded",
    row=RowTemplate(
        tag="tr",
        cells=(
            CellSpec(path="description", tag="td"),
            CellSpec(path="amount", format=FormatterKind.CURRENCY, tag="td"),
        ),
    ),
)


def _listing_view(**overrides: Any) -> ViewSpec:
    values: dict[str, Any] = {
        "fields": (
            FieldSpec(slot="price", path="price", format=FormatterKind.CURRENCY),
            FieldSpec(slot="location", path="location"),
        ),
    }
    values.update(overrides)
    return ViewSpec(**values)


def _render(
    spec: ViewSpec, data: dict[str, Any], formatter: Formatter | None = None
) -> tuple[RenderResult, MemoryView]:
    view = MemoryView.for_view(spec)
    result = Binder(spec, formatter).render(Record(data), view)
    return result, view


# ── Fields ────────────────────────────────────────────────────────────


class TestFields:
    def test_listing(self, aed_formatter: Formatter) -> None:
        result, view = _render(
            _listing_view(), {"price": 1500000, "location": "Marina"}, aed_formatter
        )
        assert result.ok
        assert result.op == "render"
        assert view.text("price") == "AED 1,500,000"
        assert view.text("location") == "Marina"
        assert result.data["fields"] == {"price": "AED 1,500,000", "location": "Marina"}

    def test_missing_intermediate_renders_fallback(self) -> None:
        spec = ViewSpec(fields=(FieldSpec(slot="tariff", path="contract.tariff"),))
        result, view = _render(spec, {})
        assert view.text("tariff") == "—"
        assert result.ok
        assert result.warnings == []

    def test_mistyped_value_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="viewbind"):
            result, view = _render(_listing_view(), {"price": "abc", "location": "Marina"})
        assert view.text("price") == "—"
        assert result.warnings == ["price: expected number, got str at price"]
        assert "Field rendered with fallback" in caplog.text

    def test_field_fallback_override(self) -> None:
        spec = ViewSpec(fields=(FieldSpec(slot="source", path="meta.source", fallback="N/A"),))
        _, view = _render(spec, {"meta": {}})
        assert view.text("source") == "N/A"

    def test_template_only_wraps_present_values(self) -> None:
        spec = ViewSpec(
            fields=(
                FieldSpec(slot="total", path="meta.total", template="{value} Properties"),
                FieldSpec(slot="avg", path="meta.avg", template="Avg: {value}"),
            )
        )
        _, view = _render(spec, {"meta": {"total": 2}})
        assert view.text("total") == "2 Properties"
        assert view.text("avg") == "—"

    def test_date_range_field(self) -> None:
        spec = ViewSpec(
            fields=(
                FieldSpec(
                    slot="period",
                    path="period.start",
                    end_path="period.end",
                    format=FormatterKind.DATE_RANGE,
                ),
            )
        )
        _, view = _render(spec, {"period": {"start": "2026-09-01", "end": "2026-09-30"}})
        assert view.text("period") == "September 1, 2026 – September 30, 2026"

    def test_text_slots_are_not_escaped(self) -> None:
        spec = ViewSpec(fields=(FieldSpec(slot="title", path="title"),))
        _, view = _render(spec, {"title": "<b>Loft</b>"})
        assert view.text("title") == "<b>Loft</b>"

    def test_text_slot_replaced(self) -> None:
        spec = _listing_view()
        view = MemoryView.for_view(spec)
        view.texts["location"].set_text("stale")
        Binder(spec).render(Record({"location": "Marina"}), view)
        assert view.text("location") == "Marina"


# ── Repeated sections ─────────────────────────────────────────────────


class TestRepeated:
    def test_empty_sequence_writes_placeholder(self) -> None:
        spec = ViewSpec(repeated=(CHARGES,))
        result, view = _render(spec, {"charges": []})
        assert view.children("charges") == [
            '<tr class="empty-state"><td colspan="2">No charges recorded</td></tr>'
        ]
        assert result.data["sections"] == {"charges": 0}

    def test_absent_sequence_writes_placeholder(self) -> None:
        spec = ViewSpec(repeated=(CHARGES,))
        result, view = _render(spec, {})
        assert len(view.children("charges")) == 1
        assert "No charges recorded" in view.children("charges")[0]
        assert result.warnings == []

    def test_one_row_per_element_in_order(self, invoice_document: dict[str, Any]) -> None:
        spec = ViewSpec(repeated=(CHARGES,))
        result, view = _render(spec, invoice_document)
        rows = view.children("charges")
        assert len(rows) == 3
        assert rows[0] == "<tr><td>Energy</td><td>USD 99.92</td></tr>"
        assert "Base fee" in rows[1]
        assert "Grid" in rows[2]
        assert result.data["sections"] == {"charges": 3}

    def test_container_cleared_before_rows(self, invoice_document: dict[str, Any]) -> None:
        spec = ViewSpec(repeated=(CHARGES,))
        view = MemoryView.for_view(spec)
        view.containers["charges"].append_html("<tr><td>old</td></tr>")
        Binder(spec).render(Record(invoice_document), view)
        assert all("old" not in row for row in view.children("charges"))
        assert len(view.children("charges")) == 3

    def test_record_text_is_escaped(self) -> None:
        spec = ViewSpec(repeated=(CHARGES,))
        _, view = _render(spec, {"charges": [{"description": "<script>alert(1)</script>"}]})
        row = view.children("charges")[0]
        assert "<script>" not in row
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in row

    def test_section_limit(self, invoice_document: dict[str, Any]) -> None:
        spec = ViewSpec(repeated=(CHARGES.model_copy(update={"limit": 2}),))
        _, view = _render(spec, invoice_document)
        assert len(view.children("charges")) == 2

    def test_mapping_values_iterated(self, property_document: dict[str, Any]) -> None:
        spec = ViewSpec(
            repeated=(
                RepeatedSpec(
                    slot="landmarks",
                    path="landmarks",
                    iterate_values=True,
                    row=RowTemplate(cells=(CellSpec(path="name"),)),
                ),
            )
        )
        _, view = _render(spec, property_document)
        assert view.children("landmarks") == [
            "<div><span>Burj Khalifa</span></div>",
            "<div><span>Palm Jumeirah</span></div>",
        ]

    def test_mapping_without_iterate_values_warns(
        self, property_document: dict[str, Any]
    ) -> None:
        spec = ViewSpec(repeated=(RepeatedSpec(slot="landmarks", path="landmarks"),))
        result, view = _render(spec, property_document)
        assert "empty-state" in view.children("landmarks")[0]
        assert result.warnings == ["landmarks: expected sequence, got dict at landmarks"]

    def test_row_element_path(self, invoice_document: dict[str, Any]) -> None:
        spec = ViewSpec(
            repeated=(
                RepeatedSpec(
                    slot="benefits",
                    path="contract.benefits",
                    row=RowTemplate(tag="li", cells=(CellSpec(css_class="benefit"),)),
                ),
            )
        )
        _, view = _render(spec, invoice_document)
        assert view.children("benefits")[0] == (
            '<li><span class="benefit">Price guarantee</span></li>'
        )


# ── Cells ─────────────────────────────────────────────────────────────


def _cells_view(*cells: CellSpec) -> ViewSpec:
    return ViewSpec(
        repeated=(
            RepeatedSpec(
                slot="properties",
                path="properties",
                row=RowTemplate(css_class="property-card", cells=cells),
            ),
        )
    )


class TestCells:
    def test_optional_cell_omitted_when_absent(self, property_document: dict[str, Any]) -> None:
        spec = _cells_view(
            CellSpec(path="title"),
            CellSpec(
                path="distance_to_burj_khalifa_km",
                format=FormatterKind.MEASUREMENT,
                options=FormatOptions(unit="km"),
                optional=True,
            ),
        )
        _, view = _render(spec, property_document)
        first, second = view.children("properties")
        assert "24.5 km" in first
        assert "km" not in second

    def test_required_cell_shows_fallback(self, property_document: dict[str, Any]) -> None:
        spec = _cells_view(CellSpec(path="coordinates.lat", format=FormatterKind.NUMBER))
        _, view = _render(spec, property_document)
        assert view.children("properties")[1] == (
            '<div class="property-card"><span>—</span></div>'
        )

    def test_items_cell_with_limit(self, property_document: dict[str, Any]) -> None:
        spec = _cells_view(
            CellSpec(
                path="features",
                kind=CellKind.ITEMS,
                tag="div",
                item_class="feature-tag",
                limit=3,
            )
        )
        _, view = _render(spec, property_document)
        first, second = view.children("properties")
        assert first.count('class="feature-tag"') == 3
        assert "Parking" not in first
        assert second == '<div class="property-card"><div>—</div></div>'

    def test_items_cell_mistyped_warns(self) -> None:
        spec = _cells_view(CellSpec(path="features", kind=CellKind.ITEMS))
        result, view = _render(spec, {"properties": [{"features": "Gym"}]})
        assert view.children("properties")[0] == '<div class="property-card"><span>—</span></div>'
        assert result.warnings == [
            "properties[0]: expected sequence, got str at features"
        ]

    def test_link_cell(self, property_document: dict[str, Any]) -> None:
        spec = _cells_view(CellSpec(kind=CellKind.LINK, href_path="url", text="View Details →"))
        _, view = _render(spec, property_document)
        first, second = view.children("properties")
        assert 'href="https://example.com/listing/1"' in first
        assert 'href="#"' in second

    def test_link_cell_omitted_without_href(self) -> None:
        spec = _cells_view(
            CellSpec(path="title"),
            CellSpec(kind=CellKind.LINK, href_path="url", text="View"),
        )
        _, view = _render(spec, {"properties": [{"title": "Loft"}]})
        assert view.children("properties") == [
            '<div class="property-card"><span>Loft</span></div>'
        ]

    def test_labelled_cell(self) -> None:
        spec = _cells_view(
            CellSpec(
                path="lat",
                format=FormatterKind.NUMBER,
                options=FormatOptions(max_fraction_digits=4, min_fraction_digits=4),
                label="Lat",
            )
        )
        _, view = _render(spec, {"properties": [{"lat": 25.08}]})
        assert "<strong>Lat</strong> 25.0800" in view.children("properties")[0]

    def test_flag_cell_class_follows_value(self) -> None:
        spec = _cells_view(
            CellSpec(
                path="ready",
                format=FormatterKind.FLAG,
                options=FormatOptions(labels=("Ready", "Building")),
                css_class="badge",
                flag_classes=("ready-badge", "under-construction"),
            )
        )
        _, view = _render(
            spec, {"properties": [{"ready": True}, {"ready": False}, {"ready": "soon"}]}
        )
        assert view.children("properties") == [
            '<div class="property-card"><span class="ready-badge">Ready</span></div>',
            '<div class="property-card"><span class="under-construction">Building</span></div>',
            '<div class="property-card"><span class="badge">—</span></div>',
        ]


# ── Planning and committing ───────────────────────────────────────────


class TestPlanApply:
    def test_plan_touches_nothing(self, property_document: dict[str, Any]) -> None:
        spec = _listing_view(repeated=(CHARGES,))
        view = MemoryView.for_view(spec)
        plan = Binder(spec).plan(Record(property_document))
        assert view.touched == set()
        assert [w.slot for w in plan.texts] == ["price", "location"]
        assert plan.summary()["sections"] == {"charges": 0}

    def test_missing_slot_skipped_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        spec = _listing_view()
        view = MemoryView(text_slots=["location"])
        with caplog.at_level(logging.WARNING, logger="viewbind"):
            result = Binder(spec).render(Record({"price": 5, "location": "Marina"}), view)
        assert result.ok
        assert result.warnings == ["price: slot not found in view"]
        assert view.text("location") == "Marina"
        assert "not found in view" in caplog.text

    def test_rendered_status_written(self) -> None:
        spec = _listing_view(rendered_status="Ready")
        _, view = _render(spec, {})
        assert view.text("status") == "Ready"

    def test_status_untouched_without_rendered_status(self) -> None:
        _, view = _render(_listing_view(), {})
        assert "status" not in view.touched


# ── Error path ────────────────────────────────────────────────────────


class TestRenderFailure:
    def test_status_and_banner_only(self, caplog: pytest.LogCaptureFixture) -> None:
        spec = _listing_view(repeated=(CHARGES,))
        view = MemoryView.for_view(spec)
        error = TransportError("HTTP error! status: 404", source="data/x.json", status=404)
        with caplog.at_level(logging.ERROR, logger="viewbind"):
            result = Binder(spec).render_failure(error, view)
        assert view.text("status") == "Load failed"
        assert view.children("main")[0].startswith('<div class="error-message" role="alert">')
        assert view.touched == {"status", "main"}
        assert not result.ok
        assert result.op == "render_failure"
        assert result.error is not None
        assert result.error.code == "TRANSPORT"
        assert result.error.message == "HTTP error! status: 404"
        assert result.error.detail == {"source": "data/x.json", "status": 404}
        assert "Error loading record" in caplog.text

    def test_banner_prepended(self) -> None:
        spec = _listing_view()
        view = MemoryView.for_view(spec)
        view.containers["main"].append_html("<p>content</p>")
        Binder(spec).render_failure(DecodeError("bad json"), view)
        children = view.children("main")
        assert len(children) == 2
        assert "error-message" in children[0]
        assert children[1] == "<p>content</p>"

    def test_custom_failure_text(self) -> None:
        spec = _listing_view(failed_status="Offline", error_message="Try again <later>")
        view = MemoryView.for_view(spec)
        result = Binder(spec).render_failure(DecodeError("bad json"), view)
        assert view.text("status") == "Offline"
        assert "Try again &lt;later&gt;" in view.children("main")[0]
        assert result.data == {"view": "custom", "status": "Offline"}
        assert result.error is not None
        assert result.error.detail == {}

    def test_missing_error_slots_warn(self) -> None:
        result = Binder(_listing_view()).render_failure(DecodeError("x"), MemoryView())
        assert result.warnings == [
            "status: slot not found in view",
            "main: slot not found in view",
        ]

    def test_unexpected_exception_is_internal(self) -> None:
        spec = _listing_view()
        result = Binder(spec).render_failure(RuntimeError("boom"), MemoryView.for_view(spec))
        assert result.error is not None
        assert result.error.code == "INTERNAL"
        assert result.error.message == "boom"
