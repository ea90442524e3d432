"""Bundled view presets for the two static sites viewbind grew out of.

Each preset pairs a :class:`ViewSpec` with the locale, currency precision
and data path its page was written for. Custom views declared in
``viewbind.toml`` take precedence over the preset's bindings.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from viewbind.domain.formatting import FormatOptions
from viewbind.domain.specs import CellSpec, FieldSpec, RepeatedSpec, RowTemplate, ViewSpec
from viewbind.domain.types import CellKind, FormatterKind

_COORD = FormatOptions(max_fraction_digits=4, min_fraction_digits=4)
_WHOLE = FormatOptions(max_fraction_digits=0)


class Preset(BaseModel):
    """A ready-made view plus the formatting conventions it assumes."""

    model_config = {"frozen": True}

    view: ViewSpec
    locale: str = "en-US"
    currency_fraction_digits: int = Field(default=2, ge=0)
    source_path: str


def _currency_field(slot: str, path: str, template: str | None = None) -> FieldSpec:
    return FieldSpec(slot=slot, path=path, format=FormatterKind.CURRENCY, template=template)


REAL_ESTATE = Preset(
    locale="en-AE",
    currency_fraction_digits=0,
    source_path="data/dubai-properties.json",
    view=ViewSpec(
        name="real-estate",
        description="Property market dashboard: statistics, listings, free zones, landmarks.",
        status_slot="data-status",
        error_slot="main",
        error_message="Failed to load property data. Please refresh the page.",
        fields=(
            FieldSpec(
                slot="total-properties", path="meta.total_properties", template="{value} Properties"
            ),
            _currency_field("avg-price", "statistics.average_price_aed", "Avg: {value}"),
            FieldSpec(
                slot="stat-total",
                path="statistics.areas_covered",
                format=FormatterKind.COUNT,
                fallback="0",
            ),
            _currency_field("stat-avg-price", "statistics.average_price_aed"),
            _currency_field("stat-median-price", "statistics.median_price_aed"),
            _currency_field("stat-price-sqm", "statistics.average_price_per_sqm_aed"),
            _currency_field("stat-min-price", "statistics.min_price_aed"),
            _currency_field("stat-max-price", "statistics.max_price_aed"),
            FieldSpec(slot="data-source", path="meta.source", fallback="Dubai Real Estate Atlas"),
            FieldSpec(slot="data-timestamp", path="meta.timestamp", format=FormatterKind.DATE),
        ),
        repeated=(
            RepeatedSpec(
                slot="properties-container",
                path="properties",
                empty_message="No properties listed",
                row=RowTemplate(
                    css_class="property-card",
                    cells=(
                        CellSpec(path="title", tag="h3", css_class="property-title"),
                        CellSpec(path="property_type", css_class="property-type"),
                        CellSpec(
                            path="price", format=FormatterKind.CURRENCY, css_class="price-main"
                        ),
                        CellSpec(
                            path="price_per_sqm",
                            format=FormatterKind.NUMBER,
                            options=_WHOLE,
                            template="AED {value}/m²",
                            css_class="price-detail",
                        ),
                        CellSpec(path="location", css_class="detail-row"),
                        CellSpec(path="building", css_class="detail-row"),
                        CellSpec(path="bedrooms", template="{value} BR", css_class="detail-row"),
                        CellSpec(path="bathrooms", template="{value} Bath", css_class="detail-row"),
                        CellSpec(
                            path="area_sqm",
                            format=FormatterKind.MEASUREMENT,
                            options=FormatOptions(unit="m²", max_fraction_digits=0),
                            css_class="detail-row",
                        ),
                        CellSpec(
                            path="distance_to_burj_khalifa_km",
                            format=FormatterKind.MEASUREMENT,
                            options=FormatOptions(unit="km to Burj Khalifa", max_fraction_digits=1),
                            css_class="detail-row",
                            optional=True,
                        ),
                        CellSpec(
                            path="coordinates.lat",
                            format=FormatterKind.NUMBER,
                            options=_COORD,
                            label="Lat",
                            css_class="detail-row",
                            optional=True,
                        ),
                        CellSpec(
                            path="coordinates.lon",
                            format=FormatterKind.NUMBER,
                            options=_COORD,
                            label="Lon",
                            css_class="detail-row",
                            optional=True,
                        ),
                        CellSpec(
                            path="features",
                            kind=CellKind.ITEMS,
                            tag="div",
                            css_class="property-features",
                            item_class="feature-tag",
                            limit=3,
                        ),
                        CellSpec(
                            path="year_built", template="Built {value}", css_class="year-built"
                        ),
                        CellSpec(
                            path="ready_to_move",
                            format=FormatterKind.FLAG,
                            options=FormatOptions(labels=("Ready to Move", "Under Construction")),
                            flag_classes=("ready-badge", "under-construction"),
                        ),
                        CellSpec(
                            kind=CellKind.LINK,
                            href_path="url",
                            text="View Details →",
                            css_class="property-link",
                        ),
                    ),
                ),
            ),
            RepeatedSpec(
                slot="free-zones-container",
                path="free_zones",
                empty_message="No free zones listed",
                row=RowTemplate(
                    css_class="free-zone-card",
                    cells=(
                        CellSpec(path="name", tag="h3", css_class="zone-name"),
                        CellSpec(path="location", tag="div", css_class="zone-location"),
                        CellSpec(
                            path="cost_range_aed.min",
                            format=FormatterKind.CURRENCY,
                            label="Setup Cost from",
                            tag="div",
                            css_class="zone-cost",
                        ),
                        CellSpec(
                            path="cost_range_aed.max",
                            format=FormatterKind.CURRENCY,
                            label="to",
                            tag="div",
                            css_class="zone-cost",
                        ),
                        CellSpec(
                            path="benefits",
                            kind=CellKind.ITEMS,
                            label="Benefits:",
                            tag="div",
                            item_tag="li",
                            css_class="zone-benefits",
                        ),
                        CellSpec(
                            path="business_types",
                            kind=CellKind.ITEMS,
                            label="Business Types:",
                            tag="div",
                            css_class="zone-business-types",
                            item_class="biz-tag",
                        ),
                        CellSpec(
                            kind=CellKind.LINK,
                            href_path="website",
                            text="Visit Website →",
                            css_class="zone-link",
                        ),
                    ),
                ),
            ),
            RepeatedSpec(
                slot="landmarks-container",
                path="landmarks",
                iterate_values=True,
                empty_message="No landmarks listed",
                row=RowTemplate(
                    css_class="landmark-card",
                    cells=(
                        CellSpec(path="name", tag="h3", css_class="landmark-name"),
                        CellSpec(
                            path="coordinates.lat",
                            format=FormatterKind.NUMBER,
                            options=_COORD,
                            label="Lat:",
                            css_class="landmark-coords",
                        ),
                        CellSpec(
                            path="coordinates.lon",
                            format=FormatterKind.NUMBER,
                            options=_COORD,
                            label="Lon:",
                            css_class="landmark-coords",
                        ),
                    ),
                ),
            ),
        ),
    ),
)


UTILITY_INVOICE = Preset(
    locale="de-DE",
    currency_fraction_digits=2,
    source_path="data/invoice.json",
    view=ViewSpec(
        name="utility-invoice",
        description="Energy bill: contract, billing period, charge lines, energy mix.",
        status_slot="invoice-status",
        error_slot="invoice",
        error_message="Failed to load invoice data. Please refresh the page.",
        fields=(
            FieldSpec(slot="customer-name", path="customer.name"),
            FieldSpec(slot="account-number", path="customer.account_number"),
            FieldSpec(slot="contract-tariff", path="contract.tariff"),
            FieldSpec(
                slot="contract-term",
                path="contract.start",
                end_path="contract.end",
                format=FormatterKind.DATE_RANGE,
            ),
            FieldSpec(
                slot="billing-period",
                path="period.start",
                end_path="period.end",
                format=FormatterKind.DATE_RANGE,
            ),
            FieldSpec(slot="issue-date", path="invoice.issued", format=FormatterKind.DATE),
            FieldSpec(slot="due-date", path="invoice.due", format=FormatterKind.DATE),
            _currency_field("amount-due", "invoice.total"),
            FieldSpec(
                slot="consumption",
                path="usage.kwh",
                format=FormatterKind.MEASUREMENT,
                options=FormatOptions(unit="kWh", max_fraction_digits=1),
            ),
            FieldSpec(
                slot="tariff-benefits", path="contract.benefits", format=FormatterKind.JOINED_LIST
            ),
        ),
        repeated=(
            RepeatedSpec(
                slot="charges-table",
                path="charges",
                empty_message="No charges recorded",
                row=RowTemplate(
                    tag="tr",
                    cells=(
                        CellSpec(path="description", tag="td"),
                        CellSpec(
                            path="quantity",
                            format=FormatterKind.MEASUREMENT,
                            options=FormatOptions(unit="kWh", max_fraction_digits=2),
                            tag="td",
                        ),
                        CellSpec(path="unit_price", format=FormatterKind.CURRENCY, tag="td"),
                        CellSpec(path="amount", format=FormatterKind.CURRENCY, tag="td"),
                    ),
                ),
            ),
            RepeatedSpec(
                slot="energy-mix",
                path="energy_mix",
                empty_message="No energy mix disclosed",
                row=RowTemplate(
                    tag="li",
                    css_class="mix-entry",
                    cells=(
                        CellSpec(path="source", css_class="mix-source"),
                        CellSpec(
                            path="share",
                            format=FormatterKind.MEASUREMENT,
                            options=FormatOptions(unit="%", max_fraction_digits=1),
                            css_class="mix-share",
                        ),
                    ),
                ),
            ),
            RepeatedSpec(
                slot="benefits-list",
                path="contract.benefits",
                empty_message="No benefits listed",
                row=RowTemplate(tag="li", cells=(CellSpec(css_class="benefit"),)),
            ),
        ),
    ),
)


PRESETS: dict[str, Preset] = {
    REAL_ESTATE.view.name: REAL_ESTATE,
    UTILITY_INVOICE.view.name: UTILITY_INVOICE,
}


def get_preset(name: str) -> Preset:
    """Return the bundled preset called *name*.

    Raises:
        ValueError: If there is no such preset.
    """
    try:
        return PRESETS[name]
    except KeyError:
        known = ", ".join(sorted(PRESETS))
        msg = f"Unknown preset '{name}' (known: {known})"
        raise ValueError(msg) from None
