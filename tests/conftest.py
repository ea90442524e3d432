"""Shared pytest fixtures and test helpers for viewbind tests."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import httpx
import pytest
from click.testing import CliRunner

from viewbind.domain.formatting import Formatter
from viewbind.domain.locales import get_locale
from viewbind.services.telemetry import _current_span, disable_telemetry


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Keep env-based config, logging and telemetry state from leaking between tests."""
    monkeypatch.delenv("VIEWBIND_CONFIG", raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    package = logging.getLogger("viewbind")
    package_level = package.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    package.setLevel(package_level)
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def formatter() -> Formatter:
    """en-US formatter with the default 2-digit currency precision."""
    return Formatter()


@pytest.fixture
def aed_formatter() -> Formatter:
    """en-AE formatter rounding currency to whole dirhams."""
    return Formatter(get_locale("en-AE"), currency_fraction_digits=0)


# ---------------------------------------------------------------------------
# Sample documents
# ---------------------------------------------------------------------------


@pytest.fixture
def property_document() -> dict[str, Any]:
    """A trimmed real-estate dataset with two listings."""
    return {
        "meta": {
            "total_properties": 2,
            "source": "Dubai Land Department",
            "timestamp": "2026-03-14T09:30:00Z",
        },
        "statistics": {
            "areas_covered": ["Marina", "Downtown", "JLT"],
            "average_price_aed": 2250000,
            "median_price_aed": 2250000,
            "average_price_per_sqm_aed": 18500.4,
            "min_price_aed": 1500000,
            "max_price_aed": 3000000,
        },
        "properties": [
            {
                "title": "Marina View <Penthouse>",
                "property_type": "Apartment",
                "price": 1500000,
                "price_per_sqm": 15000,
                "location": "Marina",
                "building": "Marina Gate",
                "bedrooms": 2,
                "bathrooms": 3,
                "area_sqm": 100,
                "distance_to_burj_khalifa_km": 24.5,
                "coordinates": {"lat": 25.0805, "lon": 55.1403},
                "features": ["Sea view", "Gym", "Pool", "Parking"],
                "year_built": 2019,
                "ready_to_move": True,
                "url": "https://example.com/listing/1",
            },
            {
                "title": "Downtown Loft",
                "property_type": "Loft",
                "price": 3000000,
                "price_per_sqm": 22000,
                "location": "Downtown",
                "building": "Boulevard Point",
                "bedrooms": 1,
                "bathrooms": 1,
                "area_sqm": 136.4,
                "features": [],
                "year_built": 2027,
                "ready_to_move": False,
                "url": "javascript:alert(1)",
            },
        ],
        "free_zones": [
            {
                "name": "DMCC",
                "location": "JLT",
                "cost_range_aed": {"min": 15000, "max": 50000},
                "benefits": ["0% tax", "100% ownership"],
                "business_types": ["Trading", "Services"],
                "website": "https://www.dmcc.ae",
            }
        ],
        "landmarks": {
            "burj_khalifa": {
                "name": "Burj Khalifa",
                "coordinates": {"lat": 25.1972, "lon": 55.2744},
            },
            "palm": {"name": "Palm Jumeirah", "coordinates": {"lat": 25.1124, "lon": 55.139}},
        },
    }


@pytest.fixture
def invoice_document() -> dict[str, Any]:
    """A utility invoice with three charge lines."""
    return {
        "customer": {"name": "Erika Muster", "account_number": "DE-4711"},
        "contract": {
            "tariff": "Öko Strom 12",
            "start": "2026-01-01",
            "end": "2026-12-31",
            "benefits": ["Price guarantee", "Green energy", "Monthly cancellation"],
        },
        "period": {"start": "2026-09-01", "end": "2026-09-30"},
        "invoice": {"issued": "2026-10-02", "due": "2026-10-16", "total": 1234.5},
        "usage": {"kwh": 312.4},
        "charges": [
            {"description": "Energy", "quantity": 312.25, "unit_price": 0.32, "amount": 99.92},
            {"description": "Base fee", "quantity": 1, "unit_price": 12.5, "amount": 12.5},
            {"description": "Grid", "quantity": 312.25, "unit_price": 0.09, "amount": 28.1},
        ],
        "energy_mix": [
            {"source": "Wind", "share": 61.5},
            {"source": "Solar", "share": 38.5},
        ],
    }


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, document: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def _json_client(
    document: Any = None,
    *,
    status: int = 200,
    body: bytes | None = None,
) -> httpx.AsyncClient:
    """AsyncClient whose every request is answered by a MockTransport."""

    def handler(request: httpx.Request) -> httpx.Response:
        if body is not None:
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=document)

    return httpx.AsyncClient(
        base_url="https://static.example.com/", transport=httpx.MockTransport(handler)
    )


@pytest.fixture
def write_json() -> Callable[[Path, Any], Path]:
    """Write a document as JSON to a path and return the path."""
    return _write_json


@pytest.fixture
def json_client() -> Callable[..., httpx.AsyncClient]:
    """Factory for MockTransport-backed clients: ``json_client(doc, status=404)``."""
    return _json_client
