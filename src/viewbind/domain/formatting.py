"""Defensive value-to-string formatters.

Every formatter maps a possibly-absent, possibly-malformed value to a display
string and never raises. Numeric formatters emit the locale's fallback glyph
for anything that is not a finite number; the date formatter instead echoes
an unparseable string back unchanged so the reader still sees the raw value.

Formatters accept either plain values or :class:`~viewbind.domain.record.Lookup`
results; absent and mistyped lookups are treated exactly like ``None``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from viewbind.domain.locales import LOCALES, LocaleProfile
from viewbind.domain.record import Lookup, is_number, is_sequence
from viewbind.domain.types import FormatterKind

logger = logging.getLogger(__name__)

DEFAULT_MAX_FRACTION_DIGITS = 3


class FormatOptions(BaseModel):
    """Per-field formatter parameters."""

    model_config = {"frozen": True}

    unit: str = ""
    max_fraction_digits: int | None = Field(default=None, ge=0)
    min_fraction_digits: int = Field(default=0, ge=0)
    labels: tuple[str, str] = ("Yes", "No")


def _unwrap(value: Any) -> Any:
    if isinstance(value, Lookup):
        return value.value if value.present else None
    return value


def _finite(value: Any) -> int | float | None:
    if not is_number(value):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def parse_date(text: str) -> date | None:
    """Parse an ISO-8601 date or datetime string; ``None`` if it is not one."""
    candidate = text.strip()
    if not candidate:
        return None
    try:
        return datetime.fromisoformat(candidate).date()
    except ValueError:
        return None


class Formatter:
    """Stateless formatter bound to one locale profile.

    Args:
        locale: Locale conventions (defaults to ``en-US``).
        currency_code: Overrides the profile's currency code.
        currency_fraction_digits: Fixed fraction digits for :meth:`currency`.
        fallback: Overrides the profile's fallback glyph.

    Raises:
        ValueError: If *currency_fraction_digits* is negative.
    """

    def __init__(
        self,
        locale: LocaleProfile | None = None,
        *,
        currency_code: str | None = None,
        currency_fraction_digits: int = 2,
        fallback: str | None = None,
    ) -> None:
        if currency_fraction_digits < 0:
            msg = f"currency_fraction_digits must be >= 0, got {currency_fraction_digits}"
            raise ValueError(msg)
        self.locale = locale or LOCALES["en-US"]
        self.currency_code = currency_code or self.locale.currency_code
        self.currency_fraction_digits = currency_fraction_digits
        self.fallback = self.locale.fallback if fallback is None else fallback

    def with_fallback(self, fallback: str) -> Formatter:
        """Copy of this formatter that emits *fallback* instead of the glyph."""
        return Formatter(
            self.locale,
            currency_code=self.currency_code,
            currency_fraction_digits=self.currency_fraction_digits,
            fallback=fallback,
        )

    # ── Numbers ──────────────────────────────────────────────────────

    def _digits(self, value: int | float, max_fd: int, min_fd: int) -> str:
        min_fd = max(min_fd, 0)
        max_fd = max(max_fd, min_fd)
        if isinstance(value, int):
            whole, frac = f"{abs(value):,}", "0" * min_fd
        else:
            whole, _, frac = f"{abs(value):,.{max_fd}f}".partition(".")
            frac = frac.rstrip("0").ljust(min_fd, "0")
        text = f"{whole}.{frac}" if frac else whole
        text = text.translate(
            str.maketrans({",": self.locale.group_separator, ".": self.locale.decimal_separator})
        )
        nonzero = any(ch in "123456789" for ch in whole + frac)
        return f"-{text}" if value < 0 and nonzero else text

    def currency(self, value: Any) -> str:
        amount = _finite(_unwrap(value))
        if amount is None:
            return self.fallback
        fd = self.currency_fraction_digits
        digits = self._digits(amount, fd, fd)
        sign = ""
        if digits.startswith("-"):
            sign, digits = "-", digits[1:]
        if self.locale.currency_first:
            return f"{sign}{self.currency_code} {digits}"
        return f"{sign}{digits} {self.currency_code}"

    def number(
        self,
        value: Any,
        max_fraction_digits: int | None = None,
        min_fraction_digits: int = 0,
    ) -> str:
        num = _finite(_unwrap(value))
        if num is None:
            return self.fallback
        if max_fraction_digits is None:
            max_fraction_digits = DEFAULT_MAX_FRACTION_DIGITS
        return self._digits(num, max_fraction_digits, min_fraction_digits)

    def measurement(
        self,
        value: Any,
        unit: str,
        max_fraction_digits: int | None = None,
        min_fraction_digits: int = 0,
    ) -> str:
        """Number followed by *unit*; the unit is never shown on its own."""
        if _finite(_unwrap(value)) is None:
            return self.fallback
        text = self.number(value, max_fraction_digits, min_fraction_digits)
        return f"{text} {unit}" if unit else text

    # ── Dates ────────────────────────────────────────────────────────

    def _long_date(self, day: date) -> str:
        return self.locale.date_pattern.format(
            month=self.locale.month_names[day.month - 1],
            day=day.day,
            year=day.year,
        )

    def date(self, value: Any) -> str:
        """Long-form date, or the original text when it cannot be parsed."""
        raw = _unwrap(value)
        if raw is None:
            return self.fallback
        if isinstance(raw, datetime):
            return self._long_date(raw.date())
        if isinstance(raw, date):
            return self._long_date(raw)
        if isinstance(raw, str):
            parsed = parse_date(raw)
            if parsed is not None:
                return self._long_date(parsed)
        logger.warning("Unparseable date value %r; showing it unchanged", raw)
        return raw if isinstance(raw, str) else str(raw)

    def date_range(self, start: Any, end: Any) -> str:
        first, last = _unwrap(start), _unwrap(end)
        if first is None or last is None:
            return self.fallback
        return f"{self.date(first)}{self.locale.range_separator}{self.date(last)}"

    # ── Text ─────────────────────────────────────────────────────────

    def raw(self, value: Any) -> str:
        """Scalars as plain text; blanks and containers fall back."""
        raw = _unwrap(value)
        if raw is None or isinstance(raw, Mapping) or is_sequence(raw):
            return self.fallback
        if isinstance(raw, bool):
            return "true" if raw else "false"
        if isinstance(raw, float) and raw.is_integer():
            return str(int(raw))
        text = str(raw)
        return text if text.strip() else self.fallback

    def joined_list(self, items: Any) -> str:
        """Natural-language join: ``A``, ``A and B``, ``A, B and C``."""
        seq = _unwrap(items)
        if not is_sequence(seq):
            return self.fallback
        parts = [self.raw(item) for item in seq if item is not None]
        if not parts:
            return self.fallback
        if len(parts) == 1:
            return parts[0]
        head = self.locale.list_separator.join(parts[:-1])
        return f"{head} {self.locale.conjunction} {parts[-1]}"

    def count(self, items: Any) -> str:
        seq = _unwrap(items)
        return str(len(seq)) if is_sequence(seq) else self.fallback

    def flag(self, value: Any, labels: tuple[str, str] = ("Yes", "No")) -> str:
        raw = _unwrap(value)
        if not isinstance(raw, bool):
            return self.fallback
        return labels[0] if raw else labels[1]

    # ── Dispatch ─────────────────────────────────────────────────────

    def format(
        self,
        kind: FormatterKind,
        value: Any,
        options: FormatOptions | None = None,
        *,
        end: Any = None,
        fallback: str | None = None,
    ) -> str:
        """Route *value* through the formatter named by *kind*.

        Args:
            kind: Which formatter to apply.
            value: A plain value or a Lookup.
            options: Unit, fraction digits and flag labels.
            end: Second endpoint for ``date_range``.
            fallback: Field-specific replacement for the fallback glyph.
        """
        fmt = self if fallback is None else self.with_fallback(fallback)
        opts = options or FormatOptions()
        match kind:
            case FormatterKind.CURRENCY:
                return fmt.currency(value)
            case FormatterKind.NUMBER:
                return fmt.number(value, opts.max_fraction_digits, opts.min_fraction_digits)
            case FormatterKind.MEASUREMENT:
                return fmt.measurement(
                    value, opts.unit, opts.max_fraction_digits, opts.min_fraction_digits
                )
            case FormatterKind.DATE:
                return fmt.date(value)
            case FormatterKind.DATE_RANGE:
                return fmt.date_range(value, end)
            case FormatterKind.JOINED_LIST:
                return fmt.joined_list(value)
            case FormatterKind.COUNT:
                return fmt.count(value)
            case FormatterKind.FLAG:
                return fmt.flag(value, opts.labels)
        return fmt.raw(value)
