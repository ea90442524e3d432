"""Fixed locale profiles for display formatting.

A profile carries everything the formatters need for one locale: digit
grouping, currency placement, list conjunction and long-form date layout.
There is no catalogue lookup; each Formatter is built with one profile.
"""

from __future__ import annotations

from pydantic import BaseModel

ENGLISH_MONTHS: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

GERMAN_MONTHS: tuple[str, ...] = (
    "Januar",
    "Februar",
    "März",
    "April",
    "Mai",
    "Juni",
    "Juli",
    "August",
    "September",
    "Oktober",
    "November",
    "Dezember",
)

FALLBACK_GLYPH = "—"


class LocaleProfile(BaseModel):
    """Formatting conventions for one locale."""

    model_config = {"frozen": True}

    tag: str
    group_separator: str = ","
    decimal_separator: str = "."
    currency_code: str = "USD"
    currency_first: bool = True
    list_separator: str = ", "
    conjunction: str = "and"
    month_names: tuple[str, ...] = ENGLISH_MONTHS
    date_pattern: str = "{month} {day}, {year}"
    range_separator: str = " – "
    fallback: str = FALLBACK_GLYPH


LOCALES: dict[str, LocaleProfile] = {
    "en-US": LocaleProfile(tag="en-US"),
    "en-AE": LocaleProfile(tag="en-AE", currency_code="AED"),
    "en-GB": LocaleProfile(tag="en-GB", currency_code="GBP", date_pattern="{day} {month} {year}"),
    "de-DE": LocaleProfile(
        tag="de-DE",
        group_separator=".",
        decimal_separator=",",
        currency_code="EUR",
        currency_first=False,
        conjunction="und",
        month_names=GERMAN_MONTHS,
        date_pattern="{day}. {month} {year}",
    ),
}


def get_locale(tag: str) -> LocaleProfile:
    """Return the built-in profile for *tag*.

    Raises:
        ValueError: If no profile is registered under *tag*.
    """
    try:
        return LOCALES[tag]
    except KeyError:
        known = ", ".join(sorted(LOCALES))
        msg = f"Unknown locale '{tag}' (known: {known})"
        raise ValueError(msg) from None
