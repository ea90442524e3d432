"""Typed row structures and their HTML serialisation.

Repeated sections are built in two steps: the binder extracts data into
:class:`Row` / :class:`Cell` structs, then :func:`serialize_row` turns them
into markup. Every piece of record-derived text and every attribute value is
escaped here and nowhere else, so rows are injection-safe by construction.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass

TAG_PATTERN = re.compile(r"^[a-z][a-z0-9]*$")

_SAFE_SCHEMES = ("http://", "https://", "mailto:")


@dataclass(frozen=True)
class Cell:
    """One rendered piece of a row."""

    text: str = ""
    tag: str = "span"
    css_class: str = ""
    label: str = ""
    href: str | None = None
    items: tuple[str, ...] = ()
    item_tag: str = "span"
    item_class: str = ""
    colspan: int | None = None


@dataclass(frozen=True)
class Row:
    """One generated child of a container slot."""

    cells: tuple[Cell, ...]
    tag: str = "div"
    css_class: str = ""


def escape(text: str) -> str:
    """HTML-entity-encode text (quotes included, safe for attributes)."""
    return html.escape(text, quote=True)


def safe_href(url: str) -> str:
    """Allow absolute http(s)/mailto and relative URLs; anything else becomes ``#``."""
    candidate = url.strip()
    lowered = candidate.lower()
    if lowered.startswith(_SAFE_SCHEMES):
        return candidate
    if ":" in candidate.split("/", 1)[0]:
        return "#"
    return candidate


def _open(tag: str, css_class: str, extra: str = "") -> str:
    attrs = f' class="{escape(css_class)}"' if css_class else ""
    return f"<{tag}{attrs}{extra}>"


def serialize_cell(cell: Cell) -> str:
    """Serialise one cell to markup."""
    if cell.href is not None:
        extra = f' href="{escape(safe_href(cell.href))}" target="_blank" rel="noopener noreferrer"'
        return f"{_open('a', cell.css_class, extra)}{escape(cell.text)}</a>"

    extra = f' colspan="{cell.colspan}"' if cell.colspan else ""
    body = f"<strong>{escape(cell.label)}</strong> " if cell.label else ""
    if cell.items:
        items = "".join(
            f"{_open(cell.item_tag, cell.item_class)}{escape(item)}</{cell.item_tag}>"
            for item in cell.items
        )
        body += f"<ul>{items}</ul>" if cell.item_tag == "li" else items
    else:
        body += escape(cell.text)
    return f"{_open(cell.tag, cell.css_class, extra)}{body}</{cell.tag}>"


def serialize_row(row: Row) -> str:
    """Serialise a row and all of its cells."""
    inner = "".join(serialize_cell(cell) for cell in row.cells)
    return f"{_open(row.tag, row.css_class)}{inner}</{row.tag}>"


def empty_row(message: str, *, tag: str = "div", columns: int = 1) -> Row:
    """The single placeholder row written when a repeated section has no data."""
    if tag == "tr":
        cell = Cell(text=message, tag="td", colspan=columns if columns > 1 else None)
    else:
        cell = Cell(text=message, tag="span")
    return Row(cells=(cell,), tag=tag, css_class="empty-state")


def banner(title: str, message: str) -> str:
    """Error banner markup prepended to the error container on load failure."""
    return (
        '<div class="error-message" role="alert">'
        f"<h2>{escape(title)}</h2><p>{escape(message)}</p>"
        "</div>"
    )
