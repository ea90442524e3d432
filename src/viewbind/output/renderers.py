"""Rich renderers for RenderResult, one per ``result.op``.

:func:`render_result` picks the renderer (ops without one get a plain
key/value listing), draws into a buffered console and returns the text.
Under CliRunner or a pipe Rich emits no ANSI codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.padding import Padding
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from viewbind.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from viewbind.services.result import RenderResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: RenderResult, *, verbose: bool = False) -> str:
    """Draw *result* and return it as text; meta is shown only when *verbose*."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    if verbose:
        _render_meta(console, result)

    return get_output(console).rstrip("\n")


def render_quiet(result: RenderResult) -> str:
    """Render minimal output for ``--quiet`` mode: one ``slot<TAB>text`` per field."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    fields = result.data.get("fields")
    if isinstance(fields, dict) and fields:
        return "\n".join(f"{slot}\t{text}" for slot, text in fields.items())

    items = result.data.get("items")
    if isinstance(items, list) and items:
        return "\n".join(str(item.get("name", "")) for item in items if isinstance(item, dict))

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: RenderResult) -> None:
    label = Text("OK", style="vb.ok")
    op = Text(f"  {result.op}", style="vb.op")
    view = result.data.get("view")
    suffix = Text(f"  ({view})", style="vb.key") if view else Text("")
    console.print(label, op, suffix, sep="")


def _field(console: Console, key: str, value: Any) -> None:
    console.print(Text(f"  {key}: ", style="vb.key"), Text(str(value)), sep="")


# Span durations above each threshold (ms) get the paired style.
_TIMING_STYLES = ((1000.0, "bold red"), (100.0, "yellow"))


def _span_label(span: dict[str, Any]) -> Text:
    duration = float(span.get("duration_ms", 0.0))
    style = next((s for limit, s in _TIMING_STYLES if duration > limit), "dim")
    label = Text(f"{duration:>8.2f}ms", style=style)
    label.append(f"  {span.get('name', '?')}")
    notes = span.get("annotations") or {}
    if notes:
        label.append("  (" + ", ".join(f"{k}={v}" for k, v in notes.items()) + ")", style="dim")
    return label


def _span_tree(span: dict[str, Any], tree: Tree | None = None) -> Tree:
    label = _span_label(span)
    node = Tree(label, guide_style="dim") if tree is None else tree.add(label)
    for child in span.get("children", []):
        _span_tree(child, node)
    return node


def _render_meta(console: Console, result: RenderResult) -> None:
    """Verbose-only trailer: meta entries, telemetry drawn as a tree."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        if key == "telemetry" and isinstance(value, dict):
            console.print(Padding(_span_tree(value), (0, 0, 0, 4)))
        else:
            console.print(Text(f"    {key}: {value}"))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: RenderResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="vb.error")
    op = Text(f"  {result.op}", style="vb.op")
    console.print(label, op, Text(" — "), Text(msg), sep="")

    status = result.data.get("status")
    if status:
        _field(console, "status", status)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}", markup=False)


# ── Render pass ───────────────────────────────────────────────────────


def _render_page(result: RenderResult, console: Console, *, verbose: bool = False) -> None:
    """Render the slots written by one pass: text fields, then sections."""
    _status_line(console, result)

    fields: dict[str, str] = result.data.get("fields", {})
    if fields:
        table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
        table.add_column("Slot", style="vb.slot", no_wrap=True)
        table.add_column("Text")
        for slot, text in fields.items():
            table.add_row(slot, Text(text))
        console.print(table)

    sections: dict[str, int] = result.data.get("sections", {})
    slots: dict[str, Any] = result.data.get("slots", {})
    for slot, count in sections.items():
        summary = Text(f"{count} rows") if count else Text("empty", style="vb.empty")
        console.print(Text(f"  {slot}: ", style="vb.key"), summary, sep="")
        if verbose:
            for markup in slots.get(slot, []):
                console.print(Text(f"    {markup}", style="vb.markup"), soft_wrap=True)


# ── Presets ───────────────────────────────────────────────────────────


def _render_presets(result: RenderResult, console: Console, *, verbose: bool = False) -> None:
    items: list[dict[str, Any]] = result.data.get("items", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Name", style="vb.slot", no_wrap=True)
    table.add_column("Locale")
    table.add_column("Source")
    table.add_column("Slots", justify="right")
    if verbose:
        table.add_column("Description", style="dim")
    for item in items:
        row = [
            str(item.get("name", "")),
            str(item.get("locale", "")),
            str(item.get("source_path", "")),
            str(item.get("slots", "")),
        ]
        if verbose:
            row.append(str(item.get("description", "")))
        table.add_row(*row)
    console.print(table)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: RenderResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if key != "view":
            _field(console, key, value)


_OP_RENDERERS = {
    "render": _render_page,
    "presets": _render_presets,
}
