"""Command: render a JSON record into a view's slots."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import click

from viewbind.commands._base import VbCommand
from viewbind.config.presets import PRESETS

if TYPE_CHECKING:
    from viewbind.commands._context import AppContext

_RENDER_EXAMPLES = """\
  viewbind render --preset real-estate --source data/dubai-properties.json
  viewbind render --preset utility-invoice --source https://example.com/data/invoice.json
  viewbind --json render --source data/listing.json
  viewbind -v render   # [source] and [view] from viewbind.toml, with timing spans"""


def _resolve_location(app: AppContext, location: str) -> str:
    """Anchor relative file paths at the project root; URLs pass through."""
    if app.settings.source.base_url or location.startswith(("http://", "https://")):
        return location
    path = Path(location)
    if not path.is_absolute():
        path = app.settings.project_root / path
    return str(path)


@click.command(cls=VbCommand, examples=_RENDER_EXAMPLES)
@click.option(
    "--preset",
    "preset_name",
    type=click.Choice(sorted(PRESETS)),
    default=None,
    help="Bundled view to render into (overrides [view] preset).",
)
@click.option(
    "--source",
    "location",
    default=None,
    help="URL or file path of the JSON record (overrides [source] path).",
)
@click.pass_obj
def render(app: AppContext, preset_name: str | None, location: str | None) -> None:
    """Fetch a JSON record and render it into the view's slots."""
    from viewbind.config.models import preset_for
    from viewbind.infrastructure.source import source_for
    from viewbind.infrastructure.view import MemoryView
    from viewbind.services.binder import Binder
    from viewbind.services.page import PageRenderer

    settings = app.settings
    try:
        preset = preset_for(settings.view, preset_name)
        spec = settings.view.resolve(preset)
        formatter = settings.format.build_formatter(preset)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    location = location or settings.source.path or (preset.source_path if preset else None)
    if not location:
        msg = "No record source: pass --source or set [source] path in viewbind.toml"
        raise click.UsageError(msg)

    source = source_for(
        _resolve_location(app, location),
        base_url=settings.source.base_url,
        timeout=settings.source.timeout_seconds,
    )
    view = MemoryView.for_view(spec)
    result = asyncio.run(PageRenderer(source, Binder(spec, formatter), view).run())
    app.emit(result.model_copy(update={"data": {**result.data, "slots": view.snapshot()}}))
