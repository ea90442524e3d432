"""Command: list the bundled view presets."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from viewbind.commands._base import VbCommand
from viewbind.config.presets import PRESETS
from viewbind.services.result import RenderResult

if TYPE_CHECKING:
    from viewbind.commands._context import AppContext


@click.command(
    cls=VbCommand,
    examples="""\
  viewbind presets
  viewbind -v presets
  viewbind --json presets""",
)
@click.pass_obj
def presets(app: AppContext) -> None:
    """List bundled view presets."""
    items = [
        {
            "name": name,
            "locale": preset.locale,
            "source_path": preset.source_path,
            "slots": len(preset.view.slots),
            "description": preset.view.description,
        }
        for name, preset in sorted(PRESETS.items())
    ]
    app.emit(RenderResult(ok=True, op="presets", data={"items": items}))
