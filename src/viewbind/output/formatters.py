"""Rich/JSON output helpers.

The CLI renders RenderResult for humans (Rich tables) or machines (--json).
The formatter layer adapts a RenderResult to the requested output mode.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from viewbind.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from viewbind.services.result import RenderResult


class OutputSettings(BaseModel):
    """Output mode flags, decoupled from the full settings object."""

    model_config = {"frozen": True}

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: RenderResult, *, settings: OutputSettings | None = None) -> str:
    """Format a RenderResult for display.

    JSON wins over quiet, quiet wins over the default Rich rendering.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
