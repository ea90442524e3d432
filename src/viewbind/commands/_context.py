"""Per-invocation state handed to every subcommand.

The root group builds one AppContext from the merged settings; commands
receive it with ``@click.pass_obj`` and hand their result to ``emit``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from viewbind.config.logging import configure_logging
from viewbind.output.formatters import OutputSettings, format_result
from viewbind.services.telemetry import enable_telemetry

if TYPE_CHECKING:
    from viewbind.config.settings import ViewbindSettings
    from viewbind.services.result import RenderResult


class AppContext:
    """Settings plus output handling for one CLI run; sets up logging on creation."""

    def __init__(self, settings: ViewbindSettings) -> None:
        self.settings = settings
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            enable_telemetry()

    def emit(self, result: RenderResult) -> None:
        """Write *result* in the selected mode.

        A successful render goes to stdout with its warnings on stderr. A
        failed one goes to stderr and the process exits with status 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
