"""Click command class for viewbind subcommands.

``VbCommand(examples=...)`` adds an eager ``--examples`` flag that prints
the given invocations and exits before any arguments are validated.
"""

from __future__ import annotations

from typing import Any

import click


def _show_examples(examples: str) -> Any:
    def callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    return callback


class VbCommand(click.Command):
    """A ``click.Command`` with an optional ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=_show_examples(examples),
                    help="Show usage examples.",
                )
            )
