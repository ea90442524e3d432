"""Subcommand modules for viewbind.

Provides register_commands() which uses deferred imports to keep
``viewbind --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from viewbind.commands.presets import presets
    from viewbind.commands.render import render

    cli.add_command(render)
    cli.add_command(presets)
