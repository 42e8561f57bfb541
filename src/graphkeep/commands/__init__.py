"""Subcommand modules for graphkeep.

Provides register_commands() which uses deferred imports to keep
``graphkeep --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from graphkeep.commands.check import check
    from graphkeep.commands.exchange import export_cmd, import_cmd, migrate
    from graphkeep.commands.graph import delete, list_cmd, show

    cli.add_command(show)
    cli.add_command(list_cmd)
    cli.add_command(import_cmd)
    cli.add_command(export_cmd)
    cli.add_command(migrate)
    cli.add_command(delete)
    cli.add_command(check)
