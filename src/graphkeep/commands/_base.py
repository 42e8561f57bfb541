"""Click command class with an ``--examples`` flag.

Usage examples live beside each command instead of in its help text,
so ``--help`` stays short. ``--examples`` is eager: it prints and exits
before the command body runs, so no storage file is opened.
"""

from __future__ import annotations

import textwrap
from typing import Any

import click


def _examples_option(examples: str) -> click.Option:
    def _show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(textwrap.indent(examples, "  "))
        ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=_show,
        help="Show usage examples and exit.",
    )


class GkCommand(click.Command):
    """A command that accepts ``examples=`` (one invocation per line)."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = textwrap.dedent(examples).strip("\n") if examples else None
        if self.examples:
            self.params.append(_examples_option(self.examples))
