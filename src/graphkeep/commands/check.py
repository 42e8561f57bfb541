"""Command: graph integrity report."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from graphkeep.commands._base import GkCommand

if TYPE_CHECKING:
    from graphkeep.commands._context import AppContext


@click.command(
    cls=GkCommand,
    examples="""\
  graphkeep check
  graphkeep check --errors-only
  graphkeep --json check""",
)
@click.option("--errors-only", is_flag=True, help="Hide warnings (self-loops, isolated nodes).")
@click.pass_obj
def check(app: AppContext, errors_only: bool) -> None:
    """Report dangling edges, self-loops and isolated nodes. Never modifies storage."""
    from graphkeep.services.check import CheckService

    svc = CheckService(app.session)
    app.emit(svc.check(min_severity="error" if errors_only else "warning"))
