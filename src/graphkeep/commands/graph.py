"""Commands: inspect the stored graph, discover and delete graph files."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from graphkeep.commands._base import GkCommand

if TYPE_CHECKING:
    from graphkeep.commands._context import AppContext


@click.command(
    cls=GkCommand,
    examples="""\
  graphkeep show
  graphkeep show --nodes
  graphkeep --db diagrams/flow.db show --nodes
  graphkeep --json show""",
)
@click.option("--nodes", "show_nodes", is_flag=True, help="List every node in a table.")
@click.pass_obj
def show(app: AppContext, show_nodes: bool) -> None:
    """Load the graph and summarise it."""
    from graphkeep.services.graph import GraphService

    app.emit(GraphService(app.session).load(), show_nodes=show_nodes)


@click.command(
    "list",
    cls=GkCommand,
    examples="""\
  graphkeep list
  graphkeep list diagrams/
  graphkeep list --pattern '*.graph.db' diagrams/
  graphkeep -q list diagrams/""",
)
@click.argument(
    "directory",
    required=False,
    type=click.Path(file_okay=False, path_type=Path),
)
@click.option("--pattern", default=None, help="Glob for storage files (default from config).")
@click.pass_obj
def list_cmd(app: AppContext, directory: Path | None, pattern: str | None) -> None:
    """List the graph files in DIRECTORY, most recently modified first.

    Defaults to the directory of the configured storage file. Files are
    read without opening them as the active storage file.
    """
    from graphkeep.infrastructure.session import GraphSession
    from graphkeep.services.graph import GraphService

    glob = pattern or app.settings.discovery.pattern
    target = directory if directory is not None else app.settings.storage_path.parent
    # Discovery needs no open file; an unopened session never creates one.
    svc = GraphService(GraphSession(app.settings.storage))
    app.emit(svc.list_graphs(target, pattern=glob))


@click.command(
    cls=GkCommand,
    examples="""\
  graphkeep delete diagrams/old.db
  graphkeep delete --yes diagrams/old.db""",
)
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("-y", "--yes", is_flag=True, help="Delete without asking for confirmation.")
@click.pass_obj
def delete(app: AppContext, path: Path, yes: bool) -> None:
    """Delete the storage file PATH and its WAL sidecars."""
    from graphkeep.infrastructure.session import GraphSession
    from graphkeep.services.graph import GraphService

    if not yes and not click.confirm(f"Delete {path}?"):
        click.echo("Cancelled.")
        return
    app.emit(GraphService(GraphSession(app.settings.storage)).delete(path))
