"""Commands: JSON import, export and directory migration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import click

from graphkeep.commands._base import GkCommand

if TYPE_CHECKING:
    from graphkeep.commands._context import AppContext


@click.command(
    "import",
    cls=GkCommand,
    examples="""\
  graphkeep import flow.json
  graphkeep --db diagrams/flow.db import flow.json""",
)
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def import_cmd(app: AppContext, file: Path) -> None:
    """Replace the stored graph with the graph-data-v1 JSON in FILE."""
    from graphkeep.services.exchange import ExchangeService

    app.emit(ExchangeService(app.session).import_json(file))


@click.command(
    "export",
    cls=GkCommand,
    examples="""\
  graphkeep export > flow.json
  graphkeep export --output backups/flow.json""",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the document here instead of stdout.",
)
@click.pass_obj
def export_cmd(app: AppContext, output: Path | None) -> None:
    """Export the stored graph as graph-data-v1 JSON."""
    from graphkeep.services.exchange import ExchangeService

    result = ExchangeService(app.session).export_json(output)
    if output is None and result.ok and not app.settings.json_output:
        click.echo(json.dumps(result.data["document"], indent=2, ensure_ascii=False))
        for warning in result.warnings:
            click.echo(f"WARNING: {warning}", err=True)
        return
    app.emit(result)


@click.command(
    cls=GkCommand,
    examples="""\
  graphkeep migrate exports/
  graphkeep migrate --pattern 'graph-*.json' exports/
  graphkeep migrate --output-dir diagrams/ exports/""",
)
@click.argument("directory", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--pattern", default="*.json", show_default=True, help="Glob for source documents.")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Where the .db files go (default: DIRECTORY).",
)
@click.pass_obj
def migrate(app: AppContext, directory: Path, pattern: str, output_dir: Path | None) -> None:
    """Import every JSON document in DIRECTORY into its own storage file.

    Each document becomes ``<stem>.db``. A document that fails is
    reported and skipped; the others still migrate.
    """
    from graphkeep.infrastructure.session import GraphSession
    from graphkeep.services.exchange import ExchangeService

    svc = ExchangeService(GraphSession(app.settings.storage))
    app.emit(svc.migrate_directory(directory, pattern=pattern, output_dir=output_dir))
