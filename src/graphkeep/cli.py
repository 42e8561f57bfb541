"""Root CLI group for graphkeep with global flags and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from graphkeep import __version__
from graphkeep.commands import register_commands
from graphkeep.commands._context import AppContext
from graphkeep.config.settings import GkSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="graphkeep")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Storage file to use (overrides storage.path).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    db_path: Path | None,
) -> None:
    """graphkeep — persist node/edge diagrams in SQLite files."""
    flags: dict[str, object] = {
        "json_output": json_output,
        "quiet": quiet,
        "verbose": verbose,
        "log_json": log_json,
    }
    if db_path is not None:
        flags["db_path"] = db_path
    settings = GkSettings.from_cli(config_path=config_path, **flags)
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
