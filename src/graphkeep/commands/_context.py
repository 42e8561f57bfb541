"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Opens the storage file lazily and centralizes
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from graphkeep.config.logging import configure_logging
from graphkeep.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from graphkeep.config.settings import GkSettings
    from graphkeep.infrastructure.session import GraphSession
    from graphkeep.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The session is opened on first use so ``--help`` and ``--version``
    never touch the storage file.
    """

    def __init__(self, settings: GkSettings) -> None:
        self.settings = settings
        self._session: GraphSession | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def session(self) -> GraphSession:
        """The session on ``settings.storage_path`` (opened lazily).

        A storage file that cannot be opened is reported like any other
        failed operation: error on stderr, exit code 1.
        """
        if self._session is None:
            from graphkeep.infrastructure.errors import StorageOpenError
            from graphkeep.infrastructure.session import GraphSession

            session = GraphSession(self.settings.storage)
            try:
                session.open(self.settings.storage_path)
            except StorageOpenError as exc:
                click.echo(f"ERROR: open — {exc}", err=True)
                raise SystemExit(1) from exc
            self._session = session
        return self._session

    def close(self) -> None:
        """Release the storage file, if one was opened."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def emit(self, result: ServiceResult, *, show_nodes: bool = False) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
            show_nodes=show_nodes,
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
