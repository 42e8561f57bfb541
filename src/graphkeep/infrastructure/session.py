"""GraphSession — owns the engine for exactly one storage file.

The session is the single handle an editor keeps: it opens a file
(preparing its schema), saves and loads snapshots through the sync
engine and loader, and switches to another file by fully disposing the
current engine before opening the next. Nothing about one file (engine,
pool, schema report) survives a switch.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import SQLAlchemyError

from graphkeep.config.models import StorageConfig
from graphkeep.infrastructure.catalog import discover_graphs
from graphkeep.infrastructure.database.engine import (
    SchemaReport,
    create_db_engine,
    ensure_schema,
)
from graphkeep.infrastructure.errors import (
    DeleteError,
    LoadError,
    SaveError,
    SessionClosedError,
    StorageOpenError,
)
from graphkeep.infrastructure.loader import read_snapshot
from graphkeep.infrastructure.sync import SyncEngine, SyncStats

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import TracebackType

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from graphkeep.domain.snapshot import GraphSnapshot, GraphSummary

logger = logging.getLogger(__name__)

SIDECAR_SUFFIXES = ("-wal", "-shm", "-journal")


def _same_file(a: Path, b: Path) -> bool:
    return a.resolve() == b.resolve()


class GraphSession:
    """One open storage file at a time.

    Usage::

        with GraphSession() as session:
            session.open(Path("diagram.db"))
            session.save_graph(snapshot)
            session.switch_file(Path("other.db"))
            restored = session.load_graph()
    """

    def __init__(
        self,
        settings: StorageConfig | None = None,
        *,
        sync_engine: SyncEngine | None = None,
    ) -> None:
        self._settings = settings or StorageConfig()
        self._sync = sync_engine or SyncEngine()
        self._engine: Engine | None = None
        self._path: Path | None = None
        self._schema_report: SchemaReport | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def path(self) -> Path | None:
        """The open storage file, or None."""
        return self._path

    @property
    def settings(self) -> StorageConfig:
        return self._settings

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        """The engine of the open file.

        Raises:
            SessionClosedError: No file is open.
        """
        if self._engine is None:
            raise SessionClosedError()
        return self._engine

    @property
    def schema_report(self) -> SchemaReport | None:
        """What schema preparation did when the current file was opened."""
        return self._schema_report

    @property
    def warnings(self) -> list[str]:
        """Warnings that apply to every operation on the current file."""
        if self._schema_report is None:
            return []
        return self._schema_report.warnings

    def open(self, path: Path) -> None:
        """Open *path*, creating the file and its schema if needed.

        Any file already open is closed first. On failure the session is
        left closed.

        Raises:
            StorageOpenError: The directory or file cannot be created or
                read, or the schema cannot be prepared.
        """
        self.close()
        path = Path(path)
        engine: Engine | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            engine = create_db_engine(
                path,
                journal_mode=self._settings.journal_mode,
                enforce_foreign_keys=self._settings.enforce_foreign_keys,
            )
            report = ensure_schema(engine, backup_legacy=self._settings.backup_legacy)
        except (OSError, SQLAlchemyError) as exc:
            if engine is not None:
                engine.dispose()
            raise StorageOpenError(path, exc) from exc

        self._engine = engine
        self._path = path
        self._schema_report = report
        logger.debug("Opened storage file %s (created=%s)", path, report.created)

    def switch_file(self, new_path: Path) -> None:
        """Close the current file completely, then open *new_path*."""
        previous = self._path
        self.close()
        self.open(new_path)
        logger.debug("Switched storage file %s -> %s", previous, new_path)

    def close(self) -> None:
        """Dispose the engine and forget the file. Idempotent."""
        if self._engine is not None:
            self._engine.dispose()
            logger.debug("Closed storage file %s", self._path)
        self._engine = None
        self._path = None
        self._schema_report = None

    def __enter__(self) -> GraphSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Yield a connection inside one transaction.

        Commits when the block exits normally and rolls back on any
        exception, which is re-raised unchanged.
        """
        with self.engine.begin() as conn:
            yield conn

    # ------------------------------------------------------------------
    # Boundary operations
    # ------------------------------------------------------------------

    def save_graph(self, snapshot: GraphSnapshot) -> SyncStats:
        """Persist *snapshot* as a minimal diff in a single transaction.

        Raises:
            SessionClosedError: No file is open.
            SaveError: The transaction failed; storage is unchanged.
        """
        engine = self.engine
        try:
            with engine.begin() as conn:
                return self._sync.apply(conn, snapshot)
        except Exception as exc:
            raise SaveError(self._path, exc) from exc

    def load_graph(self) -> GraphSnapshot:
        """Read the whole graph of the open file.

        Raises:
            SessionClosedError: No file is open.
            LoadError: Reading failed or a row could not be decoded.
        """
        engine = self.engine
        try:
            with engine.connect() as conn:
                return read_snapshot(conn)
        except Exception as exc:
            raise LoadError(self._path, exc) from exc

    def list_graphs(
        self,
        directory: Path | None = None,
        *,
        pattern: str = "*.db",
    ) -> tuple[list[GraphSummary], list[str]]:
        """Summarize the graph files in *directory* (default: the open file's).

        Each file is read through its own short-lived read-only engine;
        the open file's engine is never used or replaced.
        """
        if directory is None:
            if self._path is None:
                raise SessionClosedError()
            directory = self._path.parent
        return discover_graphs(directory, pattern=pattern)

    def delete_file(self, path: Path) -> bool:
        """Remove the storage file *path* with its WAL and shared-memory sidecars.

        The session is closed first when *path* is the open file. Returns
        False when no file existed at *path*.

        Raises:
            DeleteError: The file exists but could not be removed.
        """
        path = Path(path)
        if self._path is not None and _same_file(self._path, path):
            self.close()
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise DeleteError(path, exc) from exc
        for suffix in SIDECAR_SUFFIXES:
            sidecar = path.with_name(path.name + suffix)
            try:
                sidecar.unlink(missing_ok=True)
            except OSError as exc:
                raise DeleteError(sidecar, exc) from exc
        logger.debug("Deleted storage file %s", path)
        return True

    def __repr__(self) -> str:
        state: Any = self._path if self._path is not None else "closed"
        return f"GraphSession({state})"
