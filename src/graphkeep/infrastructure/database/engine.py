"""Database engine setup and schema preparation for graph storage files.

SQLAlchemy Core (not ORM) is used because every operation is a bulk
diff over three small tables; identity maps would only get in the way.
"""

from __future__ import annotations

import logging
import shutil
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import URL, Engine

from graphkeep.domain.timestamps import now_compact
from graphkeep.infrastructure.database.schema import (
    LEGACY_NODE_COLUMNS,
    REQUIRED_NODE_COLUMNS,
    TABLE_NAMES,
    metadata,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemaReport:
    """Outcome of :func:`ensure_schema` for one storage file.

    Attributes:
        created: Tables were created (fresh file or after a legacy drop).
        legacy_dropped: A legacy layout was detected and its tables dropped.
        legacy_reasons: Why the layout was considered legacy.
        backup_path: Copy of the file taken before the drop, if any.
    """

    created: bool = False
    legacy_dropped: bool = False
    legacy_reasons: tuple[str, ...] = field(default_factory=tuple)
    backup_path: Path | None = None

    @property
    def warnings(self) -> list[str]:
        """Human-readable warnings to surface on every result of the session."""
        if not self.legacy_dropped:
            return []
        msg = "Legacy storage layout detected; previous graph data was dropped"
        if self.legacy_reasons:
            msg += f" ({'; '.join(self.legacy_reasons)})"
        if self.backup_path is not None:
            msg += f". Backup: {self.backup_path}"
        return [msg]


def create_db_engine(
    db_path: Path,
    *,
    journal_mode: str = "wal",
    enforce_foreign_keys: bool = False,
) -> Engine:
    """Create a SQLite engine for *db_path* with per-connection PRAGMAs.

    The path goes into the URL as a component, never through string
    parsing, so names containing ``?`` or ``#`` stay literal file names.
    """
    url = URL.create("sqlite", database=str(db_path))
    engine = create_engine(url, echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute(f"PRAGMA journal_mode={journal_mode.upper()}")
        cursor.execute(f"PRAGMA foreign_keys={'ON' if enforce_foreign_keys else 'OFF'}")
        cursor.close()

    return engine


def create_readonly_engine(db_path: Path) -> Engine:
    """Create an engine that opens *db_path* read-only and never creates it."""
    uri = f"{db_path.resolve().as_uri()}?mode=ro"

    def _connect() -> sqlite3.Connection:
        return sqlite3.connect(uri, uri=True)

    return create_engine("sqlite://", creator=_connect, echo=False)


def detect_legacy_layout(engine: Engine) -> list[str]:
    """Return the reasons the file's layout is legacy (empty when current or absent)."""
    inspector = inspect(engine)
    existing = set(inspector.get_table_names())
    reasons: list[str] = []

    if "nodes" in existing:
        columns = {col["name"] for col in inspector.get_columns("nodes")}
        legacy = sorted(columns & LEGACY_NODE_COLUMNS)
        if legacy:
            reasons.append(f"nodes has per-row column(s) {', '.join(legacy)}")
        missing = sorted(REQUIRED_NODE_COLUMNS - columns)
        if missing:
            reasons.append(f"nodes lacks column(s) {', '.join(missing)}")

    for name in ("graphs", "edges"):
        if name not in existing:
            continue
        columns = {col["name"] for col in inspector.get_columns(name)}
        required = {col.name for col in metadata.tables[name].columns}
        missing = sorted(required - columns)
        if missing:
            reasons.append(f"{name} lacks column(s) {', '.join(missing)}")

    return reasons


def ensure_schema(engine: Engine, *, backup_legacy: bool = True) -> SchemaReport:
    """Create the current tables, dropping a legacy layout first.

    Idempotent on a current-layout file. A legacy layout is destructive
    to recover from: the three tables are dropped and recreated, so the
    file is copied aside first when *backup_legacy* is set.
    """
    existing = set(inspect(engine).get_table_names())
    reasons = detect_legacy_layout(engine)
    backup_path: Path | None = None

    if reasons:
        if backup_legacy:
            backup_path = _backup_file(engine)
        logger.warning(
            "Dropping legacy storage layout in %s: %s",
            engine.url.database or "<memory>",
            "; ".join(reasons),
        )
        with engine.begin() as conn:
            metadata.drop_all(conn, checkfirst=True)
        existing = set()

    created = not all(name in existing for name in TABLE_NAMES)
    metadata.create_all(engine)
    return SchemaReport(
        created=created,
        legacy_dropped=bool(reasons),
        legacy_reasons=tuple(reasons),
        backup_path=backup_path,
    )


def _backup_file(engine: Engine) -> Path | None:
    """Copy the storage file to a timestamped ``.legacy-<ts>.bak`` sibling."""
    database = engine.url.database
    if not database or database == ":memory:":
        return None
    source = Path(database)
    if not source.is_file():
        return None

    # Fold any WAL content into the main file before copying it.
    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA wal_checkpoint(TRUNCATE)")

    backup = source.with_name(f"{source.name}.legacy-{now_compact()}.bak")
    shutil.copy2(source, backup)
    logger.info("Backed up legacy storage file to %s", backup)
    return backup
