"""Graph discovery across a directory of storage files.

Each candidate file is opened read-only through its own engine, which is
disposed before moving on. Nothing here creates, migrates or writes to a
file, and the active :class:`~graphkeep.infrastructure.session.GraphSession`
is never touched.
"""

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from graphkeep.domain.snapshot import GraphSummary
from graphkeep.infrastructure.database.engine import create_readonly_engine, detect_legacy_layout
from graphkeep.infrastructure.database.schema import TABLE_NAMES
from graphkeep.infrastructure.loader import read_summary

logger = logging.getLogger(__name__)


def summarize_file(path: Path) -> GraphSummary:
    """Summarize one storage file.

    Raises:
        ValueError: The file does not hold the current table layout.
        SQLAlchemyError: The file cannot be read as SQLite.
        OSError: The file vanished before its size could be read.
    """
    engine = create_readonly_engine(path)
    try:
        tables = set(inspect(engine).get_table_names())
        missing = [name for name in TABLE_NAMES if name not in tables]
        if missing:
            msg = f"missing table(s) {', '.join(missing)}"
            raise ValueError(msg)
        reasons = detect_legacy_layout(engine)
        if reasons:
            msg = f"legacy layout ({'; '.join(reasons)})"
            raise ValueError(msg)
        with engine.connect() as conn:
            summary = read_summary(conn, path.stem)
    finally:
        engine.dispose()
    return summary.model_copy(update={"path": str(path), "size": path.stat().st_size})


def discover_graphs(
    directory: Path,
    pattern: str = "*.db",
) -> tuple[list[GraphSummary], list[str]]:
    """List the graphs stored in *directory*, most recently modified first.

    Returns ``(summaries, warnings)``; a file that cannot be summarized
    is skipped and named in *warnings*.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return [], [f"Not a directory: {directory}"]

    summaries: list[GraphSummary] = []
    warnings: list[str] = []
    for path in sorted(directory.glob(pattern)):
        if not path.is_file():
            continue
        try:
            summaries.append(summarize_file(path))
        except (OSError, SQLAlchemyError, ValueError) as exc:
            logger.debug("Skipping %s: %s", path, exc)
            warnings.append(f"Skipped {path.name}: {exc}")

    summaries.sort(key=lambda s: s.modified_at or "", reverse=True)
    return summaries, warnings
