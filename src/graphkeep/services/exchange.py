"""ExchangeService — JSON import, export and migration of whole graphs.

The document format is the editor's ``graph-data-v1`` JSON::

    {
      "format": "graph-data-v1",
      "exportedAt": "2026-01-01T00:00:00+00:00",
      "nodes": [{"id": "...", "x": 0, "y": 0, "label": "...", ...}],
      "edges": [{"id": "...", "from": "...", "to": "...", "weight": 1}],
      "scale": 1,
      "offset": {"x": 0, "y": 0},
      "metadata": {"name": "..."}
    }

Importing replaces the stored graph: the document is saved through the
normal diff, so rows absent from the document are deleted.
Migration imports every document of a directory into its own
``<stem>.db`` file next to it (or under a chosen output directory).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from graphkeep.domain.ids import new_id
from graphkeep.domain.snapshot import GraphSnapshot
from graphkeep.domain.timestamps import now_iso
from graphkeep.infrastructure.errors import SessionClosedError, StorageError
from graphkeep.infrastructure.session import GraphSession
from graphkeep.services.base import BaseService
from graphkeep.services.contracts import (
    ExportResultData,
    ImportResultData,
    MigrateResultData,
    dump_validated,
)
from graphkeep.services.graph import snapshot_payload
from graphkeep.services.result import ServiceResult

DOCUMENT_FORMAT = "graph-data-v1"
DEFAULT_DESCRIPTION = "Imported from JSON"

logger = logging.getLogger(__name__)


class DocumentError(ValueError):
    """A file does not hold a readable graph document."""

    def __init__(self, path: Path, message: str, cause: BaseException | None = None) -> None:
        self.path = path
        self.cause = cause
        super().__init__(message)


def read_document(path: Path) -> dict[str, Any]:
    """Parse *path* as a JSON object.

    Raises:
        DocumentError: The file is unreadable, not JSON, or not an object.
    """
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DocumentError(path, f"Cannot read {path}: {exc}", exc) from exc
    if not isinstance(document, dict):
        raise DocumentError(path, f"{path} does not contain a JSON object")
    return document


def _with_ids(records: Any) -> tuple[list[Any], int]:
    """Give every record dict an ``id``; return them and how many were minted."""
    if records is None:
        return [], 0
    if not isinstance(records, list):
        msg = "expected a list"
        raise TypeError(msg)
    minted = 0
    out: list[Any] = []
    for record in records:
        if isinstance(record, dict) and record.get("id") in (None, ""):
            record = {**record, "id": new_id()}
            minted += 1
        out.append(record)
    return out, minted


def snapshot_from_document(
    document: dict[str, Any],
    *,
    default_name: str,
    imported_at: str,
) -> tuple[GraphSnapshot, int]:
    """Build a snapshot from a parsed JSON document.

    Metadata ``name`` falls back to a top-level ``name`` and then to
    *default_name*; ``description`` likewise falls back to
    :data:`DEFAULT_DESCRIPTION`. ``importedAt`` is stamped unless the
    document's own metadata already carries one.

    Raises:
        TypeError: ``nodes`` or ``edges`` is not a list.
        pydantic.ValidationError: A record does not fit the snapshot model.
    """
    node_records, minted_nodes = _with_ids(document.get("nodes"))
    edge_records, minted_edges = _with_ids(document.get("edges"))

    metadata: dict[str, Any] = {
        "name": document.get("name") or default_name,
        "description": document.get("description") or DEFAULT_DESCRIPTION,
        "importedAt": imported_at,
    }
    raw_meta = document.get("metadata")
    if isinstance(raw_meta, dict):
        metadata.update({k: v for k, v in raw_meta.items() if v is not None})

    snapshot = GraphSnapshot.model_validate(
        {
            "nodes": node_records,
            "edges": edge_records,
            "scale": document.get("scale"),
            "offset": document.get("offset"),
            "metadata": metadata,
        }
    )
    return snapshot, minted_nodes + minted_edges


def document_from_snapshot(snapshot: GraphSnapshot, *, exported_at: str) -> dict[str, Any]:
    """Render *snapshot* as a ``graph-data-v1`` document."""
    payload = snapshot_payload(snapshot)
    return {"format": DOCUMENT_FORMAT, "exportedAt": exported_at, **payload}


class ExchangeService(BaseService):
    """Moves whole graphs between JSON documents and storage files."""

    def import_json(self, path: Path) -> ServiceResult:
        """Read *path* and save it as the graph of the open file."""
        op = "import_json"
        path = Path(path)
        try:
            document = read_document(path)
        except DocumentError as exc:
            detail: dict[str, Any] = {"path": str(path)}
            if exc.cause is not None:
                detail["cause"] = str(exc.cause)
            return self._fail(op, "INVALID_DOCUMENT", str(exc), detail)

        warnings: list[str] = []
        fmt = document.get("format")
        if fmt is not None and fmt != DOCUMENT_FORMAT:
            warnings.append(f"Unknown document format {fmt!r}; importing as {DOCUMENT_FORMAT}")

        try:
            snapshot, minted = snapshot_from_document(
                document,
                default_name=path.stem,
                imported_at=now_iso(),
            )
        except (TypeError, ValidationError) as exc:
            return self._fail(
                op,
                "INVALID_DOCUMENT",
                f"Invalid graph document {path}: {exc}",
                {"path": str(path), "cause": str(exc)},
            )

        try:
            self._session.save_graph(snapshot)
        except SessionClosedError as exc:
            return self._storage_failure(op, "SESSION_CLOSED", exc)
        except StorageError as exc:
            return self._storage_failure(op, "SAVE_FAILED", exc)

        if minted:
            warnings.append(f"Minted {minted} identifier(s) for records without an id")

        return self._ok(
            op,
            dump_validated(
                ImportResultData,
                {
                    "source": str(path),
                    "path": str(self._session.path),
                    "name": snapshot.name,
                    "node_count": len(snapshot.nodes),
                    "edge_count": len(snapshot.edges),
                    "minted_ids": minted,
                },
            ),
            warnings,
        )

    def export_json(self, output: Path | None = None) -> ServiceResult:
        """Render the stored graph as a document, writing it to *output* if given."""
        op = "export_json"
        try:
            snapshot = self._session.load_graph()
        except SessionClosedError as exc:
            return self._storage_failure(op, "SESSION_CLOSED", exc)
        except StorageError as exc:
            return self._storage_failure(op, "LOAD_FAILED", exc)

        document = document_from_snapshot(snapshot, exported_at=now_iso())
        if output is not None:
            output = Path(output)
            try:
                output.parent.mkdir(parents=True, exist_ok=True)
                output.write_text(
                    json.dumps(document, indent=2, ensure_ascii=False) + "\n",
                    encoding="utf-8",
                )
            except OSError as exc:
                return self._fail(
                    op,
                    "WRITE_FAILED",
                    f"Cannot write {output}: {exc}",
                    {"path": str(output), "cause": str(exc)},
                )

        return self._ok(
            op,
            dump_validated(
                ExportResultData,
                {
                    "path": str(self._session.path),
                    "output": str(output) if output is not None else None,
                    "node_count": len(snapshot.nodes),
                    "edge_count": len(snapshot.edges),
                    "document": document,
                },
            ),
        )

    def migrate_directory(
        self,
        directory: Path,
        *,
        pattern: str = "*.json",
        output_dir: Path | None = None,
    ) -> ServiceResult:
        """Import every document matching *pattern* into its own ``<stem>.db``.

        Files are independent: one that cannot be read, validated or saved
        is reported in ``items`` and *warnings* and the rest still migrate.
        The open file is only written when a target coincides with it.
        """
        op = "migrate_json"
        directory = Path(directory)
        if not directory.is_dir():
            return self._fail(
                op,
                "NOT_A_DIRECTORY",
                f"Not a directory: {directory}",
                {"path": str(directory)},
            )
        output_dir = Path(output_dir) if output_dir is not None else directory

        items: list[dict[str, Any]] = []
        warnings: list[str] = []
        for source in sorted(directory.glob(pattern)):
            if not source.is_file():
                continue
            target = output_dir / f"{source.stem}.db"
            try:
                snapshot = self._migrate_file(source, target)
            except (DocumentError, TypeError, ValidationError, StorageError) as exc:
                logger.debug("Skipping %s: %s", source, exc)
                warnings.append(f"Skipped {source.name}: {exc}")
                items.append(
                    {"source": str(source), "path": str(target), "ok": False, "error": str(exc)}
                )
                continue
            logger.debug("Migrated %s -> %s", source, target)
            items.append(
                {
                    "source": str(source),
                    "path": str(target),
                    "ok": True,
                    "node_count": len(snapshot.nodes),
                    "edge_count": len(snapshot.edges),
                }
            )

        migrated = sum(1 for item in items if item["ok"])
        return self._ok(
            op,
            dump_validated(
                MigrateResultData,
                {
                    "directory": str(directory),
                    "output_dir": str(output_dir),
                    "migrated": migrated,
                    "failed": len(items) - migrated,
                    "items": items,
                },
            ),
            warnings,
        )

    def _migrate_file(self, source: Path, target: Path) -> GraphSnapshot:
        document = read_document(source)
        if not isinstance(document.get("nodes"), list):
            raise DocumentError(source, "invalid graph structure: nodes must be a list")
        snapshot, _ = snapshot_from_document(
            document,
            default_name=source.stem,
            imported_at=now_iso(),
        )
        current = self._session.path
        if current is not None and current.resolve() == target.resolve():
            self._session.save_graph(snapshot)
            return snapshot
        with GraphSession(self._session.settings) as other:
            other.open(target)
            other.save_graph(snapshot)
        return snapshot
