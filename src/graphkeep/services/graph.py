"""GraphService — save, load, list, switch and delete storage files."""

from __future__ import annotations

from pathlib import Path

from graphkeep.domain.snapshot import GraphSnapshot
from graphkeep.infrastructure.errors import SessionClosedError, StorageError
from graphkeep.services.base import BaseService
from graphkeep.services.contracts import (
    DeleteResultData,
    ListGraphsResultData,
    LoadResultData,
    SaveResultData,
    SwitchResultData,
    dump_validated,
)
from graphkeep.services.result import ServiceResult


def snapshot_payload(snapshot: GraphSnapshot) -> dict[str, object]:
    """The snapshot in its JSON (camelCase) form."""
    return snapshot.model_dump(mode="json", by_alias=True)


class GraphService(BaseService):
    """Boundary operations of the editor over the open storage file."""

    def save(self, snapshot: GraphSnapshot) -> ServiceResult:
        """Persist *snapshot*, writing only rows that changed."""
        op = "save_graph"
        try:
            stats = self._session.save_graph(snapshot)
        except SessionClosedError as exc:
            return self._storage_failure(op, "SESSION_CLOSED", exc)
        except StorageError as exc:
            return self._storage_failure(op, "SAVE_FAILED", exc)

        return self._ok(
            op,
            dump_validated(
                SaveResultData,
                {
                    "path": str(self._session.path),
                    "node_count": len(snapshot.nodes),
                    "edge_count": len(snapshot.edges),
                    **stats.as_dict(),
                },
            ),
        )

    def load(self) -> ServiceResult:
        """Read the whole graph back."""
        op = "load_graph"
        try:
            snapshot = self._session.load_graph()
        except SessionClosedError as exc:
            return self._storage_failure(op, "SESSION_CLOSED", exc)
        except StorageError as exc:
            return self._storage_failure(op, "LOAD_FAILED", exc)

        return self._ok(
            op,
            dump_validated(
                LoadResultData,
                {
                    "path": str(self._session.path),
                    "name": snapshot.name,
                    "node_count": len(snapshot.nodes),
                    "edge_count": len(snapshot.edges),
                    "graph": snapshot_payload(snapshot),
                },
            ),
        )

    def list_graphs(
        self,
        directory: Path | None = None,
        *,
        pattern: str = "*.db",
    ) -> ServiceResult:
        """Discover graph files; defaults to the open file's directory."""
        op = "list_graphs"
        if directory is None:
            if self._session.path is None:
                return self._fail(
                    op,
                    "SESSION_CLOSED",
                    "No directory given and no storage file is open",
                )
            directory = self._session.path.parent

        summaries, warnings = self._session.list_graphs(directory, pattern=pattern)
        return self._ok(
            op,
            dump_validated(
                ListGraphsResultData,
                {
                    "directory": str(directory),
                    "count": len(summaries),
                    "items": [s.model_dump() for s in summaries],
                },
            ),
            warnings,
        )

    def switch(self, path: Path) -> ServiceResult:
        """Close the open file and open *path* instead."""
        op = "switch_file"
        previous = self._session.path
        try:
            self._session.switch_file(path)
        except StorageError as exc:
            return self._storage_failure(op, "OPEN_FAILED", exc)

        report = self._session.schema_report
        return self._ok(
            op,
            dump_validated(
                SwitchResultData,
                {
                    "path": str(path),
                    "previous": str(previous) if previous is not None else None,
                    "created": bool(report and report.created),
                    "legacy_dropped": bool(report and report.legacy_dropped),
                },
            ),
        )

    def delete(self, path: Path) -> ServiceResult:
        """Remove the storage file *path*, closing it first if it is open."""
        op = "delete_graph"
        path = Path(path)
        was_open = self._session.path is not None and (
            self._session.path.resolve() == path.resolve()
        )
        try:
            deleted = self._session.delete_file(path)
        except StorageError as exc:
            return self._storage_failure(op, "DELETE_FAILED", exc)

        warnings = [] if deleted else [f"No storage file at {path}"]
        return self._ok(
            op,
            dump_validated(
                DeleteResultData,
                {"path": str(path), "deleted": deleted, "was_open": was_open},
            ),
            warnings,
        )
