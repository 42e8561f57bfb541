"""CheckService — read-only integrity report for the open storage file.

Saving never removes edges whose endpoints disappeared; keeping edges
consistent is the caller's job. This report is how a caller finds out
it did not. Nothing here writes to storage.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from graphkeep.domain.ids import decode_key
from graphkeep.infrastructure.database.schema import edges, nodes
from graphkeep.infrastructure.errors import LoadError, SessionClosedError
from graphkeep.infrastructure.loader import INSERTION_ORDER
from graphkeep.services.base import BaseService
from graphkeep.services.contracts import CheckResultData, dump_validated
from graphkeep.services.result import ServiceResult

if TYPE_CHECKING:
    from sqlalchemy import Connection

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"

CAT_DANGLING = "dangling_edge"
CAT_SELF_LOOP = "self_loop"
CAT_ISOLATED = "isolated_node"


class CheckService(BaseService):
    """Reports graph integrity issues without modifying anything."""

    def check(self, *, min_severity: str = SEVERITY_WARNING) -> ServiceResult:
        """Report issues at or above *min_severity* (``"warning"`` or ``"error"``)."""
        op = "check"
        try:
            engine = self._session.engine
        except SessionClosedError as exc:
            return self._storage_failure(op, "SESSION_CLOSED", exc)

        try:
            with engine.connect() as conn:
                issues = self._collect_issues(conn)
        except SQLAlchemyError as exc:
            return self._storage_failure(op, "LOAD_FAILED", LoadError(self._session.path, exc))

        if min_severity == SEVERITY_ERROR:
            issues = [issue for issue in issues if issue["severity"] == SEVERITY_ERROR]

        errors = sum(1 for issue in issues if issue["severity"] == SEVERITY_ERROR)
        return self._ok(
            op,
            dump_validated(
                CheckResultData,
                {
                    "path": str(self._session.path),
                    "count": len(issues),
                    "errors": errors,
                    "issues": issues,
                },
            ),
        )

    def _collect_issues(self, conn: Connection) -> list[dict[str, Any]]:
        node_rows = conn.execute(
            select(nodes.c.key).order_by(nodes.c.created_at, INSERTION_ORDER)
        )
        node_keys = [bytes(row.key) for row in node_rows]
        known = set(node_keys)
        connected: set[bytes] = set()
        issues: list[dict[str, Any]] = []

        edge_rows = conn.execute(
            select(edges.c.key, edges.c.from_key, edges.c.to_key).order_by(
                edges.c.created_at, INSERTION_ORDER
            )
        ).fetchall()
        for row in edge_rows:
            edge_id = decode_key(bytes(row.key))
            from_key = bytes(row.from_key)
            to_key = bytes(row.to_key)
            connected.update((from_key, to_key))

            for end, key in (("source", from_key), ("target", to_key)):
                if key not in known:
                    issues.append(
                        {
                            "category": CAT_DANGLING,
                            "severity": SEVERITY_ERROR,
                            "edge_id": edge_id,
                            "node_id": decode_key(key),
                            "message": f"Edge {edge_id} {end} {decode_key(key)} does not exist",
                        }
                    )

            if from_key == to_key:
                issues.append(
                    {
                        "category": CAT_SELF_LOOP,
                        "severity": SEVERITY_WARNING,
                        "edge_id": edge_id,
                        "node_id": decode_key(from_key),
                        "message": f"Edge {edge_id} connects node {decode_key(from_key)} to itself",
                    }
                )

        for key in node_keys:
            if key not in connected:
                node_id = decode_key(key)
                issues.append(
                    {
                        "category": CAT_ISOLATED,
                        "severity": SEVERITY_WARNING,
                        "node_id": node_id,
                        "message": f"Node {node_id} has no edges",
                    }
                )

        return issues
