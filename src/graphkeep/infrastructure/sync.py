"""Synchronization engine: apply a snapshot to storage as a minimal diff.

Given the incoming :class:`GraphSnapshot` and the rows already persisted,
the engine issues only the inserts, updates and deletes needed to make
storage match the snapshot:

- new identifiers are inserted with ``created_at == modified_at == now``;
- present identifiers are compared field by field (exact equality) and
  updated only when something observable differs;
- identifiers missing from the snapshot are deleted, edges before nodes.

``created_at`` is never rewritten. The caller owns the transaction; the
engine must run inside one so a failure leaves storage untouched.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from graphkeep.config.logging import get_logger
from graphkeep.domain.ids import GRAPH_KEY, encode_id
from graphkeep.domain.snapshot import Edge, GraphSnapshot, Node, join_layers
from graphkeep.domain.timestamps import now_iso
from graphkeep.infrastructure.database.schema import edges, graphs, nodes
from graphkeep.infrastructure.loader import fetch_edge_rows, fetch_node_rows

if TYPE_CHECKING:
    from sqlalchemy import Connection, Row

log = get_logger(__name__)

NODE_FIELDS: tuple[str, ...] = (
    "x",
    "y",
    "label",
    "secondary_label",
    "color",
    "radius",
    "category",
    "layers",
)
EDGE_FIELDS: tuple[str, ...] = ("from_key", "to_key", "weight", "category")


@dataclass
class KindStats:
    """Write counts for one record kind."""

    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    deleted: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.inserted or self.updated or self.deleted)

    def as_dict(self) -> dict[str, int]:
        return {
            "inserted": self.inserted,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "deleted": self.deleted,
        }


@dataclass
class SyncStats:
    """What one save did to the nodes and edges tables."""

    nodes: KindStats
    edges: KindStats

    @property
    def changed(self) -> bool:
        """True when any node or edge row was written or deleted."""
        return self.nodes.changed or self.edges.changed

    def as_dict(self) -> dict[str, Any]:
        return {
            "nodes": self.nodes.as_dict(),
            "edges": self.edges.as_dict(),
            "changed": self.changed,
        }


def node_values(node: Node) -> dict[str, Any]:
    """Column values a node is persisted with (excluding key and timestamps)."""
    return {
        "x": node.x,
        "y": node.y,
        "label": node.label,
        "secondary_label": node.secondary_label,
        "color": node.color,
        "radius": node.radius,
        "category": node.category,
        "layers": join_layers(node.layers),
    }


def edge_values(edge: Edge) -> dict[str, Any]:
    """Column values an edge is persisted with (excluding key and timestamps)."""
    return {
        "from_key": encode_id(edge.source),
        "to_key": encode_id(edge.target),
        "weight": edge.weight,
        "category": edge.category,
    }


def _differs(row: Row[Any], values: dict[str, Any], fields: tuple[str, ...]) -> bool:
    mapping = row._mapping
    for name in fields:
        stored = mapping[name]
        if isinstance(stored, memoryview):
            stored = bytes(stored)
        if stored != values[name]:
            return True
    return False


class SyncEngine:
    """Applies snapshots to one open storage connection.

    Args:
        clock: Returns the timestamp stamped on every row written by one
            :meth:`apply` call. Injected so tests can control time.
    """

    def __init__(self, clock: Callable[[], str] = now_iso) -> None:
        self._clock = clock

    def apply(self, conn: Connection, snapshot: GraphSnapshot) -> SyncStats:
        """Make the rows behind *conn* match *snapshot*.

        Must run inside a transaction; any exception leaves the caller
        to roll back.
        """
        now = self._clock()
        existing_nodes = fetch_node_rows(conn)
        existing_edges = fetch_edge_rows(conn)

        self._upsert_graph(conn, snapshot, now)

        node_stats = KindStats()
        incoming_nodes: set[bytes] = set()
        for node in snapshot.nodes:
            key = encode_id(node.id)
            incoming_nodes.add(key)
            values = node_values(node)
            row = existing_nodes.get(key)
            if row is None:
                self._insert_node(conn, key, values, now)
                node_stats.inserted += 1
            elif _differs(row, values, NODE_FIELDS):
                self._update_node(conn, key, values, now)
                node_stats.updated += 1
            else:
                node_stats.unchanged += 1

        edge_stats = KindStats()
        incoming_edges: set[bytes] = set()
        for edge in snapshot.edges:
            key = encode_id(edge.id)
            incoming_edges.add(key)
            values = edge_values(edge)
            row = existing_edges.get(key)
            if row is None:
                self._insert_edge(conn, key, values, now)
                edge_stats.inserted += 1
            elif _differs(row, values, EDGE_FIELDS):
                self._update_edge(conn, key, values, now)
                edge_stats.updated += 1
            else:
                edge_stats.unchanged += 1

        # Edges first: with foreign keys enforced, nodes cannot go while
        # edges still point at them.
        stale_edges = [key for key in existing_edges if key not in incoming_edges]
        for chunk in _chunks(stale_edges):
            conn.execute(delete(edges).where(edges.c.key.in_(chunk)))
        edge_stats.deleted = len(stale_edges)

        stale_nodes = [key for key in existing_nodes if key not in incoming_nodes]
        for chunk in _chunks(stale_nodes):
            conn.execute(delete(nodes).where(nodes.c.key.in_(chunk)))
        node_stats.deleted = len(stale_nodes)

        stats = SyncStats(nodes=node_stats, edges=edge_stats)
        log.debug(
            "graph.synced",
            nodes=node_stats.as_dict(),
            edges=edge_stats.as_dict(),
            changed=stats.changed,
        )
        return stats

    def _upsert_graph(self, conn: Connection, snapshot: GraphSnapshot, now: str) -> None:
        meta = snapshot.metadata
        values = {
            "name": _optional_text(meta.get("name")),
            "description": _optional_text(meta.get("description")),
            "scale": snapshot.scale,
            "offset_x": snapshot.offset.x,
            "offset_y": snapshot.offset.y,
            "modified_at": now,
            "metadata": json.dumps(meta, ensure_ascii=False, default=str),
        }
        stmt = sqlite_insert(graphs).values(key=GRAPH_KEY, created_at=now, **values)
        conn.execute(stmt.on_conflict_do_update(index_elements=[graphs.c.key], set_=values))

    def _insert_node(self, conn: Connection, key: bytes, values: dict[str, Any], now: str) -> None:
        conn.execute(insert(nodes).values(key=key, created_at=now, modified_at=now, **values))

    def _update_node(self, conn: Connection, key: bytes, values: dict[str, Any], now: str) -> None:
        conn.execute(update(nodes).where(nodes.c.key == key).values(modified_at=now, **values))

    def _insert_edge(self, conn: Connection, key: bytes, values: dict[str, Any], now: str) -> None:
        conn.execute(insert(edges).values(key=key, created_at=now, modified_at=now, **values))

    def _update_edge(self, conn: Connection, key: bytes, values: dict[str, Any], now: str) -> None:
        conn.execute(update(edges).where(edges.c.key == key).values(modified_at=now, **values))


def _optional_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


# SQLite caps bound parameters per statement.
_CHUNK = 500


def _chunks(keys: list[bytes]) -> list[list[bytes]]:
    return [keys[i : i + _CHUNK] for i in range(0, len(keys), _CHUNK)]
