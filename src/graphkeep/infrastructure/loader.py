"""Read a storage file back into the snapshot shape.

The loader never validates referential integrity: an edge whose
endpoint no longer exists is returned as-is. :mod:`graphkeep.services.check`
reports such edges.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, literal_column, select

from graphkeep.domain.ids import GRAPH_KEY, decode_key
from graphkeep.domain.snapshot import Edge, GraphSnapshot, GraphSummary, Node, Offset, split_layers
from graphkeep.infrastructure.database.schema import edges, graphs, nodes

if TYPE_CHECKING:
    from sqlalchemy import Connection, Row

logger = logging.getLogger(__name__)

INSERTION_ORDER = literal_column("rowid")


def fetch_graph_row(conn: Connection) -> Row[Any] | None:
    """Return the singleton graph row, or None for a never-saved file."""
    return conn.execute(select(graphs).where(graphs.c.key == GRAPH_KEY)).first()


def fetch_node_rows(conn: Connection) -> dict[bytes, Row[Any]]:
    """All persisted nodes keyed by their raw 16-byte key, oldest first.

    Rows stamped in the same save keep their insertion order.
    """
    query = select(nodes).order_by(nodes.c.created_at, INSERTION_ORDER)
    return {bytes(row.key): row for row in conn.execute(query)}


def fetch_edge_rows(conn: Connection) -> dict[bytes, Row[Any]]:
    """All persisted edges keyed by their raw 16-byte key, oldest first."""
    query = select(edges).order_by(edges.c.created_at, INSERTION_ORDER)
    return {bytes(row.key): row for row in conn.execute(query)}


def parse_metadata(raw: str | None) -> dict[str, Any]:
    """Decode the graph row's JSON metadata bag; unreadable text yields ``{}``."""
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring unreadable graph metadata: %r", raw[:80])
        return {}
    return value if isinstance(value, dict) else {}


def node_from_row(row: Row[Any]) -> Node:
    return Node(
        id=decode_key(bytes(row.key)),
        x=row.x,
        y=row.y,
        label=row.label,
        secondary_label=row.secondary_label,
        color=row.color,
        radius=row.radius,
        category=row.category,
        layers=split_layers(row.layers),
        created_at=row.created_at,
        modified_at=row.modified_at,
    )


def edge_from_row(row: Row[Any]) -> Edge:
    return Edge(
        id=decode_key(bytes(row.key)),
        source=decode_key(bytes(row.from_key)),
        target=decode_key(bytes(row.to_key)),
        weight=row.weight,
        category=row.category,
        created_at=row.created_at,
        modified_at=row.modified_at,
    )


def read_snapshot(conn: Connection) -> GraphSnapshot:
    """Materialize the whole graph stored behind *conn*.

    A file that has never been saved loads as an empty graph with scale
    1 and offset (0, 0). Nodes and edges come back in creation order.
    """
    graph = fetch_graph_row(conn)
    node_list = [node_from_row(row) for row in fetch_node_rows(conn).values()]
    edge_list = [edge_from_row(row) for row in fetch_edge_rows(conn).values()]

    if graph is None:
        return GraphSnapshot(nodes=node_list, edges=edge_list)

    return GraphSnapshot(
        nodes=node_list,
        edges=edge_list,
        scale=graph.scale,
        offset=Offset(x=graph.offset_x, y=graph.offset_y),
        metadata=parse_metadata(graph._mapping["metadata"]),
    )


def read_summary(conn: Connection, identifier: str) -> GraphSummary:
    """Summarize the stored graph without materializing its rows.

    *identifier* names the graph when the stored row carries no name
    (typically the file stem).
    """
    graph = fetch_graph_row(conn)
    node_count = conn.execute(select(func.count()).select_from(nodes)).scalar_one()
    edge_count = conn.execute(select(func.count()).select_from(edges)).scalar_one()
    return GraphSummary(
        identifier=identifier,
        name=(graph.name if graph is not None and graph.name else identifier),
        description=(graph.description or "") if graph is not None else "",
        node_count=node_count,
        edge_count=edge_count,
        created_at=graph.created_at if graph is not None else None,
        modified_at=graph.modified_at if graph is not None else None,
    )
