"""SQLAlchemy Core table definitions for a graph storage file.

One file holds exactly one graph: a singleton ``graphs`` row keyed by
:data:`graphkeep.domain.ids.GRAPH_KEY`, plus its ``nodes`` and ``edges``.
Every row key is a 16-byte blob produced by the identifier codec.
"""

from __future__ import annotations

from sqlalchemy import (
    REAL,
    Column,
    ForeignKey,
    Index,
    LargeBinary,
    MetaData,
    Table,
    Text,
)

metadata = MetaData()

graphs = Table(
    "graphs",
    metadata,
    Column("key", LargeBinary(16), primary_key=True),
    Column("name", Text),
    Column("description", Text),
    Column("scale", REAL, nullable=False, default=1.0, server_default="1.0"),
    Column("offset_x", REAL, nullable=False, default=0.0, server_default="0.0"),
    Column("offset_y", REAL, nullable=False, default=0.0, server_default="0.0"),
    Column("created_at", Text, nullable=False),
    Column("modified_at", Text, nullable=False),
    Column("metadata", Text),  # JSON object
)

nodes = Table(
    "nodes",
    metadata,
    Column("key", LargeBinary(16), primary_key=True),
    Column("x", REAL, nullable=False),
    Column("y", REAL, nullable=False),
    Column("label", Text, nullable=False, default="", server_default=""),
    Column("secondary_label", Text, nullable=False, default="", server_default=""),
    Column("color", Text, nullable=False),
    Column("radius", REAL, nullable=False),
    Column("category", Text),
    Column("layers", Text, nullable=False, default="", server_default=""),  # comma-joined
    Column("created_at", Text, nullable=False),
    Column("modified_at", Text, nullable=False),
)

# Endpoints reference nodes.key, but enforcement is a per-connection
# PRAGMA (off unless storage.enforce_foreign_keys is set).
edges = Table(
    "edges",
    metadata,
    Column("key", LargeBinary(16), primary_key=True),
    Column("from_key", LargeBinary(16), ForeignKey("nodes.key"), nullable=False),
    Column("to_key", LargeBinary(16), ForeignKey("nodes.key"), nullable=False),
    Column("weight", REAL, nullable=False, default=1.0, server_default="1.0"),
    Column("category", Text),
    Column("created_at", Text, nullable=False),
    Column("modified_at", Text, nullable=False),
)

Index("ix_nodes_created_at", nodes.c.created_at)
Index("ix_edges_created_at", edges.c.created_at)
Index("ix_edges_from_to", edges.c.from_key, edges.c.to_key)

TABLE_NAMES: tuple[str, ...] = ("graphs", "nodes", "edges")

# A nodes table must carry these to be treated as the current layout.
REQUIRED_NODE_COLUMNS: frozenset[str] = frozenset(c.name for c in nodes.columns)

# Older layouts stored several graphs per file, tagging each row.
LEGACY_NODE_COLUMNS: frozenset[str] = frozenset({"graph_id"})
