"""Snapshot models — the in-memory graph shape exchanged with storage.

A :class:`GraphSnapshot` is what an editor hands to ``save_graph`` and
gets back from ``load_graph``. Field names are snake_case in Python; the
JSON form uses the editor's camelCase keys (``from``/``to``,
``secondaryLabel``) and still accepts the older ``chineseLabel`` key.

Timestamps on :class:`Node` and :class:`Edge` are filled by the loader
only. They are ignored when saving.
Coordinates, sizes and view scalars must be finite numbers.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

LAYER_DELIMITER = ","

DEFAULT_NODE_COLOR = "#3b82f6"
DEFAULT_NODE_RADIUS = 20.0
DEFAULT_EDGE_WEIGHT = 1.0


def split_layers(raw: str | None) -> list[str]:
    """Split a stored layer string: trim each tag, drop empties."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(LAYER_DELIMITER) if part.strip()]


def join_layers(layers: list[str]) -> str:
    """Join layer tags into their stored form."""
    return LAYER_DELIMITER.join(tag.strip() for tag in layers if tag.strip())


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Node(BaseModel):
    """A positioned, labelled diagram node."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str
    x: float
    y: float
    label: str = ""
    secondary_label: str = Field(
        default="",
        validation_alias=AliasChoices("secondary_label", "secondaryLabel", "chineseLabel"),
        serialization_alias="secondaryLabel",
    )
    color: str = DEFAULT_NODE_COLOR
    radius: float = DEFAULT_NODE_RADIUS
    category: str | None = None
    layers: list[str] = Field(default_factory=list)
    created_at: str | None = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )
    modified_at: str | None = Field(
        default=None,
        validation_alias=AliasChoices("modified_at", "modifiedAt"),
        serialization_alias="modifiedAt",
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Editors sometimes hand over numeric ids.
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("label", "secondary_label", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("color", mode="before")
    @classmethod
    def _default_color(cls, value: Any) -> Any:
        return DEFAULT_NODE_COLOR if value is None else value

    @field_validator("radius", mode="before")
    @classmethod
    def _default_radius(cls, value: Any) -> Any:
        return DEFAULT_NODE_RADIUS if value is None else value

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("layers", mode="before")
    @classmethod
    def _normalize_layers(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return split_layers(value)
        if isinstance(value, list):
            return [str(tag).strip() for tag in value if str(tag).strip()]
        return value


class Edge(BaseModel):
    """A weighted connection between two node identifiers."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str
    source: str = Field(
        validation_alias=AliasChoices("source", "from"),
        serialization_alias="from",
    )
    target: str = Field(
        validation_alias=AliasChoices("target", "to"),
        serialization_alias="to",
    )
    weight: float = DEFAULT_EDGE_WEIGHT
    category: str | None = None
    created_at: str | None = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )
    modified_at: str | None = Field(
        default=None,
        validation_alias=AliasChoices("modified_at", "modifiedAt"),
        serialization_alias="modifiedAt",
    )

    @field_validator("id", "source", "target", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("weight", mode="before")
    @classmethod
    def _default_weight(cls, value: Any) -> Any:
        return DEFAULT_EDGE_WEIGHT if value is None else value

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, value: Any) -> Any:
        return _blank_to_none(value)


class Offset(BaseModel):
    """Canvas pan offset."""

    model_config = {"frozen": True, "allow_inf_nan": False}

    x: float = 0.0
    y: float = 0.0


class GraphSnapshot(BaseModel):
    """Full graph state: nodes, edges, view scalars, and free-form metadata."""

    model_config = {"frozen": True, "allow_inf_nan": False}

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)
    scale: float = 1.0
    offset: Offset = Field(default_factory=Offset)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("scale", mode="before")
    @classmethod
    def _default_scale(cls, value: Any) -> Any:
        return 1.0 if value is None else value

    @field_validator("offset", mode="before")
    @classmethod
    def _default_offset(cls, value: Any) -> Any:
        return Offset() if value is None else value

    @field_validator("metadata", mode="before")
    @classmethod
    def _default_metadata(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def name(self) -> str | None:
        """Display name carried in the metadata bag, if any."""
        value = self.metadata.get("name")
        return str(value) if value else None

    def node(self, node_id: str) -> Node | None:
        """Look up a node by identifier (linear scan)."""
        for candidate in self.nodes:
            if candidate.id == node_id:
                return candidate
        return None

    def edge(self, edge_id: str) -> Edge | None:
        """Look up an edge by identifier (linear scan)."""
        for candidate in self.edges:
            if candidate.id == edge_id:
                return candidate
        return None


class GraphSummary(BaseModel):
    """One entry of a graph listing, for file/graph discovery UIs."""

    model_config = {"frozen": True}

    identifier: str
    name: str
    node_count: int
    edge_count: int
    created_at: str | None = None
    modified_at: str | None = None
    path: str | None = None
    description: str = ""
    size: int | None = None
