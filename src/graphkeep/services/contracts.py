"""Typed payload contracts for service boundaries.

These models validate operation payload shapes before they leave the
service layer so key regressions (for example ``items`` vs ``graphs``)
fail fast in tests and during development.
"""

from __future__ import annotations

from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T", bound=BaseModel)


def dump_validated(model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


class KindCounts(BaseModel):
    inserted: int
    updated: int
    unchanged: int
    deleted: int


class SaveResultData(BaseModel):
    """Payload contract for ``GraphService.save``."""

    path: str
    node_count: int
    edge_count: int
    changed: bool
    nodes: KindCounts
    edges: KindCounts


class LoadResultData(BaseModel):
    """Payload contract for ``GraphService.load``.

    ``graph`` is the snapshot in its JSON (camelCase) form.
    """

    path: str
    name: str | None = None
    node_count: int
    edge_count: int
    graph: dict[str, Any]


class GraphListItem(BaseModel):
    """One discovered graph file."""

    model_config = ConfigDict(extra="allow")

    identifier: str
    name: str
    node_count: int
    edge_count: int
    created_at: str | None = None
    modified_at: str | None = None
    path: str | None = None
    description: str = ""
    size: int | None = None


class ListGraphsResultData(BaseModel):
    """Payload contract for ``GraphService.list_graphs``."""

    directory: str
    count: int
    items: list[GraphListItem]


class SwitchResultData(BaseModel):
    """Payload contract for ``GraphService.switch``."""

    path: str
    previous: str | None = None
    created: bool
    legacy_dropped: bool


class DeleteResultData(BaseModel):
    """Payload contract for ``GraphService.delete``."""

    path: str
    deleted: bool
    was_open: bool


class ImportResultData(BaseModel):
    """Payload contract for ``ExchangeService.import_json``."""

    source: str
    path: str
    name: str | None = None
    node_count: int
    edge_count: int
    minted_ids: int


class MigrateItem(BaseModel):
    """Outcome for one source document of a migration."""

    source: str
    path: str | None = None
    ok: bool
    node_count: int = 0
    edge_count: int = 0
    error: str | None = None


class MigrateResultData(BaseModel):
    """Payload contract for ``ExchangeService.migrate_directory``."""

    directory: str
    output_dir: str
    migrated: int
    failed: int
    items: list[MigrateItem]


class ExportResultData(BaseModel):
    """Payload contract for ``ExchangeService.export_json``."""

    path: str
    output: str | None = None
    node_count: int
    edge_count: int
    document: dict[str, Any]


class CheckIssue(BaseModel):
    """One integrity finding returned by ``CheckService.check``."""

    model_config = ConfigDict(extra="allow")

    category: str
    severity: Literal["warning", "error"]
    node_id: str | None = None
    edge_id: str | None = None
    message: str


class CheckResultData(BaseModel):
    """Payload contract for ``CheckService.check``."""

    path: str
    count: int
    errors: int
    issues: list[CheckIssue]
