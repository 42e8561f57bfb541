"""Shared pytest fixtures for graphkeep tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from graphkeep.domain.snapshot import Edge, GraphSnapshot, Node, Offset
from graphkeep.infrastructure.session import GraphSession
from graphkeep.infrastructure.sync import SyncEngine

# Canonical identifiers decode back to themselves, so round trips compare directly.
NODE_A = "0190f3a2-7c1e-7d4b-9a55-3f1c2b8e4d01"
NODE_B = "0190f3a2-7c1e-7d4b-9a55-3f1c2b8e4d02"
NODE_C = "0190f3a2-7c1e-7d4b-9a55-3f1c2b8e4d03"
EDGE_AB = "0190f3a2-7c1e-7d4b-9a55-3f1c2b8e4e01"
EDGE_BC = "0190f3a2-7c1e-7d4b-9a55-3f1c2b8e4e02"


class TickClock:
    """Deterministic clock: every call returns the next distinct timestamp."""

    def __init__(self) -> None:
        self.ticks = 0

    def __call__(self) -> str:
        self.ticks += 1
        return f"2026-01-01T00:00:{self.ticks:02d}+00:00"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def clock() -> TickClock:
    return TickClock()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "graph.db"


@pytest.fixture
def session(db_path: Path, clock: TickClock) -> Iterator[GraphSession]:
    """Session opened on a fresh file, stamping rows with :class:`TickClock`."""
    s = GraphSession(sync_engine=SyncEngine(clock=clock))
    s.open(db_path)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def sample_snapshot() -> GraphSnapshot:
    """Three nodes in a chain, with view state and metadata."""
    return GraphSnapshot(
        nodes=[
            Node(id=NODE_A, x=100.0, y=100.0, label="Start", layers=["core"]),
            Node(
                id=NODE_B,
                x=200.5,
                y=-40.25,
                label="Middle",
                secondary_label="中间",
                color="#10b981",
                radius=30.0,
                category="process",
                layers=["core", "review"],
            ),
            Node(id=NODE_C, x=0.1, y=0.2, label="End"),
        ],
        edges=[
            Edge(id=EDGE_AB, source=NODE_A, target=NODE_B, weight=2.0, category="flow"),
            Edge(id=EDGE_BC, source=NODE_B, target=NODE_C),
        ],
        scale=1.5,
        offset=Offset(x=12.0, y=-8.0),
        metadata={"name": "Plan", "description": "Quarterly plan"},
    )


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run the CLI from an empty temp directory with no graphkeep env vars.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command
    test classes; the default storage file lands at ``tmp_path / "graph.db"``.
    """
    for var in ("GRAPHKEEP_CONFIG", "GRAPHKEEP_STORAGE__PATH", "GRAPHKEEP_DB_PATH"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)

    # The CLI reconfigures logging on every invocation.
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    gk_level = logging.getLogger("graphkeep").level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("graphkeep").setLevel(gk_level)

