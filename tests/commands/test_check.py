"""Tests for the check command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from graphkeep.cli import cli
from graphkeep.domain.snapshot import GraphSnapshot
from graphkeep.infrastructure.session import GraphSession


def _seed(path: Path, snapshot: GraphSnapshot) -> None:
    with GraphSession() as session:
        session.open(path)
        session.save_graph(snapshot)


@pytest.mark.usefixtures("_isolated_project")
class TestCheck:
    def test_clean(
        self, cli_runner: CliRunner, tmp_path: Path, sample_snapshot: GraphSnapshot
    ) -> None:
        _seed(tmp_path / "graph.db", sample_snapshot)
        result = cli_runner.invoke(cli, ["check"])
        assert result.exit_code == 0, result.output
        assert "No issues found" in result.stdout

    def test_dangling_edges(
        self, cli_runner: CliRunner, tmp_path: Path, sample_snapshot: GraphSnapshot
    ) -> None:
        a, _, c = sample_snapshot.nodes
        _seed(tmp_path / "graph.db", sample_snapshot.model_copy(update={"nodes": [a, c]}))
        result = cli_runner.invoke(cli, ["check"])
        assert result.exit_code == 0, result.output
        assert "dangling_edge" in result.stdout
        assert "2 errors, 0 warnings" in result.stdout

    def test_errors_only(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        _seed(
            tmp_path / "graph.db",
            GraphSnapshot.model_validate({"nodes": [{"id": "lonely", "x": 0, "y": 0}]}),
        )
        assert "isolated_node" in cli_runner.invoke(cli, ["check"]).stdout
        result = cli_runner.invoke(cli, ["check", "--errors-only"])
        assert "No issues found" in result.stdout

    def test_json(self, cli_runner: CliRunner) -> None:
        payload = json.loads(cli_runner.invoke(cli, ["--json", "check"]).stdout)
        assert payload["op"] == "check"
        assert payload["data"]["count"] == 0
