"""Tests for the import, export and migrate commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from graphkeep.cli import cli

FLOW = {
    "format": "graph-data-v1",
    "nodes": [
        {"id": "11111111-1111-4111-8111-111111111111", "x": 0, "y": 0, "label": "Start"},
        {"id": "22222222-2222-4222-8222-222222222222", "x": 100, "y": 0, "label": "End"},
    ],
    "edges": [
        {
            "id": "33333333-3333-4333-8333-333333333333",
            "from": "11111111-1111-4111-8111-111111111111",
            "to": "22222222-2222-4222-8222-222222222222",
        }
    ],
    "scale": 2,
    "offset": {"x": 10, "y": 20},
}


@pytest.fixture
def flow_file(tmp_path: Path) -> Path:
    path = tmp_path / "flow.json"
    path.write_text(json.dumps(FLOW), encoding="utf-8")
    return path


@pytest.mark.usefixtures("_isolated_project")
class TestImport:
    def test_import_then_show(self, cli_runner: CliRunner, flow_file: Path) -> None:
        result = cli_runner.invoke(cli, ["import", str(flow_file)])
        assert result.exit_code == 0, result.output
        assert "import_json" in result.stdout
        assert "node_count: 2" in result.stdout

        shown = cli_runner.invoke(cli, ["show"])
        assert "name: flow" in shown.stdout
        assert "scale: 2" in shown.stdout

    def test_invalid_document(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text('{"nodes": "lots"}', encoding="utf-8")
        result = cli_runner.invoke(cli, ["import", str(bad)])
        assert result.exit_code == 1
        assert "ERROR" in result.stderr
        assert "import_json" in result.stderr

    def test_missing_file(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["import", "absent.json"])
        assert result.exit_code == 2

    def test_json_output(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        source = tmp_path / "ids.json"
        source.write_text(json.dumps({"nodes": [{"x": 1, "y": 1}]}), encoding="utf-8")
        result = cli_runner.invoke(cli, ["--json", "import", str(source)])
        payload = json.loads(result.stdout)
        assert payload["data"]["minted_ids"] == 1
        assert any("Minted" in w for w in payload["warnings"])
        assert result.stderr == ""


@pytest.mark.usefixtures("_isolated_project")
class TestExport:
    def test_stdout_is_the_document(self, cli_runner: CliRunner, flow_file: Path) -> None:
        cli_runner.invoke(cli, ["import", str(flow_file)])
        result = cli_runner.invoke(cli, ["export"])
        assert result.exit_code == 0, result.output
        document = json.loads(result.stdout)
        assert document["format"] == "graph-data-v1"
        assert len(document["nodes"]) == 2
        assert document["offset"] == {"x": 10.0, "y": 20.0}

    def test_output_file(self, cli_runner: CliRunner, flow_file: Path, tmp_path: Path) -> None:
        cli_runner.invoke(cli, ["import", str(flow_file)])
        result = cli_runner.invoke(cli, ["export", "-o", "out/flow-copy.json"])
        assert result.exit_code == 0, result.output
        assert "output: out/flow-copy.json" in result.stdout
        written = json.loads((tmp_path / "out" / "flow-copy.json").read_text(encoding="utf-8"))
        assert written["edges"][0]["to"] == FLOW["nodes"][1]["id"]

    def test_json_envelope(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "export"])
        payload = json.loads(result.stdout)
        assert payload["op"] == "export_json"
        assert payload["data"]["document"]["nodes"] == []

    def test_round_trip_between_files(self, cli_runner: CliRunner, flow_file: Path) -> None:
        cli_runner.invoke(cli, ["import", str(flow_file)])
        cli_runner.invoke(cli, ["export", "-o", "copy.json"])
        result = cli_runner.invoke(cli, ["--db", "copy.db", "import", "copy.json"])
        assert result.exit_code == 0, result.output

        exported = json.loads(cli_runner.invoke(cli, ["--db", "copy.db", "export"]).stdout)
        assert [n["id"] for n in exported["nodes"]] == [n["id"] for n in FLOW["nodes"]]


@pytest.mark.usefixtures("_isolated_project")
class TestMigrate:
    def test_migrates_directory(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        exports = tmp_path / "exports"
        exports.mkdir()
        (exports / "graph-a.json").write_text(json.dumps(FLOW), encoding="utf-8")
        (exports / "graph-b.json").write_text("[]", encoding="utf-8")

        result = cli_runner.invoke(cli, ["migrate", "exports"])

        assert result.exit_code == 0, result.output
        assert "migrated: 1" in result.stdout
        assert "failed: 1" in result.stdout
        assert "WARNING: Skipped graph-b.json" in result.stderr
        assert (exports / "graph-a.db").exists()
        assert not (tmp_path / "graph.db").exists()

    def test_output_dir_json(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "flow.json").write_text(json.dumps(FLOW), encoding="utf-8")
        result = cli_runner.invoke(cli, ["--json", "migrate", "--output-dir", "dbs", "."])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["op"] == "migrate_json"
        assert payload["data"]["items"][0]["node_count"] == 2
        assert (tmp_path / "dbs" / "flow.db").exists()
