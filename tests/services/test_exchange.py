"""Tests for ExchangeService: graph-data-v1 JSON import and export."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from graphkeep.domain.ids import is_canonical
from graphkeep.domain.snapshot import GraphSnapshot
from graphkeep.infrastructure.session import GraphSession
from graphkeep.services.exchange import (
    DEFAULT_DESCRIPTION,
    DOCUMENT_FORMAT,
    ExchangeService,
    document_from_snapshot,
    snapshot_from_document,
)

CANON_1 = "11111111-1111-4111-8111-111111111111"
CANON_2 = "22222222-2222-4222-8222-222222222222"


def _write(path: Path, document: Any) -> Path:
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def _document(**extra: Any) -> dict[str, Any]:
    return {
        "format": DOCUMENT_FORMAT,
        "nodes": [
            {"id": CANON_1, "x": 200, "y": 200, "label": "Start", "chineseLabel": "开始"},
            {"id": CANON_2, "x": 400, "y": 150, "label": "Process", "category": ""},
        ],
        "edges": [{"id": "33333333-3333-4333-8333-333333333333", "from": CANON_1, "to": CANON_2}],
        "scale": 1.25,
        "offset": {"x": 5, "y": -5},
        **extra,
    }


class TestSnapshotFromDocument:
    def test_name_falls_back_to_default(self) -> None:
        snap, minted = snapshot_from_document(_document(), default_name="flow", imported_at="t")
        assert snap.metadata["name"] == "flow"
        assert snap.metadata["importedAt"] == "t"
        assert minted == 0
        assert snap.metadata["description"] == DEFAULT_DESCRIPTION

    def test_description_from_document(self) -> None:
        doc = _document(description="Top", metadata={"description": "Meta"})
        snap, _ = snapshot_from_document(doc, default_name="flow", imported_at="t")
        assert snap.metadata["description"] == "Meta"
        doc = _document(description="Top")
        snap, _ = snapshot_from_document(doc, default_name="flow", imported_at="t")
        assert snap.metadata["description"] == "Top"

    def test_top_level_name_and_metadata_override(self) -> None:
        doc = _document(name="Top", metadata={"name": "Meta", "author": "kim"})
        snap, _ = snapshot_from_document(doc, default_name="flow", imported_at="t")
        assert snap.metadata["name"] == "Meta"
        assert snap.metadata["author"] == "kim"

    def test_mints_missing_ids(self) -> None:
        doc = {"nodes": [{"x": 0, "y": 0}, {"id": "", "x": 1, "y": 1}], "edges": []}
        snap, minted = snapshot_from_document(doc, default_name="d", imported_at="t")
        assert minted == 2
        assert all(is_canonical(n.id) for n in snap.nodes)
        assert snap.nodes[0].id != snap.nodes[1].id

    def test_defaults_for_missing_sections(self) -> None:
        snap, _ = snapshot_from_document({}, default_name="d", imported_at="t")
        assert snap.nodes == []
        assert snap.scale == 1.0


class TestImportJson:
    def test_import_then_load(self, session: GraphSession, tmp_path: Path) -> None:
        source = _write(tmp_path / "flow.json", _document())
        result = ExchangeService(session).import_json(source)

        assert result.ok
        assert result.op == "import_json"
        assert result.data["node_count"] == 2
        assert result.data["name"] == "flow"

        loaded = session.load_graph()
        start = loaded.node(CANON_1)
        assert start is not None
        assert start.secondary_label == "开始"
        assert loaded.node(CANON_2).category is None  # type: ignore[union-attr]
        assert loaded.scale == 1.25
        assert loaded.edges[0].source == CANON_1
        assert loaded.metadata["description"] == "Imported from JSON"

    def test_import_replaces_stored_graph(
        self, session: GraphSession, sample_snapshot: GraphSnapshot, tmp_path: Path
    ) -> None:
        session.save_graph(sample_snapshot)
        ExchangeService(session).import_json(_write(tmp_path / "flow.json", _document()))
        assert {n.id for n in session.load_graph().nodes} == {CANON_1, CANON_2}

    def test_unknown_format_warns(self, session: GraphSession, tmp_path: Path) -> None:
        source = _write(tmp_path / "x.json", _document(format="graph-data-v9"))
        result = ExchangeService(session).import_json(source)
        assert result.ok
        assert any("graph-data-v9" in w for w in result.warnings)

    def test_minted_ids_warn(self, session: GraphSession, tmp_path: Path) -> None:
        source = _write(tmp_path / "x.json", {"nodes": [{"x": 1, "y": 2}]})
        result = ExchangeService(session).import_json(source)
        assert result.data["minted_ids"] == 1
        assert any("Minted 1" in w for w in result.warnings)

    def test_invalid_json(self, session: GraphSession, tmp_path: Path) -> None:
        source = tmp_path / "bad.json"
        source.write_text("{nope", encoding="utf-8")
        result = ExchangeService(session).import_json(source)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_DOCUMENT"
        assert result.error.detail["path"] == str(source)

    def test_invalid_records(self, session: GraphSession, tmp_path: Path) -> None:
        source = _write(tmp_path / "bad.json", {"nodes": [{"id": "n", "x": "left"}]})
        result = ExchangeService(session).import_json(source)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_DOCUMENT"
        assert session.load_graph().nodes == []

    def test_nan_coordinates_rejected(self, session: GraphSession, tmp_path: Path) -> None:
        source = tmp_path / "nan.json"
        source.write_text(
            '{"nodes": [{"id": "n1", "x": NaN, "y": 0}], "edges": []}', encoding="utf-8"
        )
        result = ExchangeService(session).import_json(source)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_DOCUMENT"
        assert session.load_graph().nodes == []

    def test_not_an_object(self, session: GraphSession, tmp_path: Path) -> None:
        result = ExchangeService(session).import_json(_write(tmp_path / "list.json", [1, 2]))
        assert not result.ok

    def test_missing_file(self, session: GraphSession, tmp_path: Path) -> None:
        result = ExchangeService(session).import_json(tmp_path / "absent.json")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_DOCUMENT"


class TestMigrateDirectory:
    def test_each_document_gets_its_own_file(self, tmp_path: Path) -> None:
        _write(tmp_path / "graph-a.json", _document())
        _write(tmp_path / "graph-b.json", {"nodes": [{"id": CANON_1, "x": 1, "y": 1}]})

        result = ExchangeService(GraphSession()).migrate_directory(tmp_path)

        assert result.ok
        assert result.op == "migrate_json"
        assert result.data["migrated"] == 2
        assert result.data["failed"] == 0
        assert [i["node_count"] for i in result.data["items"]] == [2, 1]
        with GraphSession() as s:
            s.open(tmp_path / "graph-a.db")
            first = s.load_graph()
            s.switch_file(tmp_path / "graph-b.db")
            second = s.load_graph()
        assert first.metadata["name"] == "graph-a"
        assert first.metadata["description"] == DEFAULT_DESCRIPTION
        assert [n.id for n in second.nodes] == [CANON_1]

    def test_bad_documents_are_skipped(self, tmp_path: Path) -> None:
        _write(tmp_path / "good.json", _document())
        _write(tmp_path / "no-nodes.json", {"edges": []})
        (tmp_path / "broken.json").write_text("{nope", encoding="utf-8")

        result = ExchangeService(GraphSession()).migrate_directory(tmp_path)

        assert result.ok
        assert result.data["migrated"] == 1
        assert result.data["failed"] == 2
        failed = {Path(i["source"]).name for i in result.data["items"] if not i["ok"]}
        assert failed == {"no-nodes.json", "broken.json"}
        assert any(w.startswith("Skipped no-nodes.json") for w in result.warnings)
        assert (tmp_path / "good.db").exists()
        assert not (tmp_path / "no-nodes.db").exists()

    def test_output_dir_and_pattern(self, tmp_path: Path) -> None:
        _write(tmp_path / "graph-a.json", _document())
        _write(tmp_path / "notes.json", _document())
        out = tmp_path / "out"

        result = ExchangeService(GraphSession()).migrate_directory(
            tmp_path, pattern="graph-*.json", output_dir=out
        )

        assert result.data["migrated"] == 1
        assert result.data["output_dir"] == str(out)
        assert (out / "graph-a.db").exists()
        assert not (out / "notes.db").exists()

    def test_open_file_target_uses_session(
        self, session: GraphSession, sample_snapshot: GraphSnapshot, tmp_path: Path
    ) -> None:
        session.save_graph(sample_snapshot)
        _write(tmp_path / "graph.json", _document())

        result = ExchangeService(session).migrate_directory(tmp_path)

        assert result.ok
        assert session.is_open
        assert {n.id for n in session.load_graph().nodes} == {CANON_1, CANON_2}

    def test_missing_directory(self, tmp_path: Path) -> None:
        result = ExchangeService(GraphSession()).migrate_directory(tmp_path / "absent")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_A_DIRECTORY"


class TestExportJson:
    def test_document_shape(
        self, session: GraphSession, sample_snapshot: GraphSnapshot
    ) -> None:
        session.save_graph(sample_snapshot)
        result = ExchangeService(session).export_json()
        assert result.ok
        doc = result.data["document"]
        assert doc["format"] == DOCUMENT_FORMAT
        assert "exportedAt" in doc
        assert doc["scale"] == 1.5
        assert doc["offset"] == {"x": 12.0, "y": -8.0}
        assert doc["metadata"]["name"] == "Plan"
        assert {"from", "to"} <= set(doc["edges"][0])
        assert result.data["output"] is None

    def test_writes_output_file(
        self, session: GraphSession, sample_snapshot: GraphSnapshot, tmp_path: Path
    ) -> None:
        session.save_graph(sample_snapshot)
        out = tmp_path / "exports" / "plan.json"
        result = ExchangeService(session).export_json(out)
        assert result.ok
        assert result.data["output"] == str(out)
        written = json.loads(out.read_text(encoding="utf-8"))
        assert len(written["nodes"]) == 3

    def test_export_import_round_trip(
        self, session: GraphSession, sample_snapshot: GraphSnapshot, tmp_path: Path
    ) -> None:
        session.save_graph(sample_snapshot)
        out = tmp_path / "plan.json"
        ExchangeService(session).export_json(out)

        session.switch_file(tmp_path / "copy.db")
        result = ExchangeService(session).import_json(out)
        assert result.ok
        copy = session.load_graph()
        assert {n.id for n in copy.nodes} == {n.id for n in sample_snapshot.nodes}
        assert copy.metadata["name"] == "Plan"

    def test_document_from_snapshot(self, sample_snapshot: GraphSnapshot) -> None:
        doc = document_from_snapshot(sample_snapshot, exported_at="now")
        assert doc["exportedAt"] == "now"
        assert doc["nodes"][1]["secondaryLabel"] == "中间"
