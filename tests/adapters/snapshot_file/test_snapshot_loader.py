from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from blogimport.adapters.snapshot_file import load_snapshot, snapshot_from_payload
from blogimport.domain.errors import SnapshotFormatError
from blogimport.domain.model import TableName
from tests.helpers.snapshots import make_payload, raw_post, raw_tag

if TYPE_CHECKING:
    from pathlib import Path


def _write(tmp_path: Path, document: object) -> Path:
    path = tmp_path / "export.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


def test_load_snapshot_reads_export_file(tmp_path: Path) -> None:
    payload = make_payload(tags=[raw_tag(1, name="News")], posts=[raw_post(1, title="Hello")])

    snapshot = load_snapshot(_write(tmp_path, payload))

    assert snapshot.meta.version == "003"
    assert [tag["name"] for tag in snapshot.table(TableName.TAGS)] == ["News"]
    assert [post["title"] for post in snapshot.table(TableName.POSTS)] == ["Hello"]


def test_load_snapshot_unwraps_db_export(tmp_path: Path) -> None:
    payload = make_payload(tags=[raw_tag(1, name="News")])

    snapshot = load_snapshot(_write(tmp_path, {"db": [payload]}))

    assert len(snapshot.table(TableName.TAGS)) == 1


def test_load_snapshot_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text('{"meta": ', encoding="utf-8")

    with pytest.raises(SnapshotFormatError) as excinfo:
        load_snapshot(path)

    (error,) = excinfo.value.errors
    assert error.message.startswith("Snapshot file is not valid JSON")
    assert error.table == "snapshot"


def test_load_snapshot_propagates_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_snapshot(tmp_path / "missing.json")


def test_envelope_errors_name_their_location() -> None:
    with pytest.raises(SnapshotFormatError) as excinfo:
        snapshot_from_payload({"meta": {"version": "1"}, "data": {"tags": {"id": 1}}})

    (error,) = excinfo.value.errors
    assert error.message.startswith("Snapshot is invalid at [data.tags]:")
    assert error.column == "tags"


def test_envelope_requires_meta() -> None:
    with pytest.raises(SnapshotFormatError) as excinfo:
        snapshot_from_payload({"data": {}})

    assert [error.column for error in excinfo.value.errors] == ["meta"]


def test_blank_version_is_rejected() -> None:
    with pytest.raises(SnapshotFormatError, match="version"):
        snapshot_from_payload({"meta": {"version": "  "}, "data": {}})


def test_numeric_version_is_accepted() -> None:
    snapshot = snapshot_from_payload({"meta": {"version": 3}, "data": {}})

    assert snapshot.meta.version == "3"


def test_non_object_payload_is_rejected() -> None:
    with pytest.raises(SnapshotFormatError, match="must be an object"):
        snapshot_from_payload(["not", "an", "export"])


def test_unknown_columns_survive_loading() -> None:
    payload = make_payload(tags=[raw_tag(1, name="News", accent_color="#ff0000")])

    snapshot = snapshot_from_payload(payload)

    assert snapshot.table(TableName.TAGS)[0]["accent_color"] == "#ff0000"
