"""Tests for snapshot persistence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from safecmd.errors import INTEGRITY_READ_ERROR, INTEGRITY_WRITE_ERROR, IntegrityReadError, IntegrityWriteError
from safecmd.integrity import store as store_module
from safecmd.integrity.hashing import sha256_file
from safecmd.integrity.store import FileSnapshotStore, MemorySnapshotStore
from safecmd.integrity.types import IntegrityRecord

RECORD = IntegrityRecord(
    path="/home/u/.config/safe-command/safe-command.yaml",
    hash="a" * 64,
    last_modified="2026-01-02T03:04:05.678Z",
)


def test_missing_file_loads_as_none(tmp_path: Path) -> None:
    assert FileSnapshotStore(tmp_path / "integrity.json").load() is None


def test_save_writes_camel_case_json(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "integrity.json"
    FileSnapshotStore(path).save([RECORD])

    data = json.loads(path.read_text())
    assert data == [
        {
            "path": RECORD.path,
            "hash": RECORD.hash,
            "lastModified": RECORD.last_modified,
        }
    ]
    assert FileSnapshotStore(path).load() == (RECORD,)


def test_empty_snapshot_is_distinct_from_missing(tmp_path: Path) -> None:
    store = FileSnapshotStore(tmp_path / "integrity.json")
    store.save([])
    assert store.load() == ()


def test_save_leaves_no_temp_files(tmp_path: Path) -> None:
    store = FileSnapshotStore(tmp_path / "integrity.json")
    store.save([RECORD])
    store.save([])

    assert sorted(p.name for p in tmp_path.iterdir()) == ["integrity.json"]


def test_failed_replace_keeps_previous_snapshot(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    store = FileSnapshotStore(tmp_path / "integrity.json")
    store.save([RECORD])

    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(store_module.os, "replace", boom)
    with pytest.raises(IntegrityWriteError, match="disk full") as excinfo:
        store.save([])

    assert excinfo.value.reason_code == INTEGRITY_WRITE_ERROR
    assert "Failed to save integrity records" in str(excinfo.value)

    assert store.load() == (RECORD,)
    assert sorted(p.name for p in tmp_path.iterdir()) == ["integrity.json"]


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        '{"path": "x"}',
        '[{"path": "x", "hash": "short", "lastModified": "t"}]',
        '[{"path": "x", "hash": "' + "a" * 64 + '"}]',
        '[{"path": "", "hash": "' + "a" * 64 + '", "lastModified": "t"}]',
    ],
)
def test_corrupt_snapshot_fails_closed(tmp_path: Path, content: str) -> None:
    path = tmp_path / "integrity.json"
    path.write_text(content)

    with pytest.raises(IntegrityReadError) as excinfo:
        FileSnapshotStore(path).load()
    assert excinfo.value.reason_code == INTEGRITY_READ_ERROR


def test_duplicate_paths_are_rejected(tmp_path: Path) -> None:
    path = tmp_path / "integrity.json"
    path.write_text(json.dumps([RECORD.to_dict(), RECORD.to_dict()]))

    with pytest.raises(IntegrityReadError, match="more than once"):
        FileSnapshotStore(path).load()
    with pytest.raises(IntegrityReadError):
        MemorySnapshotStore().save([RECORD, RECORD])


def test_memory_store_round_trip() -> None:
    store = MemorySnapshotStore()
    assert store.load() is None

    store.save([RECORD])
    assert store.load() == (RECORD,)
    assert store.save_count == 1


def test_sha256_file_matches_known_digest(tmp_path: Path) -> None:
    path = tmp_path / "f"
    path.write_bytes(b"abc")
    assert sha256_file(path) == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_sha256_file_missing_raises(tmp_path: Path) -> None:
    with pytest.raises(IntegrityReadError):
        sha256_file(tmp_path / "missing")


def test_save_under_regular_file_raises_write_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    store = FileSnapshotStore(blocker / "sub" / "integrity.json")

    with pytest.raises(IntegrityWriteError, match="Failed to save integrity records"):
        store.save([RECORD])

    assert blocker.read_text() == ""


def test_corrupt_snapshot_message_names_file_to_remove(tmp_path: Path) -> None:
    path = tmp_path / "integrity.json"
    path.write_text("{not json")

    with pytest.raises(IntegrityReadError) as excinfo:
        FileSnapshotStore(path).load()

    message = str(excinfo.value)
    assert f"remove {path}" in message
    assert "safe-command approve" in message
