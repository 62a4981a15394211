"""Tests for tamper detection."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from safecmd.errors import IntegrityReadError
from safecmd.integrity import checker as checker_module
from safecmd.integrity.checker import IntegrityChecker
from safecmd.integrity.hashing import sha256_file
from safecmd.integrity.store import MemorySnapshotStore
from safecmd.integrity.types import IntegrityRecord, TrustState

POLICY = 'commands:\n  aws:\n    patterns: ["s3 ls*"]\n'


def _fixed_clock() -> datetime:
    return datetime(2026, 3, 4, 5, 6, 7, 891000, tzinfo=UTC)


@pytest.fixture
def checker(settings) -> IntegrityChecker:
    return IntegrityChecker(settings, store=MemorySnapshotStore(), clock=_fixed_clock)


def test_no_snapshot_is_first_run(checker) -> None:
    result = checker.verify()

    assert result.valid is True
    assert result.is_first_run is True
    assert result.state is TrustState.UNINITIALIZED


def test_first_run_even_without_policy_files(checker) -> None:
    assert checker.verify().is_first_run is True


def test_update_and_persist_records_every_file(settings, write_policy, checker) -> None:
    write_policy(settings.local_policy_path, POLICY)
    write_policy(settings.global_policy_path, POLICY + "  git:\n    patterns: []\n")

    records = checker.update_and_persist()

    assert [r.path for r in records] == [str(settings.local_policy_path), str(settings.global_policy_path)]
    assert records[0].hash == sha256_file(settings.local_policy_path)
    assert records[0].last_modified == "2026-03-04T05:06:07.891Z"
    assert checker.load_snapshot() == records


def test_unchanged_files_verify_as_approved(settings, write_policy, checker) -> None:
    write_policy(settings.global_policy_path, POLICY)
    checker.update_and_persist()

    result = checker.verify()

    assert result.valid is True
    assert result.state is TrustState.APPROVED
    assert result.errors == ()


def test_modified_file_is_tampered(settings, write_policy, checker) -> None:
    path = write_policy(settings.global_policy_path, POLICY)
    checker.update_and_persist()
    old_hash = sha256_file(path)
    path.write_text(POLICY + "  rm:\n    patterns: ['*']\n")

    result = checker.verify()

    assert result.state is TrustState.TAMPERED
    assert result.changed_files == (str(path),)
    assert len(result.errors) == 1
    assert "has been modified" in result.errors[0]
    assert old_hash[:16] in result.errors[0]
    assert sha256_file(path)[:16] in result.errors[0]


def test_whitespace_edit_is_detected(settings, write_policy, checker) -> None:
    path = write_policy(settings.global_policy_path, POLICY)
    checker.update_and_persist()
    path.write_text(POLICY + "\n")

    assert checker.verify().valid is False


def test_new_local_file_is_tampered(settings, write_policy, checker) -> None:
    write_policy(settings.global_policy_path, POLICY)
    checker.update_and_persist()
    write_policy(settings.local_policy_path, POLICY)

    result = checker.verify()

    assert result.valid is False
    assert result.new_files == (str(settings.local_policy_path),)
    assert "New configuration file detected" in result.errors[0]


def test_deleted_file_is_tampered(settings, write_policy, checker) -> None:
    write_policy(settings.global_policy_path, POLICY)
    local = write_policy(settings.local_policy_path, POLICY)
    checker.update_and_persist()
    local.unlink()

    result = checker.verify()

    assert result.valid is False
    assert result.deleted_files == (str(local),)
    assert "has been deleted" in result.errors[0]


def test_empty_snapshot_with_files_is_not_first_run(settings, write_policy) -> None:
    checker = IntegrityChecker(settings, store=MemorySnapshotStore([]))
    write_policy(settings.global_policy_path, POLICY)

    result = checker.verify()

    assert result.is_first_run is False
    assert result.new_files == (str(settings.global_policy_path),)


def test_approval_drops_deleted_records(settings, write_policy, checker) -> None:
    write_policy(settings.global_policy_path, POLICY)
    local = write_policy(settings.local_policy_path, POLICY)
    checker.update_and_persist()
    local.unlink()

    records = checker.update_and_persist()

    assert [r.path for r in records] == [str(settings.global_policy_path)]
    assert checker.verify().valid is True


def test_unreadable_file_raises(settings, write_policy, checker, monkeypatch) -> None:
    write_policy(settings.global_policy_path, POLICY)
    checker.update_and_persist()

    def fail(path):
        raise IntegrityReadError(f"cannot read {path}")

    monkeypatch.setattr(checker_module, "sha256_file", fail)
    with pytest.raises(IntegrityReadError):
        checker.verify()


def test_preexisting_matching_snapshot_is_approved(settings, write_policy) -> None:
    path = write_policy(settings.global_policy_path, POLICY)
    record = IntegrityRecord(path=str(path), hash=sha256_file(path), last_modified="t")
    checker = IntegrityChecker(settings, store=MemorySnapshotStore([record]))

    assert checker.verify().state is TrustState.APPROVED


def test_default_store_writes_integrity_json(settings, write_policy) -> None:
    write_policy(settings.global_policy_path, POLICY)
    checker = IntegrityChecker(settings)

    checker.update_and_persist()

    assert settings.integrity_path.is_file()
    assert IntegrityChecker(settings).verify().state is TrustState.APPROVED
