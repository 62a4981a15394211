"""Persistence for the trusted integrity snapshot."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from safecmd.errors import IntegrityReadError, IntegrityWriteError
from safecmd.integrity.types import IntegrityRecord
from safecmd.schemas.validator import validate_data

logger = logging.getLogger(__name__)

SNAPSHOT_SCHEMA = "integrity_snapshot"


class SnapshotStore(Protocol):
    """Read-all / write-all access to the snapshot.

    ``load`` returns None when no snapshot was ever saved, which is distinct
    from an empty snapshot.
    """

    @property
    def location(self) -> str: ...

    def load(self) -> tuple[IntegrityRecord, ...] | None: ...

    def save(self, records: Iterable[IntegrityRecord]) -> None: ...


def _find_duplicate(records: tuple[IntegrityRecord, ...]) -> str | None:
    seen: set[str] = set()
    for record in records:
        if record.path in seen:
            return record.path
        seen.add(record.path)
    return None


def _check_unique(records: tuple[IntegrityRecord, ...], location: str) -> None:
    duplicate = _find_duplicate(records)
    if duplicate is not None:
        raise IntegrityReadError(f"Integrity records at {location} list {duplicate} more than once")


class FileSnapshotStore:
    """JSON snapshot file replaced atomically on every save."""

    def __init__(self, path: Path) -> None:
        self.path = path

    @property
    def location(self) -> str:
        return str(self.path)

    def load(self) -> tuple[IntegrityRecord, ...] | None:
        if not self.path.exists():
            return None

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise IntegrityReadError(
                f"Failed to load integrity records from {self.path}\n{exc}\n{self._recovery_hint()}"
            ) from exc

        errors = validate_data(data, SNAPSHOT_SCHEMA)
        if errors:
            detail = "\n".join(f"  - {msg}" for msg in errors)
            raise IntegrityReadError(
                f"Integrity records at {self.path} are malformed:\n{detail}\n{self._recovery_hint()}"
            )

        records = tuple(IntegrityRecord.from_dict(item) for item in data)
        duplicate = _find_duplicate(records)
        if duplicate is not None:
            raise IntegrityReadError(
                f"Integrity records at {self.path} list {duplicate} more than once\n{self._recovery_hint()}"
            )
        return records

    def save(self, records: Iterable[IntegrityRecord]) -> None:
        snapshot = tuple(records)
        _check_unique(snapshot, self.location)
        payload = json.dumps([r.to_dict() for r in snapshot], indent=2, ensure_ascii=False) + "\n"

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        except OSError as exc:
            raise IntegrityWriteError(f"Failed to save integrity records to {self.path}\n{exc}") from exc

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise IntegrityWriteError(f"Failed to save integrity records to {self.path}\n{exc}") from exc
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.info("saved %d integrity record(s) to %s", len(snapshot), self.path)

    def _recovery_hint(self) -> str:
        return (
            f"To start over, remove {self.path} and run 'safe-command approve' "
            "to review and re-approve the configuration files."
        )


class MemorySnapshotStore:
    """In-process snapshot store."""

    def __init__(self, records: Iterable[IntegrityRecord] | None = None) -> None:
        self._records = tuple(records) if records is not None else None
        self.save_count = 0

    @property
    def location(self) -> str:
        return "<memory>"

    def load(self) -> tuple[IntegrityRecord, ...] | None:
        return self._records

    def save(self, records: Iterable[IntegrityRecord]) -> None:
        snapshot = tuple(records)
        _check_unique(snapshot, self.location)
        self._records = snapshot
        self.save_count += 1
