"""Tamper detection for policy files."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from safecmd.integrity.hashing import sha256_file
from safecmd.integrity.store import FileSnapshotStore, SnapshotStore
from safecmd.integrity.types import HASH_PREFIX_LEN, IntegrityRecord, VerificationResult
from safecmd.policy.loader import discover_policy_files
from safecmd.settings import Settings, load_settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _isoformat(moment: datetime) -> str:
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class IntegrityChecker:
    """Compares discovered policy files against the trusted snapshot."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        store: SnapshotStore | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.store = store or FileSnapshotStore(self.settings.integrity_path)
        self.clock = clock or _utc_now

    def discover_files(self) -> list[Path]:
        """All existing policy files in priority order, local first."""
        return discover_policy_files(self.settings)

    def load_snapshot(self) -> tuple[IntegrityRecord, ...] | None:
        return self.store.load()

    def compute_records(self) -> tuple[IntegrityRecord, ...]:
        """Hash every currently existing policy file."""
        stamp = _isoformat(self.clock())
        return tuple(
            IntegrityRecord(path=str(path), hash=sha256_file(path), last_modified=stamp)
            for path in self.discover_files()
        )

    def update_and_persist(self) -> tuple[IntegrityRecord, ...]:
        """Recompute the snapshot from the files on disk and save it.

        Tracked files that no longer exist are not carried over.
        """
        records = self.compute_records()
        self.store.save(records)
        return records

    def verify(self) -> VerificationResult:
        """Classify every policy file as trusted, new, changed, or deleted.

        Raises:
            IntegrityReadError: snapshot unreadable or a tracked file could not be hashed.
        """
        snapshot = self.store.load()
        files = self.discover_files()

        if snapshot is None:
            logger.info("no integrity snapshot at %s; first run", self.store.location)
            return VerificationResult(valid=True, is_first_run=True)

        trusted = {record.path: record for record in snapshot}
        errors: list[str] = []
        changed: list[str] = []
        new: list[str] = []
        deleted: list[str] = []

        for path in files:
            key = str(path)
            current_hash = sha256_file(path)
            record = trusted.get(key)
            if record is None:
                new.append(key)
                errors.append(
                    f"New configuration file detected: {key}\n"
                    "  Run 'safe-command approve' to approve this file"
                )
            elif record.hash != current_hash:
                changed.append(key)
                errors.append(
                    f"Configuration file has been modified: {key}\n"
                    f"  Expected hash: {record.short_hash}...\n"
                    f"  Current hash:  {current_hash[:HASH_PREFIX_LEN]}...\n"
                    "  Run 'safe-command approve' to approve these changes"
                )

        for record in snapshot:
            if not Path(record.path).is_file():
                deleted.append(record.path)
                errors.append(
                    f"Configuration file has been deleted: {record.path}\n"
                    "  Run 'safe-command approve' to stop tracking it"
                )

        result = VerificationResult(
            valid=not errors,
            is_first_run=False,
            changed_files=tuple(changed),
            new_files=tuple(new),
            deleted_files=tuple(deleted),
            errors=tuple(errors),
        )
        logger.debug(
            "integrity %s: %d new, %d changed, %d deleted",
            result.state.value,
            len(new),
            len(changed),
            len(deleted),
        )
        return result
