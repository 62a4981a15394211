"""Integrity tracking for policy files."""

from safecmd.integrity.checker import IntegrityChecker
from safecmd.integrity.hashing import sha256_file
from safecmd.integrity.store import FileSnapshotStore, MemorySnapshotStore, SnapshotStore
from safecmd.integrity.types import IntegrityRecord, TrustState, VerificationResult

__all__ = [
    "FileSnapshotStore",
    "IntegrityChecker",
    "IntegrityRecord",
    "MemorySnapshotStore",
    "SnapshotStore",
    "TrustState",
    "VerificationResult",
    "sha256_file",
]
