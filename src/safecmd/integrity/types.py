"""Integrity snapshot types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

HASH_PREFIX_LEN = 16


class TrustState(str, Enum):
    """Trust lifecycle of the policy files."""

    UNINITIALIZED = "uninitialized"
    APPROVED = "approved"
    TAMPERED = "tampered"


@dataclass(frozen=True)
class IntegrityRecord:
    """Trusted hash of one policy file at approval time."""

    path: str
    hash: str
    last_modified: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "hash": self.hash, "lastModified": self.last_modified}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IntegrityRecord:
        return cls(path=data["path"], hash=data["hash"], last_modified=data["lastModified"])

    @property
    def short_hash(self) -> str:
        return self.hash[:HASH_PREFIX_LEN]


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of comparing the policy files on disk with the snapshot."""

    valid: bool
    is_first_run: bool
    changed_files: tuple[str, ...] = ()
    new_files: tuple[str, ...] = ()
    deleted_files: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()

    @property
    def state(self) -> TrustState:
        if self.is_first_run:
            return TrustState.UNINITIALIZED
        return TrustState.APPROVED if self.valid else TrustState.TAMPERED
