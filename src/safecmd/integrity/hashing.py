"""Content hashing for tracked policy files."""

from __future__ import annotations

import hashlib
from pathlib import Path

from safecmd.errors import IntegrityReadError


def sha256_file(path: Path) -> str:
    """Compute SHA-256 over the file's full byte content.

    Any I/O failure is raised as IntegrityReadError; a file that cannot be
    read is never treated as unchanged.
    """
    digest = hashlib.sha256()
    try:
        with path.open("rb") as handle:
            while True:
                chunk = handle.read(65536)
                if not chunk:
                    break
                digest.update(chunk)
    except OSError as exc:
        raise IntegrityReadError(f"Failed to read configuration file for hashing: {path}\n{exc}") from exc
    return digest.hexdigest()
