"""Resolve filesystem locations and runtime toggles for safe-command."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

POLICY_FILENAME = "safe-command.yaml"
INTEGRITY_FILENAME = "integrity.json"

SAFE_COMMAND_CONFIG_DIR_ENV = "SAFE_COMMAND_CONFIG_DIR"
# Disables tamper detection entirely. Meant for non-interactive automation
# and test harnesses, never for agent-facing setups.
SAFE_COMMAND_NO_INTEGRITY_CHECK_ENV = "SAFE_COMMAND_NO_INTEGRITY_CHECK"


@dataclass(frozen=True)
class Settings:
    """Paths and flags for a single invocation."""

    cwd: Path
    config_dir: Path
    skip_integrity_check: bool = False

    @property
    def local_policy_path(self) -> Path:
        return self.cwd / POLICY_FILENAME

    @property
    def global_policy_path(self) -> Path:
        return self.config_dir / POLICY_FILENAME

    @property
    def integrity_path(self) -> Path:
        return self.config_dir / INTEGRITY_FILENAME


def default_config_dir(env: Mapping[str, str] | None = None) -> Path:
    """Return the global configuration directory.

    ``$SAFE_COMMAND_CONFIG_DIR`` wins; otherwise ``~/.config/safe-command``.
    """
    environ = os.environ if env is None else env
    override = environ.get(SAFE_COMMAND_CONFIG_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser().resolve()

    home = environ.get("HOME", "").strip()
    base = Path(home) if home else Path.home()
    return (base / ".config" / "safe-command").resolve()


def load_settings(
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Build settings from the working directory and environment."""
    environ = os.environ if env is None else env
    return Settings(
        cwd=(cwd or Path.cwd()).resolve(),
        config_dir=default_config_dir(environ),
        skip_integrity_check=environ.get(SAFE_COMMAND_NO_INTEGRITY_CHECK_ENV, "0") == "1",
    )
