"""Discover, parse, and validate safe-command policy files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from safecmd.errors import ConfigNotFound, ConfigParseError, ConfigSchemaError
from safecmd.policy.types import CommandRule, Policy
from safecmd.settings import Settings, load_settings

logger = logging.getLogger(__name__)


def candidate_paths(settings: Settings) -> tuple[Path, ...]:
    """Return policy locations in priority order (project-local first)."""
    return (settings.local_policy_path, settings.global_policy_path)


def discover_policy_files(settings: Settings) -> list[Path]:
    """Return every candidate policy file that exists, in priority order."""
    found: list[Path] = []
    for path in candidate_paths(settings):
        if path.is_file() and path not in found:
            found.append(path)
    return found


def find_policy_file(settings: Settings) -> Path | None:
    """Return the first existing candidate policy file."""
    found = discover_policy_files(settings)
    return found[0] if found else None


class PolicyLoader:
    """Loads the active policy: the first candidate file found, never merged."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or load_settings()

    def load(self) -> Policy:
        path = find_policy_file(self.settings)
        if path is None:
            searched = "\n".join(f"  - {p}" for p in candidate_paths(self.settings))
            raise ConfigNotFound(
                "Configuration file not found\n"
                f"Searched locations:\n{searched}\n\n"
                "Create one with `safe-command init` or write safe-command.yaml in the project root."
            )

        logger.debug("loading policy from %s", path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigParseError(f"Failed to read configuration file: {path}\n{exc}") from exc

        return parse_policy(text, source=path)


def parse_policy(text: str, source: Path | None = None) -> Policy:
    """Parse policy YAML text and validate its structure."""
    label = str(source) if source is not None else "<policy>"
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigParseError(
            f"Failed to parse {label}\n{exc}\n\nPlease check your YAML syntax."
        ) from exc

    return Policy(commands=_normalize_commands(raw, label), source=source)


def _normalize_commands(raw: Any, label: str) -> dict[str, CommandRule]:
    if not isinstance(raw, dict):
        raise ConfigSchemaError(f"{label}: configuration must be a mapping")

    commands_raw = raw.get("commands")
    if not isinstance(commands_raw, dict):
        raise ConfigSchemaError(f'{label}: configuration must have a "commands" mapping')

    commands: dict[str, CommandRule] = {}
    for name, entry in commands_raw.items():
        command_name = str(name)
        if not isinstance(entry, dict):
            raise ConfigSchemaError(f'{label}: command "{command_name}" must be a mapping')

        patterns = entry.get("patterns")
        if not isinstance(patterns, list):
            raise ConfigSchemaError(f'{label}: command "{command_name}" must have a "patterns" list')
        if not all(isinstance(pattern, str) for pattern in patterns):
            raise ConfigSchemaError(f'{label}: all patterns in "{command_name}" must be strings')

        commands[command_name] = CommandRule(name=command_name, patterns=tuple(patterns))

    return commands


def load_policy(settings: Settings | None = None) -> Policy:
    """Load the active policy from disk."""
    return PolicyLoader(settings).load()


def get_command_config(policy: Policy, name: str) -> CommandRule | None:
    """Return the rule for ``name`` or None when the command is not configured."""
    return policy.commands.get(name)
