"""Policy data types."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class CommandRule:
    """Allowed argument patterns for one command, in declaration order."""

    name: str
    patterns: tuple[str, ...] = ()


@dataclass(frozen=True)
class Policy:
    """Command name -> rule, as loaded from a single policy file."""

    commands: dict[str, CommandRule] = field(default_factory=dict)
    source: Path | None = None

    def command_names(self) -> list[str]:
        return list(self.commands)

    def pattern_count(self) -> int:
        return sum(len(rule.patterns) for rule in self.commands.values())
