"""Spawn authorized commands without a shell."""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

COMMAND_NOT_FOUND_EXIT = 127
NOT_EXECUTABLE_EXIT = 126


@dataclass(frozen=True)
class ExecResult:
    """Result envelope for a forwarded command."""

    argv: tuple[str, ...]
    returncode: int


class ExecError(RuntimeError):
    """Raised when the command could not be started at all."""

    def __init__(self, argv: Sequence[str], returncode: int, detail: str) -> None:
        super().__init__(f"failed to execute {render_argv(argv)}: {detail}")
        self.argv = tuple(argv)
        self.returncode = returncode


def render_argv(argv: Sequence[str]) -> str:
    return shlex.join(argv)


def run_command(command: str, args: Sequence[str], *, cwd: Path | None = None) -> ExecResult:
    """Run ``command args...`` with inherited stdio and return its exit code.

    The argument vector goes straight to exec; nothing is shell-expanded.
    """
    argv = [command, *args]
    try:
        completed = subprocess.run(argv, cwd=cwd, check=False)
    except FileNotFoundError as exc:
        raise ExecError(argv, COMMAND_NOT_FOUND_EXIT, "command not found") from exc
    except PermissionError as exc:
        raise ExecError(argv, NOT_EXECUTABLE_EXIT, "permission denied") from exc
    returncode = completed.returncode
    if returncode < 0:
        # Killed by signal N: report it the way shells do.
        returncode = 128 - returncode
    return ExecResult(argv=tuple(argv), returncode=returncode)
