"""Pytest configuration and fixtures for safe-command tests."""
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from safecmd.settings import (
    SAFE_COMMAND_CONFIG_DIR_ENV,
    SAFE_COMMAND_NO_INTEGRITY_CHECK_ENV,
    Settings,
    load_settings,
)


def pytest_sessionfinish(session, exitstatus):
    """Fail a ``--cov`` run that wrote no data file.

    pytest-cov reports 0% instead of failing when safecmd was imported from a
    path it does not measure (e.g. a stale install outside ``src/``).
    """
    if not getattr(session.config.option, "cov_source", None):
        return

    if any(Path.cwd().glob(".coverage*")):
        return

    pytest.exit(
        "pytest-cov wrote no .coverage data for safecmd; "
        "reinstall with `pip install -e .[test]` and rerun.",
        returncode=1,
    )


class ScriptedConfirmation:
    """Answers approval questions from a fixed list and records what was asked."""

    def __init__(self, answers: Sequence[bool]) -> None:
        self._answers = list(answers)
        self.questions: list[str] = []

    def ask(self, question: str) -> bool:
        self.questions.append(question)
        if not self._answers:
            raise AssertionError(f"unexpected question: {question}")
        return self._answers.pop(0)


@pytest.fixture(autouse=True)
def _reset_safecmd_logger():
    """`--verbose` runs attach a handler and stop propagation; undo that per test."""
    logger = logging.getLogger("safecmd")
    handlers = list(logger.handlers)
    level, propagate = logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Isolated HOME and project directory; cwd is the project."""
    home = tmp_path / "home"
    project = tmp_path / "project"
    home.mkdir()
    project.mkdir()

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv(SAFE_COMMAND_CONFIG_DIR_ENV, raising=False)
    monkeypatch.delenv(SAFE_COMMAND_NO_INTEGRITY_CHECK_ENV, raising=False)
    monkeypatch.chdir(project)
    return load_settings()


@pytest.fixture
def write_policy() -> Callable[[Path, str], Path]:
    def _write(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text.lstrip(), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def scripted_confirm() -> Callable[..., ScriptedConfirmation]:
    def _make(*answers: bool) -> ScriptedConfirmation:
        return ScriptedConfirmation(answers)

    return _make
