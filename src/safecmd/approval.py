"""Human-confirmed approval of policy file changes.

Approval is the only path from TAMPERED back to APPROVED. It must never be
reachable by the agent whose commands are being gated.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from rich.console import Console

from safecmd.errors import ApprovalError
from safecmd.integrity.checker import IntegrityChecker
from safecmd.integrity.types import IntegrityRecord, TrustState, VerificationResult
from safecmd.ui import console as default_console
from safecmd.ui import short_hash

AFFIRMATIVE = ("yes", "y")

REAPPROVE_QUESTION = "Configuration is already approved. Re-approve anyway?"
FIRST_RUN_QUESTION = "Approve these configuration files?"
CHANGES_QUESTION = "Approve these changes?"


class ConfirmationProvider(Protocol):
    def ask(self, question: str) -> bool: ...


class ConsoleConfirmation:
    """Blocking yes/no prompt on the controlling terminal. No timeout."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or default_console

    def ask(self, question: str) -> bool:
        try:
            answer = self.console.input(f"{question} (yes/no): ")
        except EOFError:
            return False
        return answer.strip().lower() in AFFIRMATIVE


@dataclass(frozen=True)
class ApprovalOutcome:
    approved: bool
    state: TrustState
    records: tuple[IntegrityRecord, ...] = ()
    cancelled_at: str | None = None


class ApprovalWorkflow:
    def __init__(
        self,
        checker: IntegrityChecker,
        confirm: ConfirmationProvider,
        console: Console | None = None,
    ) -> None:
        self.checker = checker
        self.confirm = confirm
        self.console = console or default_console

    def run(self) -> ApprovalOutcome:
        self.console.print("[bold]safe-command approve[/bold]")
        self.console.print("====================")
        self.console.print()

        files = self.checker.discover_files()
        if not files:
            raise ApprovalError(
                "No configuration files found\n"
                "Please create a safe-command.yaml file first (see `safe-command init`)."
            )

        self._show_files(files)
        result = self.checker.verify()
        state = result.state

        if state is TrustState.UNINITIALIZED:
            self.console.print("ℹ️  This is the first run - no integrity records exist yet")
            self.console.print()
        elif state is TrustState.APPROVED:
            self.console.print("✅ All configuration files are approved and unchanged")
            self.console.print()
            self._show_records("Current integrity records:", self.checker.load_snapshot() or (), "Last approved")
            if not self.confirm.ask(REAPPROVE_QUESTION):
                return self._cancel(state, REAPPROVE_QUESTION)
        else:
            self._show_changes(result)

        question = FIRST_RUN_QUESTION if state is TrustState.UNINITIALIZED else CHANGES_QUESTION
        self.console.print("[bold yellow]⚠️  WARNING:[/bold yellow]")
        self.console.print("   By approving, you confirm that you have reviewed the configuration")
        self.console.print("   and trust that all command patterns are safe and intentional.")
        self.console.print()

        if not self.confirm.ask(question):
            return self._cancel(state, question)

        records = self.checker.update_and_persist()
        self.console.print()
        self.console.print("[green]✅ Configuration approved successfully[/green]")
        self.console.print()
        self._show_records("Updated integrity records:", records, "Approved")
        self.console.print("You can now run safe-command with these configurations.")
        return ApprovalOutcome(approved=True, state=state, records=records)

    def _cancel(self, state: TrustState, question: str) -> ApprovalOutcome:
        self.console.print()
        self.console.print("✋ Approval cancelled")
        return ApprovalOutcome(approved=False, state=state, cancelled_at=question)

    def _show_files(self, files: list[Path]) -> None:
        self.console.print("📋 Configuration Files:")
        self.console.print()
        for path in files:
            self.console.print(f"  {path}", markup=False)
        self.console.print()

    def _show_changes(self, result: VerificationResult) -> None:
        self.console.print("[bold yellow]⚠️  Configuration Changes Detected:[/bold yellow]")
        self.console.print()
        sections = (
            ("New files:", "+", result.new_files),
            ("Modified files:", "~", result.changed_files),
            ("Deleted files (will be dropped from tracking):", "-", result.deleted_files),
        )
        for title, marker, paths in sections:
            if not paths:
                continue
            self.console.print(f"  {title}")
            for path in paths:
                self.console.print(f"    {marker} {path}", markup=False)
            self.console.print()

    def _show_records(self, title: str, records: Sequence[IntegrityRecord], stamp_label: str) -> None:
        self.console.print(title)
        for record in records:
            self.console.print(f"  {record.path}", markup=False)
            self.console.print(f"    Hash: {short_hash(record.hash)}")
            self.console.print(f"    {stamp_label}: {record.last_modified}")
        self.console.print()
