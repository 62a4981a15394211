"""Authorization gate: integrity check, policy lookup, pattern match."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import Enum

from safecmd.errors import IntegrityReadError
from safecmd.integrity.checker import IntegrityChecker
from safecmd.integrity.types import IntegrityRecord, VerificationResult
from safecmd.matcher import first_match
from safecmd.policy.loader import PolicyLoader, get_command_config
from safecmd.policy.types import Policy
from safecmd.settings import Settings, load_settings

logger = logging.getLogger(__name__)

FIRST_RUN_NOTICE = "First run detected - integrity records initialized for the current configuration files"


class DenyReason(str, Enum):
    INTEGRITY_TAMPERED = "integrity_tampered"
    NOT_CONFIGURED = "not_configured"
    NO_PATTERN_MATCH = "no_pattern_match"


@dataclass(frozen=True)
class Authorized:
    command: str
    args: tuple[str, ...]
    target: str
    matched_pattern: str
    notices: tuple[str, ...] = ()

    allowed = True


@dataclass(frozen=True)
class Denied:
    command: str
    args: tuple[str, ...]
    reason: DenyReason
    message: str
    target: str = ""
    diagnostics: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
    notices: tuple[str, ...] = ()

    allowed = False


Verdict = Authorized | Denied


def join_args(args: Sequence[str]) -> str:
    """Reconstruct the string patterns are matched against.

    Arguments are joined with single spaces. This is lossy: ``["a b"]`` and
    ``["a", "b"]`` both become ``"a b"``, so a pattern cannot tell one quoted
    argument from two plain ones.
    """
    return " ".join(args)


def suggest_patterns(args: Sequence[str]) -> tuple[str, ...]:
    """Patterns an operator could add to allow this exact invocation."""
    suggestions = [join_args(args)]
    if len(args) >= 2 and args[1]:
        suggestions.append(f"{args[0]} {args[1]}*")
    return tuple(suggestions)


class AuthorizationGate:
    """Single entry point deciding whether ``command args...`` may run."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        checker: IntegrityChecker | None = None,
        loader: PolicyLoader | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.checker = checker or IntegrityChecker(self.settings)
        self.loader = loader or PolicyLoader(self.settings)

    def verify_integrity(self) -> VerificationResult:
        return self.checker.verify()

    def update_and_persist_snapshot(self) -> tuple[IntegrityRecord, ...]:
        return self.checker.update_and_persist()

    def load_policy(self) -> Policy:
        return self.loader.load()

    def authorize(self, command: str, args: Sequence[str]) -> Verdict:
        """Integrity first, then policy.

        Integrity failure denies regardless of pattern content, including a
        file that cannot be hashed during the first-run bootstrap. A snapshot
        that cannot be saved (IntegrityWriteError) and policy load errors
        (ConfigNotFound, ConfigParseError, ConfigSchemaError) propagate.
        """
        argv = tuple(args)
        notices: tuple[str, ...] = ()

        if self.settings.skip_integrity_check:
            logger.warning("integrity check disabled by environment; tamper detection is off")
        else:
            try:
                result = self.checker.verify()
                if result.is_first_run:
                    self.checker.update_and_persist()
            except IntegrityReadError as exc:
                return Denied(
                    command=command,
                    args=argv,
                    target=join_args(argv),
                    reason=DenyReason.INTEGRITY_TAMPERED,
                    message="Configuration integrity check failed",
                    diagnostics=(str(exc),),
                )

            if result.is_first_run:
                logger.info("first run: integrity snapshot created")
                notices = (FIRST_RUN_NOTICE,)
            elif not result.valid:
                return Denied(
                    command=command,
                    args=argv,
                    target=join_args(argv),
                    reason=DenyReason.INTEGRITY_TAMPERED,
                    message="Configuration integrity check failed",
                    diagnostics=result.errors,
                )

        verdict = self.evaluate(command, argv)
        if notices:
            verdict = replace(verdict, notices=notices + verdict.notices)
        return verdict

    def evaluate(self, command: str, args: Sequence[str]) -> Verdict:
        """Policy-only decision, without the integrity step."""
        argv = tuple(args)
        policy = self.loader.load()
        target = join_args(argv)

        rule = get_command_config(policy, command)
        if rule is None:
            logger.debug("deny %s: not configured", command)
            return Denied(
                command=command,
                args=argv,
                target=target,
                reason=DenyReason.NOT_CONFIGURED,
                message=f'Command "{command}" is not configured',
            )

        matched = first_match(rule.patterns, target)
        if matched is None:
            logger.debug("deny %s %r: no pattern matched", command, target)
            return Denied(
                command=command,
                args=argv,
                target=target,
                reason=DenyReason.NO_PATTERN_MATCH,
                message=f"Command not allowed: {command} {target}".rstrip(),
                patterns=rule.patterns,
                suggestions=suggest_patterns(argv),
            )

        logger.debug("allow %s %r via %r", command, target, matched)
        return Authorized(command=command, args=argv, target=target, matched_pattern=matched)

