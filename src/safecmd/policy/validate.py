"""Heuristic lint checks over a loaded policy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from safecmd.policy.types import Policy

Severity = Literal["error", "warning", "info"]

_AWS_DESTRUCTIVE = (
    ("delete-", "delete"),
    ("terminate-", "terminate"),
    ("remove-", "destructive"),
    ("destroy-", "destructive"),
)


@dataclass(frozen=True)
class ValidationIssue:
    severity: Severity
    message: str


def validate_policy(policy: Policy) -> list[ValidationIssue]:
    """Return lint findings for ``policy`` in a stable order."""
    issues: list[ValidationIssue] = []

    if not policy.commands:
        issues.append(ValidationIssue("warning", "No commands configured. All commands will be denied."))
        return issues

    for name, rule in policy.commands.items():
        if not rule.patterns:
            issues.append(
                ValidationIssue(
                    "warning",
                    f"Command '{name}' has no patterns. All {name} commands will be denied.",
                )
            )
            continue

        for pattern in rule.patterns:
            issues.extend(_check_pattern(name, pattern))

    issues.append(
        ValidationIssue(
            "info",
            f"Found {len(policy.commands)} command(s) with {policy.pattern_count()} pattern(s) total.",
        )
    )
    return issues


def _check_pattern(name: str, pattern: str) -> list[ValidationIssue]:
    # A literal "" is the deliberate no-arguments pattern; whitespace-only is a typo.
    if pattern and not pattern.strip():
        return [ValidationIssue("error", f"Command '{name}' has blank pattern {pattern!r}.")]

    found: list[ValidationIssue] = []
    if pattern == "*":
        found.append(
            ValidationIssue(
                "warning",
                f"Command '{name}' has overly permissive pattern '*' - allows ALL {name} commands.",
            )
        )
    elif pattern == "* *":
        found.append(
            ValidationIssue(
                "warning",
                f"Command '{name}' has overly permissive pattern '* *' - allows most {name} commands.",
            )
        )

    if name == "aws":
        for fragment, label in _AWS_DESTRUCTIVE:
            if fragment in pattern:
                found.append(
                    ValidationIssue(
                        "warning",
                        f"AWS pattern '{pattern}' allows {label} operations - use with extreme caution.",
                    )
                )
                break
    elif name == "kubectl" and pattern.startswith("delete "):
        found.append(
            ValidationIssue(
                "warning",
                f"kubectl pattern '{pattern}' allows delete operations - use with extreme caution.",
            )
        )
    elif name == "terraform" and pattern.startswith("destroy"):
        found.append(
            ValidationIssue(
                "warning",
                f"terraform pattern '{pattern}' allows destroy operations - use with extreme caution.",
            )
        )

    return found


def has_errors(issues: list[ValidationIssue]) -> bool:
    return any(issue.severity == "error" for issue in issues)
