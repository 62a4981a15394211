"""Wildcard matching for command patterns.

Only ``*`` is special: it matches any run of characters, including none.
Every other character, regex metacharacters and shell operators included,
is compared literally. Matches are anchored at both ends.

Because commands are spawned without a shell, the argument string never goes
through shell expansion; ``;``, ``|``, backticks and ``$()`` are plain data.
"""

from __future__ import annotations

from collections.abc import Iterable

WILDCARD = "*"


def match_pattern(pattern: str, target: str) -> bool:
    """Return True when ``target`` matches ``pattern`` in full.

    Two-pointer wildcard matcher: on mismatch, rewind to the most recent
    ``*`` and let it absorb one more character. Runs in O(len(pattern) *
    len(target)) worst case without recursion or regex compilation.

    Examples:
        match_pattern("s3 ls*", "s3 ls s3://bucket") -> True
        match_pattern("* describe-*", "ec2 describe-instances") -> True
        match_pattern("a.b", "axb") -> False
    """
    p = 0
    t = 0
    star = -1
    resume = 0
    p_len = len(pattern)
    t_len = len(target)

    while t < t_len:
        if p < p_len and pattern[p] == WILDCARD:
            # Collapse runs of stars; they behave like a single one.
            while p < p_len and pattern[p] == WILDCARD:
                p += 1
            star = p
            resume = t
        elif p < p_len and pattern[p] == target[t]:
            p += 1
            t += 1
        elif star != -1:
            resume += 1
            t = resume
            p = star
        else:
            return False

    while p < p_len and pattern[p] == WILDCARD:
        p += 1

    return p == p_len


def first_match(patterns: Iterable[str], target: str) -> str | None:
    """Return the first pattern, in declaration order, that matches ``target``."""
    for pattern in patterns:
        if match_pattern(pattern, target):
            return pattern
    return None


def match_any(patterns: Iterable[str], target: str) -> bool:
    """Return True when at least one pattern matches ``target``."""
    return first_match(patterns, target) is not None
