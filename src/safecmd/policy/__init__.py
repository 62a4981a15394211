"""Policy discovery, parsing, templates, and linting."""

from safecmd.policy.loader import (
    PolicyLoader,
    candidate_paths,
    discover_policy_files,
    find_policy_file,
    get_command_config,
    load_policy,
    parse_policy,
)
from safecmd.policy.types import CommandRule, Policy

__all__ = [
    "CommandRule",
    "Policy",
    "PolicyLoader",
    "candidate_paths",
    "discover_policy_files",
    "find_policy_file",
    "get_command_config",
    "load_policy",
    "parse_policy",
]
