"""safe-command - allowlist gate for commands run on behalf of AI agents."""

__version__ = "0.3.0"
