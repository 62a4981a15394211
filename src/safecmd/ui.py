from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

SAFE_COMMAND_LOG_LEVEL_ENV = "SAFE_COMMAND_LOG_LEVEL"


def log_level_from_env() -> str:
    return os.getenv(SAFE_COMMAND_LOG_LEVEL_ENV, "WARNING").strip().upper() or "WARNING"


def configure_logging(verbose: bool = False) -> None:
    """Route safecmd log records to stderr through rich.

    Without ``--verbose`` only warnings surface unless SAFE_COMMAND_LOG_LEVEL says otherwise.
    """
    level = "DEBUG" if verbose else log_level_from_env()
    logger = logging.getLogger("safecmd")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.propagate = False


def short_hash(value: str, length: int = 16) -> str:
    return f"{value[:length]}..."
