"""Logging helpers for sorodeploy."""
from __future__ import annotations

import logging
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str | Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO") -> None:
    """Configure root logging with Rich formatting on stderr.

    Progress output goes to stdout through the console reporter, so log records
    are kept on a separate stream.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )
