"""Blocking confirmation used while a fresh identity waits for funding."""
from __future__ import annotations

import logging
from typing import Callable

from rich.console import Console

ConfirmationProvider = Callable[[str, str], None]
"""Called with ``(address, funding_url)``; returns once the operator confirms."""

logger = logging.getLogger(__name__)


class ConsoleConfirmation:
    """Waits for the operator to press Enter. No timeout; Ctrl-C aborts the run."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def __call__(self, address: str, funding_url: str) -> None:
        self.console.input("Press Enter after funding the account...")


def assume_funded(address: str, funding_url: str) -> None:
    """Non-interactive provider for identities funded ahead of time."""
    logger.info("Assuming %s is already funded", address)
