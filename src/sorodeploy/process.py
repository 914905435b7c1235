"""Synchronous wrapper around external command invocations."""
from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, Sequence

COMMAND_NOT_FOUND = 127
COMMAND_TIMED_OUT = 124


@dataclass(slots=True)
class ProcessOutcome:
    """Exit status and captured output of one external invocation."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    command: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def combined_output(self) -> str:
        return "\n".join(part.strip() for part in (self.stdout, self.stderr) if part.strip())


class CommandRunner(Protocol):
    def run(self, command: Sequence[str], *, cwd: Path | None = None) -> ProcessOutcome: ...

    def locate(self, executable: str) -> str | None: ...


class ProcessRunner:
    """Runs external commands and reports their outcome without raising."""

    def __init__(self, timeout_seconds: int | None = None) -> None:
        self.timeout_seconds = timeout_seconds
        self.logger = logging.getLogger("sorodeploy.process")

    def locate(self, executable: str) -> str | None:
        return shutil.which(executable)

    def run(self, command: Sequence[str], *, cwd: Path | None = None) -> ProcessOutcome:
        args = [str(arg) for arg in command]
        self.logger.debug("Running %s (cwd=%s)", " ".join(args), cwd or ".")
        try:
            result = subprocess.run(
                args,
                check=False,
                capture_output=True,
                cwd=cwd,
                text=True,
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError:
            return ProcessOutcome(
                exit_code=COMMAND_NOT_FOUND,
                stderr=f"Command not found: {args[0]}",
                command=args,
            )
        except subprocess.TimeoutExpired as exc:
            stdout = exc.stdout.decode() if isinstance(exc.stdout, bytes) else exc.stdout or ""
            stderr = exc.stderr.decode() if isinstance(exc.stderr, bytes) else exc.stderr or ""
            return ProcessOutcome(
                exit_code=COMMAND_TIMED_OUT,
                stdout=stdout,
                stderr=(stderr + f"\nTimed out after {self.timeout_seconds}s").strip(),
                command=args,
            )

        self.logger.debug("%s exited with %s", args[0], result.returncode)
        return ProcessOutcome(
            exit_code=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            command=args,
        )
