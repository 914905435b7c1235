from __future__ import annotations

import io
from pathlib import Path
from typing import Sequence

import pytest
from rich.console import Console

from sorodeploy.config.models import AppConfig
from sorodeploy.process import ProcessOutcome
from sorodeploy.reporting import ConsoleReporter
from sorodeploy.workspace import Workspace

ARTIFACT_RELPATH = Path("target/wasm32-unknown-unknown/release/soroban_ajo.wasm")


class FakeRunner:
    """In-memory stand-in for cargo and the soroban CLI."""

    def __init__(
        self,
        *,
        installed: Sequence[str] = ("soroban", "cargo"),
        networks: Sequence[str] = (),
        keys: dict[str, str] | None = None,
    ) -> None:
        self.installed = set(installed)
        self.networks = list(networks)
        self.keys = dict(keys or {})
        self.calls: list[tuple[list[str], Path | None]] = []
        self.overrides: dict[tuple[str, ...], ProcessOutcome] = {}
        self.build_writes_artifact = True
        self.optimize_writes_artifact = True
        self.optimize_exit_code = 0
        self.optimize_suffix = "_optimized"
        self.contract_id = "CONTRACT123"

    def locate(self, executable: str) -> str | None:
        return f"/usr/local/bin/{executable}" if executable in self.installed else None

    def invoked(self, *prefix: str) -> list[list[str]]:
        return [args for args, _ in self.calls if tuple(args[: len(prefix)]) == prefix]

    def run(self, command: Sequence[str], *, cwd: Path | None = None) -> ProcessOutcome:
        args = [str(arg) for arg in command]
        self.calls.append((args, cwd))
        for prefix, outcome in self.overrides.items():
            if tuple(args[: len(prefix)]) == prefix:
                return outcome
        return self._dispatch(args, cwd)

    def _ok(self, args: list[str], stdout: str = "") -> ProcessOutcome:
        return ProcessOutcome(exit_code=0, stdout=stdout, command=args)

    def _dispatch(self, args: list[str], cwd: Path | None) -> ProcessOutcome:
        tool, rest = args[0], args[1:]
        if rest == ["--version"]:
            return self._ok(args, f"{tool} 21.5.0\n")

        if tool == "cargo" and rest[:1] == ["build"]:
            if self.build_writes_artifact:
                artifact = Path(cwd) / ARTIFACT_RELPATH
                artifact.parent.mkdir(parents=True, exist_ok=True)
                artifact.write_bytes(b"\x00asm" + b"\x01" * 2048)
            return self._ok(args, "Finished release [optimized] target(s)\n")

        if rest[:2] == ["network", "ls"]:
            return self._ok(args, "".join(f"{name}\n" for name in self.networks))
        if rest[:2] == ["network", "add"]:
            positional = [arg for arg in rest[2:] if arg != "--global"]
            if positional[0] not in self.networks:
                self.networks.append(positional[0])
            return self._ok(args)

        if rest[:2] == ["keys", "ls"]:
            return self._ok(args, "".join(f"{name}\n" for name in self.keys))
        if rest[:2] == ["keys", "generate"]:
            name = rest[2]
            self.keys.setdefault(name, f"G{name.upper()}ADDRESS")
            return self._ok(args)
        if rest[:2] == ["keys", "address"]:
            name = rest[2]
            if name not in self.keys:
                return ProcessOutcome(exit_code=1, stderr=f"error: no identity {name}", command=args)
            return self._ok(args, f"{self.keys[name]}\n")

        if rest[:2] == ["contract", "optimize"]:
            wasm = Path(rest[rest.index("--wasm") + 1])
            if self.optimize_writes_artifact:
                wasm.with_name(f"{wasm.stem}{self.optimize_suffix}{wasm.suffix}").write_bytes(b"\x00asm" + b"\x01" * 512)
            stderr = "wasm-opt crashed" if self.optimize_exit_code else ""
            return ProcessOutcome(exit_code=self.optimize_exit_code, stderr=stderr, command=args)
        if rest[:2] == ["contract", "deploy"]:
            return self._ok(args, f"{self.contract_id}\n")
        if rest[:2] == ["contract", "inspect"]:
            return self._ok(args, "Contract spec: 12 functions\n")

        raise AssertionError(f"Unexpected command: {args}")


def failing(exit_code: int = 1, stdout: str = "", stderr: str = "boom") -> ProcessOutcome:
    return ProcessOutcome(exit_code=exit_code, stdout=stdout, stderr=stderr)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def workspace(tmp_path: Path, config: AppConfig) -> Workspace:
    ws = Workspace.create(root=tmp_path, config=config)
    ws.project_dir.mkdir(parents=True)
    return ws


@pytest.fixture
def reporter() -> ConsoleReporter:
    return ConsoleReporter(Console(file=io.StringIO(), width=200, color_system=None))


def console_text(reporter: ConsoleReporter) -> str:
    return reporter.console.file.getvalue()


class RecordingConfirmation:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    def __call__(self, address: str, funding_url: str) -> None:
        self.calls.append((address, funding_url))


@pytest.fixture
def confirm() -> RecordingConfirmation:
    return RecordingConfirmation()
