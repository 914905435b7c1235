"""Argument builders for the Soroban deploy CLI."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..process import CommandRunner, ProcessOutcome


def parse_listing(stdout: str) -> list[str]:
    """Extract entry names from ``network ls`` / ``keys ls`` output.

    One entry per line; a leading ``*`` marks the default entry in some CLI
    versions and is dropped.
    """
    names: list[str] = []
    for line in stdout.splitlines():
        token = line.strip().lstrip("*").strip()
        if not token:
            continue
        names.append(token.split()[0])
    return names


@dataclass(slots=True)
class SorobanCLI:
    runner: CommandRunner
    binary: str = "soroban"

    def _run(self, *args: str | Path) -> ProcessOutcome:
        return self.runner.run([self.binary, *(str(arg) for arg in args)])

    def list_networks(self) -> ProcessOutcome:
        return self._run("network", "ls")

    def add_network(self, name: str, rpc_url: str, passphrase: str, *, global_scope: bool = True) -> ProcessOutcome:
        scope = ["--global"] if global_scope else []
        return self._run("network", "add", *scope, name, "--rpc-url", rpc_url, "--network-passphrase", passphrase)

    def list_keys(self) -> ProcessOutcome:
        return self._run("keys", "ls")

    def generate_key(self, name: str, network: str) -> ProcessOutcome:
        return self._run("keys", "generate", name, "--network", network)

    def key_address(self, name: str) -> ProcessOutcome:
        return self._run("keys", "address", name)

    def optimize(self, wasm: Path) -> ProcessOutcome:
        return self._run("contract", "optimize", "--wasm", wasm)

    def deploy(self, wasm: Path, source: str, network: str) -> ProcessOutcome:
        return self._run("contract", "deploy", "--wasm", wasm, "--source", source, "--network", network)

    def inspect(self, contract_id: str, network: str) -> ProcessOutcome:
        return self._run("contract", "inspect", "--id", contract_id, "--network", network)
