"""Concrete pipeline stage implementations."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable

from ..config.models import (
    AppConfig,
    BuildSettings,
    IdentitySettings,
    NetworkSettings,
    OptimizeSettings,
    ToolRequirement,
)
from ..confirmation import ConfirmationProvider
from ..process import CommandRunner
from ..reporting import ConsoleReporter
from ..services.soroban import SorobanCLI, parse_listing
from ..workspace import Workspace
from .artifacts import DeploymentSummary
from .context import PipelineContext
from .results import HardFailure, SoftFailure, StageResult, Success


def human_size(num_bytes: int) -> str:
    if num_bytes < 1024:
        return f"{num_bytes}B"
    size = float(num_bytes)
    for unit in ("K", "M"):
        size /= 1024
        if size < 1024:
            return f"{size:.1f}{unit}"
    return f"{size / 1024:.1f}G"


def optimized_path(artifact_path: Path, suffix: str = "_optimized") -> Path:
    return artifact_path.with_name(f"{artifact_path.stem}{suffix}{artifact_path.suffix}")


def _is_nonempty_file(path: Path) -> bool:
    return path.is_file() and path.stat().st_size > 0


class PipelineStage(ABC):
    name: str
    title: str | None = None
    description: str | None = None
    output_field: str | None = None
    requires: tuple[str, ...] = ()
    soft_fail_allowed: bool = False

    @abstractmethod
    def run(self, ctx: PipelineContext) -> StageResult:  # pragma: no cover - runtime behaviour
        """Execute the stage."""


class PreflightChecker(PipelineStage):
    name = "Preflight"
    description = "Checking prerequisites..."

    def __init__(self, runner: CommandRunner, tools: Iterable[ToolRequirement], reporter: ConsoleReporter) -> None:
        self.runner = runner
        self.tools = list(tools)
        self.reporter = reporter
        self.logger = logging.getLogger(self.name)

    def check(self, tools: Iterable[ToolRequirement]) -> StageResult:
        versions: dict[str, str] = {}
        for tool in tools:
            if self.runner.locate(tool.name) is None:
                message = f"{tool.name} not found. Please install it first"
                if tool.install_hint:
                    message += f": {tool.install_hint}"
                return HardFailure(message)

            outcome = self.runner.run([tool.name, *tool.version_args])
            if not outcome.ok:
                return HardFailure(
                    f"{tool.name} is installed but its version check exited with {outcome.exit_code}",
                    output=outcome.combined_output or None,
                )
            lines = outcome.stdout.strip().splitlines()
            version = lines[0].strip() if lines else "unknown version"
            versions[tool.name] = version
            self.reporter.success(f"{tool.name} found: {version}")

        return Success(versions)

    def run(self, ctx: PipelineContext) -> StageResult:
        result = self.check(self.tools)
        if isinstance(result, Success):
            ctx.record_diagnostic(self.name, {"versions": result.payload})
        return result


class ResourceProvisioner(PipelineStage):
    name = "Provisioning"
    description = "Checking network configuration and deployer identity..."
    output_field = "signing_identity_address"
    requires = ("target_network_name",)

    def __init__(
        self,
        cli: SorobanCLI,
        network: NetworkSettings,
        identity: IdentitySettings,
        reporter: ConsoleReporter,
        confirm: ConfirmationProvider,
    ) -> None:
        self.cli = cli
        self.network = network
        self.identity = identity
        self.reporter = reporter
        self.confirm = confirm
        self.logger = logging.getLogger(self.name)

    def ensure_network(self, name: str, rpc_url: str, passphrase: str) -> StageResult:
        listing = self.cli.list_networks()
        if not listing.ok:
            return HardFailure("Could not list configured networks", output=listing.combined_output or None)

        existing = parse_listing(listing.stdout)
        self.logger.debug("Configured networks: %s", existing)
        if name in existing:
            self.reporter.success(f"Network {name} already configured")
            return Success(name, detail="existing")

        self.reporter.warning(f"Network {name} not configured. Adding it now...")
        added = self.cli.add_network(name, rpc_url, passphrase, global_scope=self.network.global_scope)
        if not added.ok:
            return HardFailure(f"Could not add network {name}", output=added.combined_output or None)
        self.reporter.success(f"Network {name} added")
        return Success(name, detail="created")

    def ensure_identity(self, name: str, network: str) -> StageResult:
        listing = self.cli.list_keys()
        if not listing.ok:
            return HardFailure("Could not list signing identities", output=listing.combined_output or None)

        if name in parse_listing(listing.stdout):
            self.reporter.success(f"Identity {name} found")
            return self._resolve_address(name, detail="existing")

        self.reporter.warning(f"Identity {name} not found. Creating it now...")
        generated = self.cli.generate_key(name, network)
        if not generated.ok:
            return HardFailure(f"Could not generate identity {name}", output=generated.combined_output or None)
        self.reporter.success(f"Identity {name} created")

        result = self._resolve_address(name, detail="created")
        if not isinstance(result, Success):
            return result

        address = result.payload
        funding_url = self.identity.funding_url_template.format(address=address)
        self.reporter.warning("Please fund this address using the faucet:")
        self.reporter.output(funding_url)
        self.confirm(address, funding_url)
        return result

    def _resolve_address(self, name: str, *, detail: str) -> StageResult:
        outcome = self.cli.key_address(name)
        address = outcome.stdout.strip()
        if not outcome.ok or not address:
            return HardFailure(f"Could not resolve the address of identity {name}", output=outcome.combined_output or None)
        self.reporter.info(f"{name} address: {address}")
        return Success(address, detail=detail)

    def run(self, ctx: PipelineContext) -> StageResult:
        network_result = self.ensure_network(ctx.target_network_name, self.network.rpc_url, self.network.passphrase)
        if not isinstance(network_result, Success):
            return network_result

        identity_result = self.ensure_identity(self.identity.name, ctx.target_network_name)
        if isinstance(identity_result, Success):
            ctx.record_diagnostic(
                self.name,
                {
                    "network": {"name": ctx.target_network_name, "status": network_result.detail},
                    "identity": {"name": self.identity.name, "status": identity_result.detail},
                },
            )
            return Success(identity_result.payload, detail="Network and identity ready")
        return identity_result


class BuildStage(PipelineStage):
    name = "Build"
    title = "Building Contract"
    description = "Building contract..."
    output_field = "artifact_path"

    def __init__(self, runner: CommandRunner, settings: BuildSettings, project_dir: Path) -> None:
        self.runner = runner
        self.settings = settings
        self.project_dir = project_dir
        self.logger = logging.getLogger(self.name)

    def build(self, project_dir: Path) -> StageResult:
        if not project_dir.is_dir():
            return HardFailure(f"Contract directory not found: {project_dir}. Are you in the project root?")

        profile_args = ["--release"] if self.settings.profile == "release" else ["--profile", self.settings.profile]
        command = [self.settings.cargo_binary, "build", "--target", self.settings.target, *profile_args]
        outcome = self.runner.run(command, cwd=project_dir)
        if not outcome.ok:
            return HardFailure(
                f"Build failed with exit code {outcome.exit_code}",
                output=outcome.combined_output or None,
            )

        artifact = project_dir / self.settings.artifact_relpath
        if not _is_nonempty_file(artifact):
            return HardFailure(
                f"Build failed. WASM file not found at {artifact}",
                output=outcome.combined_output or None,
            )
        return Success(artifact, detail=f"Contract built successfully (Size: {human_size(artifact.stat().st_size)})")

    def run(self, ctx: PipelineContext) -> StageResult:
        result = self.build(self.project_dir)
        if isinstance(result, Success):
            ctx.record_diagnostic(self.name, {"artifact": str(result.payload), "bytes": result.payload.stat().st_size})
        return result


class OptimizationStage(PipelineStage):
    name = "Optimize"
    description = "Optimizing contract..."
    output_field = "artifact_path"
    requires = ("artifact_path",)
    soft_fail_allowed = True

    def __init__(self, cli: SorobanCLI, settings: OptimizeSettings) -> None:
        self.cli = cli
        self.settings = settings
        self.logger = logging.getLogger(self.name)

    def optimize(self, artifact_path: Path) -> StageResult:
        if not self.settings.enabled:
            return SoftFailure("Optimization disabled, using unoptimized WASM")

        target = optimized_path(artifact_path, self.settings.suffix)
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            return SoftFailure(f"Could not remove stale {target.name}: {exc}, using unoptimized WASM")

        outcome = self.cli.optimize(artifact_path)
        if outcome.ok and _is_nonempty_file(target):
            return Success(target, detail=f"Contract optimized (Size: {human_size(target.stat().st_size)})")
        return SoftFailure(
            "Optimization skipped or failed, using unoptimized WASM",
            output=outcome.combined_output or None,
        )

    def run(self, ctx: PipelineContext) -> StageResult:
        result = self.optimize(ctx.artifact_path)
        ctx.record_diagnostic(self.name, {"optimized": isinstance(result, Success)})
        return result


class PublicationStage(PipelineStage):
    name = "Deploy"
    output_field = "remote_identifier"
    requires = ("artifact_path", "signing_identity_address")

    def __init__(self, cli: SorobanCLI, identity_name: str, network_display_name: str) -> None:
        self.cli = cli
        self.identity_name = identity_name
        self.title = f"Deploying to {network_display_name}"
        self.description = f"Deploying contract to {network_display_name}. This may take a minute..."
        self.logger = logging.getLogger(self.name)

    def publish(self, artifact_path: Path, identity_name: str, network: str) -> StageResult:
        outcome = self.cli.deploy(artifact_path, identity_name, network)
        if not outcome.ok:
            return HardFailure(
                f"Deployment failed with exit code {outcome.exit_code}",
                output=outcome.combined_output or None,
            )

        contract_id = outcome.stdout.strip()
        if not contract_id:
            return HardFailure("Deployment exited successfully but printed no contract ID", output=outcome.stderr or None)
        return Success(contract_id, detail=f"Contract deployed successfully! Contract ID: {contract_id}")

    def run(self, ctx: PipelineContext) -> StageResult:
        result = self.publish(ctx.artifact_path, self.identity_name, ctx.target_network_name)
        if isinstance(result, Success):
            ctx.record_diagnostic(self.name, {"contract_id": result.payload, "artifact": str(ctx.artifact_path)})
        return result


class StatePersister(PipelineStage):
    name = "Persist"
    description = "Saving contract ID..."
    requires = ("remote_identifier",)

    def __init__(self, record_path: Path) -> None:
        self.record_path = record_path
        self.logger = logging.getLogger(self.name)

    def persist(self, remote_identifier: str, path: Path) -> StageResult:
        try:
            path.write_text(f"{remote_identifier}\n")
        except OSError as exc:
            return HardFailure(f"Could not save contract ID to {path}: {exc}")
        return Success(path, detail=f"Contract ID saved to {path.name}")

    def run(self, ctx: PipelineContext) -> StageResult:
        return self.persist(ctx.remote_identifier, self.record_path)


class VerificationStage(PipelineStage):
    name = "Verify"
    title = "Verifying Deployment"
    description = "Inspecting deployed contract..."
    requires = ("remote_identifier",)
    soft_fail_allowed = True

    def __init__(self, cli: SorobanCLI) -> None:
        self.cli = cli
        self.logger = logging.getLogger(self.name)

    def verify(self, remote_identifier: str, network: str) -> StageResult:
        if not remote_identifier:
            return SoftFailure("No contract ID available to verify")
        outcome = self.cli.inspect(remote_identifier, network)
        if not outcome.ok:
            return SoftFailure(
                f"Could not inspect contract {remote_identifier} (exit code {outcome.exit_code})",
                output=outcome.combined_output or None,
            )
        return Success(outcome.stdout.strip(), detail=f"Contract {remote_identifier} resolves on {network}")

    def run(self, ctx: PipelineContext) -> StageResult:
        result = self.verify(ctx.remote_identifier, ctx.target_network_name)
        ctx.record_diagnostic(self.name, {"verified": isinstance(result, Success)})
        return result


class SummaryReporter(PipelineStage):
    name = "Summary"
    title = "Deployment Summary"
    requires = ("remote_identifier", "signing_identity_address")

    def __init__(
        self,
        network: NetworkSettings,
        identity_name: str,
        reporter: ConsoleReporter,
        *,
        record_path: Path | None = None,
        project_dir: str | None = None,
        demo_script: str | None = None,
    ) -> None:
        self.network = network
        self.identity_name = identity_name
        self.reporter = reporter
        self.record_path = record_path
        self.project_dir = project_dir
        self.demo_script = demo_script

    def summarize(self, ctx: PipelineContext) -> DeploymentSummary:
        optimize_diagnostic = ctx.diagnostics.get("stages", {}).get(OptimizationStage.name, {})
        return DeploymentSummary(
            contract_id=ctx.remote_identifier,
            deployer_address=ctx.signing_identity_address,
            identity_name=self.identity_name,
            network_name=ctx.target_network_name,
            network_display_name=self.network.display_name,
            explorer_url=self.network.explorer_url_template.format(
                network=ctx.target_network_name,
                contract_id=ctx.remote_identifier,
            ),
            artifact_path=ctx.artifact_path,
            record_path=self.record_path,
            optimized=bool(optimize_diagnostic.get("optimized", False)),
        )

    def run(self, ctx: PipelineContext) -> StageResult:
        summary = self.summarize(ctx)
        self.reporter.render_summary(summary, project_dir=self.project_dir, demo_script=self.demo_script)
        ctx.record_diagnostic(self.name, summary.to_dict())
        return Success(summary)


def build_default_stages(
    config: AppConfig,
    workspace: Workspace,
    *,
    runner: CommandRunner,
    reporter: ConsoleReporter,
    confirm: ConfirmationProvider,
) -> list[PipelineStage]:
    cli = SorobanCLI(runner=runner, binary=config.deploy.soroban_binary)
    return [
        PreflightChecker(runner=runner, tools=config.required_tools(), reporter=reporter),
        ResourceProvisioner(
            cli=cli,
            network=config.network,
            identity=config.identity,
            reporter=reporter,
            confirm=confirm,
        ),
        BuildStage(runner=runner, settings=config.build, project_dir=workspace.project_dir),
        OptimizationStage(cli=cli, settings=config.optimize),
        PublicationStage(
            cli=cli,
            identity_name=config.identity.name,
            network_display_name=config.network.display_name,
        ),
        StatePersister(record_path=workspace.record_path),
        VerificationStage(cli=cli),
        SummaryReporter(
            network=config.network,
            identity_name=config.identity.name,
            reporter=reporter,
            record_path=workspace.record_path,
            project_dir=config.build.project_dir,
            demo_script=config.output.demo_script,
        ),
    ]
