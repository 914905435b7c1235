"""Pydantic models representing the sorodeploy configuration."""
from __future__ import annotations

from pathlib import Path
from pydantic import BaseModel, Field, field_validator


class ToolRequirement(BaseModel):
    """An external executable that must be installed before the pipeline starts."""

    name: str = Field(description="Executable name looked up on PATH.")
    version_args: list[str] = Field(
        default_factory=lambda: ["--version"],
        description="Arguments used to query the tool's version.",
    )
    install_hint: str = Field(default="", description="Command suggested to the operator when the tool is missing.")

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value.strip():
            msg = "Tool name cannot be empty"
            raise ValueError(msg)
        return value


class NetworkSettings(BaseModel):
    name: str = Field(default="testnet", description="Network configuration name registered with the deploy CLI.")
    rpc_url: str = Field(default="https://soroban-testnet.stellar.org:443")
    passphrase: str = Field(default="Test SDF Network ; September 2015")
    display_name: str = Field(default="Stellar Testnet", description="Human readable network name for reports.")
    explorer_url_template: str = Field(
        default="https://stellar.expert/explorer/{network}/contract/{contract_id}",
        description="Template for the explorer link. Supports placeholders {network} and {contract_id}.",
    )
    global_scope: bool = Field(default=True, description="Register the network in the CLI's global configuration.")


class IdentitySettings(BaseModel):
    name: str = Field(default="deployer", description="Signing identity used as the deploy source account.")
    funding_url_template: str = Field(
        default="https://friendbot.stellar.org?addr={address}",
        description="Faucet link shown when a freshly generated identity needs funding.",
    )


class BuildSettings(BaseModel):
    project_dir: str = Field(default="contracts/ajo", description="Contract crate, relative to the repository root.")
    cargo_binary: str = Field(default="cargo")
    install_hint: str = Field(default="curl --proto '=https' --tlsv1.2 -sSf https://sh.rustup.rs | sh")
    target: str = Field(default="wasm32-unknown-unknown")
    profile: str = Field(default="release")
    artifact_name: str = Field(default="soroban_ajo", description="File stem of the produced WebAssembly module.")

    @property
    def artifact_relpath(self) -> Path:
        profile_dir = "debug" if self.profile == "dev" else self.profile
        return Path("target") / self.target / profile_dir / f"{self.artifact_name}.wasm"


class OptimizeSettings(BaseModel):
    enabled: bool = True
    suffix: str = Field(default="_optimized", description="Inserted before the extension of the optimized module.")


class DeploySettings(BaseModel):
    soroban_binary: str = Field(default="soroban")
    install_hint: str = Field(default="cargo install --locked soroban-cli --features opt")
    timeout_seconds: int | None = Field(
        default=None,
        ge=1,
        description="Optional timeout applied to every external command. Unlimited when unset.",
    )


class OutputSettings(BaseModel):
    record_path: str = Field(default="contract-id.txt", description="File receiving the deployed contract id.")
    metadata_dir: str = Field(default=".sorodeploy", description="Directory receiving run metadata.")
    demo_script: str | None = Field(
        default="demo/demo-script.md",
        description="Walkthrough suggested in the final report. Omitted from the report when unset.",
    )


class AppConfig(BaseModel):
    name: str = Field(default="soroban-ajo-testnet")
    description: str = Field(default="Deploy the Ajo contract to Stellar testnet.")
    tools: list[ToolRequirement] = Field(
        default_factory=list,
        description="Additional executables checked before the run, after the deploy CLI and the build tool.",
    )
    network: NetworkSettings = Field(default_factory=NetworkSettings)
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    build: BuildSettings = Field(default_factory=BuildSettings)
    optimize: OptimizeSettings = Field(default_factory=OptimizeSettings)
    deploy: DeploySettings = Field(default_factory=DeploySettings)
    output: OutputSettings = Field(default_factory=OutputSettings)

    model_config = {
        "extra": "allow",
    }

    def required_tools(self) -> list[ToolRequirement]:
        """The executables the pipeline actually runs, followed by any extra tools."""
        return [
            ToolRequirement(name=self.deploy.soroban_binary, install_hint=self.deploy.install_hint),
            ToolRequirement(name=self.build.cargo_binary, install_hint=self.build.install_hint),
            *self.tools,
        ]
