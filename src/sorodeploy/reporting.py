"""Console reporter used for user-facing pipeline progress."""
from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from .pipeline.artifacts import DeploymentSummary


class ConsoleReporter:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def header(self, title: str) -> None:
        self.console.print()
        self.console.print(Rule(Text(title, style="bold blue"), style="blue"))
        self.console.print()

    def info(self, message: str) -> None:
        self.console.print(Text.assemble(("ℹ ", "blue"), message))

    def success(self, message: str) -> None:
        self.console.print(Text.assemble(("✓ ", "green"), message))

    def warning(self, message: str) -> None:
        self.console.print(Text.assemble(("⚠ ", "yellow"), message))

    def error(self, message: str) -> None:
        self.console.print(Text.assemble(("✗ ", "red"), message))

    def output(self, text: str) -> None:
        """Echo raw captured command output."""
        for line in text.splitlines():
            self.console.print(Text(f"  {line}", style="dim"))

    def render_summary(
        self,
        summary: DeploymentSummary,
        *,
        project_dir: str | None = None,
        demo_script: str | None = None,
    ) -> None:
        built = "Contract built and optimized" if summary.optimized else "Contract built"
        self.success(built)
        self.success(f"Deployed to {summary.network_display_name}")
        if summary.record_path is not None:
            self.success("Contract ID saved")
        self.console.print()

        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column(style="bold blue")
        table.add_column()
        # Values come from external tool output and must not be parsed as markup.
        table.add_row("Contract ID:", Text(summary.contract_id))
        table.add_row("Deployer:", Text(summary.deployer_address))
        table.add_row("Network:", Text(summary.network_display_name))
        table.add_row("Explorer:", Text(summary.explorer_url))
        self.console.print(table)

        self.header("Next Steps")
        steps = [
            ("Test the contract:", f"cd {project_dir} && cargo test" if project_dir else "cargo test"),
            (
                "Interact with the contract:",
                f"soroban contract invoke --id {summary.contract_id} --source {summary.identity_name} "
                f"--network {summary.network_name} -- <function> ...",
            ),
        ]
        if demo_script:
            steps.append(("Follow the demo script:", f"See {demo_script} for a complete walkthrough"))
        steps.append(
            (
                "Create test users:",
                f"soroban keys generate alice --network {summary.network_name}\n"
                f"   soroban keys generate bob --network {summary.network_name}",
            )
        )
        for index, (label, command) in enumerate(steps, start=1):
            self.console.print(Text(f"{index}. {label}"))
            self.console.print(Text(f"   {command}"))
            self.console.print()
