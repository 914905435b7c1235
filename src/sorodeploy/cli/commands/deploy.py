"""`sorodeploy deploy` command implementation."""
from __future__ import annotations

import time
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from ...config.loader import load_config
from ...confirmation import ConsoleConfirmation, assume_funded as auto_confirm
from ...errors import ConfigurationError, PipelineStageError
from ...logging_utils import configure_logging
from ...pipeline.runner import PipelineRunner
from ...process import ProcessRunner
from ...reporting import ConsoleReporter
from ...workspace import Workspace

console = Console()


def deploy(
    config: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the configuration file. Defaults to config/sorodeploy.yaml when present.",
        dir_okay=False,
        resolve_path=True,
    ),
    root: Path = typer.Option(
        None,
        "--root",
        help="Repository root the project and record paths are resolved against. Defaults to the current directory.",
        file_okay=False,
    ),
    assume_funded: bool = typer.Option(
        False,
        "--assume-funded",
        help="Do not wait for confirmation after generating a new identity.",
    ),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level."),
) -> None:
    """Build, optimize, deploy and verify the contract."""
    configure_logging(level=log_level)

    try:
        cfg = load_config(config, base_dir=root)
    except (FileNotFoundError, ConfigurationError) as exc:
        console.print(f"[bold red]✗[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    workspace = Workspace.create(root=root or Path.cwd(), config=cfg)
    reporter = ConsoleReporter(console)
    runner = PipelineRunner(
        config=cfg,
        workspace=workspace,
        reporter=reporter,
        runner=ProcessRunner(timeout_seconds=cfg.deploy.timeout_seconds),
        confirm=auto_confirm if assume_funded else ConsoleConfirmation(console),
    )

    reporter.header(f"{cfg.name} - {cfg.network.display_name} Deployment")
    start = time.perf_counter()
    result = runner.run()
    duration = time.perf_counter() - start

    try:
        result.raise_for_failure()
    except PipelineStageError as exc:
        console.print(f"[bold red]Deployment aborted[/bold red] after {duration:.2f}s: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    if result.warnings:
        console.print(f"[yellow]{len(result.warnings)} stage(s) completed with warnings.[/yellow]")
    reporter.success(f"Deployment complete in {duration:.2f}s! 🎉")
