"""`sorodeploy inspect` command implementation."""
from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...config.loader import load_config
from ...errors import ConfigurationError
from ...pipeline.runner import METADATA_FILENAME
from ...workspace import Workspace

console = Console()


def inspect(
    root: Path = typer.Option(Path("."), "--root", help="Repository root of a previous deployment."),
    config: Path = typer.Option(None, "--config", "-c", help="Configuration file used for the deployment."),
) -> None:
    """Display metadata and diagnostics from the last deployment run."""
    try:
        cfg = load_config(config, base_dir=root)
    except (FileNotFoundError, ConfigurationError) as exc:
        console.print(f"[bold red]✗[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    workspace = Workspace.create(root=root, config=cfg)
    metadata_path = workspace.metadata_dir / METADATA_FILENAME
    if not metadata_path.exists():
        raise typer.BadParameter(f"{METADATA_FILENAME} not found under {workspace.metadata_dir}")

    metadata = json.loads(metadata_path.read_text())

    status = "[green]succeeded[/green]" if metadata.get("succeeded") else "[red]failed[/red]"
    console.print(f"[bold]Workspace:[/bold] {metadata.get('workspace')}")
    console.print(f"[bold]Config:[/bold] {metadata.get('config_name')}")
    console.print(f"[bold]Status:[/bold] {status}")
    if metadata.get("error"):
        console.print(f"[bold]Error:[/bold] {metadata['failed_stage']}: {escape(metadata['error'])}")

    stage_table = Table(title="Stages", show_header=True, header_style="bold green")
    stage_table.add_column("Stage")
    stage_table.add_column("Status")
    stage_table.add_column("Duration (s)")
    stage_table.add_column("Detail")
    for stage in metadata.get("stages", []):
        stage_table.add_row(
            stage.get("name", "?"),
            stage.get("status", "?"),
            f"{stage.get('duration_seconds', 0):.2f}",
            escape(stage.get("detail") or ""),
        )
    console.print(stage_table)

    context_table = Table(title="Context", show_header=True, header_style="bold blue")
    context_table.add_column("Field")
    context_table.add_column("Value")
    for key, value in metadata.get("context", {}).items():
        context_table.add_row(key, escape("" if value is None else str(value)))
    console.print(context_table)

    diagnostics = metadata.get("diagnostics")
    if diagnostics:
        console.print("[bold]Diagnostics:[/bold]")
        console.print_json(data=diagnostics)
    else:
        console.print("[yellow]No diagnostics recorded.[/yellow]")
