"""Command-line interface bootstrap for sorodeploy."""
from __future__ import annotations

import typer

from .commands.deploy import deploy
from .commands.inspect import inspect

app = typer.Typer(help="Build, deploy and verify a Soroban contract.", invoke_without_command=True)

app.command()(deploy)
app.command()(inspect)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Run the full deployment pipeline when no command is given."""
    if ctx.invoked_subcommand is None:
        deploy(config=None, root=None, assume_funded=False, log_level="INFO")


__all__ = ["app"]
