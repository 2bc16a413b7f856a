"""Main CLI entry point for Klarity"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from klarity.__version__ import __version__
from klarity.agents.base import DecisionContext
from klarity.config.loader import ConfigLoader
from klarity.core.errors import ConfigError, DecisionError
from klarity.core.types import AgentOutcome
from klarity.observability.logging import setup_logging

app = typer.Typer(
    name="klarity",
    help="Klarity - booking conversation orchestration",
    add_completion=False,
)
console = Console()


class _OfflineDecisionMaker:
    """Placeholder used when the graph is only inspected, never run."""

    async def decide(self, context: DecisionContext) -> AgentOutcome:
        raise DecisionError("No decision maker configured")


def version_callback(value: bool) -> None:
    """Print version and exit"""
    if value:
        typer.echo(f"Klarity version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level"),
) -> None:
    """Klarity - booking conversation orchestration"""
    setup_logging(log_level.upper())


@app.command()
def graph(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to klarity.yaml (defaults are used otherwise)"
    ),
) -> None:
    """Print the turn graph as a Mermaid diagram."""
    from klarity.config.models import AssistantConfig
    from klarity.dm.builder import build_booking_graph
    from klarity.runtime.context import RuntimeContext
    from klarity.tools.registry import ToolRegistry

    try:
        settings = ConfigLoader.load(config) if config else AssistantConfig()
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    context = RuntimeContext.create(
        decision_maker=_OfflineDecisionMaker(), tools=ToolRegistry(), config=settings
    )
    typer.echo(build_booking_graph(context).render_mermaid())


@app.command("check-config")
def check_config(
    config: Path = typer.Argument(..., help="Path to klarity.yaml or its directory"),
) -> None:
    """Validate a configuration file and show the effective settings."""
    try:
        settings = ConfigLoader.load(config)
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    table = Table(title=f"Configuration: {config}")
    table.add_column("Section", style="cyan")
    table.add_column("Setting")
    table.add_column("Value", style="green")
    for section, values in settings.model_dump().items():
        for key, value in values.items():
            table.add_row(section, key, str(value))
    console.print(table)


def cli() -> None:
    """Entry point for CLI"""
    app()


if __name__ == "__main__":
    cli()
