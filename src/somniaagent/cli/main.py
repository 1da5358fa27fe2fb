"""Somnia Agent CLI - Main entry point."""

import typer
from typing_extensions import Annotated

from .. import __version__
from ..core.settings import get_settings
from .output import console, setup_logging

app = typer.Typer(
    name="somniaagent",
    help="CLI tool for building AI agents on the Somnia blockchain",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold]Somnia Agent SDK[/bold] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="SDK log level (default: SOMNIA_LOG_LEVEL)"),
    ] = "",
) -> None:
    """Build, test, and deploy event-driven AI agents on Somnia."""
    setup_logging(log_level or get_settings().log_level)


# 명령 모듈은 app 정의 이후에 등록
from .commands.deploy import deploy_agent
from .commands.info import show_examples, show_info
from .commands.init import init_project
from .commands.listing import list_agents
from .commands.monitor import monitor_agent
from .commands.run_test import run_agent_test

app.command(name="init", help="Initialize a new AI agent project")(init_project)
app.command(name="test", help="Test your agent with simulated events")(run_agent_test)
app.command(name="deploy", help="Deploy your agent to Somnia blockchain")(deploy_agent)
app.command(name="monitor", help="Monitor your deployed agent")(monitor_agent)
app.command(name="list", help="List all your deployed agents")(list_agents)
app.command(name="info", help="Show information about the SDK")(show_info)
app.command(name="examples", help="Show usage examples")(show_examples)


if __name__ == "__main__":
    app()
