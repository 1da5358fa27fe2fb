"""somniaagent list - 배포 기록 조회"""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table
from typing_extensions import Annotated

from ...core.networks import get_network
from ..errors import exit_on_error
from ..output import console, log_info, print_header
from ..project import format_age, load_deployments


def list_agents(
    network: Annotated[
        Optional[str], typer.Option("--network", "-n", help="Only show this network")
    ] = None,
    project_dir: Annotated[Path, typer.Option("--dir", help="Project directory")] = Path("."),
):
    """List agents deployed from this project."""
    print_header("Your Deployed Agents")

    with exit_on_error():
        deployments = load_deployments(project_dir)
        if network:
            chain_id = get_network(network).chain_id
            deployments = [d for d in deployments if d.get("chain_id") == chain_id]

    if not deployments:
        log_info("No deployments found. Deploy one with: somniaagent deploy")
        return

    table = Table(show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Type")
    table.add_column("Address", style="cyan")
    table.add_column("Network")
    table.add_column("Deployed")
    for index, entry in enumerate(deployments, start=1):
        network_label = entry.get("network", "")
        if entry.get("mock"):
            network_label += " (mock)"
        table.add_row(
            str(index),
            str(entry.get("name", "")),
            str(entry.get("type", "")),
            str(entry.get("address", "")),
            network_label,
            format_age(entry.get("deployed_at")),
        )
    console.print(table)
    console.print(f"\nTotal: {len(deployments)}")
