"""somniaagent info / examples"""

from rich.panel import Panel
from rich.table import Table

from ... import __version__
from ...core.networks import NETWORKS
from ...core.settings import get_settings
from ...testing import SCENARIO_DESCRIPTIONS
from ..output import console, key_value_table
from ..templates import TEMPLATES


def show_info():
    """Show information about the SDK and the current configuration."""
    settings = get_settings()
    console.print(
        Panel.fit(
            f"[bold]Somnia Agent SDK v{__version__}[/bold]\n"
            "Event-driven AI agents for the Somnia blockchain",
            border_style="cyan",
        )
    )

    networks = Table(title="Networks", show_header=True)
    networks.add_column("Key", style="cyan")
    networks.add_column("Name")
    networks.add_column("Chain ID", justify="right")
    networks.add_column("RPC")
    for key, network in NETWORKS.items():
        rpc = settings.rpc_override(key) or network.rpc_url
        networks.add_row(key, network.name, str(network.chain_id), rpc)
    console.print(networks)

    console.print(
        key_value_table(
            [
                ("Default network", settings.default_network),
                ("Private key", "set" if settings.private_key else "not set"),
                ("AI endpoint", settings.ai_endpoint),
                ("AI model", settings.ai_model),
                ("Scenarios", ", ".join(SCENARIO_DESCRIPTIONS)),
                ("Templates", ", ".join(TEMPLATES)),
            ],
            title="Configuration",
        )
    )


def show_examples():
    """Show usage examples."""
    examples = [
        ("Create a new DeFi trading agent", "somniaagent init --name MyTradingBot --template defi-trading"),
        ("Test your agent with market volatility", "somniaagent test --scenario market_volatility --duration 20"),
        ("Rehearse a deployment offline", "somniaagent deploy --mock"),
        ("Deploy to Somnia testnet", "somniaagent deploy --network testnet --bytecode-file Agent.bin"),
        ("Monitor your deployed agent", "somniaagent monitor 0x1234... --network testnet"),
        ("List your agents", "somniaagent list --network testnet"),
    ]
    console.print("\n[bold]Somnia Agent CLI Examples[/bold]\n")
    for index, (title, command) in enumerate(examples, start=1):
        console.print(f"[cyan]{index}. {title}:[/cyan]")
        console.print(f"   [dim]$ {command}[/dim]\n")
