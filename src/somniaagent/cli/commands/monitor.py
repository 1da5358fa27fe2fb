"""somniaagent monitor - 배포된 에이전트 컨트랙트 모니터링"""

import asyncio

import typer
from typing_extensions import Annotated

from ...core.chain import RpcChainClient, is_address
from ...core.exceptions import AgentError
from ...core.networks import get_network
from ...core.settings import get_settings
from ...core.types import Network
from ..errors import exit_on_error, run_async
from ..output import console, log_info, print_header


def monitor_agent(
    address: Annotated[str, typer.Argument(help="Agent contract address")],
    network: Annotated[str, typer.Option("--network", "-n", help="Network")] = "testnet",
    interval: Annotated[
        float, typer.Option("--interval", "-i", help="Refresh interval in seconds")
    ] = 5.0,
    count: Annotated[
        int, typer.Option("--count", help="Number of polls (0 = until interrupted)")
    ] = 0,
):
    """Monitor a deployed agent contract.

    Examples:

        somniaagent monitor 0x1234... --network testnet --interval 10
    """
    print_header("Monitoring Agent")
    settings = get_settings()

    with exit_on_error():
        if not is_address(address):
            raise AgentError.configuration(f"Invalid contract address: {address}")
        target = get_network(network, settings)

    log_info(f"Contract {address} on {target.name} (Ctrl+C to stop)")
    try:
        run_async(_poll(target, address, interval, count, RpcChainClient.from_settings(settings)))
    except KeyboardInterrupt:
        log_info("Monitoring stopped")


async def _poll(
    network: Network, address: str, interval: float, count: int, client: RpcChainClient
) -> None:
    connection = await client.connect(network, None)
    try:
        contract = await connection.attach(address)
        iteration = 0
        while count <= 0 or iteration < count:
            if iteration:
                await asyncio.sleep(interval)
            iteration += 1

            block = await connection.block_number()
            info = await contract.get_info()
            status = "[green]deployed[/green]" if info["deployed"] else "[red]no code[/red]"
            console.print(
                f"[dim]#{iteration}[/dim] block [cyan]{block}[/cyan]  "
                f"{status}  code={info['code_size']} bytes"
            )
    finally:
        await connection.close()
