"""somniaagent deploy - 에이전트 컨트랙트 배포"""

from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from ...core.agent import Agent
from ...core.chain import RpcChainClient
from ...core.exceptions import AgentError
from ...core.networks import get_network
from ...core.settings import get_settings
from ...core.types import DeploymentOptions, DeploymentResult
from ...testing import MockChain, MockChainClient
from ..errors import exit_on_error, run_async
from ..output import console, key_value_table, log_info, log_success, log_warning, print_header
from ..project import CONFIG_FILE, deployments_path, load_agent_config, record_deployment


def deploy_agent(
    network: Annotated[
        Optional[str], typer.Option("--network", "-n", help="Network (testnet, mainnet)")
    ] = None,
    private_key: Annotated[
        Optional[str],
        typer.Option("--private-key", "-k", help="Private key (or PRIVATE_KEY env var)"),
    ] = None,
    gas_limit: Annotated[int, typer.Option("--gas-limit", help="Gas limit")] = 5000000,
    bytecode_file: Annotated[
        Optional[Path], typer.Option("--bytecode-file", help="File with 0x-prefixed contract bytecode")
    ] = None,
    config_path: Annotated[
        Path, typer.Option("--config", "-c", help="Agent config file")
    ] = Path(CONFIG_FILE),
    project_dir: Annotated[
        Path, typer.Option("--dir", help="Project directory for the deployment record")
    ] = Path("."),
    verify: Annotated[bool, typer.Option("--verify", help="Verify contract on explorer")] = False,
    mock: Annotated[
        bool, typer.Option("--mock", help="Deploy to an in-memory chain (no network access)")
    ] = False,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip mainnet confirmation")] = False,
):
    """Deploy your agent to the Somnia blockchain.

    Examples:

        somniaagent deploy --mock
        somniaagent deploy --network testnet --bytecode-file Agent.bin
    """
    print_header("Deploy AI Agent to Somnia")
    settings = get_settings()

    with exit_on_error():
        config = load_agent_config(config_path)
        target = get_network(network or settings.default_network, settings)

        key = private_key or settings.private_key or config.private_key
        if not key:
            raise AgentError.deployment(
                "Private key not found! Set PRIVATE_KEY in .env or use --private-key",
                config.name,
            )

        bytecode = None
        if bytecode_file is not None:
            bytecode = bytecode_file.read_text(encoding="utf-8").strip()
            if not bytecode.startswith("0x"):
                bytecode = "0x" + bytecode

    console.print(
        key_value_table(
            [
                ("Agent", config.name),
                ("Network", target.name),
                ("Chain ID", target.chain_id),
                ("Gas Limit", f"{gas_limit:,}"),
                ("Mode", "mock" if mock else "rpc"),
            ]
        )
    )

    if "mainnet" in target.name.lower() and not mock:
        log_warning("You are deploying to MAINNET! This will use real SOMI tokens.")
        if not yes:
            typer.confirm("Continue?", abort=True)

    if verify:
        log_warning("Explorer verification is not supported yet; skipping")

    agent = Agent(
        replace(config, private_key=key, contract_address=None),
        client=MockChainClient(MockChain()) if mock else RpcChainClient.from_settings(settings),
    )
    options = DeploymentOptions(network=target, gas_limit=gas_limit, bytecode=bytecode)
    result = run_async(_deploy(agent, options))

    entry = record_deployment(agent.config, result, project_dir, mock=mock)
    log_success("Deployment Successful!")
    _print_result(result)
    log_info(f"Recorded in {deployments_path(project_dir)} ({entry['name']})")


async def _deploy(agent: Agent, options: DeploymentOptions) -> DeploymentResult:
    try:
        return await agent.deploy(options)
    finally:
        await agent.close()


def _print_result(result: DeploymentResult) -> None:
    rows = [
        ("Contract", result.contract_address),
        ("Transaction", result.tx_hash),
        ("Block", result.block_number),
        ("Gas Used", f"{result.gas_used:,}"),
    ]
    explorer = result.network.address_url(result.contract_address)
    if explorer:
        rows.append(("Explorer", explorer))
    console.print(key_value_table(rows))
