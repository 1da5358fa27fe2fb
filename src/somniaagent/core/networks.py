"""
Somnia 네트워크 레지스트리

네트워크 이름("testnet", "mainnet")을 Network 설정으로 해석합니다.
"""

from dataclasses import replace
from typing import Dict, List, Optional, Union

from .exceptions import AgentError
from .settings import Settings
from .types import Network


# Somnia Shannon Testnet (faucet: https://testnet.somnia.network)
SOMNIA_TESTNET = Network(
    name="Somnia Shannon Testnet",
    chain_id=50312,
    rpc_url="https://50312.rpc.thirdweb.com",
    explorer_url="https://testnet.somnia.network",
)

SOMNIA_MAINNET = Network(
    name="Somnia Mainnet",
    chain_id=5031,
    rpc_url="https://api.infra.mainnet.somnia.network",
    explorer_url="https://somnia.network",
)

NETWORKS: Dict[str, Network] = {
    "testnet": SOMNIA_TESTNET,
    "mainnet": SOMNIA_MAINNET,
}

DEFAULT_NETWORK = "testnet"


def available_networks() -> List[str]:
    """등록된 네트워크 이름 목록"""
    return sorted(NETWORKS)


def get_network(name: str, settings: Optional[Settings] = None) -> Network:
    """
    이름으로 네트워크 조회 (대소문자 무시)

    Args:
        name: 네트워크 이름 (예: "testnet")
        settings: 지정하면 SOMNIA_*_RPC 재정의를 적용

    Returns:
        Network 설정

    Raises:
        AgentError(CONFIGURATION): 알 수 없는 네트워크
    """
    key = (name or "").strip().lower()
    network = NETWORKS.get(key)
    if network is None:
        raise AgentError.configuration(
            f"Unknown network: {name} (available: {', '.join(available_networks())})"
        )

    if settings is not None:
        override = settings.rpc_override(key)
        if override:
            network = replace(network, rpc_url=override)
    return network


def resolve_network(
    network: Union[Network, str, None], settings: Optional[Settings] = None
) -> Network:
    """
    네트워크 이름/설정/None을 Network로 해석

    None이면 testnet을 사용합니다.
    """
    if isinstance(network, Network):
        return network
    if network is None:
        return get_network(DEFAULT_NETWORK, settings)
    return get_network(network, settings)


def is_testnet(network: Union[Network, str]) -> bool:
    """테스트넷 여부"""
    net = resolve_network(network)
    return "testnet" in net.name.lower()
