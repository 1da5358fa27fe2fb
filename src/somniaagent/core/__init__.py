"""
Somnia Agent SDK Core

이 모듈은 에이전트 런타임의 핵심 구성 요소를 제공합니다.

Classes:
    Agent: 이벤트 기반 자율 에이전트
    AgentStateMachine: 생명주기 상태 전이
    EventBus: 프로세스 내 이벤트 발행/구독
    MetricsAggregator: 실행 결과 메트릭 누적
    RpcChainClient: JSON-RPC 체인 협력자
    CircuitBreaker: 외부 호출 장애 격리
"""

from .exceptions import AgentError, CircuitBreakerOpenError, ErrorKind, RpcError
from .types import (
    Action,
    AgentConfig,
    AgentEvent,
    AgentEvents,
    AgentMetrics,
    AgentState,
    AgentStatus,
    AgentType,
    AIDecision,
    AutonomyLevel,
    DeploymentOptions,
    DeploymentResult,
    ExecutionResult,
    Network,
    now_ms,
)
from .settings import Settings, get_settings
from .networks import (
    NETWORKS,
    SOMNIA_MAINNET,
    SOMNIA_TESTNET,
    available_networks,
    get_network,
    resolve_network,
)
from .event_bus import EventBus, EventHandler
from .metrics import MetricsAggregator
from .state_machine import AgentStateMachine, Transition
from .circuit_breaker import CircuitBreaker, CircuitState
from .chain import (
    ChainClient,
    ChainConnection,
    ContractHandle,
    PendingTransaction,
    RpcChainClient,
    TransactionReceipt,
)
from .agent import Agent

__all__ = [
    # Exceptions
    "AgentError",
    "ErrorKind",
    "CircuitBreakerOpenError",
    "RpcError",
    # Types
    "Action",
    "AgentConfig",
    "AgentEvent",
    "AgentEvents",
    "AgentMetrics",
    "AgentState",
    "AgentStatus",
    "AgentType",
    "AIDecision",
    "AutonomyLevel",
    "DeploymentOptions",
    "DeploymentResult",
    "ExecutionResult",
    "Network",
    "now_ms",
    # Configuration
    "Settings",
    "get_settings",
    "NETWORKS",
    "SOMNIA_TESTNET",
    "SOMNIA_MAINNET",
    "available_networks",
    "get_network",
    "resolve_network",
    # Runtime
    "Agent",
    "AgentStateMachine",
    "Transition",
    "EventBus",
    "EventHandler",
    "MetricsAggregator",
    # Chain
    "ChainClient",
    "ChainConnection",
    "ContractHandle",
    "PendingTransaction",
    "RpcChainClient",
    "TransactionReceipt",
    # Fault Tolerance
    "CircuitBreaker",
    "CircuitState",
]
