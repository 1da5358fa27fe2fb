"""
Somnia Agent SDK

Somnia 블록체인 위에서 동작하는 이벤트 기반 자율 에이전트 SDK.

    from somniaagent import Agent, AgentConfig

    agent = Agent(AgentConfig(name="TradingBot", type="defi", triggers=["price_change"]))
"""

from .core import (
    Action,
    Agent,
    AgentConfig,
    AgentError,
    AgentEvent,
    AgentEvents,
    AgentStatus,
    AgentType,
    AIDecision,
    AutonomyLevel,
    DeploymentOptions,
    ErrorKind,
    ExecutionResult,
    get_network,
)

__version__ = "0.1.0"

__all__ = [
    "Action",
    "Agent",
    "AgentConfig",
    "AgentError",
    "AgentEvent",
    "AgentEvents",
    "AgentStatus",
    "AgentType",
    "AIDecision",
    "AutonomyLevel",
    "DeploymentOptions",
    "ErrorKind",
    "ExecutionResult",
    "get_network",
    "__version__",
]
