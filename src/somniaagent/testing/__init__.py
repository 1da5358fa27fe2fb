"""
Somnia Agent 테스트 하네스

네트워크 없이 에이전트 로직을 검증하기 위한 시뮬레이터, 메모리 내 체인, 헬퍼.
"""

from .helpers import assert_simulation_results, wait_for
from .mock_chain import (
    Block,
    MockChain,
    MockChainClient,
    MockTransactionError,
    Transaction,
)
from .scenarios import (
    SCENARIO_DESCRIPTIONS,
    SCENARIOS,
    SimulationEvent,
    available_scenarios,
    create_bear_market_scenario,
    create_bull_run_scenario,
    create_volatility_scenario,
    events_from_steps,
    generate_event_sequence,
    generate_liquidity_event,
    generate_price_change_event,
    get_scenario_events,
    load_scenario_file,
)
from .simulator import SimulationConfig, SimulationResult, Simulator

__all__ = [
    "Simulator",
    "SimulationConfig",
    "SimulationResult",
    "SimulationEvent",
    "MockChain",
    "MockChainClient",
    "MockTransactionError",
    "Block",
    "Transaction",
    "SCENARIOS",
    "SCENARIO_DESCRIPTIONS",
    "available_scenarios",
    "get_scenario_events",
    "events_from_steps",
    "load_scenario_file",
    "generate_price_change_event",
    "generate_liquidity_event",
    "generate_event_sequence",
    "create_volatility_scenario",
    "create_bull_run_scenario",
    "create_bear_market_scenario",
    "assert_simulation_results",
    "wait_for",
]
