"""
Agent - 이벤트 기반 자율 에이전트

상태 머신, 이벤트 버스, 메트릭 누적기를 조합한 SDK의 공개 진입점입니다.
"""

from copy import deepcopy
from dataclasses import fields, replace
from typing import Any, Callable, Dict, Mapping, Optional, Union
import json
import logging

from ..ai.base import AICapability, NeutralAI
from .chain import ChainClient, ChainConnection, ContractHandle, RpcChainClient, Subscription
from .event_bus import EventBus, EventHandler, event_key
from .exceptions import AgentError
from .metrics import MetricsAggregator
from .networks import resolve_network
from .state_machine import AgentStateMachine, Transition
from .types import (
    Action,
    AgentConfig,
    AgentEvent,
    AgentEvents,
    AgentMetrics,
    AgentState,
    AgentStatus,
    DeploymentOptions,
    DeploymentResult,
    ExecutionResult,
    Network,
    now_ms,
)


_STATE_FIELDS = frozenset(f.name for f in fields(AgentState))


class Agent:
    """
    이벤트 기반 블록체인 에이전트

    핵심 책임:
    - 생명주기 관리 (start / stop / pause / resume / emergency_stop)
    - 이벤트 핸들러 등록 및 외부 이벤트 디스패치
    - 액션 실행 및 결과 메트릭 누적
    - 컨트랙트 배포
    - AI capability 슬롯 제공

    Example:
        agent = Agent(AgentConfig(name="TradingBot", type="defi", triggers=["price_change"]))

        async def on_price(event: AgentEvent):
            decision = await agent.ai.analyze(event.data)
            if decision.confidence >= 0.7:
                await agent.execute(decision.to_action())

        agent.on_event("price_change", on_price)
        await agent.init()
        await agent.start()

    Attributes:
        config: 에이전트 설정 (불변)
        logger: 로거 인스턴스
    """

    def __init__(
        self,
        config: Union[AgentConfig, Mapping[str, Any]],
        *,
        client: Optional[ChainClient] = None,
        ai: Optional[AICapability] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            config: AgentConfig 또는 같은 키를 가진 딕셔너리
            client: 체인 협력자 (None이면 init 시 RpcChainClient 사용)
            ai: AI capability (None이면 첫 사용 시 NeutralAI)
            clock: 단조 시계 (초 단위, uptime 계측용)

        Raises:
            AgentError(CONFIGURATION): name/type 누락 또는 잘못된 설정
        """
        if isinstance(config, Mapping):
            config = AgentConfig.from_dict(config)
        elif not isinstance(config, AgentConfig):
            raise AgentError.configuration(
                f"config must be AgentConfig or a mapping, got {type(config).__name__}"
            )

        self._config = config
        self.logger = logging.getLogger(f"agent.{config.name}")

        self._bus = EventBus()
        self._machine = AgentStateMachine(clock=clock, name=config.name)
        self._metrics = MetricsAggregator()
        self._state = AgentState(contract_address=config.contract_address)

        self._client = client
        self._connection: Optional[ChainConnection] = None
        self._contract: Optional[ContractHandle] = None
        self._subscriptions: Dict[str, Subscription] = {}
        self._ai = ai

    # ─────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def status(self) -> AgentStatus:
        return self._machine.status

    @property
    def event_bus(self) -> EventBus:
        return self._bus

    @property
    def is_initialized(self) -> bool:
        return self._connection is not None

    @property
    def contract(self) -> Optional[ContractHandle]:
        return self._contract

    @property
    def uptime_ms(self) -> int:
        """누적 uptime + 현재 실행 구간"""
        return self._state.metrics.uptime + self._machine.current_run_ms()

    # ─────────────────────────────────────────────────────────────────
    # Initialization
    # ─────────────────────────────────────────────────────────────────

    def get_network(self) -> Network:
        """
        설정된 네트워크 해석

        Raises:
            AgentError(CONFIGURATION): 알 수 없는 네트워크 이름
        """
        try:
            network = resolve_network(self._config.network)
        except AgentError as e:
            raise AgentError.configuration(e.message, self.name, e) from e

        if self._config.rpc_url:
            network = replace(network, rpc_url=self._config.rpc_url)
        return network

    async def init(self) -> None:
        """
        네트워크 연결 및 (설정된 경우) 기존 컨트랙트 연결

        반복 호출하면 기존 연결을 닫고 다시 연결합니다.

        Raises:
            AgentError(CONFIGURATION): 네트워크 해석, 연결, 컨트랙트 연결 실패
        """
        network = self.get_network()
        if self._client is None:
            self._client = RpcChainClient()

        await self._close_connection()
        try:
            self._connection = await self._client.connect(network, self._config.private_key)
            if self._config.contract_address:
                self._contract = await self._connection.attach(self._config.contract_address)
        except Exception as e:
            self._contract = None
            raise AgentError.configuration(
                f"Failed to initialize agent: {e}", self.name, e
            ) from e

        self.logger.info(f"Initialized on {network.name} (chain {network.chain_id})")
        if self._is_active:
            await self._subscribe_triggers()
        self._emit(
            AgentEvents.INITIALIZED,
            {
                "name": self.name,
                "type": self._config.type.value,
                "network": network.name,
                "contract_address": self._config.contract_address,
            },
        )

    async def _close_connection(self) -> None:
        self._cancel_subscriptions()
        if self._connection is not None:
            connection, self._connection = self._connection, None
            self._contract = None
            await connection.close()

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────

    async def start(self) -> bool:
        """
        실행 시작 (idle/paused -> running)

        이미 실행 중이면 아무것도 하지 않습니다.

        Returns:
            True if 상태가 바뀜
        """
        transition = self._machine.start()
        if not transition:
            return False

        self._apply_transition(transition)
        await self._subscribe_triggers()

        self.logger.info(f"Started ({transition.from_status.value} -> running)")
        self._emit(AgentEvents.STARTED, {"timestamp": now_ms()})
        return True

    async def stop(self) -> bool:
        """실행 중지 (running -> idle), 실행 시간을 uptime에 누적"""
        transition = self._machine.stop()
        if not transition:
            return False

        self._apply_transition(transition)
        self._cancel_subscriptions()

        uptime = self._state.metrics.uptime
        self.logger.info(f"Stopped (uptime={uptime}ms)")
        self._emit(AgentEvents.STOPPED, {"uptime": uptime})
        return True

    async def pause(self) -> bool:
        """일시 정지 (running -> paused)"""
        transition = self._machine.pause()
        if not transition:
            return False

        self._apply_transition(transition)
        self.logger.info("Paused")
        self._emit(AgentEvents.PAUSED, {})
        return True

    async def resume(self) -> bool:
        """재개 (paused -> running)"""
        transition = self._machine.resume()
        if not transition:
            return False

        self._apply_transition(transition)
        await self._subscribe_triggers()
        self.logger.info("Resumed")
        self._emit(AgentEvents.RESUMED, {})
        return True

    def emergency_stop(self, reason: Optional[str] = None) -> bool:
        """
        비상 정지 (any -> error)

        error 상태에서 나가는 전이는 없습니다. 새 에이전트를 생성해야 합니다.
        """
        transition = self._machine.emergency_stop()
        if not transition:
            return False

        self._apply_transition(transition)
        self._cancel_subscriptions()
        self.logger.error(f"Emergency stop: {reason or 'no reason given'}")
        self._emit(
            AgentEvents.EMERGENCY_STOP,
            {"reason": reason, "from": transition.from_status.value},
        )
        return True

    @property
    def _is_active(self) -> bool:
        # running/paused 상태에서는 트리거 구독이 유지되어야 함
        return self.status in (AgentStatus.RUNNING, AgentStatus.PAUSED)

    def _apply_transition(self, transition: Transition) -> None:
        metrics = self._metrics.add_uptime(transition.elapsed_ms)
        self._state = replace(self._state, status=transition.to_status, metrics=metrics)

    async def _subscribe_triggers(self) -> None:
        if not self._config.triggers:
            return
        if self._connection is None:
            self.logger.debug(
                f"Not initialized; triggers {list(self._config.triggers)} "
                "will be subscribed on init()"
            )
            return

        for trigger in self._config.triggers:
            if trigger in self._subscriptions:
                continue
            try:
                self._subscriptions[trigger] = await self._connection.subscribe(
                    trigger, self._on_chain_event
                )
            except Exception as e:
                self.logger.warning(f"Failed to subscribe to '{trigger}': {e}", exc_info=True)
        self.logger.info(f"Subscribed to events: {', '.join(self._subscriptions)}")

    def _cancel_subscriptions(self) -> None:
        for subscription in self._subscriptions.values():
            subscription.cancel()
        self._subscriptions.clear()

    def _on_chain_event(self, event_name: str, data: Any) -> None:
        block_number = data.get("number") if isinstance(data, dict) else None
        self.dispatch(event_name, data, source="chain", block_number=block_number)

    # ─────────────────────────────────────────────────────────────────
    # Events
    # ─────────────────────────────────────────────────────────────────

    def on_event(self, event: Union[str, AgentEvents], handler: EventHandler) -> None:
        """이벤트 핸들러 등록 (async/sync 모두 가능)"""
        self._bus.on(event, handler)

    def off_event(self, event: Union[str, AgentEvents], handler: EventHandler) -> bool:
        """이벤트 핸들러 해제"""
        return self._bus.off(event, handler)

    def dispatch(
        self,
        event: Union[str, AgentEvent],
        data: Any = None,
        source: Optional[str] = None,
        block_number: Optional[int] = None,
        tx_hash: Optional[str] = None,
    ) -> AgentEvent:
        """
        외부 자극(체인 이벤트, 시뮬레이터 이벤트)을 핸들러로 전달

        Args:
            event: 이벤트 이름 또는 완성된 AgentEvent
            data: 이벤트 페이로드
            source: 이벤트 발생원 (None이면 에이전트 이름)

        Returns:
            발행된 AgentEvent
        """
        if isinstance(event, AgentEvent):
            agent_event = event
        else:
            agent_event = AgentEvent(
                type=event_key(event),
                data=data,
                source=source or self.name,
                block_number=block_number,
                tx_hash=tx_hash,
            )
        self._bus.emit(agent_event.type, agent_event)
        return agent_event

    def _emit(self, event: AgentEvents, data: Any) -> None:
        self._bus.emit(event, AgentEvent(type=event.value, data=data, source=self.name))

    async def drain(self) -> None:
        """진행 중인 비동기 핸들러 완료 대기"""
        await self._bus.drain()

    # ─────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────

    async def execute(self, action: Union[Action, Mapping[str, Any]]) -> ExecutionResult:
        """
        액션 실행

        컨트랙트 핸들과 서명 자격 증명이 모두 있어야 합니다.
        실패 시에도 메트릭에 실패(gas 0)를 기록한 뒤 예외를 올립니다.

        Args:
            action: 실행할 Action (또는 같은 키의 딕셔너리)

        Returns:
            ExecutionResult (성공)

        Raises:
            AgentError(EXECUTION): 준비되지 않았거나 제출/확정 실패
        """
        if isinstance(action, Mapping):
            action = Action.from_dict(action)

        if self._contract is None or not self._config.private_key:
            raise AgentError.execution("Agent not properly initialized or deployed", self.name)

        payload = json.dumps(action.params, default=str).encode("utf-8")
        try:
            pending = await self._contract.execute_action(
                action.type,
                payload,
                gas_limit=action.gas_limit,
                gas_price=action.gas_price,
            )
            receipt = await pending.wait()
        except Exception as e:
            self._record_outcome(False, 0)
            failure = ExecutionResult.failed(str(e))
            self.logger.warning(f"Action '{action.type}' failed: {e}")
            self._emit(
                AgentEvents.ERROR,
                {"action": action, "error": str(e), "result": failure},
            )
            raise AgentError.execution(
                f"Action execution failed: {e}", self.name, e
            ) from e

        result = ExecutionResult.succeeded(
            tx_hash=receipt.hash,
            gas_used=receipt.gas_used,
            block_number=receipt.block_number,
        )
        self._record_outcome(True, result.gas_used, last_action=action)
        self.logger.info(
            f"Executed '{action.type}' tx={result.tx_hash} gas={result.gas_used}"
        )
        self._emit(AgentEvents.ACTION_EXECUTED, {"action": action, "result": result})
        return result

    def _record_outcome(
        self, success: bool, gas_used: int, last_action: Optional[Action] = None
    ) -> None:
        # await 없이 읽기-계산-저장
        old_state = self._state
        metrics = self._metrics.record(success, gas_used)
        changes: Dict[str, Any] = {"metrics": metrics}
        if last_action is not None:
            changes["last_action"] = deepcopy(last_action)
        self._state = replace(old_state, **changes)
        self._emit(
            AgentEvents.STATE_CHANGED,
            {"old_state": old_state.copy(), "new_state": self._state.copy()},
        )

    # ─────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────

    def get_state(self) -> AgentState:
        """현재 상태의 사본 (수정해도 내부 상태에 영향 없음)"""
        return self._state.copy()

    def set_state(self, partial: Optional[Mapping[str, Any]] = None, **changes: Any) -> AgentState:
        """
        상태 갱신 (최상위 키 단위 얕은 병합 후 객체 전체 교체)

        Example:
            agent.set_state(data={"x": 1})
            agent.set_state({"data": {"y": 2}})
            agent.get_state().data  # {"y": 2}

        Returns:
            새 상태의 사본

        Raises:
            ValueError: 알 수 없는 상태 키
        """
        updates: Dict[str, Any] = dict(partial or {})
        updates.update(changes)

        unknown = set(updates) - _STATE_FIELDS
        if unknown:
            raise ValueError(f"Unknown state keys: {', '.join(sorted(unknown))}")

        updates = {key: deepcopy(value) for key, value in updates.items()}
        if isinstance(updates.get("metrics"), Mapping):
            updates["metrics"] = AgentMetrics(**updates["metrics"])
        if isinstance(updates.get("last_action"), Mapping):
            updates["last_action"] = Action.from_dict(updates["last_action"])

        if "metrics" in updates:
            self._metrics.load(updates["metrics"])
        if "status" in updates:
            transition = self._machine.force(AgentStatus(updates["status"]))
            updates["status"] = transition.to_status
            updates["metrics"] = self._metrics.add_uptime(transition.elapsed_ms)

        old_state = self._state.copy()
        self._state = replace(self._state, **updates)
        self._emit(
            AgentEvents.STATE_CHANGED,
            {"old_state": old_state, "new_state": self._state.copy()},
        )
        return self._state.copy()

    # ─────────────────────────────────────────────────────────────────
    # Deployment
    # ─────────────────────────────────────────────────────────────────

    async def deploy(
        self, options: Union[DeploymentOptions, Mapping[str, Any], None] = None
    ) -> DeploymentResult:
        """
        에이전트 컨트랙트 배포

        성공한 경우에만 주소를 설정과 상태에 저장하고 deployed 이벤트를 발행합니다.

        Raises:
            AgentError(DEPLOYMENT): 서명 자격 증명 누락 또는 배포 실패
        """
        if options is None:
            options = DeploymentOptions()
        elif isinstance(options, Mapping):
            options = DeploymentOptions(**options)

        if not self._config.private_key:
            raise AgentError.deployment(
                "No signer configured. Provide private key in config.", self.name
            )

        try:
            network = (
                resolve_network(options.network)
                if options.network is not None
                else self.get_network()
            )
        except AgentError as e:
            raise AgentError.deployment(e.message, self.name, e) from e

        if self._client is None:
            self._client = RpcChainClient()

        connection = self._connection
        owns_connection = connection is None or connection.network != network
        try:
            if owns_connection:
                connection = await self._client.connect(network, self._config.private_key)
            receipt = await connection.deploy(
                options.bytecode or "0x",
                gas_limit=options.gas_limit,
                gas_price=options.gas_price,
            )
            contract = await connection.attach(receipt.contract_address)
        except Exception as e:
            if owns_connection and connection is not None:
                await connection.close()
            raise AgentError.deployment(f"Deployment failed: {e}", self.name, e) from e

        if owns_connection:
            await self._close_connection()
            self._connection = connection
            if self._is_active:
                await self._subscribe_triggers()

        result = DeploymentResult(
            contract_address=receipt.contract_address,
            tx_hash=receipt.hash,
            block_number=receipt.block_number,
            gas_used=receipt.gas_used,
            network=network,
        )
        self._config = self._config.with_contract_address(result.contract_address)
        self._contract = contract
        self._state = replace(self._state, contract_address=result.contract_address)

        self.logger.info(f"Deployed to {network.name} at {result.contract_address}")
        self._emit(AgentEvents.DEPLOYED, result)
        return result

    # ─────────────────────────────────────────────────────────────────
    # AI
    # ─────────────────────────────────────────────────────────────────

    @property
    def ai(self) -> AICapability:
        """AI capability (설정하지 않았으면 중립 hold 결정을 내리는 기본값)"""
        if self._ai is None:
            self._ai = NeutralAI()
        return self._ai

    def set_ai(self, ai: AICapability) -> None:
        if not callable(getattr(ai, "analyze", None)):
            raise TypeError(f"AI capability must define analyze(), got {type(ai).__name__}")
        self._ai = ai

    # ─────────────────────────────────────────────────────────────────
    # Utility Methods
    # ─────────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """연결 종료 및 진행 중인 핸들러 대기"""
        await self._close_connection()
        await self._bus.drain()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": self._config.to_dict(),
            "state": self._state.to_dict(),
            "initialized": self.is_initialized,
            "uptime_ms": self.uptime_ms,
        }

    def __repr__(self) -> str:
        return f"<Agent name={self.name} type={self._config.type.value} status={self.status.value}>"

    def __str__(self) -> str:
        return f"Agent({self.name})"
