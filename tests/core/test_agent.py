"""
Agent 테스트

- 생명주기 전이와 이벤트
- execute 사전 조건 및 메트릭
- set_state 병합 규칙
- init / deploy (MockChainClient)
- 트리거 구독
"""

import pytest

from somniaagent.ai.base import NeutralAI
from somniaagent.core.agent import Agent
from somniaagent.core.exceptions import AgentError, ErrorKind
from somniaagent.core.types import (
    Action,
    AgentConfig,
    AgentEvent,
    AgentEvents,
    AgentStatus,
)
from somniaagent.testing import MockChainClient


def collect(agent, *events):
    """내장 이벤트 수집용 헬퍼"""
    seen = []
    for event in events:
        agent.on_event(event, lambda e: seen.append(e))
    return seen


# ─────────────────────────────────────────────────────────────────
# Construction Tests
# ─────────────────────────────────────────────────────────────────


class TestConstruction:
    """에이전트 생성 테스트"""

    def test_initial_state(self, agent):
        state = agent.get_state()
        assert state.status is AgentStatus.IDLE
        assert state.last_action is None
        assert state.metrics.total_actions == 0
        assert state.metrics.success_rate == 1.0
        assert state.data == {}
        assert not agent.is_initialized

    def test_from_mapping(self):
        agent = Agent({"name": "Npc", "type": "gaming", "triggers": ["a", "b", "a"]})
        assert agent.config.triggers == ("a", "b")
        assert agent.config.autonomy.value == "medium"

    @pytest.mark.parametrize(
        "data",
        [
            {"type": "defi"},
            {"name": "", "type": "defi"},
            {"name": "x"},
            {"name": "x", "type": "unknown"},
        ],
    )
    def test_invalid_config(self, data):
        """name/type 누락 또는 잘못된 값 → CONFIGURATION"""
        with pytest.raises(AgentError) as exc_info:
            Agent(data)
        assert exc_info.value.is_kind(ErrorKind.CONFIGURATION)

    def test_private_key_not_in_repr(self, config):
        assert "ab" * 32 not in repr(config)
        assert "private_key" not in config.to_dict()


# ─────────────────────────────────────────────────────────────────
# Lifecycle Tests
# ─────────────────────────────────────────────────────────────────


class TestLifecycle:
    """생명주기 테스트"""

    @pytest.mark.asyncio
    async def test_start_stop(self, agent, clock):
        seen = collect(agent, AgentEvents.STARTED, AgentEvents.STOPPED)

        assert await agent.start() is True
        assert agent.status is AgentStatus.RUNNING
        clock.advance(3.0)
        assert await agent.stop() is True

        assert agent.status is AgentStatus.IDLE
        assert agent.get_state().metrics.uptime == 3000
        assert [e.type for e in seen] == ["agent:started", "agent:stopped"]
        assert seen[1].data == {"uptime": 3000}

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, agent):
        """두 번째 start는 이벤트 없이 no-op"""
        seen = collect(agent, AgentEvents.STARTED)

        await agent.start()
        assert await agent.start() is False
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_noop_transitions_emit_nothing(self, agent):
        seen = collect(agent, AgentEvents.STOPPED, AgentEvents.PAUSED, AgentEvents.RESUMED)

        assert await agent.stop() is False
        assert await agent.pause() is False
        assert await agent.resume() is False
        assert seen == []

    @pytest.mark.asyncio
    async def test_pause_resume(self, agent, clock):
        seen = collect(agent, AgentEvents.PAUSED, AgentEvents.RESUMED)

        await agent.start()
        clock.advance(1.0)
        assert await agent.pause() is True
        clock.advance(5.0)
        assert await agent.resume() is True
        clock.advance(1.0)
        await agent.stop()

        assert [e.type for e in seen] == ["agent:paused", "agent:resumed"]
        assert agent.get_state().metrics.uptime == 2000

    @pytest.mark.asyncio
    async def test_uptime_includes_open_run(self, agent, clock):
        await agent.start()
        clock.advance(1.5)
        assert agent.uptime_ms == 1500

    @pytest.mark.asyncio
    async def test_emergency_stop_is_terminal(self, agent):
        seen = collect(agent, AgentEvents.EMERGENCY_STOP)

        await agent.start()
        assert agent.emergency_stop("kill switch") is True
        assert agent.status is AgentStatus.ERROR
        assert seen[0].data == {"reason": "kill switch", "from": "running"}

        assert await agent.start() is False
        assert await agent.resume() is False
        assert agent.emergency_stop() is False
        assert agent.status is AgentStatus.ERROR


# ─────────────────────────────────────────────────────────────────
# Event Tests
# ─────────────────────────────────────────────────────────────────


class TestEvents:
    """이벤트 등록/디스패치 테스트"""

    def test_dispatch_wraps_payload(self, agent):
        seen = []
        agent.on_event("price_change", seen.append)

        event = agent.dispatch("price_change", {"price": 1000})

        assert seen == [event]
        assert event.type == "price_change"
        assert event.data == {"price": 1000}
        assert event.source == "TradingBot"

    def test_dispatch_prebuilt_event(self, agent):
        seen = []
        agent.on_event("x", seen.append)
        event = AgentEvent(type="x", data=1, source="simulator")

        agent.dispatch(event)
        assert seen[0] is event

    def test_off_event(self, agent):
        seen = []
        agent.on_event("x", seen.append)
        assert agent.off_event("x", seen.append) is True
        agent.dispatch("x", 1)
        assert seen == []

    @pytest.mark.asyncio
    async def test_async_handler_drained(self, agent):
        done = []

        async def handler(event):
            done.append(event.data)

        agent.on_event("x", handler)
        agent.dispatch("x", 42)
        await agent.drain()
        assert done == [42]


# ─────────────────────────────────────────────────────────────────
# Execution Tests
# ─────────────────────────────────────────────────────────────────


class TestExecute:
    """액션 실행 테스트"""

    @pytest.mark.asyncio
    async def test_execute_without_contract(self, agent):
        """컨트랙트 없이 실행 → EXECUTION, 메트릭 변화 없음"""
        with pytest.raises(AgentError) as exc_info:
            await agent.execute(Action(type="buy", params={"amount": 1}))

        assert exc_info.value.kind is ErrorKind.EXECUTION
        assert "not properly initialized" in exc_info.value.message
        assert agent.get_state().metrics.total_actions == 0

    @pytest.mark.asyncio
    async def test_execute_success(self, agent, chain):
        seen = collect(agent, AgentEvents.ACTION_EXECUTED, AgentEvents.STATE_CHANGED)
        await agent.init()
        await agent.deploy()

        result = await agent.execute({"type": "buy", "params": {"amount": 1}})

        assert result.success
        assert result.tx_hash.startswith("0x")
        assert 21000 <= result.gas_used < 51000

        state = agent.get_state()
        assert state.metrics.total_actions == 1
        assert state.metrics.success_rate == 1.0
        assert state.metrics.avg_gas_used == result.gas_used
        assert state.last_action.type == "buy"

        executed = [e for e in seen if e.type == "agent:action_executed"]
        assert executed[0].data["result"] is result
        assert chain.contracts[state.contract_address]["state"]["calls"] == 1

    @pytest.mark.asyncio
    async def test_execute_failure_records_metrics(self, config, failing_chain):
        """트랜잭션 실패 → EXECUTION, 메트릭에 실패 반영"""
        agent = Agent(config, client=MockChainClient(failing_chain))
        errors = collect(agent, AgentEvents.ERROR)
        await agent.init()
        await agent.deploy()

        with pytest.raises(AgentError) as exc_info:
            await agent.execute(Action(type="sell", params={"amount": 2}))

        assert exc_info.value.kind is ErrorKind.EXECUTION
        assert exc_info.value.message.startswith("Action execution failed")

        m = agent.get_state().metrics
        assert m.total_actions == 1
        assert m.success_rate == 0.0
        assert m.avg_gas_used == 0.0
        assert errors[0].data["result"].success is False

    @pytest.mark.asyncio
    async def test_state_snapshot_isolated(self, agent):
        """get_state 사본 수정은 내부 상태에 영향 없음"""
        snapshot = agent.get_state()
        snapshot.data["x"] = 1
        assert agent.get_state().data == {}


# ─────────────────────────────────────────────────────────────────
# State Tests
# ─────────────────────────────────────────────────────────────────


class TestSetState:
    """set_state 병합 테스트"""

    def test_top_level_keys_replaced(self, agent):
        """data는 얕은 병합이 아닌 통째 교체"""
        agent.set_state(data={"x": 1})
        agent.set_state({"data": {"y": 2}})
        assert agent.get_state().data == {"y": 2}

    def test_untouched_keys_preserved(self, agent):
        agent.set_state(data={"x": 1})
        agent.set_state(last_action={"type": "hold"})

        state = agent.get_state()
        assert state.data == {"x": 1}
        assert state.last_action.type == "hold"

    def test_input_copied(self, agent):
        payload = {"x": [1]}
        agent.set_state(data=payload)
        payload["x"].append(2)
        assert agent.get_state().data == {"x": [1]}

    def test_unknown_key(self, agent):
        with pytest.raises(ValueError):
            agent.set_state(foo=1)

    def test_state_changed_event(self, agent):
        seen = collect(agent, AgentEvents.STATE_CHANGED)
        agent.set_state(data={"x": 1})

        assert seen[0].data["old_state"].data == {}
        assert seen[0].data["new_state"].data == {"x": 1}

    def test_status_goes_through_state_machine(self, agent):
        agent.set_state(status="paused")
        assert agent.status is AgentStatus.PAUSED
        assert agent.get_state().status is AgentStatus.PAUSED

    def test_metrics_mapping(self, agent):
        agent.set_state(metrics={"total_actions": 2, "success_rate": 0.5})
        assert agent.get_state().metrics.total_actions == 2


# ─────────────────────────────────────────────────────────────────
# Init / Deploy Tests
# ─────────────────────────────────────────────────────────────────


class TestInitAndDeploy:
    """초기화 및 배포 테스트"""

    @pytest.mark.asyncio
    async def test_init_emits_initialized(self, agent):
        seen = collect(agent, AgentEvents.INITIALIZED)
        await agent.init()

        assert agent.is_initialized
        assert seen[0].data["name"] == "TradingBot"
        assert seen[0].data["network"] == "Somnia Shannon Testnet"

    @pytest.mark.asyncio
    async def test_unknown_network(self, chain):
        agent = Agent(
            AgentConfig(name="Bot", type="defi", network="moonbase"),
            client=MockChainClient(chain),
        )
        with pytest.raises(AgentError) as exc_info:
            await agent.init()

        assert exc_info.value.kind is ErrorKind.CONFIGURATION
        assert "Unknown network" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_init_attaches_existing_contract(self, config, chain):
        address = chain.deploy_contract("0x6080")
        agent = Agent(config.with_contract_address(address), client=MockChainClient(chain))

        await agent.init()
        assert agent.contract is not None
        assert agent.contract.address == address

    @pytest.mark.asyncio
    async def test_init_unknown_contract(self, config, chain):
        agent = Agent(
            config.with_contract_address("0x" + "1" * 40), client=MockChainClient(chain)
        )
        with pytest.raises(AgentError) as exc_info:
            await agent.init()

        assert exc_info.value.kind is ErrorKind.CONFIGURATION
        assert exc_info.value.message.startswith("Failed to initialize agent")

    @pytest.mark.asyncio
    async def test_deploy_without_key(self, chain):
        agent = Agent(AgentConfig(name="Bot", type="defi"), client=MockChainClient(chain))
        with pytest.raises(AgentError) as exc_info:
            await agent.deploy()

        assert exc_info.value.kind is ErrorKind.DEPLOYMENT
        assert "No signer configured" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_deploy_persists_address(self, agent):
        seen = collect(agent, AgentEvents.DEPLOYED)

        result = await agent.deploy({"gas_limit": 5_000_000})

        assert result.contract_address.startswith("0x")
        assert len(result.contract_address) == 42
        assert agent.config.contract_address == result.contract_address
        assert agent.get_state().contract_address == result.contract_address
        assert agent.is_initialized
        assert seen[0].data is result

    @pytest.mark.asyncio
    async def test_deploy_failure_keeps_state(self, agent):
        class BrokenClient:
            async def connect(self, network, credential):
                raise ConnectionError("node unreachable")

        broken = Agent(agent.config, client=BrokenClient())
        with pytest.raises(AgentError) as exc_info:
            await broken.deploy()

        assert exc_info.value.kind is ErrorKind.DEPLOYMENT
        assert "Deployment failed" in exc_info.value.message
        assert broken.config.contract_address is None
        assert broken.get_state().contract_address is None


# ─────────────────────────────────────────────────────────────────
# Trigger Tests
# ─────────────────────────────────────────────────────────────────


class TestTriggers:
    """트리거 구독 테스트"""

    @pytest.mark.asyncio
    async def test_chain_events_reach_handlers(self, agent, chain):
        seen = []
        agent.on_event("price_change", seen.append)
        await agent.init()
        await agent.start()

        chain.emit_chain_event("price_change", {"price": 1200})

        assert len(seen) == 1
        assert seen[0].source == "chain"
        assert seen[0].data == {"price": 1200}

    @pytest.mark.asyncio
    async def test_stop_cancels_subscriptions(self, agent, chain):
        seen = []
        agent.on_event("price_change", seen.append)
        await agent.init()
        await agent.start()
        await agent.stop()

        chain.emit_chain_event("price_change", {"price": 1200})
        assert seen == []

    @pytest.mark.asyncio
    async def test_reinit_while_running_keeps_triggers(self, agent, chain):
        """실행 중 init() 재호출 후에도 체인 이벤트 수신"""
        seen = []
        agent.on_event("price_change", seen.append)
        await agent.init()
        await agent.start()
        await agent.init()

        chain.emit_chain_event("price_change", {"price": 1200})

        assert agent.status is AgentStatus.RUNNING
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_start_before_init_subscribes_on_init(self, agent, chain):
        """init() 전에 start()한 경우 init()에서 구독"""
        seen = []
        agent.on_event("price_change", seen.append)
        await agent.start()
        await agent.init()

        chain.emit_chain_event("price_change", {"price": 1200})
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_reinit_while_paused_resubscribes_on_resume(self, agent, chain):
        seen = []
        agent.on_event("price_change", seen.append)
        await agent.init()
        await agent.start()
        await agent.pause()
        await agent.init()
        await agent.resume()

        chain.emit_chain_event("price_change", {"price": 1200})
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_deploy_to_other_network_keeps_triggers(self, agent, chain):
        """배포가 연결을 교체해도 구독 유지 (중복 없음)"""
        seen = []
        agent.on_event("price_change", seen.append)
        await agent.init()
        await agent.start()
        await agent.deploy({"network": "mainnet"})

        chain.emit_chain_event("price_change", {"price": 1200})
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_init_when_idle_does_not_subscribe(self, agent, chain):
        seen = []
        agent.on_event("price_change", seen.append)
        await agent.init()

        chain.emit_chain_event("price_change", {"price": 1200})
        assert seen == []


# ─────────────────────────────────────────────────────────────────
# AI Slot Tests
# ─────────────────────────────────────────────────────────────────


class TestAISlot:
    """AI capability 슬롯 테스트"""

    @pytest.mark.asyncio
    async def test_default_ai_holds(self, agent):
        decision = await agent.ai.analyze({"price": 1})
        assert isinstance(agent.ai, NeutralAI)
        assert decision.action == "hold"
        assert decision.confidence == 0.5

    def test_set_ai_requires_analyze(self, agent):
        with pytest.raises(TypeError):
            agent.set_ai(object())

    @pytest.mark.asyncio
    async def test_close(self, agent):
        await agent.init()
        await agent.close()
        assert not agent.is_initialized
