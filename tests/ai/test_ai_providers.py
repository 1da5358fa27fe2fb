"""
AI capability 테스트

- 응답 파싱
- 규칙 기반 / Mock AI
- LocalLLMProvider (Ollama / OpenAI 호환, 폴백)
- OpenAIProvider
"""

import json

import httpx
import pytest

from somniaagent.ai import (
    CUSTOM_AGENT_PROMPT,
    DEFI_TRADING_PROMPT,
    GAMING_NPC_PROMPT,
    LocalLLMProvider,
    MockAI,
    OpenAIProvider,
    RuleBasedAI,
    build_prompt,
    parse_decision,
    prompt_for,
)
from somniaagent.core.circuit_breaker import CircuitBreaker, CircuitState
from somniaagent.core.exceptions import AgentError, ErrorKind
from somniaagent.core.settings import Settings
from somniaagent.core.types import AgentEvent


PRICE_UP = {"type": "price_change", "price": 1100, "change": 0.08}
DECISION_JSON = '{"action": "buy", "confidence": 0.8, "reasoning": "dip", "params": {"amount": 2}}'


def recording_transport(responder):
    """요청을 기록하고 responder(request)의 응답을 돌려주는 전송 계층"""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return responder(request)

    return httpx.MockTransport(handler), requests


# ─────────────────────────────────────────────────────────────────
# Parsing Tests
# ─────────────────────────────────────────────────────────────────


class TestParseDecision:
    """응답 파싱 테스트"""

    def test_json_embedded_in_text(self):
        decision = parse_decision(f"Sure! Here is my answer:\n{DECISION_JSON}\nGood luck.")
        assert decision.action == "buy"
        assert decision.confidence == 0.8
        assert decision.params == {"amount": 2}
        assert decision.metadata == {"source": "LLM"}

    def test_missing_fields_use_defaults(self):
        decision = parse_decision('{"action": "sell"}')
        assert decision.confidence == 0.5
        assert decision.reasoning == "No reasoning provided"

    @pytest.mark.parametrize(
        "text",
        ["no json here", "{not valid json}", '{"confidence": 7}', ""],
    )
    def test_unparseable_returns_hold(self, text):
        decision = parse_decision(text, source="OpenAI")
        assert decision.action == "hold"
        assert decision.confidence == 0.5
        assert decision.reasoning == "Failed to parse OpenAI response"

    def test_build_prompt_flattens_event(self):
        event = AgentEvent(type="price_change", data={"price": 1000})
        prompt = build_prompt(event, system_prompt="SYSTEM")

        assert prompt.startswith("SYSTEM")
        assert "Event Type: price_change" in prompt
        assert '"price": 1000' in prompt


# ─────────────────────────────────────────────────────────────────
# Rule / Mock Tests
# ─────────────────────────────────────────────────────────────────


class TestRuleBasedAI:
    """규칙 기반 결정 테스트"""

    @pytest.mark.asyncio
    async def test_price_up_sells(self):
        decision = await RuleBasedAI().analyze(PRICE_UP)
        assert decision.action == "sell"
        assert decision.confidence == 0.6
        assert decision.reasoning == "Price increased >5% (fallback rule)"

    def test_price_down_buys(self):
        decision = RuleBasedAI().decide({"type": "price_change", "change": -0.1})
        assert decision.action == "buy"
        assert decision.params == {"amount": 1}

    @pytest.mark.parametrize(
        "data",
        [
            {"type": "price_change", "change": 0.01},
            {"type": "liquidity_change", "change": 0.5},
            {},
        ],
    )
    def test_no_signal_holds(self, data):
        decision = RuleBasedAI().decide(data)
        assert decision.action == "hold"
        assert decision.confidence == 0.5

    def test_agent_event_input(self):
        event = AgentEvent(type="price_change", data={"change": 0.2})
        assert RuleBasedAI().decide(event).action == "sell"


class TestMockAI:
    """Mock AI 테스트"""

    @pytest.mark.asyncio
    async def test_fixed_decision(self):
        ai = MockAI(default_action="buy", default_confidence=0.9)
        decision = await ai.analyze({"x": 1})

        assert decision.action == "buy"
        assert decision.confidence == 0.9
        assert ai.calls == [{"x": 1}]

    @pytest.mark.asyncio
    async def test_random_reproducible(self):
        first = await MockAI(randomize=True, seed=3).analyze(None)
        second = await MockAI(randomize=True, seed=3).analyze(None)

        assert first.action == second.action
        assert first.confidence == second.confidence
        assert 0.5 <= first.confidence <= 1.0

    @pytest.mark.asyncio
    async def test_decision_to_action(self):
        decision = await MockAI(default_action="sell").analyze({})
        action = decision.to_action(amount=3)
        assert action.type == "sell"
        assert action.params == {"amount": 3}


class TestPrompts:
    """프롬프트 선택 테스트"""

    def test_prompt_for_type(self):
        assert prompt_for("defi") == DEFI_TRADING_PROMPT
        assert prompt_for("gaming") == GAMING_NPC_PROMPT
        assert prompt_for("governance") == CUSTOM_AGENT_PROMPT
        assert prompt_for("custom") == CUSTOM_AGENT_PROMPT


# ─────────────────────────────────────────────────────────────────
# Local LLM Tests
# ─────────────────────────────────────────────────────────────────


class TestLocalLLMProvider:
    """로컬 LLM 테스트"""

    @pytest.mark.asyncio
    async def test_ollama_generate(self):
        transport, requests = recording_transport(
            lambda r: httpx.Response(200, json={"response": DECISION_JSON})
        )
        ai = LocalLLMProvider(model="llama3", temperature=0.2, transport=transport)

        decision = await ai.analyze(PRICE_UP)

        assert decision.action == "buy"
        assert requests[0].url.path == "/api/generate"
        body = json.loads(requests[0].content)
        assert body["model"] == "llama3"
        assert body["stream"] is False
        assert body["options"] == {"temperature": 0.2, "num_predict": 1000}

    @pytest.mark.asyncio
    async def test_openai_compatible_endpoint(self):
        transport, requests = recording_transport(
            lambda r: httpx.Response(
                200, json={"choices": [{"message": {"content": DECISION_JSON}}]}
            )
        )
        ai = LocalLLMProvider(endpoint="http://localhost:1234/", transport=transport)

        decision = await ai.analyze(PRICE_UP)

        assert not ai.is_ollama
        assert decision.action == "buy"
        assert requests[0].url.path == "/v1/chat/completions"

    @pytest.mark.asyncio
    async def test_http_error_falls_back_to_rules(self):
        transport, _ = recording_transport(lambda r: httpx.Response(500))
        ai = LocalLLMProvider(transport=transport)

        decision = await ai.analyze(PRICE_UP)

        assert decision.action == "sell"
        assert decision.reasoning.endswith("(fallback rule)")

    @pytest.mark.asyncio
    async def test_open_breaker_skips_endpoint(self):
        transport, requests = recording_transport(lambda r: httpx.Response(500))
        breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=60.0, name="test")
        ai = LocalLLMProvider(transport=transport, breaker=breaker)

        await ai.analyze(PRICE_UP)
        assert breaker.state is CircuitState.OPEN

        decision = await ai.analyze(PRICE_UP)
        assert decision.action == "sell"
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_unparseable_reply_holds(self):
        transport, _ = recording_transport(
            lambda r: httpx.Response(200, json={"response": "I am not sure."})
        )
        decision = await LocalLLMProvider(transport=transport).analyze(PRICE_UP)

        assert decision.action == "hold"
        assert decision.reasoning == "Failed to parse LLM response"

    def test_configure(self):
        ai = LocalLLMProvider()
        ai.configure(temperature=0.1, endpoint="http://localhost:8080/")

        assert ai.temperature == 0.1
        assert ai.endpoint == "http://localhost:8080"
        with pytest.raises(AttributeError):
            ai.configure(unknown=1)

    def test_from_settings(self, monkeypatch):
        monkeypatch.setenv("SOMNIA_AI_ENDPOINT", "http://gpu-box:11434")
        monkeypatch.setenv("SOMNIA_AI_MODEL", "mistral")
        ai = LocalLLMProvider.from_settings(Settings())

        assert ai.model == "mistral"
        assert ai.is_ollama


# ─────────────────────────────────────────────────────────────────
# OpenAI Tests
# ─────────────────────────────────────────────────────────────────


class TestOpenAIProvider:
    """OpenAI 테스트"""

    def test_requires_api_key(self):
        with pytest.raises(AgentError) as exc_info:
            OpenAIProvider(api_key="")
        assert exc_info.value.kind is ErrorKind.CONFIGURATION

    @pytest.mark.asyncio
    async def test_chat_completion(self):
        transport, requests = recording_transport(
            lambda r: httpx.Response(
                200, json={"choices": [{"message": {"content": DECISION_JSON}}]}
            )
        )
        ai = OpenAIProvider(api_key="sk-test", organization="org-1", transport=transport)

        decision = await ai.analyze(PRICE_UP)

        assert decision.action == "buy"
        assert decision.metadata == {"source": "OpenAI"}
        request = requests[0]
        assert request.url == "https://api.openai.com/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.headers["OpenAI-Organization"] == "org-1"
        messages = json.loads(request.content)["messages"]
        assert [m["role"] for m in messages] == ["system", "user"]

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        transport, _ = recording_transport(lambda r: httpx.Response(401))
        ai = OpenAIProvider(api_key="sk-bad", transport=transport)

        with pytest.raises(httpx.HTTPStatusError):
            await ai.analyze(PRICE_UP)
