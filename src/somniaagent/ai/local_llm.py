"""
Local LLM Provider

Ollama, LM Studio, LocalAI 등 로컬 LLM 엔드포인트를 사용하는 AI capability.
엔드포인트 장애 시 규칙 기반 결정으로 폴백합니다.
"""

from typing import Any, Dict, Optional
import logging
import time

import httpx

from ..core.circuit_breaker import CircuitBreaker
from ..core.settings import Settings
from ..core.types import AIDecision
from .base import DEFAULT_SYSTEM_PROMPT, build_prompt, parse_decision
from .rules import RuleBasedAI


OLLAMA_PORT = 11434


class LocalLLMProvider:
    """
    로컬 LLM 기반 의사결정

    - 포트 11434(Ollama): POST {endpoint}/api/generate
    - 그 외 (OpenAI 호환): POST {endpoint}/v1/chat/completions

    호출이 실패하거나 Circuit Breaker가 열려 있으면 RuleBasedAI 결과를 반환합니다.
    응답 JSON 파싱에 실패하면 hold(0.5)를 반환합니다.

    사용법:
        ai = LocalLLMProvider(endpoint="http://localhost:11434", model="llama3")
        decision = await ai.analyze({"type": "price_change", "change": 0.08})
    """

    def __init__(
        self,
        endpoint: str = "http://localhost:11434",
        model: str = "llama3",
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout: float = 30.0,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        breaker: Optional[CircuitBreaker] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.system_prompt = system_prompt
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=3, recovery_timeout=30.0, name="ai.local_llm"
        )
        self.fallback = RuleBasedAI()
        self._transport = transport
        self.logger = logging.getLogger("ai.local_llm")

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "LocalLLMProvider":
        return cls(endpoint=settings.ai_endpoint, model=settings.ai_model, **kwargs)

    @property
    def is_ollama(self) -> bool:
        return httpx.URL(self.endpoint).port == OLLAMA_PORT

    def configure(self, **options: Any) -> None:
        """설정 일부 변경 (예: configure(temperature=0.2))"""
        for key, value in options.items():
            if not hasattr(self, key) or key in ("breaker", "fallback", "logger"):
                raise AttributeError(f"Unknown LocalLLMProvider option: {key}")
            setattr(self, key, value.rstrip("/") if key == "endpoint" else value)

    async def analyze(self, data: Any) -> AIDecision:
        start = time.perf_counter()
        prompt = build_prompt(data, self.system_prompt)
        try:
            text = await self.breaker.wrap(self._call_llm)(prompt)
        except Exception as e:
            self.logger.warning(f"Local LLM unavailable, using fallback rules: {e}")
            return self.fallback.decide(data)

        decision = parse_decision(text, source="LLM")
        self.logger.debug(
            f"Decision {decision.action} ({decision.confidence:.2f}) "
            f"in {(time.perf_counter() - start) * 1000:.0f}ms"
        )
        return decision

    async def _call_llm(self, prompt: str) -> str:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as http:
            if self.is_ollama:
                response = await http.post(
                    f"{self.endpoint}/api/generate",
                    json={
                        "model": self.model,
                        "prompt": prompt,
                        "stream": False,
                        "options": {
                            "temperature": self.temperature,
                            "num_predict": self.max_tokens,
                        },
                    },
                )
                response.raise_for_status()
                return response.json()["response"]

            response = await http.post(
                f"{self.endpoint}/v1/chat/completions",
                json=self._chat_body(prompt),
            )
            response.raise_for_status()
            return response.json()["choices"][0]["message"]["content"]

    def _chat_body(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def __repr__(self) -> str:
        return f"LocalLLMProvider(endpoint={self.endpoint}, model={self.model})"
