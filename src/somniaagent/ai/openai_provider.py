"""
OpenAI Provider

OpenAI chat completions API를 사용하는 AI capability.
LocalLLMProvider와 달리 오류를 호출자에게 그대로 전달합니다.
"""

from typing import Any, Optional
import logging

import httpx

from ..core.exceptions import AgentError
from ..core.settings import Settings
from ..core.types import AIDecision
from .base import DEFAULT_SYSTEM_PROMPT, build_prompt, parse_decision


OPENAI_API_BASE = "https://api.openai.com"


class OpenAIProvider:
    """
    OpenAI 기반 의사결정

    Raises:
        AgentError(CONFIGURATION): API 키 누락 (생성 시)
        httpx.HTTPError: API 호출 실패 (analyze 시)
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout: float = 30.0,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        organization: Optional[str] = None,
        base_url: str = OPENAI_API_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise AgentError.configuration("OpenAI API key is required (OPENAI_API_KEY)")

        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.system_prompt = system_prompt
        self.organization = organization
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self.logger = logging.getLogger("ai.openai")

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "OpenAIProvider":
        return cls(api_key=settings.openai_api_key or "", **kwargs)

    async def analyze(self, data: Any) -> AIDecision:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        if self.organization:
            headers["OpenAI-Organization"] = self.organization

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as http:
            response = await http.post(
                f"{self.base_url}/v1/chat/completions",
                headers=headers,
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": self.system_prompt},
                        {"role": "user", "content": build_prompt(data)},
                    ],
                    "temperature": self.temperature,
                    "max_tokens": self.max_tokens,
                },
            )
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]

        decision = parse_decision(content, source="OpenAI")
        self.logger.debug(f"Decision {decision.action} ({decision.confidence:.2f})")
        return decision

    def __repr__(self) -> str:
        return f"OpenAIProvider(model={self.model})"
