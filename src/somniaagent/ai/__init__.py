"""
AI capability 구현

- NeutralAI: 기본값 (항상 hold)
- RuleBasedAI: 가격 변동 임계값 규칙
- MockAI: 테스트용 고정/무작위 결정
- LocalLLMProvider: Ollama / OpenAI 호환 로컬 엔드포인트
- OpenAIProvider: OpenAI API
"""

from .base import AICapability, NeutralAI, build_prompt, event_payload, parse_decision
from .local_llm import LocalLLMProvider
from .mock import MockAI
from .openai_provider import OpenAIProvider
from .prompts import CUSTOM_AGENT_PROMPT, DEFI_TRADING_PROMPT, GAMING_NPC_PROMPT, prompt_for
from .rules import RuleBasedAI

__all__ = [
    "AICapability",
    "NeutralAI",
    "RuleBasedAI",
    "MockAI",
    "LocalLLMProvider",
    "OpenAIProvider",
    "build_prompt",
    "event_payload",
    "parse_decision",
    "prompt_for",
    "DEFI_TRADING_PROMPT",
    "GAMING_NPC_PROMPT",
    "CUSTOM_AGENT_PROMPT",
]
