"""
AI capability 인터페이스와 공통 유틸리티
"""

from typing import Any, Dict, Optional, Protocol, runtime_checkable
import json
import logging
import re

from pydantic import BaseModel, Field, ValidationError

from ..core.types import AgentEvent, AIDecision


DEFAULT_SYSTEM_PROMPT = "You are an AI agent assistant for blockchain operations."

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

logger = logging.getLogger("ai")


@runtime_checkable
class AICapability(Protocol):
    """
    에이전트의 의사결정 슬롯

    analyze()는 이벤트(또는 임의 데이터)를 받아 AIDecision을 돌려줍니다.
    """

    async def analyze(self, data: Any) -> AIDecision:
        ...


class NeutralAI:
    """AI가 설정되지 않은 에이전트의 기본값 (항상 hold)"""

    async def analyze(self, data: Any) -> AIDecision:
        return AIDecision(action="hold", confidence=0.5, reasoning="No AI model configured")

    def __repr__(self) -> str:
        return "NeutralAI()"


def event_payload(data: Any) -> Dict[str, Any]:
    """
    AgentEvent 또는 딕셔너리를 평탄한 딕셔너리로 변환

    AgentEvent이면 type과 data의 키를 합칩니다.
    """
    if isinstance(data, AgentEvent):
        payload: Dict[str, Any] = {"type": data.type}
        if isinstance(data.data, dict):
            payload.update(data.data)
        elif data.data is not None:
            payload["value"] = data.data
        return payload
    if isinstance(data, dict):
        return dict(data)
    return {"value": data}


def build_prompt(data: Any, system_prompt: Optional[str] = None) -> str:
    """이벤트 분석 프롬프트 생성"""
    payload = event_payload(data)
    lines = []
    if system_prompt:
        lines.append(system_prompt)
        lines.append("")
    lines.extend(
        [
            "Analyze the following event and provide a decision:",
            "",
            f"Event Type: {payload.get('type', 'unknown')}",
            f"Event Data: {json.dumps(payload, indent=2, default=str)}",
            "",
            "Respond in JSON format:",
            "{",
            '  "action": "buy|sell|hold|execute",',
            '  "confidence": 0.0-1.0,',
            '  "reasoning": "explanation",',
            '  "params": { "key": "value" }',
            "}",
        ]
    )
    return "\n".join(lines)


class DecisionPayload(BaseModel):
    """모델 응답 JSON 스키마"""

    action: str = "hold"
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    reasoning: str = "No reasoning provided"
    params: Dict[str, Any] = Field(default_factory=dict)


def parse_decision(text: str, source: str = "LLM") -> AIDecision:
    """
    모델 응답에서 JSON 객체를 찾아 AIDecision으로 변환

    JSON이 없거나 스키마에 맞지 않으면 중립 hold 결정을 반환합니다.
    """
    match = _JSON_OBJECT.search(text or "")
    if match:
        try:
            parsed = DecisionPayload.model_validate_json(match.group(0))
        except ValidationError as e:
            logger.warning(f"Failed to parse {source} response: {e.error_count()} error(s)")
        else:
            return AIDecision(
                action=parsed.action,
                confidence=parsed.confidence,
                reasoning=parsed.reasoning,
                params=parsed.params,
                metadata={"source": source},
            )

    return AIDecision(
        action="hold",
        confidence=0.5,
        reasoning=f"Failed to parse {source} response",
        metadata={"source": source},
    )
