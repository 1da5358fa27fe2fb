"""
규칙 기반 의사결정 (LLM 장애 시 폴백)
"""

from typing import Any

from ..core.types import AIDecision
from .base import event_payload


class RuleBasedAI:
    """
    가격 변동률 임계값 규칙

    - price_change 이벤트의 change > threshold: sell (0.6)
    - change < -threshold: buy (0.6)
    - 그 외: hold (0.5)
    """

    def __init__(self, threshold: float = 0.05, amount: float = 1):
        self.threshold = threshold
        self.amount = amount

    async def analyze(self, data: Any) -> AIDecision:
        return self.decide(data)

    def decide(self, data: Any) -> AIDecision:
        payload = event_payload(data)
        if payload.get("type") == "price_change":
            change = payload.get("change") or 0
            if change > self.threshold:
                return AIDecision(
                    action="sell",
                    confidence=0.6,
                    reasoning=f"Price increased >{self.threshold:.0%} (fallback rule)",
                    params={"amount": self.amount},
                    metadata={"source": "rules"},
                )
            if change < -self.threshold:
                return AIDecision(
                    action="buy",
                    confidence=0.6,
                    reasoning=f"Price decreased >{self.threshold:.0%} (fallback rule)",
                    params={"amount": self.amount},
                    metadata={"source": "rules"},
                )

        return AIDecision(
            action="hold",
            confidence=0.5,
            reasoning="No clear signal (fallback)",
            metadata={"source": "rules"},
        )

    def __repr__(self) -> str:
        return f"RuleBasedAI(threshold={self.threshold})"
