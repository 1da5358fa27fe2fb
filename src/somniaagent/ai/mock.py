"""
테스트용 Mock AI
"""

from typing import Any, List, Optional
import random

from ..core.types import AIDecision


class MockAI:
    """
    고정(또는 무작위) 결정을 돌려주는 AI

    Example:
        ai = MockAI(default_action="buy", default_confidence=0.9)
        agent = Agent(config, ai=ai)

        # 재현 가능한 무작위 결정
        ai = MockAI(randomize=True, seed=42)
    """

    ACTIONS = ("buy", "sell", "hold")

    def __init__(
        self,
        default_action: str = "hold",
        default_confidence: float = 0.5,
        randomize: bool = False,
        seed: Optional[int] = None,
    ):
        self.default_action = default_action
        self.default_confidence = default_confidence
        self.randomize = randomize
        self._rng = random.Random(seed)
        self.calls: List[Any] = []

    async def analyze(self, data: Any) -> AIDecision:
        self.calls.append(data)
        if self.randomize:
            action = self._rng.choice(self.ACTIONS)
            return AIDecision(
                action=action,
                confidence=0.5 + self._rng.random() * 0.5,
                reasoning=f"Random decision for testing ({action})",
                metadata={"source": "mock"},
            )

        return AIDecision(
            action=self.default_action,
            confidence=self.default_confidence,
            reasoning="Mock AI decision for testing",
            metadata={"source": "mock"},
        )

    def __repr__(self) -> str:
        return f"MockAI(action={self.default_action}, randomize={self.randomize})"
