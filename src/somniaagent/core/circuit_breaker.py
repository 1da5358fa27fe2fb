"""
Circuit Breaker - 외부 엔드포인트 장애 격리

AI 엔드포인트처럼 느리거나 죽어 있을 수 있는 외부 호출이
반복 실패할 때 일정 시간 호출 자체를 건너뛰게 합니다.
"""

from enum import Enum
from functools import wraps
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar
import logging
import time

from .exceptions import CircuitBreakerOpenError


class CircuitState(Enum):
    """Circuit Breaker 상태"""

    CLOSED = "closed"  # 정상 - 호출 허용
    OPEN = "open"  # 차단 - 호출 거부
    HALF_OPEN = "half_open"  # 복구 시도 - 제한적 허용


T = TypeVar("T")


class CircuitBreaker:
    """
    외부 호출 장애 격리 (Circuit Breaker Pattern)

    상태 전이:
    - CLOSED: 정상 작동, 연속 실패 카운트
    - OPEN: 호출 차단, recovery_timeout 후 HALF_OPEN으로 전이
    - HALF_OPEN: 시험 호출 허용, success_threshold만큼 성공하면 CLOSED

    사용법:
        cb = CircuitBreaker(failure_threshold=3, recovery_timeout=30, name="ai.local_llm")

        @cb.wrap
        async def call_llm(prompt: str) -> str:
            ...

        try:
            text = await call_llm(prompt)
        except CircuitBreakerOpenError:
            # 폴백 사용
            ...
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        success_threshold: int = 1,
        name: Optional[str] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            failure_threshold: OPEN 전환 연속 실패 횟수 (기본: 5)
            recovery_timeout: OPEN 유지 시간 초 (기본: 60)
            success_threshold: CLOSED 복귀 성공 횟수 (기본: 1)
            name: 로깅용 이름
            clock: 단조 시계 (테스트용, 기본: time.monotonic)
        """
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.success_threshold = success_threshold
        self.name = name or "unnamed"
        self._clock = clock or time.monotonic

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._opened_at: Optional[float] = None

        self.logger = logging.getLogger(f"circuit_breaker.{self.name}")

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def can_execute(self) -> bool:
        """호출 허용 여부 (OPEN에서 복구 시간이 지나면 HALF_OPEN으로 전이)"""
        if self._state is CircuitState.OPEN:
            if self._opened_at is not None and (
                self._clock() - self._opened_at >= self.recovery_timeout
            ):
                self._transition_to(CircuitState.HALF_OPEN)
                return True
            return False
        return True

    def record_success(self) -> None:
        if self._state is CircuitState.HALF_OPEN:
            self._success_count += 1
            if self._success_count >= self.success_threshold:
                self._transition_to(CircuitState.CLOSED)
        else:
            self._failure_count = 0

    def record_failure(self) -> None:
        self._failure_count += 1

        if self._state is CircuitState.HALF_OPEN:
            self._transition_to(CircuitState.OPEN)
        elif (
            self._state is CircuitState.CLOSED
            and self._failure_count >= self.failure_threshold
        ):
            self._transition_to(CircuitState.OPEN)

    def _transition_to(self, new_state: CircuitState) -> None:
        old_state = self._state
        self._state = new_state
        self._success_count = 0

        if new_state is CircuitState.OPEN:
            self._opened_at = self._clock()
            self.logger.warning(
                f"Circuit breaker '{self.name}': {old_state.value} -> open "
                f"(failures: {self._failure_count})"
            )
        elif new_state is CircuitState.CLOSED:
            self._failure_count = 0
            self._opened_at = None
            self.logger.info(f"Circuit breaker '{self.name}': {old_state.value} -> closed")
        else:
            self.logger.info(f"Circuit breaker '{self.name}': {old_state.value} -> half_open")

    def reset(self) -> None:
        """수동 복구"""
        self._transition_to(CircuitState.CLOSED)

    def wrap(self, func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        """비동기 함수를 Circuit Breaker로 감싸는 데코레이터"""

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            if not self.can_execute():
                raise CircuitBreakerOpenError(self.name)
            try:
                result = await func(*args, **kwargs)
            except Exception:
                self.record_failure()
                raise
            self.record_success()
            return result

        return wrapper

    def get_stats(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "state": self._state.value,
            "failure_count": self._failure_count,
            "failure_threshold": self.failure_threshold,
            "recovery_timeout": self.recovery_timeout,
        }

    def __repr__(self) -> str:
        return (
            f"CircuitBreaker(name={self.name}, state={self._state.value}, "
            f"failures={self._failure_count}/{self.failure_threshold})"
        )
