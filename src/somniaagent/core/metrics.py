"""
MetricsAggregator - 실행 결과 메트릭 누적

관측 이력을 저장하지 않고 관측 1건당 O(1)로
성공률과 평균 가스 사용량을 갱신합니다.
"""

from dataclasses import replace
from typing import Iterable, Optional, Tuple
import logging

from .types import AgentMetrics, now_ms


class MetricsAggregator:
    """
    실행 결과 메트릭 누적기

    갱신 공식 (n = total_actions, r = success_rate, g = avg_gas_used):
        new_total = n + 1
        successful = n * r + 1 (성공) 또는 n * r (실패)
        new_success_rate = successful / new_total
        new_avg_gas_used = (g * n + gas_used) / new_total

    이는 전체 성공 횟수 / 전체 시도 횟수, 그리고 가스 사용량의
    산술 평균과 (부동소수점 오차 범위 내에서) 같습니다.

    Example:
        agg = MetricsAggregator()
        agg.record(True, 100)
        agg.record(False, 0)
        agg.record(True, 200)
        agg.metrics.success_rate  # 0.6667
        agg.metrics.avg_gas_used  # 100.0
    """

    def __init__(self, metrics: Optional[AgentMetrics] = None):
        self._metrics = metrics or AgentMetrics()
        self.logger = logging.getLogger("metrics")

    @property
    def metrics(self) -> AgentMetrics:
        """현재 메트릭 (불변 객체)"""
        return self._metrics

    def load(self, metrics: AgentMetrics) -> None:
        """메트릭 교체 (예: set_state로 주입된 값)"""
        self._metrics = metrics

    @staticmethod
    def fold(
        metrics: AgentMetrics,
        success: bool,
        gas_used: int,
        timestamp: Optional[int] = None,
    ) -> AgentMetrics:
        """관측 1건을 반영한 새 메트릭 반환 (순수 함수)"""
        if gas_used < 0:
            raise ValueError(f"gas_used must be non-negative: {gas_used}")

        n = metrics.total_actions
        new_total = n + 1
        successful = n * metrics.success_rate + (1 if success else 0)

        return replace(
            metrics,
            total_actions=new_total,
            success_rate=successful / new_total,
            avg_gas_used=(metrics.avg_gas_used * n + gas_used) / new_total,
            last_action_at=timestamp if timestamp is not None else now_ms(),
        )

    def record(
        self, success: bool, gas_used: int = 0, timestamp: Optional[int] = None
    ) -> AgentMetrics:
        """
        관측 기록

        읽기-계산-저장 사이에 await가 없으므로 동시 execute()에서도
        갱신이 유실되지 않습니다.

        Args:
            success: 성공 여부
            gas_used: 사용한 가스 (실패 시 0)
            timestamp: 관측 시각 (None이면 현재)

        Returns:
            갱신된 메트릭
        """
        self._metrics = self.fold(self._metrics, success, gas_used, timestamp)
        self.logger.debug(
            f"Recorded outcome: success={success}, gas={gas_used}, "
            f"total={self._metrics.total_actions}"
        )
        return self._metrics

    def add_uptime(self, elapsed_ms: int) -> AgentMetrics:
        """실행 시간 누적"""
        if elapsed_ms > 0:
            self._metrics = replace(self._metrics, uptime=self._metrics.uptime + int(elapsed_ms))
        return self._metrics

    def reset(self) -> None:
        """메트릭 초기화"""
        self._metrics = AgentMetrics()

    @classmethod
    def from_observations(
        cls, observations: Iterable[Tuple[bool, int]]
    ) -> "MetricsAggregator":
        """(success, gas_used) 목록을 차례로 반영한 누적기 생성"""
        aggregator = cls()
        for success, gas_used in observations:
            aggregator.record(success, gas_used)
        return aggregator

    def __repr__(self) -> str:
        m = self._metrics
        return (
            f"MetricsAggregator(total={m.total_actions}, "
            f"success_rate={m.success_rate:.4f}, avg_gas={m.avg_gas_used:.1f})"
        )
