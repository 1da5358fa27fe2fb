"""
에이전트 테스트 헬퍼
"""

from typing import Awaitable, Callable, Optional, Union
import asyncio
import inspect

from .simulator import SimulationResult


def assert_simulation_results(
    result: SimulationResult,
    min_success_rate: Optional[float] = None,
    max_response_time: Optional[float] = None,
    max_gas_used: Optional[float] = None,
) -> None:
    """
    시뮬레이션 결과 기대치 검증

    Raises:
        AssertionError: 기대치를 벗어난 항목이 있는 경우
    """
    if min_success_rate is not None and result.success_rate < min_success_rate:
        raise AssertionError(
            f"Success rate {result.success_rate} is below minimum {min_success_rate}"
        )
    if max_response_time is not None and result.avg_response_time > max_response_time:
        raise AssertionError(
            f"Response time {result.avg_response_time}ms exceeds maximum {max_response_time}ms"
        )
    if max_gas_used is not None and result.avg_gas_used > max_gas_used:
        raise AssertionError(f"Gas used {result.avg_gas_used} exceeds maximum {max_gas_used}")


async def wait_for(
    condition: Callable[[], Union[bool, Awaitable[bool]]],
    timeout: float = 5.0,
    interval: float = 0.1,
) -> None:
    """
    조건이 참이 될 때까지 대기 (sync/async 조건 모두 가능)

    Raises:
        TimeoutError: timeout 초 안에 조건이 참이 되지 않은 경우
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        value = condition()
        if inspect.isawaitable(value):
            value = await value
        if value:
            return
        if loop.time() >= deadline:
            raise TimeoutError(f"Timeout waiting for condition after {timeout}s")
        await asyncio.sleep(interval)
