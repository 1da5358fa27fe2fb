"""
AgentStateMachine - 에이전트 생명주기 상태 전이

상태: idle, running, paused, error (초기 상태: idle)

전이:
    idle, paused --start-->  running   (실행 구간 시작)
    running      --stop-->   idle      (실행 구간 종료, 경과 시간 누적)
    running      --pause-->  paused    (실행 구간 종료)
    paused       --resume--> running   (실행 구간 시작)
    any          --emergency_stop--> error

error 상태에서 나가는 전이는 없습니다. 복구하려면 새 에이전트를 생성해야 합니다.
허용되지 않은 전이 요청은 오류 없이 무시됩니다 (no-op).
"""

from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Optional, Tuple
import logging
import time

from .types import AgentStatus


@dataclass(frozen=True)
class Transition:
    """전이 결과"""

    operation: str
    from_status: AgentStatus
    to_status: AgentStatus
    changed: bool
    elapsed_ms: int = 0

    def __bool__(self) -> bool:
        return self.changed


_IDLE = AgentStatus.IDLE
_RUNNING = AgentStatus.RUNNING
_PAUSED = AgentStatus.PAUSED
_ERROR = AgentStatus.ERROR


class AgentStateMachine:
    """
    에이전트 상태 머신

    Example:
        sm = AgentStateMachine()
        sm.start()           # idle -> running
        sm.pause()           # running -> paused
        sm.pause()           # no-op (changed=False)
        t = sm.stop()        # no-op (paused 상태)
        sm.resume()          # paused -> running
        t = sm.stop()        # running -> idle, t.elapsed_ms = 실행 구간 길이
    """

    TRANSITIONS: Dict[str, Tuple[FrozenSet[AgentStatus], AgentStatus]] = {
        "start": (frozenset({_IDLE, _PAUSED}), _RUNNING),
        "stop": (frozenset({_RUNNING}), _IDLE),
        "pause": (frozenset({_RUNNING}), _PAUSED),
        "resume": (frozenset({_PAUSED}), _RUNNING),
    }

    def __init__(
        self,
        clock: Optional[Callable[[], float]] = None,
        name: str = "agent",
    ):
        """
        Args:
            clock: 단조 증가 시계 (초 단위, 기본: time.monotonic)
            name: 로깅용 이름
        """
        self._clock = clock or time.monotonic
        self._status = _IDLE
        self._run_started_at: Optional[float] = None
        self.logger = logging.getLogger(f"agent.{name}.state")

    @property
    def status(self) -> AgentStatus:
        """현재 상태"""
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status is _RUNNING

    def can(self, operation: str) -> bool:
        """전이 가능 여부"""
        if operation == "emergency_stop":
            return self._status is not _ERROR
        allowed, _ = self.TRANSITIONS[operation]
        return self._status in allowed

    def current_run_ms(self) -> int:
        """현재 열린 실행 구간의 경과 시간 (실행 중이 아니면 0)"""
        if self._run_started_at is None:
            return 0
        return int((self._clock() - self._run_started_at) * 1000)

    def start(self) -> Transition:
        return self._apply("start")

    def stop(self) -> Transition:
        return self._apply("stop")

    def pause(self) -> Transition:
        return self._apply("pause")

    def resume(self) -> Transition:
        return self._apply("resume")

    def emergency_stop(self) -> Transition:
        """어느 상태에서든 error로 전이"""
        old = self._status
        if old is _ERROR:
            return Transition("emergency_stop", old, old, changed=False)

        elapsed = self._close_run()
        self._status = _ERROR
        self.logger.warning(f"Emergency stop: {old.value} -> error")
        return Transition("emergency_stop", old, _ERROR, changed=True, elapsed_ms=elapsed)

    def force(self, status: AgentStatus) -> Transition:
        """
        상태 강제 설정 (Agent.set_state 전용)

        실행 구간 계측은 새 상태에 맞춰 열고 닫습니다.
        """
        status = AgentStatus(status)
        old = self._status
        if old is status:
            return Transition("force", old, old, changed=False)

        elapsed = self._close_run()
        self._status = status
        if status is _RUNNING:
            self._run_started_at = self._clock()
        return Transition("force", old, status, changed=True, elapsed_ms=elapsed)

    def _apply(self, operation: str) -> Transition:
        allowed, target = self.TRANSITIONS[operation]
        old = self._status
        if old not in allowed:
            self.logger.debug(f"Ignored '{operation}' in state {old.value}")
            return Transition(operation, old, old, changed=False)

        elapsed = 0
        if old is _RUNNING:
            elapsed = self._close_run()
        self._status = target
        if target is _RUNNING:
            self._run_started_at = self._clock()

        self.logger.debug(f"{operation}: {old.value} -> {target.value}")
        return Transition(operation, old, target, changed=True, elapsed_ms=elapsed)

    def _close_run(self) -> int:
        elapsed = self.current_run_ms()
        self._run_started_at = None
        return elapsed

    def __repr__(self) -> str:
        return f"AgentStateMachine(status={self._status.value})"
