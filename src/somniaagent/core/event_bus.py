"""
EventBus - 프로세스 내 이벤트 발행/구독

이벤트 생산자(체인 구독, 시뮬레이터, 에이전트 생명주기)와
소비자(사용자 핸들러)를 느슨하게 연결합니다.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union
from collections import defaultdict
from enum import Enum
import asyncio
import inspect
import logging

from .types import AgentEvent


# 핸들러 타입 정의 (async/sync 모두 가능)
EventHandler = Callable[[Any], Union[None, Awaitable[None]]]


def event_key(event_type: Union[str, Enum]) -> str:
    """이벤트 이름 정규화 (Enum이면 value 사용)"""
    if isinstance(event_type, Enum):
        return str(event_type.value)
    return event_type


class EventBus:
    """
    프로세스 내 이벤트 버스

    동작 규약:
    - 같은 이벤트 이름의 핸들러는 등록 순서대로 호출됩니다.
    - 동일 핸들러를 두 번 등록하면 두 번 호출됩니다 (중복 제거 없음).
    - 비동기 핸들러는 태스크로 띄우고 기다리지 않습니다 (fire-and-forget).
      따라서 완료 순서는 보장되지 않습니다.
    - 한 핸들러의 예외는 로그만 남기고 나머지 핸들러 호출을 막지 않습니다.

    사용법:
        bus = EventBus()

        async def on_price(event: AgentEvent):
            print(event.data["price"])

        bus.on("price_change", on_price)
        bus.emit("price_change", AgentEvent(type="price_change", data={"price": 1000}))

        # 진행 중인 비동기 핸들러 완료 대기
        await bus.drain()
    """

    def __init__(self, max_history: int = 1000):
        self._subscribers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._pending: Set[asyncio.Task] = set()
        self.logger = logging.getLogger("event_bus")
        self._event_history: List[AgentEvent] = []
        self._max_history = max_history

    def on(self, event_type: Union[str, Enum], handler: EventHandler) -> None:
        """
        핸들러 등록

        Args:
            event_type: 구독할 이벤트 이름 (예: "price_change")
            handler: 이벤트 핸들러 (async/sync 모두 가능)
        """
        key = event_key(event_type)
        self._subscribers[key].append(handler)
        self.logger.debug(f"Subscribed to '{key}'")

    def off(self, event_type: Union[str, Enum], handler: EventHandler) -> bool:
        """
        핸들러 해제 (처음 일치하는 등록 하나만)

        Returns:
            True if 해제됨, False if 등록되지 않은 핸들러
        """
        key = event_key(event_type)
        handlers = self._subscribers.get(key)
        if handlers and handler in handlers:
            handlers.remove(handler)
            if not handlers:
                del self._subscribers[key]
            self.logger.debug(f"Unsubscribed from '{key}'")
            return True
        return False

    def remove_all(self, event_type: Optional[Union[str, Enum]] = None) -> None:
        """특정 이벤트(또는 전체)의 핸들러 모두 해제"""
        if event_type is None:
            self._subscribers.clear()
        else:
            self._subscribers.pop(event_key(event_type), None)

    def emit(self, event_type: Union[str, Enum], payload: Any = None) -> int:
        """
        이벤트 발행

        발행 시점에 등록된 모든 핸들러를 등록 순서대로 호출합니다.
        동기 핸들러는 즉시 실행되고, 비동기 핸들러는 태스크로 예약됩니다.

        Args:
            event_type: 이벤트 이름
            payload: 모든 핸들러에 동일하게 전달되는 객체

        Returns:
            호출된 핸들러 수
        """
        key = event_key(event_type)
        self.logger.debug(f"Emitting: {key}")

        if isinstance(payload, AgentEvent):
            self._event_history.append(payload)
            if len(self._event_history) > self._max_history:
                self._event_history = self._event_history[-self._max_history:]

        # 핸들러가 발행 도중 on/off를 호출해도 이번 발행 대상은 고정
        handlers = list(self._subscribers.get(key, ()))
        for handler in handlers:
            self._invoke(handler, key, payload)
        return len(handlers)

    def _invoke(self, handler: EventHandler, key: str, payload: Any) -> None:
        """예외 안전 핸들러 호출"""
        try:
            result = handler(payload)
        except Exception as e:
            self.logger.error(f"Event handler error for '{key}': {e}", exc_info=True)
            return

        if inspect.isawaitable(result):
            self._schedule(result, key)

    def _schedule(self, awaitable: Awaitable[None], key: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # 실행 중인 루프가 없으면 그 자리에서 완료까지 실행
            asyncio.run(self._safe_await(awaitable, key))
            return

        task = loop.create_task(self._safe_await(awaitable, key))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _safe_await(self, awaitable: Awaitable[None], key: str) -> None:
        try:
            await awaitable
        except Exception as e:
            self.logger.error(f"Event handler error for '{key}': {e}", exc_info=True)

    async def drain(self) -> None:
        """진행 중인 비동기 핸들러가 모두 끝날 때까지 대기"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def pending_count(self) -> int:
        """진행 중인 비동기 핸들러 수"""
        return len(self._pending)

    def listener_count(self, event_type: Union[str, Enum]) -> int:
        """특정 이벤트의 핸들러 수"""
        return len(self._subscribers.get(event_key(event_type), []))

    def event_names(self) -> List[str]:
        """핸들러가 등록된 이벤트 이름 목록"""
        return [name for name, handlers in self._subscribers.items() if handlers]

    def get_history(
        self,
        event_type: Optional[Union[str, Enum]] = None,
        limit: int = 100,
    ) -> List[AgentEvent]:
        """
        이벤트 히스토리 조회

        Args:
            event_type: 필터링할 이벤트 타입 (None이면 전체)
            limit: 반환할 최대 개수

        Returns:
            이벤트 목록 (최신순)
        """
        events = self._event_history
        if event_type is not None:
            key = event_key(event_type)
            events = [e for e in events if e.type == key]
        return list(reversed(events[-limit:]))

    def clear_history(self) -> None:
        """히스토리 초기화"""
        self._event_history.clear()

    def __repr__(self) -> str:
        return (
            f"EventBus(subscribers={len(self.event_names())}, "
            f"history={len(self._event_history)}, pending={len(self._pending)})"
        )
