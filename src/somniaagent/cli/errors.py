"""
CLI 최상위 오류 처리

잡힌 오류는 ✗ 표시와 함께 출력하고 종료 코드 1로 끝냅니다.
"""

from contextlib import contextmanager
from typing import Any, Coroutine, Iterator, TypeVar
import asyncio
import logging

import typer

from ..core.exceptions import AgentError
from .output import log_error

T = TypeVar("T")

logger = logging.getLogger("somniaagent.cli")


@contextmanager
def exit_on_error() -> Iterator[None]:
    try:
        yield
    except (typer.Exit, typer.Abort):
        raise
    except AgentError as e:
        log_error(str(e))
        raise typer.Exit(code=1) from e
    except Exception as e:
        logger.debug("Unhandled CLI error", exc_info=True)
        log_error(f"{type(e).__name__}: {e}")
        raise typer.Exit(code=1) from e


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """코루틴 실행 (오류 시 종료 코드 1)"""
    with exit_on_error():
        return asyncio.run(coro)
