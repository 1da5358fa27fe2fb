"""
Pytest Configuration and Fixtures

오프라인 체인(MockChain)과 에이전트 생성 픽스처를 제공합니다.
"""

import pytest

from somniaagent.core.agent import Agent
from somniaagent.core.settings import get_settings
from somniaagent.core.types import AgentConfig
from somniaagent.testing import MockChain, MockChainClient


TEST_KEY = "0x" + "ab" * 32


class FakeClock:
    """수동으로 진행하는 단조 시계 (초 단위)"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """환경 변수 영향 차단 및 설정 캐시 초기화"""
    for name in ("PRIVATE_KEY", "SOMNIA_PRIVATE_KEY", "SOMNIA_NETWORK", "SOMNIA_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def chain():
    """항상 성공하는 재현 가능한 MockChain"""
    return MockChain(success_probability=1.0, seed=7)


@pytest.fixture
def failing_chain():
    """항상 실패하는 MockChain"""
    return MockChain(success_probability=0.0, seed=7)


@pytest.fixture
def config():
    return AgentConfig(
        name="TradingBot",
        type="defi",
        triggers=("price_change",),
        private_key=TEST_KEY,
    )


@pytest.fixture
def agent(config, chain, clock):
    return Agent(config, client=MockChainClient(chain), clock=clock)
