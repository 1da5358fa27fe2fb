"""
SDK 핵심 데이터 타입

에이전트 설정, 상태, 메트릭, 액션, 실행 결과, 이벤트 등
코어 전반에서 사용하는 데이터 클래스를 정의합니다.
"""

from copy import deepcopy
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union
from uuid import uuid4
import time

from .exceptions import AgentError


def now_ms() -> int:
    """현재 시각 (epoch 밀리초)"""
    return int(time.time() * 1000)


# ─────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────


class AgentType(str, Enum):
    """에이전트 분류"""

    DEFI = "defi"
    GAMING = "gaming"
    GOVERNANCE = "governance"
    CUSTOM = "custom"


class AutonomyLevel(str, Enum):
    """자율성 수준"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AgentStatus(str, Enum):
    """에이전트 상태"""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    ERROR = "error"


class AgentEvents(str, Enum):
    """에이전트가 발행하는 내장 이벤트"""

    INITIALIZED = "agent:initialized"
    STARTED = "agent:started"
    STOPPED = "agent:stopped"
    PAUSED = "agent:paused"
    RESUMED = "agent:resumed"
    ERROR = "agent:error"
    EMERGENCY_STOP = "agent:emergency_stop"
    ACTION_EXECUTED = "agent:action_executed"
    STATE_CHANGED = "agent:state_changed"
    DEPLOYED = "agent:deployed"


# ─────────────────────────────────────────────────────────────────
# Network
# ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Network:
    """블록체인 네트워크 설정"""

    name: str
    chain_id: int
    rpc_url: str
    explorer_url: Optional[str] = None

    def tx_url(self, tx_hash: str) -> Optional[str]:
        """익스플로러 트랜잭션 링크"""
        if not self.explorer_url:
            return None
        return f"{self.explorer_url.rstrip('/')}/tx/{tx_hash}"

    def address_url(self, address: str) -> Optional[str]:
        """익스플로러 주소 링크"""
        if not self.explorer_url:
            return None
        return f"{self.explorer_url.rstrip('/')}/address/{address}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "chain_id": self.chain_id,
            "rpc_url": self.rpc_url,
            "explorer_url": self.explorer_url,
        }


# ─────────────────────────────────────────────────────────────────
# Agent Config
# ─────────────────────────────────────────────────────────────────


def _dedupe(names: Iterable[str]) -> Tuple[str, ...]:
    seen = []
    for name in names:
        if name not in seen:
            seen.append(name)
    return tuple(seen)


@dataclass(frozen=True)
class AgentConfig:
    """
    에이전트 설정 (생성 후 불변)

    Attributes:
        name: 에이전트 이름 (필수, 빈 문자열 불가)
        type: 에이전트 분류 (필수)
        autonomy: 자율성 수준 (기본: medium)
        triggers: 구독할 이벤트 이름 목록 (중복 제거, 순서 유지)
        network: 네트워크 이름 또는 Network (None이면 testnet)
        ai_model: 사용할 AI 모델 이름
        rpc_url: 네트워크 RPC URL 재정의
        private_key: 서명 자격 증명
        contract_address: 이미 배포된 컨트랙트 주소

    Raises:
        AgentError(CONFIGURATION): name 또는 type이 없거나 잘못된 경우
    """

    name: str
    type: AgentType
    autonomy: AutonomyLevel = AutonomyLevel.MEDIUM
    triggers: Tuple[str, ...] = ()
    network: Union[Network, str, None] = None
    ai_model: Optional[str] = None
    rpc_url: Optional[str] = None
    private_key: Optional[str] = field(default=None, repr=False)
    contract_address: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name or not isinstance(self.name, str):
            raise AgentError.configuration("Agent name is required")
        if not self.type:
            raise AgentError.configuration("Agent type is required", self.name)

        try:
            object.__setattr__(self, "type", AgentType(self.type))
        except ValueError as e:
            raise AgentError.configuration(
                f"Invalid agent type: {self.type!r}", self.name, e
            ) from e

        try:
            object.__setattr__(
                self, "autonomy", AutonomyLevel(self.autonomy or AutonomyLevel.MEDIUM)
            )
        except ValueError as e:
            raise AgentError.configuration(
                f"Invalid autonomy level: {self.autonomy!r}", self.name, e
            ) from e

        if isinstance(self.triggers, str):
            raise AgentError.configuration(
                "triggers must be a collection of event names", self.name
            )
        object.__setattr__(self, "triggers", _dedupe(self.triggers or ()))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AgentConfig":
        """
        딕셔너리(예: agent.yaml)에서 설정 생성

        알 수 없는 키는 무시합니다.
        """
        network = data.get("network")
        if isinstance(network, Mapping):
            network = Network(
                name=network["name"],
                chain_id=int(network["chain_id"]),
                rpc_url=network["rpc_url"],
                explorer_url=network.get("explorer_url"),
            )

        return cls(
            name=data.get("name", ""),
            type=data.get("type"),
            autonomy=data.get("autonomy") or AutonomyLevel.MEDIUM,
            triggers=tuple(data.get("triggers") or ()),
            network=network,
            ai_model=data.get("ai_model"),
            rpc_url=data.get("rpc_url"),
            private_key=data.get("private_key"),
            contract_address=data.get("contract_address"),
        )

    def with_contract_address(self, address: str) -> "AgentConfig":
        """컨트랙트 주소가 설정된 새 설정 반환"""
        return replace(self, contract_address=address)

    def to_dict(self, include_secrets: bool = False) -> Dict[str, Any]:
        network = self.network.to_dict() if isinstance(self.network, Network) else self.network
        data = {
            "name": self.name,
            "type": self.type.value,
            "autonomy": self.autonomy.value,
            "triggers": list(self.triggers),
            "network": network,
            "ai_model": self.ai_model,
            "rpc_url": self.rpc_url,
            "contract_address": self.contract_address,
        }
        if include_secrets:
            data["private_key"] = self.private_key
        return data


# ─────────────────────────────────────────────────────────────────
# Metrics / Action / Result
# ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AgentMetrics:
    """
    에이전트 성능 메트릭

    Attributes:
        total_actions: 실행 시도한 액션 수
        success_rate: 성공률 (0-1, 액션이 없으면 1)
        avg_gas_used: 액션당 평균 가스 사용량
        uptime: 누적 실행 시간 (밀리초)
        last_action_at: 마지막 액션 시각 (epoch 밀리초)
    """

    total_actions: int = 0
    success_rate: float = 1.0
    avg_gas_used: float = 0.0
    uptime: int = 0
    last_action_at: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_actions": self.total_actions,
            "success_rate": self.success_rate,
            "avg_gas_used": self.avg_gas_used,
            "uptime": self.uptime,
            "last_action_at": self.last_action_at,
        }


@dataclass
class Action:
    """
    에이전트가 실행할 액션

    Attributes:
        type: 액션 동사 (예: "buy", "sell", "hold")
        params: 실행 협력자에게 그대로 전달되는 파라미터
        gas_limit: 가스 한도 (선택)
        gas_price: 가스 가격 (선택, 문자열)
        timestamp: 생성 시각 (선택, epoch 밀리초)
    """

    type: str
    params: Dict[str, Any] = field(default_factory=dict)
    gas_limit: Optional[int] = None
    gas_price: Optional[str] = None
    timestamp: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Action":
        return cls(
            type=data["type"],
            params=dict(data.get("params") or {}),
            gas_limit=data.get("gas_limit"),
            gas_price=data.get("gas_price"),
            timestamp=data.get("timestamp"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "params": self.params,
            "gas_limit": self.gas_limit,
            "gas_price": self.gas_price,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ExecutionResult:
    """
    액션 실행 결과 (생성 후 불변)

    error는 success=False일 때만 존재합니다.

    Example:
        result = ExecutionResult.succeeded(tx_hash="0xabc...", gas_used=42000)
        failed = ExecutionResult.failed("transaction reverted")
    """

    success: bool
    tx_hash: str = ""
    gas_used: int = 0
    error: Optional[str] = None
    block_number: Optional[int] = None
    timestamp: int = field(default_factory=now_ms)

    @classmethod
    def succeeded(
        cls, tx_hash: str, gas_used: int, block_number: Optional[int] = None
    ) -> "ExecutionResult":
        return cls(
            success=True,
            tx_hash=tx_hash,
            gas_used=max(0, int(gas_used)),
            block_number=block_number,
        )

    @classmethod
    def failed(cls, error: str) -> "ExecutionResult":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "tx_hash": self.tx_hash,
            "gas_used": self.gas_used,
            "error": self.error,
            "block_number": self.block_number,
            "timestamp": self.timestamp,
        }

    def __bool__(self) -> bool:
        return self.success


# ─────────────────────────────────────────────────────────────────
# Agent State
# ─────────────────────────────────────────────────────────────────


@dataclass
class AgentState:
    """
    에이전트 상태

    Agent만 소유하며, 갱신 시 객체 전체가 교체됩니다.
    외부에는 copy()로 만든 사본만 전달됩니다.
    """

    status: AgentStatus = AgentStatus.IDLE
    last_action: Optional[Action] = None
    metrics: AgentMetrics = field(default_factory=AgentMetrics)
    data: Dict[str, Any] = field(default_factory=dict)
    contract_address: Optional[str] = None

    def copy(self) -> "AgentState":
        """깊은 복사본 반환"""
        return deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "last_action": self.last_action.to_dict() if self.last_action else None,
            "metrics": self.metrics.to_dict(),
            "data": deepcopy(self.data),
            "contract_address": self.contract_address,
        }


# ─────────────────────────────────────────────────────────────────
# Events
# ─────────────────────────────────────────────────────────────────


@dataclass
class AgentEvent:
    """
    EventBus를 흐르는 모든 이벤트의 공통 봉투

    Attributes:
        type: 이벤트 타입 (예: "price_change", "agent:started")
        data: 이벤트 페이로드 (타입별로 다름)
        source: 이벤트 발생원 (에이전트 이름)
        timestamp: 발생 시각 (epoch 밀리초)
        block_number: 블록 번호 (체인 이벤트인 경우)
        tx_hash: 트랜잭션 해시 (체인 이벤트인 경우)
        event_id: 이벤트 고유 ID
    """

    type: str
    data: Any = None
    source: str = ""
    timestamp: int = field(default_factory=now_ms)
    block_number: Optional[int] = None
    tx_hash: Optional[str] = None
    event_id: str = field(default_factory=lambda: str(uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "data": self.data,
            "source": self.source,
            "timestamp": self.timestamp,
            "block_number": self.block_number,
            "tx_hash": self.tx_hash,
            "event_id": self.event_id,
        }

    def __repr__(self) -> str:
        return f"AgentEvent(type={self.type}, source={self.source}, id={self.event_id[:8]}...)"


# ─────────────────────────────────────────────────────────────────
# Deployment
# ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DeploymentOptions:
    """
    배포 옵션

    Attributes:
        network: 대상 네트워크 (None이면 에이전트 설정의 네트워크)
        gas_limit: 가스 한도
        gas_price: 가스 가격
        verify: 익스플로러 검증 요청 여부
        bytecode: 배포할 컨트랙트 바이트코드 (0x hex)
    """

    network: Union[Network, str, None] = None
    gas_limit: Optional[int] = None
    gas_price: Optional[str] = None
    verify: bool = False
    bytecode: Optional[str] = None


@dataclass(frozen=True)
class DeploymentResult:
    """배포 결과"""

    contract_address: str
    tx_hash: str
    block_number: int
    gas_used: int
    network: Network
    timestamp: int = field(default_factory=now_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contract_address": self.contract_address,
            "tx_hash": self.tx_hash,
            "block_number": self.block_number,
            "gas_used": self.gas_used,
            "network": self.network.to_dict(),
            "timestamp": self.timestamp,
        }


# ─────────────────────────────────────────────────────────────────
# AI
# ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AIDecision:
    """
    AI 의사결정 레코드

    Attributes:
        action: 권장 액션
        confidence: 신뢰도 (0-1)
        reasoning: 판단 근거
        params: 액션 파라미터
        metadata: 부가 정보 (모델 버전, 처리 시간 등)
    """

    action: str
    confidence: float
    reasoning: str = ""
    params: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_action(self, **extra_params: Any) -> Action:
        """의사결정을 실행 가능한 Action으로 변환"""
        return Action(type=self.action, params={**self.params, **extra_params})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "params": self.params,
            "metadata": self.metadata,
        }

