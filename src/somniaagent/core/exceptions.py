"""
에이전트 SDK 예외

모든 에이전트 관련 오류는 단일 AgentError로 표현되며,
kind(ErrorKind)로 오류 종류를 구분합니다.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """오류 종류"""

    CONFIGURATION = "configuration_error"
    EXECUTION = "execution_error"
    DEPLOYMENT = "deployment_error"


class AgentError(Exception):
    """
    에이전트 SDK 기본 예외

    Attributes:
        kind: 오류 종류 (CONFIGURATION / EXECUTION / DEPLOYMENT)
        message: 오류 메시지
        agent_name: 오류가 발생한 에이전트 이름 (있는 경우)
        cause: 원본 예외 (있는 경우)

    Example:
        try:
            await agent.execute(action)
        except AgentError as e:
            if e.is_kind(ErrorKind.EXECUTION):
                ...
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        agent_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.kind = kind
        self.message = message
        self.agent_name = agent_name
        self.cause = cause
        super().__init__(self.message)

    @property
    def code(self) -> str:
        """오류 코드 (예: "execution_error")"""
        return self.kind.value

    def is_kind(self, kind: ErrorKind) -> bool:
        return self.kind is kind

    @classmethod
    def configuration(
        cls,
        message: str,
        agent_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> "AgentError":
        """설정 오류 (필수 설정 누락, 알 수 없는 네트워크, 초기화 실패)"""
        return cls(ErrorKind.CONFIGURATION, message, agent_name, cause)

    @classmethod
    def execution(
        cls,
        message: str,
        agent_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> "AgentError":
        """실행 오류 (준비되지 않은 에이전트, 트랜잭션 실패)"""
        return cls(ErrorKind.EXECUTION, message, agent_name, cause)

    @classmethod
    def deployment(
        cls,
        message: str,
        agent_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> "AgentError":
        """배포 오류 (서명 자격 증명 누락, 배포 실패)"""
        return cls(ErrorKind.DEPLOYMENT, message, agent_name, cause)

    def __str__(self) -> str:
        if self.agent_name:
            return f"[{self.agent_name}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        return f"AgentError(kind={self.kind.name}, message={self.message!r})"


class CircuitBreakerOpenError(Exception):
    """
    Circuit Breaker Open 상태 예외

    보호 대상 호출(예: AI 엔드포인트)의 Circuit Breaker가 Open 상태일 때 발생합니다.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"[{name}] Circuit breaker is open - requests are blocked")


class RpcError(Exception):
    """
    JSON-RPC 호출 오류

    노드가 error 응답을 돌려주거나 트랜잭션이 revert된 경우 발생합니다.
    Agent가 이 예외를 AgentError로 감싸 호출자에게 전달합니다.
    """

    def __init__(self, message: str, code: Optional[int] = None):
        self.code = code
        super().__init__(message)
