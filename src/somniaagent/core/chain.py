"""
체인 협력자 인터페이스

Agent는 블록체인에 두 가지 좁은 인터페이스로만 접근합니다.
  (a) 이름 있는 액션 + 불투명 파라미터 제출 → 성공/실패 영수증 (가스 사용량 포함)
  (b) 이름 있는 온체인 이벤트 스트림 구독

이 모듈은 해당 Protocol과 JSON-RPC 구현(RpcChainClient)을 제공합니다.
오프라인 구현은 somniaagent.testing.mock_chain.MockChainClient를 참고하세요.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable
import asyncio
import logging
import re

import httpx

from .exceptions import RpcError
from .types import Network


ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")

# 온체인 이벤트 콜백: (이벤트 이름, 페이로드)
ChainEventCallback = Callable[[str, Any], None]


def is_address(value: Any) -> bool:
    """0x + 40 hex 형식의 주소인지 확인"""
    return isinstance(value, str) and bool(ADDRESS_PATTERN.match(value))


def encode_action_call(action_type: str, data: bytes) -> str:
    """
    executeAction 호출 데이터 인코딩

    ABI 인코딩이 아닌 불투명 hex 페이로드입니다: type + NUL + data
    """
    return "0x" + (action_type.encode("utf-8") + b"\x00" + data).hex()


def decode_action_call(calldata: str) -> tuple:
    """encode_action_call의 역변환 → (action_type, data)"""
    raw = bytes.fromhex(calldata[2:] if calldata.startswith("0x") else calldata)
    action_type, _, data = raw.partition(b"\x00")
    return action_type.decode("utf-8"), data


@dataclass(frozen=True)
class TransactionReceipt:
    """트랜잭션 영수증"""

    hash: str
    gas_used: int
    block_number: int
    status: bool = True
    contract_address: Optional[str] = None


# ─────────────────────────────────────────────────────────────────
# Protocols
# ─────────────────────────────────────────────────────────────────


@runtime_checkable
class PendingTransaction(Protocol):
    """제출된 트랜잭션 핸들"""

    hash: str

    async def wait(self) -> TransactionReceipt:
        """확정까지 대기. revert되면 예외 발생."""
        ...


@runtime_checkable
class ContractHandle(Protocol):
    """연결된 에이전트 컨트랙트"""

    address: str

    async def execute_action(
        self,
        action_type: str,
        data: bytes,
        gas_limit: Optional[int] = None,
        gas_price: Optional[str] = None,
    ) -> PendingTransaction:
        ...

    async def get_info(self) -> Dict[str, Any]:
        ...


@runtime_checkable
class Subscription(Protocol):
    def cancel(self) -> None:
        ...


@runtime_checkable
class ChainConnection(Protocol):
    """네트워크 연결"""

    network: Network

    async def attach(self, address: str) -> ContractHandle:
        ...

    async def deploy(
        self,
        bytecode: str,
        gas_limit: Optional[int] = None,
        gas_price: Optional[str] = None,
    ) -> TransactionReceipt:
        ...

    async def subscribe(self, event_name: str, callback: ChainEventCallback) -> Subscription:
        ...

    async def block_number(self) -> int:
        ...

    async def close(self) -> None:
        ...


@runtime_checkable
class ChainClient(Protocol):
    """네트워크 연결 팩토리"""

    async def connect(self, network: Network, credential: Optional[str]) -> ChainConnection:
        ...


# ─────────────────────────────────────────────────────────────────
# JSON-RPC implementation
# ─────────────────────────────────────────────────────────────────


class _NullSubscription:
    def cancel(self) -> None:
        pass


class _PollingSubscription:
    def __init__(self, task: asyncio.Task):
        self._task = task

    def cancel(self) -> None:
        self._task.cancel()


class RpcPendingTransaction:
    """eth_sendTransaction으로 제출된 트랜잭션"""

    def __init__(self, connection: "RpcConnection", tx_hash: str):
        self.connection = connection
        self.hash = tx_hash

    async def wait(self) -> TransactionReceipt:
        receipt = await self.connection.wait_for_receipt(self.hash)
        if not receipt.status:
            raise RpcError(f"Transaction reverted: {self.hash}")
        return receipt

    def __repr__(self) -> str:
        return f"RpcPendingTransaction(hash={self.hash[:10]}...)"


class RpcContract:
    """JSON-RPC로 접근하는 에이전트 컨트랙트"""

    def __init__(self, connection: "RpcConnection", address: str):
        self.connection = connection
        self.address = address

    async def execute_action(
        self,
        action_type: str,
        data: bytes,
        gas_limit: Optional[int] = None,
        gas_price: Optional[str] = None,
    ) -> RpcPendingTransaction:
        return await self.connection.send_transaction(
            to=self.address,
            data=encode_action_call(action_type, data),
            gas_limit=gas_limit,
            gas_price=gas_price,
        )

    async def get_info(self) -> Dict[str, Any]:
        code = await self.connection.request("eth_getCode", [self.address, "latest"])
        code = code or "0x"
        return {
            "address": self.address,
            "deployed": code not in ("0x", "0x0"),
            "code_size": max(0, (len(code) - 2) // 2),
            "network": self.connection.network.name,
        }


class RpcConnection:
    """
    JSON-RPC 2.0 네트워크 연결

    첫 요청 전까지는 네트워크에 접근하지 않습니다.
    트랜잭션 서명은 노드에 위임합니다 (eth_sendTransaction).
    """

    def __init__(
        self,
        network: Network,
        http: httpx.AsyncClient,
        account: Optional[str] = None,
        poll_interval: float = 1.0,
        receipt_timeout: float = 120.0,
    ):
        self.network = network
        self.account = account
        self.poll_interval = poll_interval
        self.receipt_timeout = receipt_timeout
        self._http = http
        self._request_id = 0
        self._subscriptions: List[_PollingSubscription] = []
        self.logger = logging.getLogger("chain.rpc")

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        JSON-RPC 호출

        Raises:
            RpcError: 노드가 error를 응답한 경우
            httpx.HTTPError: 전송 실패
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }
        self.logger.debug(f"-> {method} {payload['params']}")

        response = await self._http.post(self.network.rpc_url, json=payload)
        response.raise_for_status()
        body = response.json()

        error = body.get("error")
        if error:
            raise RpcError(
                f"{method} failed: {error.get('message', error)}", error.get("code")
            )
        return body.get("result")

    async def chain_id(self) -> int:
        return int(await self.request("eth_chainId"), 16)

    async def block_number(self) -> int:
        return int(await self.request("eth_blockNumber"), 16)

    async def _sender(self) -> str:
        if self.account:
            return self.account
        accounts = await self.request("eth_accounts") or []
        if not accounts:
            raise RpcError("No account available for eth_sendTransaction")
        self.account = accounts[0]
        return self.account

    async def send_transaction(
        self,
        data: str,
        to: Optional[str] = None,
        gas_limit: Optional[int] = None,
        gas_price: Optional[str] = None,
    ) -> RpcPendingTransaction:
        tx: Dict[str, Any] = {"from": await self._sender(), "data": data}
        if to:
            tx["to"] = to
        if gas_limit:
            tx["gas"] = hex(int(gas_limit))
        if gas_price:
            tx["gasPrice"] = hex(int(gas_price))

        tx_hash = await self.request("eth_sendTransaction", [tx])
        self.logger.info(f"Submitted transaction {tx_hash} on {self.network.name}")
        return RpcPendingTransaction(self, tx_hash)

    async def get_receipt(self, tx_hash: str) -> Optional[TransactionReceipt]:
        raw = await self.request("eth_getTransactionReceipt", [tx_hash])
        if not raw:
            return None
        return TransactionReceipt(
            hash=raw.get("transactionHash", tx_hash),
            gas_used=int(raw.get("gasUsed", "0x0"), 16),
            block_number=int(raw.get("blockNumber", "0x0"), 16),
            status=raw.get("status", "0x1") == "0x1",
            contract_address=raw.get("contractAddress"),
        )

    async def wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        """영수증이 나올 때까지 폴링"""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.receipt_timeout
        while True:
            receipt = await self.get_receipt(tx_hash)
            if receipt is not None:
                return receipt
            if loop.time() >= deadline:
                raise RpcError(
                    f"Timed out after {self.receipt_timeout}s waiting for receipt {tx_hash}"
                )
            await asyncio.sleep(self.poll_interval)

    async def attach(self, address: str) -> RpcContract:
        if not is_address(address):
            raise ValueError(f"Invalid contract address: {address!r}")
        return RpcContract(self, address)

    async def deploy(
        self,
        bytecode: str,
        gas_limit: Optional[int] = None,
        gas_price: Optional[str] = None,
    ) -> TransactionReceipt:
        if not bytecode or bytecode == "0x":
            raise ValueError("Contract bytecode is required for deployment")

        pending = await self.send_transaction(
            data=bytecode, gas_limit=gas_limit, gas_price=gas_price
        )
        receipt = await pending.wait()
        if not receipt.contract_address:
            raise RpcError(f"Deployment receipt has no contract address: {receipt.hash}")
        return receipt

    async def subscribe(self, event_name: str, callback: ChainEventCallback) -> Subscription:
        """
        온체인 이벤트 구독

        "block"은 eth_blockNumber 폴링으로 제공됩니다.
        그 외 이벤트는 온체인 소스가 없으므로 Agent.dispatch로 주입해야 합니다.
        """
        if event_name != "block":
            self.logger.info(
                f"No on-chain source for '{event_name}'; dispatch it to the agent directly"
            )
            return _NullSubscription()

        task = asyncio.get_running_loop().create_task(self._poll_blocks(callback))
        subscription = _PollingSubscription(task)
        self._subscriptions.append(subscription)
        return subscription

    async def _poll_blocks(self, callback: ChainEventCallback) -> None:
        last = await self.block_number()
        while True:
            await asyncio.sleep(self.poll_interval)
            try:
                current = await self.block_number()
            except (RpcError, httpx.HTTPError) as e:
                self.logger.warning(f"Block polling failed: {e}")
                continue
            for number in range(last + 1, current + 1):
                callback("block", {"number": number})
            last = max(last, current)

    async def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions.clear()
        await self._http.aclose()

    def __repr__(self) -> str:
        return f"RpcConnection(network={self.network.name}, rpc={self.network.rpc_url})"


class RpcChainClient:
    """
    JSON-RPC 기반 ChainClient

    사용법:
        client = RpcChainClient(account="0x...")
        agent = Agent(config, client=client)
        await agent.init()
    """

    def __init__(
        self,
        account: Optional[str] = None,
        timeout: float = 30.0,
        poll_interval: float = 1.0,
        receipt_timeout: float = 120.0,
        verify_chain_id: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            account: 송신 계정 (None이면 eth_accounts의 첫 계정)
            timeout: HTTP 요청 타임아웃 (초)
            poll_interval: 영수증/블록 폴링 간격 (초)
            receipt_timeout: 영수증 대기 한도 (초)
            verify_chain_id: 연결 시 eth_chainId로 네트워크 확인
            transport: httpx 전송 계층 (테스트용 MockTransport 등)
        """
        self.account = account
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.receipt_timeout = receipt_timeout
        self.verify_chain_id = verify_chain_id
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Any, **kwargs: Any) -> "RpcChainClient":
        return cls(account=settings.rpc_account, timeout=settings.rpc_timeout, **kwargs)

    async def connect(self, network: Network, credential: Optional[str]) -> RpcConnection:
        http = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        connection = RpcConnection(
            network,
            http,
            account=self.account,
            poll_interval=self.poll_interval,
            receipt_timeout=self.receipt_timeout,
        )

        if self.verify_chain_id:
            try:
                chain_id = await connection.chain_id()
            except Exception:
                await connection.close()
                raise
            if chain_id != network.chain_id:
                await connection.close()
                raise RpcError(
                    f"Chain id mismatch for {network.name}: "
                    f"expected {network.chain_id}, node reports {chain_id}"
                )
        return connection
