"""Chain reads needed around a swap: allowances, balances, gas price and receipts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from web3.exceptions import TimeExhausted

from swapper.models.types import normalize_address

from .erc20 import ERC20_ABI

if TYPE_CHECKING:
    from web3 import AsyncWeb3


@dataclass(frozen=True)
class TxRequest:
    """An unsigned transaction for the Signer to sign and broadcast."""

    to: str
    data: bytes = b""
    value: int = 0
    gas_limit: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a web3-style transaction dict."""
        tx: dict[str, Any] = {"to": self.to, "data": "0x" + self.data.hex(), "value": self.value}
        if self.gas_limit is not None:
            tx["gas"] = self.gas_limit
        return tx


@dataclass(frozen=True)
class LogEntry:
    """One event log from a receipt."""

    address: str
    topics: tuple[bytes, ...]
    data: bytes


@dataclass(frozen=True)
class TxReceipt:
    """The parts of a transaction receipt the engine looks at."""

    tx_hash: str
    status: int
    logs: tuple[LogEntry, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.status == 1


class ChainReader(Protocol):
    """Read-only chain access used by allowance, balance and settlement checks."""

    async def allowance(self, token: str, owner: str, spender: str) -> int: ...

    async def balance_of(self, token: str, owner: str) -> int: ...

    async def native_balance(self, owner: str) -> int: ...

    async def gas_price(self) -> int: ...

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> TxReceipt:
        """Wait for the transaction to be mined; TimeoutError if it is not."""
        ...


@dataclass
class MockChainReader:
    """In-memory chain state for tests."""

    allowances: dict[tuple[str, str, str], int] = field(default_factory=dict)
    balances: dict[tuple[str, str], int] = field(default_factory=dict)
    native_balances: dict[str, int] = field(default_factory=dict)
    gas_price_wei: int = 1_000_000_000
    receipts: dict[str, TxReceipt] = field(default_factory=dict)

    def set_allowance(self, token: str, owner: str, spender: str, amount: int) -> None:
        key = (normalize_address(token), normalize_address(owner), normalize_address(spender))
        self.allowances[key] = amount

    def set_balance(self, token: str, owner: str, amount: int) -> None:
        self.balances[(normalize_address(token), normalize_address(owner))] = amount

    def set_native_balance(self, owner: str, amount: int) -> None:
        self.native_balances[normalize_address(owner)] = amount

    async def allowance(self, token: str, owner: str, spender: str) -> int:
        key = (normalize_address(token), normalize_address(owner), normalize_address(spender))
        return self.allowances.get(key, 0)

    async def balance_of(self, token: str, owner: str) -> int:
        return self.balances.get((normalize_address(token), normalize_address(owner)), 0)

    async def native_balance(self, owner: str) -> int:
        return self.native_balances.get(normalize_address(owner), 0)

    async def gas_price(self) -> int:
        return self.gas_price_wei

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> TxReceipt:
        receipt = self.receipts.get(tx_hash)
        if receipt is None:
            raise TimeoutError(f"Transaction {tx_hash} not mined within {timeout}s")
        return receipt


class Web3ChainReader:
    """ChainReader backed by a shared async web3 client."""

    def __init__(self, w3: AsyncWeb3):
        self.w3 = w3

    def _erc20(self, token: str) -> Any:
        return self.w3.eth.contract(address=self.w3.to_checksum_address(token), abi=ERC20_ABI)

    async def allowance(self, token: str, owner: str, spender: str) -> int:
        result = await self._erc20(token).functions.allowance(
            self.w3.to_checksum_address(owner),
            self.w3.to_checksum_address(spender),
        ).call()
        return int(result)

    async def balance_of(self, token: str, owner: str) -> int:
        result = await self._erc20(token).functions.balanceOf(
            self.w3.to_checksum_address(owner)
        ).call()
        return int(result)

    async def native_balance(self, owner: str) -> int:
        return int(await self.w3.eth.get_balance(self.w3.to_checksum_address(owner)))

    async def gas_price(self) -> int:
        return int(await self.w3.eth.gas_price)

    async def wait_for_receipt(self, tx_hash: str, timeout: float) -> TxReceipt:
        try:
            raw = await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        except TimeExhausted as e:
            raise TimeoutError(f"Transaction {tx_hash} not mined within {timeout}s") from e
        logs = tuple(
            LogEntry(
                address=normalize_address(log["address"]),
                topics=tuple(bytes(topic) for topic in log["topics"]),
                data=bytes(log["data"]),
            )
            for log in raw["logs"]
        )
        return TxReceipt(tx_hash=tx_hash, status=int(raw["status"]), logs=logs)


__all__ = [
    "TxRequest",
    "LogEntry",
    "TxReceipt",
    "ChainReader",
    "MockChainReader",
    "Web3ChainReader",
]
