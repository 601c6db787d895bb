"""Signer collaborators.

Key custody lives outside this package. The engine only needs something that
turns ``(wallet_id, TxRequest)`` into a broadcast transaction hash.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

import structlog

from swapper.models.types import normalize_address

from .chain import LogEntry, MockChainReader, TxReceipt, TxRequest
from .erc20 import APPROVE_SELECTOR, decode_address_args

logger = structlog.get_logger()


class Signer(Protocol):
    """Signs and broadcasts a transaction for a wallet, returning its hash."""

    async def send_transaction(self, wallet_id: str, tx: TxRequest) -> str: ...


@dataclass
class MockSigner:
    """Signer for tests that "mines" into a MockChainReader.

    Each transaction is classified as ``approve``, ``swap`` (sent to the router)
    or ``fee`` (anything else). Per kind, tests can make the send raise
    (``fail_on``), mine a reverted receipt (``revert_on``) or attach logs to the
    swap receipt (``swap_logs``). A mined approval updates the reader's
    allowance.
    """

    reader: MockChainReader
    router_address: str
    wallets: dict[str, str] = field(default_factory=dict)
    fail_on: dict[str, Exception] = field(default_factory=dict)
    revert_on: set[str] = field(default_factory=set)
    swap_logs: list[LogEntry] = field(default_factory=list)
    sent: list[tuple[str, str, TxRequest]] = field(default_factory=list)

    def classify(self, tx: TxRequest) -> str:
        if tx.data[:4] == APPROVE_SELECTOR:
            return "approve"
        if normalize_address(tx.to) == normalize_address(self.router_address):
            return "swap"
        return "fee"

    def sent_kinds(self) -> list[str]:
        return [kind for _wallet, kind, _tx in self.sent]

    async def send_transaction(self, wallet_id: str, tx: TxRequest) -> str:
        kind = self.classify(tx)
        self.sent.append((wallet_id, kind, tx))
        if kind in self.fail_on:
            raise self.fail_on[kind]

        tx_hash = "0x" + f"{len(self.sent):064x}"
        status = 0 if kind in self.revert_on else 1
        logs = tuple(self.swap_logs) if kind == "swap" else ()
        self.reader.receipts[tx_hash] = TxReceipt(tx_hash=tx_hash, status=status, logs=logs)

        if kind == "approve" and status == 1:
            spender, amount = decode_address_args(tx.data)
            self.reader.set_allowance(tx.to, self.wallets[wallet_id], spender, amount)
        return tx_hash


@dataclass(frozen=True)
class SigningRequest:
    """A request posted to an out-of-process signer (e.g. the wallet UI)."""

    request_id: str
    wallet_id: str
    tx: TxRequest


class CorrelatedSigner:
    """Signer that talks to a remote signing UI by message passing.

    Every request gets a fresh id and a pending future in a correlation table.
    The transport delivers the request; the response side calls ``resolve`` or
    ``reject`` with the same id. Unknown or late ids are ignored.
    """

    def __init__(
        self,
        post: Callable[[SigningRequest], Awaitable[None]],
        timeout_seconds: float = 300.0,
    ):
        self._post = post
        self._timeout = timeout_seconds
        self._pending: dict[str, asyncio.Future[str]] = {}

    @property
    def pending_ids(self) -> list[str]:
        return list(self._pending)

    async def send_transaction(self, wallet_id: str, tx: TxRequest) -> str:
        request_id = uuid.uuid4().hex
        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            await self._post(SigningRequest(request_id=request_id, wallet_id=wallet_id, tx=tx))
            return await asyncio.wait_for(future, timeout=self._timeout)
        finally:
            self._pending.pop(request_id, None)

    def resolve(self, request_id: str, tx_hash: str) -> bool:
        """Complete a pending request with the broadcast hash."""
        future = self._pending.get(request_id)
        if future is None or future.done():
            logger.warning("signing_response_unknown_request", request_id=request_id)
            return False
        future.set_result(tx_hash)
        return True

    def reject(self, request_id: str, reason: str) -> bool:
        """Fail a pending request (user declined, wallet locked...)."""
        future = self._pending.get(request_id)
        if future is None or future.done():
            logger.warning("signing_response_unknown_request", request_id=request_id)
            return False
        future.set_exception(RuntimeError(reason))
        return True


__all__ = ["Signer", "MockSigner", "SigningRequest", "CorrelatedSigner"]
