"""Reading swap settlement out of transaction receipts."""

from __future__ import annotations

from eth_abi import decode  # type: ignore[attr-defined]

from swapper.errors import SwapReverted
from swapper.models import SwapRequest, Token, normalize_address

from .chain import TxReceipt
from .erc20 import TRANSFER_TOPIC, WITHDRAWAL_TOPIC, address_topic


def ensure_succeeded(receipt: TxReceipt) -> TxReceipt:
    """Raise SwapReverted unless the receipt has status 1."""
    if receipt.succeeded:
        return receipt
    if not receipt.logs:
        reason = (
            "Swap reverted: Insufficient liquidity or slippage too high. "
            "Try increasing slippage tolerance or reducing swap amount."
        )
    else:
        reason = (
            "Swap reverted: Possible reasons - insufficient liquidity, "
            "slippage exceeded, or deadline passed."
        )
    raise SwapReverted(reason)


def _uint(data: bytes) -> int:
    (value,) = decode(["uint256"], data)
    return int(value)


def transferred_to(receipt: TxReceipt, token: str, recipient: str) -> int:
    """Sum of ERC-20 ``Transfer`` values of ``token`` paid to ``recipient``."""
    token_key = normalize_address(token)
    to_topic = address_topic(recipient)
    return sum(
        _uint(log.data)
        for log in receipt.logs
        if normalize_address(log.address) == token_key
        and len(log.topics) == 3
        and log.topics[0] == TRANSFER_TOPIC
        and log.topics[2] == to_topic
    )


def unwrapped_by(receipt: TxReceipt, wrapped_native: str, router: str) -> int:
    """Sum of wrapped-native ``Withdrawal`` amounts unwrapped by the router."""
    wrapped_key = normalize_address(wrapped_native)
    src_topic = address_topic(router)
    return sum(
        _uint(log.data)
        for log in receipt.logs
        if normalize_address(log.address) == wrapped_key
        and len(log.topics) == 2
        and log.topics[0] == WITHDRAWAL_TOPIC
        and log.topics[1] == src_topic
    )


def settled_output(
    receipt: TxReceipt,
    request: SwapRequest,
    wrapped_native: Token,
    router: str,
    min_out: int,
) -> int:
    """Output amount the swap actually delivered.

    Falls back to the guaranteed ``min_out`` when the receipt carries no
    matching log, so downstream fees are never computed on more than was
    received.
    """
    if request.is_to_native:
        amount = unwrapped_by(receipt, wrapped_native.address, router)
    else:
        amount = transferred_to(receipt, request.token_out.address, request.recipient)
    return amount if amount > 0 else min_out


__all__ = ["ensure_succeeded", "transferred_to", "unwrapped_by", "settled_output"]
