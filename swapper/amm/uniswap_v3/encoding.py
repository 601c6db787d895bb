"""SwapRouter02 calldata encoding for UniswapV3-style swaps."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from eth_abi import decode, encode  # type: ignore[attr-defined]
from eth_utils import function_signature_to_4byte_selector

from swapper.models.types import normalize_address

# Router functions we call, keyed by name: (canonical signature, argument types)
ROUTER_FUNCTIONS: dict[str, tuple[str, list[str]]] = {
    # exactInputSingle((tokenIn, tokenOut, fee, recipient, amountIn, amountOutMinimum,
    #                   sqrtPriceLimitX96))
    "exactInputSingle": (
        "exactInputSingle((address,address,uint24,address,uint256,uint256,uint160))",
        ["(address,address,uint24,address,uint256,uint256,uint160)"],
    ),
    # exactInput((path, recipient, amountIn, amountOutMinimum))
    "exactInput": (
        "exactInput((bytes,address,uint256,uint256))",
        ["(bytes,address,uint256,uint256)"],
    ),
    "multicall": ("multicall(uint256,bytes[])", ["uint256", "bytes[]"]),
    "wrapETH": ("wrapETH(uint256)", ["uint256"]),
    "unwrapWETH9": ("unwrapWETH9(uint256,address)", ["uint256", "address"]),
    "refundETH": ("refundETH()", []),
}

SELECTORS: dict[str, bytes] = {
    name: function_signature_to_4byte_selector(signature)
    for name, (signature, _types) in ROUTER_FUNCTIONS.items()
}

EXACT_INPUT_SINGLE_SELECTOR = SELECTORS["exactInputSingle"]
EXACT_INPUT_SELECTOR = SELECTORS["exactInput"]
MULTICALL_SELECTOR = SELECTORS["multicall"]


@dataclass(frozen=True)
class RouterCall:
    """One encoded router call, named for inspection and logging."""

    name: str
    data: bytes

    @property
    def hex(self) -> str:
        return "0x" + self.data.hex()


def _encode_call(name: str, args: Sequence[Any]) -> RouterCall:
    _signature, types = ROUTER_FUNCTIONS[name]
    return RouterCall(name=name, data=SELECTORS[name] + encode(types, list(args)))


def _address(value: str) -> str:
    return normalize_address(value, validate=True)


def encode_exact_input_single(
    token_in: str,
    token_out: str,
    fee: int,
    recipient: str,
    amount_in: int,
    amount_out_minimum: int,
    sqrt_price_limit_x96: int = 0,
) -> RouterCall:
    """Encode SwapRouter02.exactInputSingle.

    Args:
        token_in: Input token address (wrapped native, never the sentinel)
        token_out: Output token address
        fee: Pool fee tier (e.g., 3000 for 0.3%)
        recipient: Address to receive output tokens
        amount_in: Amount of input tokens
        amount_out_minimum: Minimum output amount (slippage protection)
        sqrt_price_limit_x96: Price limit (0 = no limit)
    """
    params = (
        _address(token_in),
        _address(token_out),
        fee,
        _address(recipient),
        amount_in,
        amount_out_minimum,
        sqrt_price_limit_x96,
    )
    return _encode_call("exactInputSingle", [params])


def encode_exact_input(
    path: bytes,
    recipient: str,
    amount_in: int,
    amount_out_minimum: int,
) -> RouterCall:
    """Encode SwapRouter02.exactInput for a packed multihop path."""
    return _encode_call(
        "exactInput", [(path, _address(recipient), amount_in, amount_out_minimum)]
    )


def encode_wrap_native(value: int) -> RouterCall:
    """Encode wrapETH: wrap ``value`` of the attached native asset inside the router."""
    return _encode_call("wrapETH", [value])


def encode_unwrap_native(amount_minimum: int, recipient: str) -> RouterCall:
    """Encode unwrapWETH9: unwrap the router's wrapped balance and send it to recipient."""
    return _encode_call("unwrapWETH9", [amount_minimum, _address(recipient)])


def encode_refund_native() -> RouterCall:
    """Encode refundETH: return any unspent native value to the sender."""
    return _encode_call("refundETH", [])


def encode_multicall(deadline: int, calls: Sequence[RouterCall]) -> RouterCall:
    """Encode multicall(deadline, calls); the batch reverts as a whole."""
    return _encode_call("multicall", [deadline, [call.data for call in calls]])


def decode_router_call(data: bytes) -> tuple[str, tuple[Any, ...]]:
    """Decode router calldata produced by this module into (name, args).

    Raises:
        ValueError: If the selector is not one of ours
    """
    selector, body = data[:4], data[4:]
    for name, known in SELECTORS.items():
        if known == selector:
            _signature, types = ROUTER_FUNCTIONS[name]
            return name, tuple(decode(types, body)) if types else ()
    raise ValueError(f"Unknown router selector: 0x{selector.hex()}")


__all__ = [
    "ROUTER_FUNCTIONS",
    "SELECTORS",
    "EXACT_INPUT_SINGLE_SELECTOR",
    "EXACT_INPUT_SELECTOR",
    "MULTICALL_SELECTOR",
    "RouterCall",
    "encode_exact_input_single",
    "encode_exact_input",
    "encode_wrap_native",
    "encode_unwrap_native",
    "encode_refund_native",
    "encode_multicall",
    "decode_router_call",
]
