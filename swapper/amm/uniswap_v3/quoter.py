"""UniswapV3 quoter implementations for swap simulation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

import structlog

from swapper.models.types import normalize_address

from .path import decode_path

if TYPE_CHECKING:
    from web3 import AsyncWeb3

logger = structlog.get_logger()


class UniswapV3Quoter(Protocol):
    """Protocol for UniswapV3 quoter implementations.

    Both methods return ``None`` when the simulate call reverts, so callers can
    treat a revert as "this tier or path is unusable" without exceptions.
    """

    async def quote_exact_input_single(
        self,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
    ) -> int | None:
        """Get output amount for exact input through one pool.

        Args:
            token_in: Input token address
            token_out: Output token address
            fee: Pool fee tier (e.g., 3000)
            amount_in: Input amount

        Returns:
            Output amount, or None if the simulate call reverts
        """
        ...

    async def quote_exact_input(self, path: bytes, amount_in: int) -> int | None:
        """Get output amount for exact input along a packed multihop path."""
        ...


@dataclass(frozen=True)
class QuoteKey:
    """Key for looking up single-pool quotes in MockUniswapV3Quoter."""

    token_in: str
    token_out: str
    fee: int

    @classmethod
    def of(cls, token_in: str, token_out: str, fee: int) -> QuoteKey:
        return cls(normalize_address(token_in), normalize_address(token_out), fee)


@dataclass
class MockUniswapV3Quoter:
    """Mock quoter for testing without RPC calls.

    Quotes are configured as output-per-input ratios so any amount can be
    quoted; unconfigured pools and paths behave like reverting calls. Calls are
    recorded for assertions.
    """

    rates: dict[QuoteKey, tuple[int, int]] = field(default_factory=dict)
    path_rates: dict[tuple[tuple[str, ...], tuple[int, ...]], tuple[int, int]] = field(
        default_factory=dict
    )
    calls: list[tuple[str, object, int]] = field(default_factory=list)

    def set_rate(self, token_in: str, token_out: str, fee: int, num: int, denom: int = 1) -> None:
        """Quote ``amount_in * num // denom`` for this pool direction."""
        self.rates[QuoteKey.of(token_in, token_out, fee)] = (num, denom)

    def set_path_rate(
        self, addresses: list[str], fees: list[int], num: int, denom: int = 1
    ) -> None:
        """Quote ``amount_in * num // denom`` for this multihop path."""
        key = (tuple(normalize_address(a) for a in addresses), tuple(fees))
        self.path_rates[key] = (num, denom)

    async def quote_exact_input_single(
        self,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
    ) -> int | None:
        key = QuoteKey.of(token_in, token_out, fee)
        self.calls.append(("exact_input_single", key, amount_in))
        rate = self.rates.get(key)
        if rate is None:
            return None
        num, denom = rate
        return amount_in * num // denom

    async def quote_exact_input(self, path: bytes, amount_in: int) -> int | None:
        addresses, fees = decode_path(path)
        key = (tuple(addresses), tuple(fees))
        self.calls.append(("exact_input", key, amount_in))
        rate = self.path_rates.get(key)
        if rate is None:
            return None
        num, denom = rate
        return amount_in * num // denom


# QuoterV2 ABI - minimal, just the functions we need
QUOTER_V2_ABI = [
    {
        "name": "quoteExactInputSingle",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {
                "name": "params",
                "type": "tuple",
                "components": [
                    {"name": "tokenIn", "type": "address"},
                    {"name": "tokenOut", "type": "address"},
                    {"name": "amountIn", "type": "uint256"},
                    {"name": "fee", "type": "uint24"},
                    {"name": "sqrtPriceLimitX96", "type": "uint160"},
                ],
            }
        ],
        "outputs": [
            {"name": "amountOut", "type": "uint256"},
            {"name": "sqrtPriceX96After", "type": "uint160"},
            {"name": "initializedTicksCrossed", "type": "uint32"},
            {"name": "gasEstimate", "type": "uint256"},
        ],
    },
    {
        "name": "quoteExactInput",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "path", "type": "bytes"},
            {"name": "amountIn", "type": "uint256"},
        ],
        "outputs": [
            {"name": "amountOut", "type": "uint256"},
            {"name": "sqrtPriceX96AfterList", "type": "uint160[]"},
            {"name": "initializedTicksCrossedList", "type": "uint32[]"},
            {"name": "gasEstimate", "type": "uint256"},
        ],
    },
]


class Web3UniswapV3Quoter:
    """Real quoter that calls the QuoterV2 contract via RPC.

    QuoterV2 functions are declared nonpayable but revert-and-return internally,
    so they are only ever issued as ``eth_call`` and never broadcast.
    """

    def __init__(self, w3: AsyncWeb3, quoter_address: str):
        """Initialize quoter with a shared async web3 client.

        Args:
            w3: Async web3 client owned by the ChainContext
            quoter_address: QuoterV2 contract address
        """
        self.w3 = w3
        self.quoter = w3.eth.contract(
            address=w3.to_checksum_address(quoter_address),
            abi=QUOTER_V2_ABI,
        )

    async def quote_exact_input_single(
        self,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
    ) -> int | None:
        """Get output amount for exact input via eth_call."""
        try:
            result = await self.quoter.functions.quoteExactInputSingle(
                (
                    self.w3.to_checksum_address(token_in),
                    self.w3.to_checksum_address(token_out),
                    amount_in,
                    fee,
                    0,  # sqrtPriceLimitX96 = 0 means no limit
                )
            ).call()

            # Result is (amountOut, sqrtPriceX96After, initializedTicksCrossed, gasEstimate)
            return int(result[0])
        except Exception as e:
            logger.warning(
                "v3_quote_exact_input_single_failed",
                token_in=token_in,
                token_out=token_out,
                fee=fee,
                amount_in=amount_in,
                error=str(e),
            )
            return None

    async def quote_exact_input(self, path: bytes, amount_in: int) -> int | None:
        """Get output amount for a multihop path via eth_call."""
        try:
            result = await self.quoter.functions.quoteExactInput(path, amount_in).call()
            return int(result[0])
        except Exception as e:
            logger.warning(
                "v3_quote_exact_input_failed",
                path="0x" + path.hex(),
                amount_in=amount_in,
                error=str(e),
            )
            return None


__all__ = [
    "UniswapV3Quoter",
    "QuoteKey",
    "MockUniswapV3Quoter",
    "Web3UniswapV3Quoter",
    "QUOTER_V2_ABI",
]
