"""Chain and engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from swapper.constants import (
    DEADLINE_SECONDS,
    DEFAULT_CHAIN_ID,
    DEFAULT_FACTORY_ADDRESS,
    DEFAULT_NATIVE_SYMBOL,
    DEFAULT_QUOTER_ADDRESS,
    DEFAULT_ROUTER_ADDRESS,
    DEFAULT_RPC_URL,
    DEFAULT_SLIPPAGE_BPS,
    DEFAULT_WRAPPED_NATIVE_ADDRESS,
    QUOTE_DEBOUNCE_SECONDS,
    RECEIPT_TIMEOUT_SECONDS,
)
from swapper.models import Token, is_valid_address, normalize_address


@dataclass(frozen=True)
class ChainConfig:
    """Everything the engine needs to know about one chain deployment.

    Attributes:
        chain_id: EVM chain id
        rpc_url: HTTP RPC endpoint
        factory_address: AMM factory (getPool)
        quoter_address: QuoterV2 (simulate calls)
        router_address: SwapRouter02 (execution and multicall)
        wrapped_native_address: Wrapped-native ERC-20, the only multihop base
        native_symbol: Symbol of the native asset
        native_decimals: Decimals of the native asset
        default_slippage_bps: Slippage used when a request does not set one
        deadline_seconds: Offset from now for the deadline of requests the
            engine builds
        quote_debounce_seconds: Debounce applied to user-driven quote refreshes
        receipt_timeout_seconds: Max wait for a transaction receipt
    """

    chain_id: int = DEFAULT_CHAIN_ID
    rpc_url: str = DEFAULT_RPC_URL
    factory_address: str = DEFAULT_FACTORY_ADDRESS
    quoter_address: str = DEFAULT_QUOTER_ADDRESS
    router_address: str = DEFAULT_ROUTER_ADDRESS
    wrapped_native_address: str = DEFAULT_WRAPPED_NATIVE_ADDRESS
    native_symbol: str = DEFAULT_NATIVE_SYMBOL
    native_decimals: int = 18
    default_slippage_bps: int = DEFAULT_SLIPPAGE_BPS
    deadline_seconds: int = DEADLINE_SECONDS
    quote_debounce_seconds: float = QUOTE_DEBOUNCE_SECONDS
    receipt_timeout_seconds: int = RECEIPT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        for name in ("factory_address", "quoter_address", "router_address", "wrapped_native_address"):
            value = getattr(self, name)
            if not is_valid_address(value):
                raise ValueError(f"Invalid {name}: {value} (must be 0x + 40 hex chars)")
            object.__setattr__(self, name, normalize_address(value))

    @property
    def native_token(self) -> Token:
        return Token.native(self.native_symbol, self.native_decimals)

    @property
    def wrapped_native(self) -> Token:
        return Token(
            address=self.wrapped_native_address,
            decimals=self.native_decimals,
            symbol=f"W{self.native_symbol}",
        )

    @classmethod
    def from_env(cls) -> ChainConfig:
        """Build a config from ``SWAPPER_*`` environment variables.

        Unset variables keep their defaults.
        """
        env = os.environ
        return cls(
            chain_id=int(env.get("SWAPPER_CHAIN_ID", DEFAULT_CHAIN_ID)),
            rpc_url=env.get("SWAPPER_RPC_URL", DEFAULT_RPC_URL),
            factory_address=env.get("SWAPPER_FACTORY_ADDRESS", DEFAULT_FACTORY_ADDRESS),
            quoter_address=env.get("SWAPPER_QUOTER_ADDRESS", DEFAULT_QUOTER_ADDRESS),
            router_address=env.get("SWAPPER_ROUTER_ADDRESS", DEFAULT_ROUTER_ADDRESS),
            wrapped_native_address=env.get(
                "SWAPPER_WRAPPED_NATIVE_ADDRESS", DEFAULT_WRAPPED_NATIVE_ADDRESS
            ),
            native_symbol=env.get("SWAPPER_NATIVE_SYMBOL", DEFAULT_NATIVE_SYMBOL),
            default_slippage_bps=int(env.get("SWAPPER_SLIPPAGE_BPS", DEFAULT_SLIPPAGE_BPS)),
            deadline_seconds=int(env.get("SWAPPER_DEADLINE_SECONDS", DEADLINE_SECONDS)),
            quote_debounce_seconds=float(
                env.get("SWAPPER_QUOTE_DEBOUNCE_SECONDS", QUOTE_DEBOUNCE_SECONDS)
            ),
            receipt_timeout_seconds=int(
                env.get("SWAPPER_RECEIPT_TIMEOUT_SECONDS", RECEIPT_TIMEOUT_SECONDS)
            ),
        )


# Default configuration instance
DEFAULT_CHAIN_CONFIG = ChainConfig()

__all__ = ["ChainConfig", "DEFAULT_CHAIN_CONFIG"]
