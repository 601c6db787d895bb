"""Core swap dataclasses: tokens, pools, routes, quotes and requests."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum

from swapper.constants import DEADLINE_SECONDS, FEE_TIERS, MAX_SLIPPAGE_BPS

from .types import NATIVE_TOKEN, format_units, normalize_address, parse_units, sort_addresses


@dataclass(frozen=True)
class Token:
    """An ERC-20 token or the chain's native asset.

    The native asset carries the zero-address sentinel. Pools, quotes and paths
    only ever see the wrapped-native contract, see ``for_pools``.
    """

    address: str
    decimals: int
    symbol: str = ""
    is_native: bool = False

    @classmethod
    def native(cls, symbol: str, decimals: int = 18) -> Token:
        """Create the native-asset token."""
        return cls(address=NATIVE_TOKEN, decimals=decimals, symbol=symbol, is_native=True)

    @property
    def key(self) -> str:
        """Lowercase address used for comparisons."""
        return normalize_address(self.address)

    def for_pools(self, wrapped_native: Token) -> Token:
        """Return the token to use in pool, quote and path operations."""
        return wrapped_native if self.is_native else self

    def for_display(self, native: Token, wrapped_native: Token) -> Token:
        """Map the wrapped-native contract back to the native asset."""
        return native if self.key == wrapped_native.key else self

    def to_base_units(self, amount: str) -> int:
        """Parse a decimal amount string into base units of this token."""
        return parse_units(amount, self.decimals)

    def format_amount(self, amount: int) -> str:
        """Format base units of this token as a decimal string."""
        return format_units(amount, self.decimals)


@dataclass(frozen=True)
class Pool:
    """A factory pool for a token pair at one fee tier.

    Existence (``address``) and ``has_liquidity`` are independent facts: a pool
    can exist with zero liquidity and is then unusable.
    """

    token0: str
    token1: str
    fee: int
    address: str | None
    has_liquidity: bool = False

    @classmethod
    def for_pair(
        cls, token_a: str, token_b: str, fee: int, address: str | None, has_liquidity: bool
    ) -> Pool:
        token0, token1 = sort_addresses(token_a, token_b)
        return cls(
            token0=normalize_address(token0),
            token1=normalize_address(token1),
            fee=fee,
            address=address,
            has_liquidity=has_liquidity,
        )

    @property
    def exists(self) -> bool:
        return self.address is not None

    @property
    def usable(self) -> bool:
        return self.exists and self.has_liquidity


class RouteKind(str, Enum):
    """Shape of a route."""

    DIRECT = "direct"
    TWO_HOP = "two_hop"


@dataclass(frozen=True)
class Route:
    """A feasible path through the AMM.

    ``path`` holds pool-side tokens (wrapped native, never the sentinel) and
    ``fees`` the fee tier of each hop, so ``len(path) == len(fees) + 1``.
    """

    kind: RouteKind
    path: tuple[Token, ...]
    fees: tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.path) != len(self.fees) + 1:
            raise ValueError(
                f"Route path has {len(self.path)} tokens for {len(self.fees)} fees"
            )
        for fee in self.fees:
            if fee not in FEE_TIERS:
                raise ValueError(f"Unsupported fee tier: {fee}")
        expected = RouteKind.DIRECT if len(self.fees) == 1 else RouteKind.TWO_HOP
        if self.kind != expected or len(self.fees) > 2:
            raise ValueError(f"{self.kind.value} route cannot have {len(self.fees)} hops")

    @property
    def token_in(self) -> Token:
        return self.path[0]

    @property
    def token_out(self) -> Token:
        return self.path[-1]

    @property
    def addresses(self) -> list[str]:
        return [token.address for token in self.path]

    @property
    def hop_count(self) -> int:
        return len(self.fees)


@dataclass(frozen=True)
class Quote:
    """Expected output for a route, in integer base units of tokenOut.

    For direct routes ``fee_tier`` is the best-priced tier found by the quoter,
    which may differ from ``route.fees[0]``. Two-hop quotes leave it unset.
    """

    route: Route
    amount_in: int
    amount_out: int
    fee_tier: int | None = None
    timestamp: float = field(default_factory=time.time)

    @property
    def is_direct(self) -> bool:
        return self.route.kind == RouteKind.DIRECT


@dataclass(frozen=True)
class SwapRequest:
    """A user-initiated swap, immutable once built."""

    token_in: Token
    token_out: Token
    amount_in: int
    slippage_bps: int
    deadline: int
    recipient: str

    def __post_init__(self) -> None:
        if self.amount_in <= 0:
            raise ValueError(f"amount_in must be positive, got {self.amount_in}")
        if not 0 <= self.slippage_bps <= MAX_SLIPPAGE_BPS:
            raise ValueError(f"slippage_bps must be within 0..{MAX_SLIPPAGE_BPS}")
        if self.token_in.key == self.token_out.key:
            raise ValueError("token_in and token_out must differ")

    @classmethod
    def create(
        cls,
        token_in: Token,
        token_out: Token,
        amount_in: int,
        recipient: str,
        slippage_bps: int,
        now: int | None = None,
        deadline_seconds: int = DEADLINE_SECONDS,
    ) -> SwapRequest:
        """Build a request whose deadline is ``deadline_seconds`` from now."""
        current = int(time.time()) if now is None else now
        return cls(
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            slippage_bps=slippage_bps,
            deadline=current + deadline_seconds,
            recipient=recipient,
        )

    @property
    def is_from_native(self) -> bool:
        return self.token_in.is_native

    @property
    def is_to_native(self) -> bool:
        return self.token_out.is_native


__all__ = ["Pool", "Quote", "Route", "RouteKind", "SwapRequest", "Token"]
