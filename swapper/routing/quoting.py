"""Price quotes for routes, and the debounced quote refresh pipeline."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from swapper.amm.uniswap_v3.path import encode_path
from swapper.constants import FEE_TIERS, QUOTE_DEBOUNCE_SECONDS
from swapper.errors import QuoteFailed, SwapError
from swapper.models import Quote, Route, RouteKind, Token

if TYPE_CHECKING:
    from swapper.context import ChainContext

logger = structlog.get_logger()


@dataclass(frozen=True)
class TierQuote:
    """Outcome of one simulate call; ``amount_out`` is None when it reverted."""

    fee: int
    amount_out: int | None

    @property
    def ok(self) -> bool:
        return self.amount_out is not None


def best_tier(probes: list[TierQuote]) -> TierQuote | None:
    """Pick the highest-output probe among those that did not revert.

    ``max`` keeps the first maximal element, so ties go to the earliest tier in
    enumeration order.
    """
    usable = [probe for probe in probes if probe.ok]
    if not usable:
        return None
    return max(usable, key=lambda probe: probe.amount_out or 0)


class SwapQuoter:
    """Quotes routes with read-only QuoterV2 simulate calls.

    Direct routes re-probe every fee tier and keep the best price; the tier the
    RouteFinder settled on only proves feasibility. Two-hop routes are quoted
    on their fixed (fee1, fee2) pair with no alternative-tier search.
    """

    def __init__(self, context: ChainContext):
        self.context = context

    async def quote(self, route: Route, amount_in: int) -> Quote:
        """Quote ``amount_in`` base units of the route's input token.

        Raises:
            ValueError: If amount_in is not positive
            QuoteFailed: If no simulate call produced an output
        """
        if amount_in <= 0:
            raise ValueError(f"amount_in must be positive, got {amount_in}")
        if route.kind == RouteKind.DIRECT:
            return await self.quote_direct(route, amount_in)
        return await self.quote_two_hop(route, amount_in)

    async def probe_tiers(self, token_in: str, token_out: str, amount_in: int) -> list[TierQuote]:
        """Simulate the swap at every fee tier concurrently, in tier order."""
        quoter = self.context.quoter
        outputs = await asyncio.gather(
            *(
                quoter.quote_exact_input_single(token_in, token_out, fee, amount_in)
                for fee in FEE_TIERS
            )
        )
        return [TierQuote(fee, out) for fee, out in zip(FEE_TIERS, outputs, strict=True)]

    async def quote_direct(self, route: Route, amount_in: int) -> Quote:
        probes = await self.probe_tiers(route.token_in.address, route.token_out.address, amount_in)
        best = best_tier(probes)
        if best is None or not best.amount_out:
            logger.info(
                "direct_quote_failed",
                token_in=route.token_in.key,
                token_out=route.token_out.key,
                amount_in=amount_in,
            )
            raise QuoteFailed("No liquidity found")

        logger.debug(
            "direct_quote",
            fee=best.fee,
            route_fee=route.fees[0],
            amount_in=amount_in,
            amount_out=best.amount_out,
            tiers={probe.fee: probe.amount_out for probe in probes},
        )
        return Quote(route=route, amount_in=amount_in, amount_out=best.amount_out, fee_tier=best.fee)

    async def quote_two_hop(self, route: Route, amount_in: int) -> Quote:
        path = encode_path(route.addresses, route.fees)
        amount_out = await self.context.quoter.quote_exact_input(path, amount_in)
        if not amount_out:
            logger.info(
                "multihop_quote_failed",
                path=[t.key for t in route.path],
                fees=list(route.fees),
                amount_in=amount_in,
            )
            raise QuoteFailed("Failed to get quote for multihop route")
        return Quote(route=route, amount_in=amount_in, amount_out=amount_out)


QuoteFetcher = Callable[[Token, Token, int], Awaitable[Quote]]


class QuoteSession:
    """Debounced quote refreshes where newer requests supersede older ones.

    Every ``refresh`` takes a new generation number. After the debounce sleep,
    and again when the quote arrives, a request whose generation is no longer
    current returns None and leaves ``latest`` untouched. In-flight calls are
    never cancelled, their results are simply ignored.
    """

    def __init__(self, fetch: QuoteFetcher, debounce_seconds: float = QUOTE_DEBOUNCE_SECONDS):
        self._fetch = fetch
        self._debounce = debounce_seconds
        self._generation = 0
        self.latest: Quote | None = None
        self.latest_error: SwapError | None = None

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> None:
        """Drop the current quote and supersede anything in flight."""
        self._generation += 1
        self.latest = None
        self.latest_error = None

    def _is_stale(self, generation: int, stage: str) -> bool:
        if generation == self._generation:
            return False
        logger.debug(
            "quote_superseded", generation=generation, current=self._generation, stage=stage
        )
        return True

    async def refresh(self, token_in: Token, token_out: Token, amount_in: int) -> Quote | None:
        """Request a quote for the latest user input.

        Returns:
            The quote, or None if the amount is empty or the request was
            superseded by a newer one

        Raises:
            SwapError: Route or quote failure for the current generation
        """
        self.invalidate()
        generation = self._generation
        if amount_in <= 0:
            return None

        await asyncio.sleep(self._debounce)
        if self._is_stale(generation, "debounce"):
            return None

        try:
            quote = await self._fetch(token_in, token_out, amount_in)
        except SwapError as e:
            if self._is_stale(generation, "error"):
                return None
            self.latest_error = e
            raise

        if self._is_stale(generation, "response"):
            return None
        self.latest = quote
        return quote


__all__ = ["TierQuote", "best_tier", "SwapQuoter", "QuoteSession", "QuoteFetcher"]
