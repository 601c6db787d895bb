"""Route discovery between two tokens.

The search is greedy first-match, not price-optimal:

1. Direct: the lowest fee tier with a liquid pool wins. A liquid direct pool
   at any tier always beats a two-hop route.
2. Two-hop through the wrapped-native asset, the only supported base token.
   ``fee1`` is the outer loop and ``fee2`` the inner one; the first pair with
   both hops liquid wins.
3. Otherwise NoRouteFound.

Pool probes for one stage are issued concurrently, but the winner is always
picked in enumeration order, so results are identical to a sequential scan.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from swapper.amm.uniswap_v3.pools import PoolLocator
from swapper.constants import FEE_TIERS
from swapper.errors import NoRouteFound
from swapper.models import Route, RouteKind, Token

if TYPE_CHECKING:
    from swapper.context import ChainContext

logger = structlog.get_logger()


class RouteFinder:
    """Finds a feasible Direct or TwoHop route for a token pair."""

    def __init__(self, context: ChainContext, locator: PoolLocator | None = None):
        self.context = context
        self.locator = locator or PoolLocator(context)

    async def find_route(self, token_in: Token, token_out: Token) -> Route:
        """Find a route between two user-facing tokens.

        Native tokens are replaced by the wrapped-native contract before any
        pool lookup.

        Raises:
            NoRouteFound: If no liquid pool exists across any tier or hop
        """
        wrapped = self.context.wrapped_native
        pool_in = token_in.for_pools(wrapped)
        pool_out = token_out.for_pools(wrapped)

        if pool_in.key == pool_out.key:
            raise NoRouteFound(f"{token_in.symbol or token_in.address} cannot be swapped for itself")

        route = await self.find_direct(pool_in, pool_out)
        if route is None:
            route = await self.find_two_hop(pool_in, pool_out)

        if route is None:
            logger.info("no_route_found", token_in=pool_in.key, token_out=pool_out.key)
            raise NoRouteFound(
                f"No route found. Try swapping through {wrapped.symbol or 'the wrapped native token'} first."
            )

        logger.debug(
            "route_found",
            kind=route.kind.value,
            path=[t.key for t in route.path],
            fees=list(route.fees),
        )
        return route

    async def find_direct(self, token_in: Token, token_out: Token) -> Route | None:
        """First fee tier (ascending) with a liquid direct pool, as a Route."""
        fee = await self.locator.first_liquid_tier(token_in.address, token_out.address)
        if fee is None:
            return None
        return Route(kind=RouteKind.DIRECT, path=(token_in, token_out), fees=(fee,))

    async def find_two_hop(self, token_in: Token, token_out: Token) -> Route | None:
        """First (fee1, fee2) pair with both hops through the base liquid."""
        base = self.context.wrapped_native
        if base.key in (token_in.key, token_out.key):
            return None

        first_hops, second_hops = await asyncio.gather(
            self.locator.check_tiers(token_in.address, base.address),
            self.locator.check_tiers(base.address, token_out.address),
        )
        first_liquid = {pool.fee for pool in first_hops if pool.usable}
        second_liquid = {pool.fee for pool in second_hops if pool.usable}

        for fee1 in FEE_TIERS:
            if fee1 not in first_liquid:
                continue
            for fee2 in FEE_TIERS:
                if fee2 in second_liquid:
                    return Route(
                        kind=RouteKind.TWO_HOP,
                        path=(token_in, base, token_out),
                        fees=(fee1, fee2),
                    )
        return None


__all__ = ["RouteFinder"]
