"""Builds the router transaction for a quoted swap.

Shapes produced (``amountIn`` = request amount, ``minOut`` = slippage floor):

- ERC-20 -> ERC-20: one ``exactInputSingle`` / ``exactInput`` call, recipient
  is the user, no value attached.
- Native in and/or out: ``multicall(deadline, [...])`` so the whole sequence
  reverts together::

      [wrapETH(amountIn)]            if native in
      swap(recipient = router if native out else user)
      [unwrapWETH9(minOut, user)]    if native out
      refundETH()

  with ``value = amountIn`` when the input is native, else 0.

For direct routes the execution fee tier is re-scanned (lowest liquid tier),
independently of the best-priced tier the quote used. The two can differ.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from swapper.amm.uniswap_v3.encoding import (
    RouterCall,
    encode_exact_input,
    encode_exact_input_single,
    encode_multicall,
    encode_refund_native,
    encode_unwrap_native,
    encode_wrap_native,
)
from swapper.amm.uniswap_v3.path import encode_path
from swapper.amm.uniswap_v3.pools import PoolLocator
from swapper.constants import (
    BPS_DENOMINATOR,
    DEADLINE_SECONDS,
    EXACT_INPUT_GAS_LIMIT,
    EXACT_INPUT_SINGLE_GAS_LIMIT,
    MAX_SLIPPAGE_BPS,
    MULTICALL_GAS_LIMIT,
)
from swapper.errors import NoRouteFound
from swapper.models import Quote, Route, RouteKind, SwapRequest

from .chain import TxRequest

if TYPE_CHECKING:
    from swapper.context import ChainContext

logger = structlog.get_logger()


def compute_min_out(amount_out: int, slippage_bps: int) -> int:
    """Slippage floor: ``floor(amount_out * (10000 - slippage_bps) / 10000)``.

    Integer arithmetic only; the result is always within ``[0, amount_out]``.

    Raises:
        ValueError: On negative amounts or slippage outside 0..10000 bps
    """
    if amount_out < 0:
        raise ValueError(f"amount_out cannot be negative: {amount_out}")
    if not 0 <= slippage_bps <= MAX_SLIPPAGE_BPS:
        raise ValueError(f"slippage_bps must be within 0..{MAX_SLIPPAGE_BPS}: {slippage_bps}")
    return amount_out * (BPS_DENOMINATOR - slippage_bps) // BPS_DENOMINATOR


def compute_deadline(now: int | None = None, seconds: int = DEADLINE_SECONDS) -> int:
    """Epoch-seconds deadline ``seconds`` from now (20 minutes by default)."""
    current = int(time.time()) if now is None else now
    return current + seconds


@dataclass(frozen=True)
class SwapTransaction:
    """A ready-to-sign swap.

    Attributes:
        route: Route being executed
        fee_tier: Execution tier for direct routes, None for two-hop
        min_out: Slippage floor passed to the router
        deadline: Multicall deadline (epoch seconds)
        calls: Router calls in execution order (inner calls when batched)
        batched: True when the calls are wrapped in one multicall
        tx: Transaction for the Signer
    """

    route: Route
    fee_tier: int | None
    min_out: int
    deadline: int
    calls: tuple[RouterCall, ...]
    batched: bool
    tx: TxRequest

    @property
    def call_names(self) -> list[str]:
        return [call.name for call in self.calls]


class ExecutionBuilder:
    """Turns a Route, Quote and SwapRequest into a router transaction."""

    def __init__(self, context: ChainContext, locator: PoolLocator | None = None):
        self.context = context
        self.locator = locator or PoolLocator(context)

    async def execution_fee_tier(self, route: Route) -> int:
        """Lowest liquid fee tier for a direct route's pair, scanned now.

        Raises:
            NoRouteFound: If the pair lost all liquidity since routing
        """
        fee = await self.locator.first_liquid_tier(route.token_in.address, route.token_out.address)
        if fee is None:
            raise NoRouteFound("Direct pool has no liquidity at any fee tier")
        return fee

    async def build(self, route: Route, quote: Quote, request: SwapRequest) -> SwapTransaction:
        """Build the swap transaction.

        Raises:
            NoRouteFound: If a direct route has no liquid tier anymore
            ValueError: If the quote does not belong to the route
        """
        if quote.route != route:
            raise ValueError("Quote was computed for a different route")

        min_out = compute_min_out(quote.amount_out, request.slippage_bps)
        router = self.context.router_address
        is_from_native = request.is_from_native
        is_to_native = request.is_to_native
        batched = is_from_native or is_to_native
        swap_recipient = router if is_to_native else request.recipient

        fee_tier: int | None = None
        if route.kind == RouteKind.DIRECT:
            fee_tier = await self.execution_fee_tier(route)
            if quote.fee_tier is not None and fee_tier != quote.fee_tier:
                logger.info(
                    "execution_tier_differs_from_quote",
                    quote_fee=quote.fee_tier,
                    execution_fee=fee_tier,
                )
            swap_call = encode_exact_input_single(
                token_in=route.token_in.address,
                token_out=route.token_out.address,
                fee=fee_tier,
                recipient=swap_recipient,
                amount_in=request.amount_in,
                amount_out_minimum=min_out,
            )
            single_gas = EXACT_INPUT_SINGLE_GAS_LIMIT
        else:
            swap_call = encode_exact_input(
                path=encode_path(route.addresses, route.fees),
                recipient=swap_recipient,
                amount_in=request.amount_in,
                amount_out_minimum=min_out,
            )
            single_gas = EXACT_INPUT_GAS_LIMIT

        if not batched:
            calls: tuple[RouterCall, ...] = (swap_call,)
            tx = TxRequest(to=router, data=swap_call.data, value=0, gas_limit=single_gas)
        else:
            batch: list[RouterCall] = []
            if is_from_native:
                batch.append(encode_wrap_native(request.amount_in))
            batch.append(swap_call)
            if is_to_native:
                batch.append(encode_unwrap_native(min_out, request.recipient))
            batch.append(encode_refund_native())
            calls = tuple(batch)
            multicall = encode_multicall(request.deadline, calls)
            tx = TxRequest(
                to=router,
                data=multicall.data,
                value=request.amount_in if is_from_native else 0,
                gas_limit=MULTICALL_GAS_LIMIT,
            )

        logger.debug(
            "swap_transaction_built",
            kind=route.kind.value,
            calls=[call.name for call in calls],
            fee_tier=fee_tier,
            min_out=min_out,
            value=tx.value,
        )
        return SwapTransaction(
            route=route,
            fee_tier=fee_tier,
            min_out=min_out,
            deadline=request.deadline,
            calls=calls,
            batched=batched,
            tx=tx,
        )


__all__ = ["compute_min_out", "compute_deadline", "SwapTransaction", "ExecutionBuilder"]
