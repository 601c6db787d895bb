"""API endpoints for routing and quoting.

Only read-only operations are exposed; swaps need a Signer and are driven
through SwapEngine.execute_swap by the embedding application.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException

from swapper.amm.uniswap_v3.path import encode_path_hex
from swapper.api.schemas import (
    MinOutRequest,
    MinOutResponse,
    QuoteRequest,
    QuoteResponse,
    RouteRequest,
    RouteResponse,
)
from swapper.engine import SwapEngine, get_default_engine
from swapper.errors import NoRouteFound, QuoteFailed
from swapper.execution import compute_min_out
from swapper.models import Route, RouteKind

logger = structlog.get_logger()

router = APIRouter()


def get_engine() -> SwapEngine:
    """Dependency provider for the engine instance.

    Override this in tests to inject an engine backed by mocks:
        app.dependency_overrides[get_engine] = lambda: engine

    Returns:
        The engine to use for routing and quoting.
    """
    return get_default_engine()


def _route_response(route: Route) -> RouteResponse:
    encoded = None
    if route.kind == RouteKind.TWO_HOP:
        encoded = encode_path_hex(route.addresses, route.fees)
    return RouteResponse.from_route(route, encoded)


@router.post("/route", response_model_by_alias=True)
async def find_route(request: RouteRequest, engine: SwapEngine = Depends(get_engine)) -> RouteResponse:
    """Find a Direct or TwoHop route.

    Error Handling:
        - No liquid route: 404 with the NoRouteFound reason
    """
    native_symbol = engine.context.config.native_symbol
    try:
        route = await engine.find_route(
            request.token_in.to_token(native_symbol), request.token_out.to_token(native_symbol)
        )
    except NoRouteFound as e:
        raise HTTPException(status_code=404, detail=e.reason) from e
    return _route_response(route)


@router.post("/quote", response_model_by_alias=True)
async def quote(request: QuoteRequest, engine: SwapEngine = Depends(get_engine)) -> QuoteResponse:
    """Route and quote an exact-input swap.

    Error Handling:
        - Invalid amounts or addresses: 422 Validation Error (Pydantic)
        - Zero amount: 422
        - No liquid route: 404
        - Quote simulation failed: 422 with the QuoteFailed reason
    """
    amount_in = int(request.amount_in)
    if amount_in == 0:
        raise HTTPException(status_code=422, detail="amountIn must be positive")

    native_symbol = engine.context.config.native_symbol
    token_in = request.token_in.to_token(native_symbol)
    token_out = request.token_out.to_token(native_symbol)
    try:
        result = await engine.quote(token_in, token_out, amount_in)
    except NoRouteFound as e:
        raise HTTPException(status_code=404, detail=e.reason) from e
    except QuoteFailed as e:
        raise HTTPException(status_code=422, detail=e.reason) from e

    slippage = (
        engine.context.config.default_slippage_bps
        if request.slippage_bps is None
        else request.slippage_bps
    )
    logger.info(
        "quote_served",
        token_in=token_in.key,
        token_out=token_out.key,
        amount_in=amount_in,
        amount_out=result.amount_out,
        kind=result.route.kind.value,
    )
    return QuoteResponse.from_quote(
        result,
        _route_response(result.route),
        min_out=engine.min_out(result, slippage),
        slippage_bps=slippage,
    )


@router.post("/min-out", response_model_by_alias=True)
async def min_out(request: MinOutRequest) -> MinOutResponse:
    """Slippage floor for a quoted output amount."""
    return MinOutResponse(min_out=str(compute_min_out(int(request.amount_out), request.slippage_bps)))
