"""Request and response models for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from swapper.constants import MAX_SLIPPAGE_BPS
from swapper.models import Address, Quote, Route, Token, Uint256, is_native_address
from swapper.models.types import normalize_address


class TokenRef(BaseModel):
    """A token as the client knows it; the zero address means the native asset."""

    address: Address
    decimals: int = Field(default=18, ge=0, le=77)
    symbol: str = ""

    def to_token(self, native_symbol: str) -> Token:
        if is_native_address(self.address):
            return Token.native(self.symbol or native_symbol, self.decimals)
        return Token(address=normalize_address(self.address), decimals=self.decimals, symbol=self.symbol)


class RouteRequest(BaseModel):
    token_in: TokenRef = Field(alias="tokenIn")
    token_out: TokenRef = Field(alias="tokenOut")

    model_config = {"populate_by_name": True}


class QuoteRequest(RouteRequest):
    amount_in: Uint256 = Field(alias="amountIn", description="Input amount in base units")
    slippage_bps: int | None = Field(
        default=None, alias="slippageBps", ge=0, le=MAX_SLIPPAGE_BPS
    )


class MinOutRequest(BaseModel):
    amount_out: Uint256 = Field(alias="amountOut")
    slippage_bps: int = Field(alias="slippageBps", ge=0, le=MAX_SLIPPAGE_BPS)

    model_config = {"populate_by_name": True}


class RouteResponse(BaseModel):
    kind: str
    path: list[Address]
    fees: list[int]
    encoded_path: str | None = Field(default=None, alias="encodedPath")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_route(cls, route: Route, encoded_path: str | None = None) -> RouteResponse:
        return cls(
            kind=route.kind.value,
            path=route.addresses,
            fees=list(route.fees),
            encoded_path=encoded_path,
        )


class QuoteResponse(BaseModel):
    route: RouteResponse
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    min_out: Uint256 = Field(alias="minOut")
    slippage_bps: int = Field(alias="slippageBps")
    fee_tier: int | None = Field(default=None, alias="feeTier")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: Quote, route: RouteResponse, min_out: int, slippage_bps: int) -> QuoteResponse:
        return cls(
            route=route,
            amount_in=str(quote.amount_in),
            amount_out=str(quote.amount_out),
            min_out=str(min_out),
            slippage_bps=slippage_bps,
            fee_tier=quote.fee_tier,
        )


class MinOutResponse(BaseModel):
    min_out: Uint256 = Field(alias="minOut")

    model_config = {"populate_by_name": True}
