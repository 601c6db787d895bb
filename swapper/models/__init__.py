"""Data models for swap routing and execution."""

from swapper.models.swap import Pool, Quote, Route, RouteKind, SwapRequest, Token
from swapper.models.types import (
    NATIVE_TOKEN,
    UINT256_MAX,
    ZERO_ADDRESS,
    Address,
    Uint256,
    format_units,
    is_native_address,
    is_valid_address,
    normalize_address,
    parse_units,
    sort_addresses,
)

__all__ = [
    # Types
    "Address",
    "Uint256",
    "NATIVE_TOKEN",
    "UINT256_MAX",
    "ZERO_ADDRESS",
    "format_units",
    "is_native_address",
    "is_valid_address",
    "normalize_address",
    "parse_units",
    "sort_addresses",
    # Swap models
    "Pool",
    "Quote",
    "Route",
    "RouteKind",
    "SwapRequest",
    "Token",
]
