"""UniswapV3-style AMM package.

This package provides everything that talks to the concentrated-liquidity AMM:
- Pool discovery (PoolLocator, PoolSource implementations)
- Quoter implementations (Mock and Web3-based)
- Multihop path encoding
- SwapRouter02 calldata encoding
"""

from .encoding import (
    EXACT_INPUT_SELECTOR,
    EXACT_INPUT_SINGLE_SELECTOR,
    MULTICALL_SELECTOR,
    RouterCall,
    decode_router_call,
    encode_exact_input,
    encode_exact_input_single,
    encode_multicall,
    encode_refund_native,
    encode_unwrap_native,
    encode_wrap_native,
)
from .path import decode_path, encode_path, encode_path_hex
from .pools import (
    FACTORY_ABI,
    POOL_ABI,
    MockPoolSource,
    PoolLocator,
    PoolSource,
    Web3PoolSource,
)
from .quoter import (
    QUOTER_V2_ABI,
    MockUniswapV3Quoter,
    QuoteKey,
    UniswapV3Quoter,
    Web3UniswapV3Quoter,
)

__all__ = [
    # Pools
    "PoolSource",
    "MockPoolSource",
    "Web3PoolSource",
    "PoolLocator",
    "FACTORY_ABI",
    "POOL_ABI",
    # Quoter
    "UniswapV3Quoter",
    "QuoteKey",
    "MockUniswapV3Quoter",
    "Web3UniswapV3Quoter",
    "QUOTER_V2_ABI",
    # Path
    "encode_path",
    "encode_path_hex",
    "decode_path",
    # Encoding
    "RouterCall",
    "EXACT_INPUT_SELECTOR",
    "EXACT_INPUT_SINGLE_SELECTOR",
    "MULTICALL_SELECTOR",
    "encode_exact_input",
    "encode_exact_input_single",
    "encode_multicall",
    "encode_refund_native",
    "encode_unwrap_native",
    "encode_wrap_native",
    "decode_router_call",
]
