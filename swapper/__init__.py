"""Swap routing and execution for UniswapV3-style AMMs."""

from swapper.engine import SwapEngine, SwapOutcome, get_default_engine

__version__ = "0.1.0"
__all__ = ["SwapEngine", "SwapOutcome", "get_default_engine", "__version__"]
