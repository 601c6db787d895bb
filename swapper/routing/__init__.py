"""Route discovery and quoting.

Module structure:
- route_finder.py: RouteFinder, greedy Direct / TwoHop search
- quoting.py: SwapQuoter for simulate-call quotes, QuoteSession for
  debounced refreshes
"""

from swapper.routing.quoting import QuoteSession, SwapQuoter, TierQuote, best_tier
from swapper.routing.route_finder import RouteFinder

__all__ = [
    "QuoteSession",
    "RouteFinder",
    "SwapQuoter",
    "TierQuote",
    "best_tier",
]
