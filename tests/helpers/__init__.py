"""Test helpers module for shared test utilities.

- constants: Token, wallet and deployment addresses
- factories: Mock-backed contexts, routes, requests and receipt logs
"""

from tests.helpers.constants import (
    FEE_WALLET,
    ONE,
    PEPU,
    ROUTER,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    USER,
    WALLET_ID,
    WPEPU,
    WPEPU_TOKEN,
    A,
    B,
    C,
)
from tests.helpers.factories import (
    MockChain,
    direct_route,
    fail_receipts,
    make_chain,
    make_quote,
    make_request,
    transfer_log,
    two_hop_route,
    withdrawal_log,
)

__all__ = [
    # Constants
    "ROUTER",
    "WPEPU",
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "USER",
    "FEE_WALLET",
    "WALLET_ID",
    "PEPU",
    "WPEPU_TOKEN",
    "A",
    "B",
    "C",
    "ONE",
    # Factories
    "MockChain",
    "make_chain",
    "direct_route",
    "two_hop_route",
    "make_request",
    "make_quote",
    "transfer_log",
    "withdrawal_log",
    "fail_receipts",
]
