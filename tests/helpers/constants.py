"""Shared token and wallet constants for tests.

All addresses are lowercase for consistency with normalize_address().

Usage:
    from tests.helpers import TOKEN_A, WPEPU
    # or
    from tests.helpers.constants import TOKEN_A, WPEPU
"""

from swapper.config import DEFAULT_CHAIN_CONFIG
from swapper.models import Token

# =============================================================================
# Chain deployment (defaults)
# =============================================================================

ROUTER = DEFAULT_CHAIN_CONFIG.router_address
WPEPU = DEFAULT_CHAIN_CONFIG.wrapped_native_address

# =============================================================================
# Synthetic tokens and wallets
# =============================================================================

TOKEN_A = "0x" + "aa" * 20
TOKEN_B = "0x" + "bb" * 20
TOKEN_C = "0x" + "cc" * 20

USER = "0x" + "11" * 20
FEE_WALLET = "0x" + "fe" * 20
WALLET_ID = "wallet-1"

# =============================================================================
# Token objects
# =============================================================================

PEPU = DEFAULT_CHAIN_CONFIG.native_token
WPEPU_TOKEN = DEFAULT_CHAIN_CONFIG.wrapped_native
A = Token(address=TOKEN_A, decimals=18, symbol="AAA")
B = Token(address=TOKEN_B, decimals=6, symbol="BBB")
C = Token(address=TOKEN_C, decimals=18, symbol="CCC")

ONE = 10**18
