"""Protocol constants for the swap engine.

Centralizes well-known addresses, fee tiers and execution parameters.
"""

# Fee tiers in Uniswap units (hundredths of a basis point)
# Fee = units / 1,000,000 (e.g., 3000 = 0.3%)
FEE_LOWEST = 100  # 0.01%
FEE_LOW = 500  # 0.05%
FEE_MEDIUM = 3000  # 0.30%
FEE_HIGH = 10000  # 1.00%

# Enumeration order matters: route search and quote tie-breaks follow it
FEE_TIERS: tuple[int, ...] = (FEE_LOWEST, FEE_LOW, FEE_MEDIUM, FEE_HIGH)

# Largest value a uint24 path fee can hold
MAX_UINT24 = 2**24 - 1

# Slippage is expressed in basis points of the quoted output
BPS_DENOMINATOR = 10_000
MAX_SLIPPAGE_BPS = BPS_DENOMINATOR
DEFAULT_SLIPPAGE_BPS = 50  # 0.5%

# Swap deadline, seconds after the request is built
DEADLINE_SECONDS = 20 * 60

# Gas limits per transaction shape
APPROVE_GAS_LIMIT = 100_000
MULTICALL_GAS_LIMIT = 500_000
EXACT_INPUT_GAS_LIMIT = 400_000
EXACT_INPUT_SINGLE_GAS_LIMIT = 300_000
FEE_TRANSFER_GAS_LIMIT = 100_000

# Conservative gas budget reserved when the input is the native asset
NATIVE_SWAP_GAS_RESERVE = 500_000

# Default chain (Pepe Unchained mainnet) and its AMM deployment
DEFAULT_CHAIN_ID = 97741
DEFAULT_RPC_URL = "https://rpc-pepu-v2-mainnet-0.t.conduit.xyz"
DEFAULT_NATIVE_SYMBOL = "PEPU"
DEFAULT_FACTORY_ADDRESS = "0x5984b8bf2d4db9c0acb1d7924762e4474d80c807"
DEFAULT_QUOTER_ADDRESS = "0xd647b2d80b48e93613aa6982b85f8909578b4829"
DEFAULT_ROUTER_ADDRESS = "0x150c3f0f16c3d9eb34351d7af9c961fedc97a0fb"
DEFAULT_WRAPPED_NATIVE_ADDRESS = "0xf9cf4a16d26979b929be7176bac4e7084975fcb8"

# Protocol fee taken from the swap output
DEFAULT_SWAP_FEE_PERCENT = "0.8"

# Debounce interval for quote refreshes driven by user input
QUOTE_DEBOUNCE_SECONDS = 0.5

# How long to wait for a receipt before giving up
RECEIPT_TIMEOUT_SECONDS = 180

__all__ = [
    "FEE_LOWEST",
    "FEE_LOW",
    "FEE_MEDIUM",
    "FEE_HIGH",
    "FEE_TIERS",
    "MAX_UINT24",
    "BPS_DENOMINATOR",
    "MAX_SLIPPAGE_BPS",
    "DEFAULT_SLIPPAGE_BPS",
    "DEADLINE_SECONDS",
    "APPROVE_GAS_LIMIT",
    "MULTICALL_GAS_LIMIT",
    "EXACT_INPUT_GAS_LIMIT",
    "EXACT_INPUT_SINGLE_GAS_LIMIT",
    "FEE_TRANSFER_GAS_LIMIT",
    "NATIVE_SWAP_GAS_RESERVE",
    "DEFAULT_CHAIN_ID",
    "DEFAULT_RPC_URL",
    "DEFAULT_NATIVE_SYMBOL",
    "DEFAULT_FACTORY_ADDRESS",
    "DEFAULT_QUOTER_ADDRESS",
    "DEFAULT_ROUTER_ADDRESS",
    "DEFAULT_WRAPPED_NATIVE_ADDRESS",
    "DEFAULT_SWAP_FEE_PERCENT",
    "QUOTE_DEBOUNCE_SECONDS",
    "RECEIPT_TIMEOUT_SECONDS",
]
