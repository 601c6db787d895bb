"""Shared type definitions for swap models.

These types are used across the engine's dataclasses and the HTTP schemas.
"""

from decimal import Decimal, InvalidOperation, localcontext
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

# Maximum uint256 value
UINT256_MAX = 2**256 - 1

# Sentinel used for the chain's native asset in user-facing contexts
NATIVE_TOKEN = "0x0000000000000000000000000000000000000000"
ZERO_ADDRESS = NATIVE_TOKEN


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a valid non-negative integer within uint256 range
    """
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Uint256 cannot be negative: {value}")
        if value > UINT256_MAX:
            raise ValueError(f"Uint256 overflow: {value} > 2^256-1")
        return str(value)

    if not isinstance(value, str):
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    try:
        int_value = int(value)
    except ValueError as err:
        raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")

    return value


# Ethereum address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an Ethereum address to lowercase.

    Args:
        address: An Ethereum address (with or without 0x prefix)
        validate: If True, raises ValueError for invalid addresses.

    Returns:
        Lowercase address with 0x prefix

    Raises:
        ValueError: If validate=True and address is not a valid Ethereum address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a valid Ethereum address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def is_native_address(address: str) -> bool:
    """True if the address is the native-asset sentinel."""
    return normalize_address(address) == NATIVE_TOKEN


def sort_addresses(token_a: str, token_b: str) -> tuple[str, str]:
    """Return the pair in the factory's canonical (token0, token1) order."""
    if normalize_address(token_a) < normalize_address(token_b):
        return token_a, token_b
    return token_b, token_a


def parse_units(amount: str | int | Decimal, decimals: int) -> int:
    """Convert a human-readable amount into integer base units.

    Uses Decimal throughout; floats are rejected because they cannot represent
    most decimal fractions exactly.

    Args:
        amount: Decimal string (e.g. "1.5"), int, or Decimal
        decimals: Token decimals

    Returns:
        Amount in base units

    Raises:
        ValueError: On negative amounts, floats, unparseable input, or more
            fractional digits than the token supports
    """
    if isinstance(amount, float):
        raise ValueError("Amounts must not be floats; pass a string or Decimal")
    if decimals < 0:
        raise ValueError(f"Invalid decimals: {decimals}")

    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as err:
        raise ValueError(f"Invalid amount: {amount!r}") from err

    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    if value < 0:
        raise ValueError(f"Amount cannot be negative: {amount}")

    # Default context precision (28 digits) would silently round large amounts
    with localcontext() as ctx:
        ctx.prec = 200
        scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Too many decimal places for {decimals}-decimal token: {amount}")
    return int(scaled)


def format_units(amount: int, decimals: int) -> str:
    """Convert integer base units into a plain decimal string.

    Trailing zeros are stripped; whole numbers keep one decimal (``"1.0"``).
    """
    if decimals == 0:
        return str(amount)
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), 10**decimals)
    frac_str = str(frac).rjust(decimals, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{frac_str}"
