"""Swap fee configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal

from swapper.constants import BPS_DENOMINATOR, DEFAULT_SWAP_FEE_PERCENT
from swapper.models import is_valid_address, normalize_address


@dataclass(frozen=True)
class FeeConfig:
    """Where the post-swap fee goes and how large it is.

    Attributes:
        fee_wallet: Recipient of the fee. None disables collection entirely.
        swap_fee_percent: Fee as a percentage of the swap output (0.8 = 0.8%)
    """

    fee_wallet: str | None = None
    swap_fee_percent: Decimal = Decimal(DEFAULT_SWAP_FEE_PERCENT)

    def __post_init__(self) -> None:
        if self.fee_wallet is not None and not is_valid_address(self.fee_wallet):
            raise ValueError(f"Invalid fee wallet: {self.fee_wallet}")
        if not Decimal(0) <= self.swap_fee_percent <= Decimal(100):
            raise ValueError(f"swap_fee_percent must be within 0..100: {self.swap_fee_percent}")

    @property
    def enabled(self) -> bool:
        return self.fee_wallet is not None and self.bps > 0

    @property
    def bps(self) -> int:
        """Fee in basis points, rounded down (0.8% -> 80)."""
        scaled = self.swap_fee_percent * 100
        bps = int(scaled.to_integral_value(rounding=ROUND_FLOOR))
        return min(bps, BPS_DENOMINATOR)

    @classmethod
    def from_env(cls) -> FeeConfig:
        """Read ``SWAPPER_FEE_WALLET`` and ``SWAPPER_SWAP_FEE_PERCENT``.

        An empty or unset fee wallet disables fee collection.
        """
        wallet = os.environ.get("SWAPPER_FEE_WALLET", "").strip()
        percent = os.environ.get("SWAPPER_SWAP_FEE_PERCENT", DEFAULT_SWAP_FEE_PERCENT)
        return cls(
            fee_wallet=normalize_address(wallet) if wallet else None,
            swap_fee_percent=Decimal(percent),
        )


# Default configuration instance: no fee wallet, so nothing is collected
DEFAULT_FEE_CONFIG = FeeConfig()
