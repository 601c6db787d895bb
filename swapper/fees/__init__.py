"""Post-swap fee handling.

Usage:
    from swapper.fees import FeeCollector, FeeConfig

    collector = FeeCollector(context, FeeConfig(fee_wallet="0x..."))
    result = await collector.collect(wallet_id, token_out, amount_out)

    if result.is_error:
        log(result.error, result.error_detail)
"""

from swapper.fees.collector import FeeCollector
from swapper.fees.config import DEFAULT_FEE_CONFIG, FeeConfig
from swapper.fees.result import FeeError, FeeResult

__all__ = [
    "FeeCollector",
    "FeeConfig",
    "DEFAULT_FEE_CONFIG",
    "FeeResult",
    "FeeError",
]
