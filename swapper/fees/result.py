"""Fee collection result types."""

from dataclasses import dataclass
from enum import Enum


class FeeError(Enum):
    """Types of fee collection errors."""

    SEND_FAILED = "send_failed"
    REVERTED = "reverted"
    RECEIPT_TIMEOUT = "receipt_timeout"


@dataclass(frozen=True)
class FeeResult:
    """Outcome of the post-swap fee transfer.

    Fee collection is best effort: the swap has already settled, so failures
    are reported through this object instead of being raised.

    Attributes:
        fee: Fee amount in output-token base units (0 when skipped)
        tx_hash: Hash of the fee transfer, if one was sent
        error: If collection failed, the type of error that occurred
        error_detail: Optional human-readable detail about the error
        skip_reason: Why no transfer was attempted, if none was

    Examples:
        # Fee transferred
        result = FeeResult.collected(8000, "0xabc...")
        assert result.is_collected

        # No fee wallet configured
        result = FeeResult.skipped("no_fee_wallet")
        assert result.is_valid and not result.is_collected

        # Transfer reverted
        result = FeeResult.with_error(FeeError.REVERTED, fee=8000)
        assert result.is_error
    """

    fee: int
    tx_hash: str | None = None
    error: FeeError | None = None
    error_detail: str | None = None
    skip_reason: str | None = None

    @property
    def is_valid(self) -> bool:
        """True if nothing went wrong (including skipped collections)."""
        return self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def is_collected(self) -> bool:
        """True if a fee transfer was confirmed on chain."""
        return self.is_valid and self.tx_hash is not None

    @classmethod
    def skipped(cls, reason: str) -> "FeeResult":
        """No transfer attempted (no fee wallet, zero fee)."""
        return cls(fee=0, skip_reason=reason)

    @classmethod
    def collected(cls, fee: int, tx_hash: str) -> "FeeResult":
        return cls(fee=fee, tx_hash=tx_hash)

    @classmethod
    def with_error(
        cls,
        error: FeeError,
        detail: str | None = None,
        fee: int = 0,
        tx_hash: str | None = None,
    ) -> "FeeResult":
        """Create an error result."""
        return cls(fee=fee, tx_hash=tx_hash, error=error, error_detail=detail)
