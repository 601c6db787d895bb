"""Post-swap fee collection.

The fee is a fixed share of the swap output, sent from the user's wallet to
the configured fee wallet in a separate transaction after the swap settles:
a plain value transfer for the native asset, ``transfer(feeWallet, fee)`` for
ERC-20 outputs. Collection never raises; see FeeResult.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from swapper.constants import BPS_DENOMINATOR, FEE_TRANSFER_GAS_LIMIT
from swapper.errors import FeeCollectionFailed
from swapper.execution.chain import TxRequest
from swapper.execution.erc20 import encode_transfer
from swapper.models import Token

from .config import DEFAULT_FEE_CONFIG, FeeConfig
from .result import FeeError, FeeResult

if TYPE_CHECKING:
    from swapper.context import ChainContext

logger = structlog.get_logger()


class FeeCollector:
    """Computes and transfers the swap fee."""

    def __init__(self, context: ChainContext, config: FeeConfig = DEFAULT_FEE_CONFIG):
        self.context = context
        self.config = config

    def compute_fee(self, amount_out: int) -> int:
        """``floor(amount_out * bps / 10000)``."""
        if amount_out < 0:
            raise ValueError(f"amount_out cannot be negative: {amount_out}")
        return amount_out * self.config.bps // BPS_DENOMINATOR

    def fee_transaction(self, token_out: Token, fee: int) -> TxRequest:
        wallet = self.config.fee_wallet
        if wallet is None:
            raise FeeCollectionFailed("No fee wallet configured")
        if token_out.is_native:
            return TxRequest(to=wallet, value=fee, gas_limit=FEE_TRANSFER_GAS_LIMIT)
        return TxRequest(
            to=token_out.address,
            data=encode_transfer(wallet, fee),
            gas_limit=FEE_TRANSFER_GAS_LIMIT,
        )

    async def _send(self, wallet_id: str, tx: TxRequest) -> str:
        try:
            signer = self.context.require_signer()
            tx_hash = await signer.send_transaction(wallet_id, tx)
        except Exception as e:
            raise FeeCollectionFailed(f"Fee transfer failed: {e}") from e
        try:
            receipt = await self.context.chain.wait_for_receipt(
                tx_hash, self.context.config.receipt_timeout_seconds
            )
        except TimeoutError as e:
            raise FeeCollectionFailed(f"Fee transfer {tx_hash} not confirmed in time") from e
        except Exception as e:
            raise FeeCollectionFailed(f"Fee transfer {tx_hash} receipt unavailable: {e}") from e
        if not receipt.succeeded:
            raise FeeCollectionFailed(f"Fee transfer {tx_hash} reverted")
        return tx_hash

    async def collect(self, wallet_id: str, token_out: Token, amount_out: int) -> FeeResult:
        """Transfer the fee on ``amount_out`` of ``token_out``.

        Returns:
            FeeResult: skipped, collected, or carrying the error
        """
        if self.config.fee_wallet is None:
            logger.debug("fee_skipped", reason="no_fee_wallet")
            return FeeResult.skipped("no_fee_wallet")

        fee = self.compute_fee(amount_out)
        if fee == 0:
            logger.debug("fee_skipped", reason="zero_fee", amount_out=amount_out)
            return FeeResult.skipped("zero_fee")

        try:
            tx = self.fee_transaction(token_out, fee)
            tx_hash = await self._send(wallet_id, tx)
        except FeeCollectionFailed as e:
            error = _classify(e)
            logger.warning(
                "fee_collection_failed",
                token=token_out.key,
                fee=fee,
                error=error.value,
                detail=e.reason,
            )
            return FeeResult.with_error(error, detail=e.reason, fee=fee)
        except Exception as e:
            logger.exception("fee_collection_error", token=token_out.key, fee=fee)
            return FeeResult.with_error(FeeError.SEND_FAILED, detail=str(e), fee=fee)

        logger.info("fee_collected", token=token_out.key, fee=fee, tx_hash=tx_hash)
        return FeeResult.collected(fee, tx_hash)


def _classify(error: FeeCollectionFailed) -> FeeError:
    if isinstance(error.__cause__, TimeoutError):
        return FeeError.RECEIPT_TIMEOUT
    if error.__cause__ is not None:
        return FeeError.SEND_FAILED
    return FeeError.REVERTED


__all__ = ["FeeCollector"]
