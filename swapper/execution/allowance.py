"""ERC-20 allowance checks and approvals for the swap router."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from swapper.constants import APPROVE_GAS_LIMIT
from swapper.errors import ApprovalFailed
from swapper.models import UINT256_MAX, Token

from .chain import TxRequest
from .erc20 import encode_approve

if TYPE_CHECKING:
    from swapper.context import ChainContext

logger = structlog.get_logger()


class AllowanceManager:
    """Checks and raises the router's spending allowance.

    Allowance is on-chain state that anyone can change, so it is read fresh
    every time and never cached.
    """

    def __init__(self, context: ChainContext):
        self.context = context

    @property
    def spender(self) -> str:
        return self.context.router_address

    async def needs_approval(self, token: Token, owner: str, amount_in: int) -> bool:
        """True iff the router's allowance is below ``amount_in``.

        ``amount_in`` is the full pre-fee amount the router will pull.

        Raises:
            ApprovalFailed: If the allowance cannot be read
        """
        if token.is_native:
            return False
        try:
            allowance = await self.context.chain.allowance(token.address, owner, self.spender)
        except Exception as e:
            logger.warning("allowance_read_failed", token=token.key, owner=owner, error=str(e))
            raise ApprovalFailed(f"Could not read allowance: {e}") from e
        return allowance < amount_in

    async def approve(self, wallet_id: str, token: Token) -> str:
        """Approve the router for the maximum uint256 and wait for the receipt.

        Returns:
            Approval transaction hash

        Raises:
            ApprovalFailed: On native tokens, send errors, timeouts or reverts
        """
        if token.is_native:
            raise ApprovalFailed("Native token does not need approval")

        signer = self.context.require_signer()
        tx = TxRequest(
            to=token.address,
            data=encode_approve(self.spender, UINT256_MAX),
            gas_limit=APPROVE_GAS_LIMIT,
        )
        try:
            tx_hash = await signer.send_transaction(wallet_id, tx)
            receipt = await self.context.chain.wait_for_receipt(
                tx_hash, self.context.config.receipt_timeout_seconds
            )
        except Exception as e:
            logger.warning("approval_failed", token=token.key, error=str(e))
            raise ApprovalFailed(f"Approval failed: {e}") from e

        if not receipt.succeeded:
            logger.warning("approval_reverted", token=token.key, tx_hash=tx_hash)
            raise ApprovalFailed("Approval transaction reverted")

        logger.info("approval_confirmed", token=token.key, tx_hash=tx_hash)
        return tx_hash

    async def ensure_allowance(
        self, wallet_id: str, token: Token, owner: str, amount_in: int
    ) -> str | None:
        """Approve only if needed; returns the approval hash or None."""
        if not await self.needs_approval(token, owner, amount_in):
            return None
        return await self.approve(wallet_id, token)


__all__ = ["AllowanceManager"]
