"""Swap engine: routing, quoting and the full execution flow for one chain.

execute_swap runs, per wallet and strictly in order::

    balance check -> allowance (approve if needed) -> build -> sign/send
        -> receipt -> settled output -> fee transfer

Any failure before the swap is mined aborts the flow with a SwapError. Fee
collection failures never fail a settled swap; they are reported in the
returned FeeResult.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from swapper.constants import NATIVE_SWAP_GAS_RESERVE
from swapper.context import ChainContext
from swapper.errors import InsufficientBalance, SwapError, SwapReverted, classify_send_error
from swapper.execution import (
    AllowanceManager,
    ExecutionBuilder,
    SwapTransaction,
    compute_min_out,
    ensure_succeeded,
    settled_output,
)
from swapper.fees import DEFAULT_FEE_CONFIG, FeeCollector, FeeConfig, FeeResult
from swapper.models import Quote, Route, SwapRequest, Token
from swapper.routing import QuoteSession, RouteFinder, SwapQuoter

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapOutcome:
    """Result of a settled swap.

    Attributes:
        tx_hash: Swap transaction hash
        amount_out: Output actually delivered (min_out if the receipt had no
            matching transfer log)
        min_out: Slippage floor the swap was sent with
        approval_tx_hash: Approval sent before the swap, if any
        fee: Fee collection result, None while it runs in the background
    """

    tx_hash: str
    amount_out: int
    min_out: int
    approval_tx_hash: str | None = None
    fee: FeeResult | None = None


class SwapEngine:
    """Entry point tying the routing, quoting, execution and fee components."""

    def __init__(self, context: ChainContext, fee_config: FeeConfig = DEFAULT_FEE_CONFIG):
        self.context = context
        self.route_finder = RouteFinder(context)
        self.quoter = SwapQuoter(context)
        self.allowances = AllowanceManager(context)
        self.builder = ExecutionBuilder(context, locator=self.route_finder.locator)
        self.fees = FeeCollector(context, fee_config)
        self._wallet_locks: dict[str, asyncio.Lock] = {}
        self._fee_tasks: set[asyncio.Task[FeeResult]] = set()

    # Read-only operations

    async def find_route(self, token_in: Token, token_out: Token) -> Route:
        return await self.route_finder.find_route(token_in, token_out)

    async def quote(self, token_in: Token, token_out: Token, amount_in: int) -> Quote:
        """Find a route and quote ``amount_in`` base units along it.

        Raises:
            NoRouteFound: If no liquid route exists
            QuoteFailed: If the simulation produced no output
        """
        route = await self.find_route(token_in, token_out)
        return await self.quoter.quote(route, amount_in)

    def quote_session(self) -> QuoteSession:
        """A debounced quote pipeline for interactive input."""
        return QuoteSession(self.quote, debounce_seconds=self.context.config.quote_debounce_seconds)

    def min_out(self, quote: Quote, slippage_bps: int | None = None) -> int:
        slippage = self.context.config.default_slippage_bps if slippage_bps is None else slippage_bps
        return compute_min_out(quote.amount_out, slippage)

    def make_request(
        self,
        token_in: Token,
        token_out: Token,
        amount_in: int,
        recipient: str,
        slippage_bps: int | None = None,
        now: int | None = None,
    ) -> SwapRequest:
        """Build a SwapRequest with this chain's slippage and deadline defaults."""
        config = self.context.config
        return SwapRequest.create(
            token_in,
            token_out,
            amount_in,
            recipient,
            config.default_slippage_bps if slippage_bps is None else slippage_bps,
            now=now,
            deadline_seconds=config.deadline_seconds,
        )

    async def needs_approval(self, token: Token, owner: str, amount_in: int) -> bool:
        return await self.allowances.needs_approval(token, owner, amount_in)

    async def check_balance(self, request: SwapRequest) -> None:
        """Raise InsufficientBalance unless the owner can fund the swap.

        A native input must also leave room for gas on the batched call.
        """
        token = request.token_in
        owner = request.recipient
        chain = self.context.chain

        try:
            if token.is_native:
                balance = await chain.native_balance(owner)
                gas_reserve = NATIVE_SWAP_GAS_RESERVE * await chain.gas_price()
            else:
                balance = await chain.balance_of(token.address, owner)
                gas_reserve = 0
        except Exception as e:
            logger.warning("balance_check_failed", token=token.key, owner=owner, error=str(e))
            raise InsufficientBalance(
                f"Could not verify {token.symbol or token.address} balance: {e}"
            ) from e

        if token.is_native:
            required = request.amount_in + gas_reserve
            if balance < required:
                raise InsufficientBalance(
                    f"Insufficient {token.symbol or 'native'} balance. "
                    f"Have: {token.format_amount(balance)}, "
                    f"Need: {token.format_amount(required)} (including gas)"
                )
            return

        if balance < request.amount_in:
            raise InsufficientBalance(
                f"Insufficient {token.symbol or token.address} balance. "
                f"Have: {token.format_amount(balance)}, "
                f"Need: {token.format_amount(request.amount_in)}"
            )

    # Execution

    def _lock_for(self, wallet_id: str) -> asyncio.Lock:
        lock = self._wallet_locks.get(wallet_id)
        if lock is None:
            lock = self._wallet_locks[wallet_id] = asyncio.Lock()
        return lock

    def _check_quote(self, request: SwapRequest, quote: Quote) -> None:
        wrapped = self.context.wrapped_native
        if quote.amount_in != request.amount_in:
            raise ValueError(
                f"Quote is for {quote.amount_in} base units, request is for {request.amount_in}"
            )
        if quote.route.token_in.key != request.token_in.for_pools(wrapped).key:
            raise ValueError("Quote input token does not match the request")
        if quote.route.token_out.key != request.token_out.for_pools(wrapped).key:
            raise ValueError("Quote output token does not match the request")

    async def _send_swap(self, wallet_id: str, swap: SwapTransaction) -> str:
        signer = self.context.require_signer()
        try:
            return await signer.send_transaction(wallet_id, swap.tx)
        except SwapError:
            raise
        except Exception as e:
            error = classify_send_error(str(e))
            logger.warning("swap_send_failed", error=str(e), reason=error.reason)
            raise error from e

    async def execute_swap(
        self,
        wallet_id: str,
        request: SwapRequest,
        quote: Quote,
        collect_fee_in_background: bool = False,
    ) -> SwapOutcome:
        """Execute a quoted swap for ``wallet_id``.

        Args:
            wallet_id: Identifier the Signer resolves to a key
            request: The swap to execute; ``recipient`` is the owning wallet
            quote: Quote obtained for this request's tokens and amount
            collect_fee_in_background: Schedule the fee transfer instead of
                awaiting it; the outcome's ``fee`` is then None

        Raises:
            ValueError: If the quote does not match the request
            InsufficientBalance: If the wallet cannot fund the swap
            ApprovalFailed: If a needed approval fails
            NoRouteFound: If a direct pool lost its liquidity
            SwapReverted: If the swap fails to send, reverts or times out
        """
        self._check_quote(request, quote)

        async with self._lock_for(wallet_id):
            log = logger.bind(
                wallet_id=wallet_id,
                token_in=request.token_in.key,
                token_out=request.token_out.key,
                amount_in=request.amount_in,
            )
            await self.check_balance(request)

            approval_tx_hash = await self.allowances.ensure_allowance(
                wallet_id, request.token_in, request.recipient, request.amount_in
            )

            swap = await self.builder.build(quote.route, quote, request)
            tx_hash = await self._send_swap(wallet_id, swap)
            log.info("swap_sent", tx_hash=tx_hash, calls=swap.call_names, min_out=swap.min_out)

            try:
                receipt = await self.context.chain.wait_for_receipt(
                    tx_hash, self.context.config.receipt_timeout_seconds
                )
            except TimeoutError as e:
                raise SwapReverted(f"Swap {tx_hash} was not confirmed in time") from e
            except Exception as e:
                log.warning("swap_receipt_failed", tx_hash=tx_hash, error=str(e))
                raise SwapReverted(f"Could not confirm swap {tx_hash}: {e}") from e
            ensure_succeeded(receipt)

            amount_out = settled_output(
                receipt,
                request,
                self.context.wrapped_native,
                self.context.router_address,
                swap.min_out,
            )
            log.info("swap_settled", tx_hash=tx_hash, amount_out=amount_out)

            fee: FeeResult | None = None
            if not collect_fee_in_background:
                fee = await self.fees.collect(wallet_id, request.token_out, amount_out)

        if collect_fee_in_background:
            self._schedule_fee(wallet_id, request.token_out, amount_out)

        return SwapOutcome(
            tx_hash=tx_hash,
            amount_out=amount_out,
            min_out=swap.min_out,
            approval_tx_hash=approval_tx_hash,
            fee=fee,
        )

    def _schedule_fee(self, wallet_id: str, token_out: Token, amount_out: int) -> None:
        async def run() -> FeeResult:
            async with self._lock_for(wallet_id):
                return await self.fees.collect(wallet_id, token_out, amount_out)

        task = asyncio.create_task(run())
        self._fee_tasks.add(task)
        task.add_done_callback(self._fee_tasks.discard)

    @property
    def pending_fees(self) -> int:
        return len(self._fee_tasks)

    async def wait_for_fees(self) -> list[FeeResult]:
        """Wait for every background fee transfer scheduled so far."""
        if not self._fee_tasks:
            return []
        return list(await asyncio.gather(*self._fee_tasks))


_default_engine: SwapEngine | None = None


def _create_default_engine() -> SwapEngine:
    """Create a read-only engine from ``SWAPPER_*`` environment variables."""
    from swapper.config import ChainConfig

    config = ChainConfig.from_env()
    logger.info("engine_configured", chain_id=config.chain_id, rpc_url=config.rpc_url[:50])
    return SwapEngine(ChainContext.connect(config), FeeConfig.from_env())


def get_default_engine() -> SwapEngine:
    """Return the process-wide engine, creating it on first use."""
    global _default_engine
    if _default_engine is None:
        _default_engine = _create_default_engine()
    return _default_engine


__all__ = ["SwapEngine", "SwapOutcome", "get_default_engine"]
