"""Tests for the end-to-end swap flow in SwapEngine."""

import asyncio
from dataclasses import replace

import pytest

from swapper.engine import SwapEngine
from swapper.errors import ApprovalFailed, InsufficientBalance, NoRouteFound, SwapReverted
from swapper.fees import FeeError
from tests.helpers import (
    FEE_WALLET,
    ONE,
    PEPU,
    ROUTER,
    TOKEN_A,
    TOKEN_B,
    USER,
    WALLET_ID,
    WPEPU,
    A,
    B,
    fail_receipts,
    make_request,
    transfer_log,
    withdrawal_log,
)

POOL = "0x" + "99" * 20


def liquid_a_to_b(chain, rate: int = 2) -> None:
    chain.pools.add_pool(TOKEN_A, TOKEN_B, 3000)
    chain.quoter.set_rate(TOKEN_A, TOKEN_B, 3000, rate)
    chain.reader.set_balance(TOKEN_A, USER, 10 * ONE)
    chain.signer.swap_logs = [transfer_log(TOKEN_B, POOL, USER, rate * ONE)]


class TestReadOnly:
    """Routing and quoting through the engine."""

    @pytest.mark.asyncio
    async def test_quote_routes_then_quotes(self, chain, engine):
        liquid_a_to_b(chain)

        quote = await engine.quote(A, B, ONE)

        assert quote.amount_out == 2 * ONE
        assert quote.route.fees == (3000,)
        assert engine.min_out(quote) == 2 * ONE * 9950 // 10000

    @pytest.mark.asyncio
    async def test_no_route(self, engine):
        with pytest.raises(NoRouteFound):
            await engine.quote(A, B, ONE)

    def test_make_request_uses_chain_defaults(self, chain):
        config = replace(chain.context.config, deadline_seconds=90, default_slippage_bps=25)
        engine = SwapEngine(replace(chain.context, config=config))

        request = engine.make_request(A, B, ONE, USER, now=1_000)

        assert request.deadline == 1_090
        assert request.slippage_bps == 25
        assert engine.make_request(A, B, ONE, USER, slippage_bps=100, now=1_000).slippage_bps == 100


class TestExecuteSwap:
    """Happy paths."""

    @pytest.mark.asyncio
    async def test_erc20_swap_with_approval(self, chain, engine):
        liquid_a_to_b(chain)
        quote = await engine.quote(A, B, ONE)

        outcome = await engine.execute_swap(WALLET_ID, make_request(A, B, ONE), quote)

        assert chain.signer.sent_kinds() == ["approve", "swap"]
        assert outcome.approval_tx_hash is not None
        assert outcome.tx_hash != outcome.approval_tx_hash
        assert outcome.amount_out == 2 * ONE
        assert outcome.min_out == 2 * ONE * 9950 // 10000
        assert outcome.fee.skip_reason == "no_fee_wallet"

    @pytest.mark.asyncio
    async def test_existing_allowance_skips_approval(self, chain, engine):
        liquid_a_to_b(chain)
        chain.reader.set_allowance(TOKEN_A, USER, ROUTER, ONE)
        quote = await engine.quote(A, B, ONE)

        outcome = await engine.execute_swap(WALLET_ID, make_request(A, B, ONE), quote)

        assert chain.signer.sent_kinds() == ["swap"]
        assert outcome.approval_tx_hash is None

    @pytest.mark.asyncio
    async def test_native_in_swap(self, chain, engine):
        chain.pools.add_pool(WPEPU, TOKEN_A, 3000)
        chain.quoter.set_rate(WPEPU, TOKEN_A, 3000, 5)
        chain.reader.set_native_balance(USER, 2 * ONE)
        quote = await engine.quote(PEPU, A, ONE)

        outcome = await engine.execute_swap(WALLET_ID, make_request(PEPU, A, ONE), quote)

        (_wallet, kind, tx), = chain.signer.sent
        assert kind == "swap"
        assert tx.value == ONE
        assert outcome.amount_out == outcome.min_out

    @pytest.mark.asyncio
    async def test_native_out_fee_on_unwrapped_amount(self, chain, fee_engine):
        chain.pools.add_pool(TOKEN_A, WPEPU, 500)
        chain.quoter.set_rate(TOKEN_A, WPEPU, 500, 1)
        chain.reader.set_balance(TOKEN_A, USER, ONE)
        chain.reader.set_allowance(TOKEN_A, USER, ROUTER, ONE)
        chain.signer.swap_logs = [withdrawal_log(WPEPU, ONE)]
        quote = await fee_engine.quote(A, PEPU, ONE)

        outcome = await fee_engine.execute_swap(WALLET_ID, make_request(A, PEPU, ONE), quote)

        assert outcome.fee.is_collected
        _wallet, _kind, fee_tx = chain.signer.sent[-1]
        assert fee_tx.to == FEE_WALLET
        assert fee_tx.value == ONE * 80 // 10000


class TestFeeCollection:
    """Fee failures never fail a settled swap."""

    @pytest.mark.asyncio
    async def test_fee_collected_after_swap(self, chain, fee_engine):
        liquid_a_to_b(chain)
        quote = await fee_engine.quote(A, B, ONE)

        outcome = await fee_engine.execute_swap(WALLET_ID, make_request(A, B, ONE), quote)

        assert chain.signer.sent_kinds() == ["approve", "swap", "fee"]
        assert outcome.fee.is_collected
        assert outcome.fee.fee == 2 * ONE * 80 // 10000

    @pytest.mark.asyncio
    async def test_fee_network_error_still_succeeds(self, chain, fee_engine):
        """The swap hash is returned and the fee error recorded."""
        liquid_a_to_b(chain)
        chain.signer.fail_on["fee"] = ConnectionError("network error")
        quote = await fee_engine.quote(A, B, ONE)

        outcome = await fee_engine.execute_swap(WALLET_ID, make_request(A, B, ONE), quote)

        swap_hashes = [h for h, receipt in chain.reader.receipts.items() if receipt.logs]
        assert outcome.tx_hash in swap_hashes
        assert outcome.fee.is_error
        assert outcome.fee.error == FeeError.SEND_FAILED

    @pytest.mark.asyncio
    async def test_fee_receipt_poll_error_still_succeeds(self, chain, fee_engine):
        """The approval and swap receipts arrive; the fee receipt poll fails."""
        liquid_a_to_b(chain)
        fail_receipts(chain.reader, ConnectionError("receipt poll: network error"), after=2)
        quote = await fee_engine.quote(A, B, ONE)

        outcome = await fee_engine.execute_swap(WALLET_ID, make_request(A, B, ONE), quote)

        assert chain.signer.sent_kinds() == ["approve", "swap", "fee"]
        assert outcome.amount_out == 2 * ONE
        assert outcome.fee.is_error
        assert outcome.fee.error == FeeError.SEND_FAILED
        assert "network error" in outcome.fee.error_detail

    @pytest.mark.asyncio
    async def test_background_fee_receipt_poll_error_is_reported(self, chain, fee_engine):
        liquid_a_to_b(chain)
        fail_receipts(chain.reader, ConnectionError("receipt poll: network error"), after=2)
        quote = await fee_engine.quote(A, B, ONE)

        outcome = await fee_engine.execute_swap(
            WALLET_ID, make_request(A, B, ONE), quote, collect_fee_in_background=True
        )

        assert outcome.fee is None
        (result,) = await fee_engine.wait_for_fees()
        assert result.error == FeeError.SEND_FAILED

    @pytest.mark.asyncio
    async def test_background_fee(self, chain, fee_engine):
        liquid_a_to_b(chain)
        quote = await fee_engine.quote(A, B, ONE)

        outcome = await fee_engine.execute_swap(
            WALLET_ID, make_request(A, B, ONE), quote, collect_fee_in_background=True
        )

        assert outcome.fee is None
        results = await fee_engine.wait_for_fees()
        assert [r.is_collected for r in results] == [True]
        assert chain.signer.sent_kinds()[-1] == "fee"
        await asyncio.sleep(0)
        assert fee_engine.pending_fees == 0


class TestExecuteSwapFailures:
    """Failures before settlement abort the flow."""

    @pytest.mark.asyncio
    async def test_insufficient_token_balance(self, chain, engine):
        liquid_a_to_b(chain)
        chain.reader.set_balance(TOKEN_A, USER, ONE - 1)
        quote = await engine.quote(A, B, ONE)

        with pytest.raises(InsufficientBalance, match="Have: 0.999999999999999999"):
            await engine.execute_swap(WALLET_ID, make_request(A, B, ONE), quote)
        assert chain.signer.sent == []

    @pytest.mark.asyncio
    async def test_native_balance_must_cover_gas(self, chain, engine):
        chain.pools.add_pool(WPEPU, TOKEN_A, 3000)
        chain.quoter.set_rate(WPEPU, TOKEN_A, 3000, 5)
        chain.reader.set_native_balance(USER, ONE)
        quote = await engine.quote(PEPU, A, ONE)

        with pytest.raises(InsufficientBalance, match="including gas"):
            await engine.execute_swap(WALLET_ID, make_request(PEPU, A, ONE), quote)

    @pytest.mark.asyncio
    async def test_approval_failure_aborts(self, chain, engine):
        liquid_a_to_b(chain)
        chain.signer.revert_on.add("approve")
        quote = await engine.quote(A, B, ONE)

        with pytest.raises(ApprovalFailed):
            await engine.execute_swap(WALLET_ID, make_request(A, B, ONE), quote)
        assert chain.signer.sent_kinds() == ["approve"]

    @pytest.mark.asyncio
    async def test_reverted_swap_skips_fee(self, chain, fee_engine):
        liquid_a_to_b(chain)
        chain.signer.revert_on.add("swap")
        quote = await fee_engine.quote(A, B, ONE)

        with pytest.raises(SwapReverted):
            await fee_engine.execute_swap(WALLET_ID, make_request(A, B, ONE), quote)
        assert "fee" not in chain.signer.sent_kinds()

    @pytest.mark.asyncio
    async def test_swap_receipt_poll_error_is_typed(self, chain, fee_engine):
        liquid_a_to_b(chain)
        fail_receipts(chain.reader, ConnectionError("receipt poll: network error"), after=1)
        quote = await fee_engine.quote(A, B, ONE)

        with pytest.raises(SwapReverted, match="Could not confirm swap"):
            await fee_engine.execute_swap(WALLET_ID, make_request(A, B, ONE), quote)
        assert chain.signer.sent_kinds() == ["approve", "swap"]

    @pytest.mark.asyncio
    async def test_balance_read_error_is_typed(self, chain, engine, monkeypatch):
        liquid_a_to_b(chain)
        quote = await engine.quote(A, B, ONE)

        async def unreachable(token, owner):
            raise ConnectionError("rpc unreachable")

        monkeypatch.setattr(chain.reader, "balance_of", unreachable)

        with pytest.raises(InsufficientBalance, match="Could not verify AAA balance: rpc unreachable"):
            await engine.execute_swap(WALLET_ID, make_request(A, B, ONE), quote)
        assert chain.signer.sent == []

    @pytest.mark.asyncio
    async def test_allowance_read_error_is_typed(self, chain, engine, monkeypatch):
        liquid_a_to_b(chain)
        quote = await engine.quote(A, B, ONE)

        async def unreachable(token, owner, spender):
            raise ConnectionError("rpc unreachable")

        monkeypatch.setattr(chain.reader, "allowance", unreachable)

        with pytest.raises(ApprovalFailed, match="Could not read allowance"):
            await engine.execute_swap(WALLET_ID, make_request(A, B, ONE), quote)
        assert chain.signer.sent == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("message", "error", "reason"),
        [
            ("execution reverted: Too little received", SwapReverted, "Slippage"),
            ("execution reverted: LS", SwapReverted, "liquidity"),
            ("insufficient funds for gas * price + value", InsufficientBalance, "Insufficient"),
        ],
    )
    async def test_send_errors_are_classified(self, chain, engine, message, error, reason):
        liquid_a_to_b(chain)
        chain.reader.set_allowance(TOKEN_A, USER, ROUTER, ONE)
        chain.signer.fail_on["swap"] = RuntimeError(message)
        quote = await engine.quote(A, B, ONE)

        with pytest.raises(error, match=reason):
            await engine.execute_swap(WALLET_ID, make_request(A, B, ONE), quote)

    @pytest.mark.asyncio
    async def test_quote_for_other_amount_rejected(self, chain, engine):
        liquid_a_to_b(chain)
        quote = await engine.quote(A, B, ONE)

        with pytest.raises(ValueError, match="base units"):
            await engine.execute_swap(WALLET_ID, make_request(A, B, 2 * ONE), quote)

    @pytest.mark.asyncio
    async def test_quote_for_other_tokens_rejected(self, chain, engine):
        liquid_a_to_b(chain)
        quote = await engine.quote(A, B, ONE)

        with pytest.raises(ValueError, match="output token"):
            await engine.execute_swap(WALLET_ID, make_request(A, PEPU, ONE), quote)


class TestWalletSerialization:
    """Swaps for one wallet run one after another."""

    @pytest.mark.asyncio
    async def test_concurrent_swaps_share_one_approval(self, chain, engine):
        liquid_a_to_b(chain)
        quote = await engine.quote(A, B, ONE)
        request = make_request(A, B, ONE)

        first, second = await asyncio.gather(
            engine.execute_swap(WALLET_ID, request, quote),
            engine.execute_swap(WALLET_ID, request, quote),
        )

        assert chain.signer.sent_kinds() == ["approve", "swap", "swap"]
        assert first.approval_tx_hash is not None
        assert second.approval_tx_hash is None
