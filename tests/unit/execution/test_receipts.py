"""Tests for reading settlement out of receipts."""

import pytest

from swapper.errors import SwapReverted
from swapper.execution import TxReceipt, ensure_succeeded, settled_output
from swapper.execution.receipts import transferred_to, unwrapped_by
from tests.helpers import (
    PEPU,
    ROUTER,
    TOKEN_A,
    TOKEN_B,
    USER,
    WPEPU,
    WPEPU_TOKEN,
    A,
    B,
    make_request,
    transfer_log,
    withdrawal_log,
)

POOL = "0x" + "99" * 20


class TestEnsureSucceeded:
    def test_success_passes_through(self):
        receipt = TxReceipt(tx_hash="0x1", status=1)
        assert ensure_succeeded(receipt) is receipt

    def test_revert_without_logs(self):
        with pytest.raises(SwapReverted, match="slippage too high"):
            ensure_succeeded(TxReceipt(tx_hash="0x1", status=0))

    def test_revert_with_logs(self):
        receipt = TxReceipt(tx_hash="0x1", status=0, logs=(transfer_log(TOKEN_A, USER, POOL, 1),))
        with pytest.raises(SwapReverted, match="Possible reasons"):
            ensure_succeeded(receipt)


class TestSettledOutput:
    """Output parsing from Transfer and Withdrawal logs."""

    def test_erc20_output_from_transfer(self):
        receipt = TxReceipt(
            tx_hash="0x1",
            status=1,
            logs=(
                transfer_log(TOKEN_A, USER, POOL, 1000),
                transfer_log(TOKEN_B, POOL, USER, 1234),
            ),
        )
        request = make_request(A, B, amount_in=1000)

        assert settled_output(receipt, request, WPEPU_TOKEN, ROUTER, min_out=1) == 1234

    def test_transfers_to_others_are_ignored(self):
        receipt = TxReceipt(tx_hash="0x1", status=1, logs=(transfer_log(TOKEN_B, POOL, ROUTER, 50),))
        assert transferred_to(receipt, TOKEN_B, USER) == 0

    def test_native_output_from_withdrawal(self):
        receipt = TxReceipt(
            tx_hash="0x1",
            status=1,
            logs=(
                transfer_log(WPEPU, POOL, ROUTER, 777),
                withdrawal_log(WPEPU, 777),
            ),
        )
        request = make_request(A, PEPU, amount_in=10)

        assert settled_output(receipt, request, WPEPU_TOKEN, ROUTER, min_out=700) == 777

    def test_withdrawal_by_other_account_ignored(self):
        receipt = TxReceipt(tx_hash="0x1", status=1, logs=(withdrawal_log(WPEPU, 5, src=USER),))
        assert unwrapped_by(receipt, WPEPU, ROUTER) == 0

    def test_falls_back_to_min_out(self):
        receipt = TxReceipt(tx_hash="0x1", status=1)
        request = make_request(A, B, amount_in=10)

        assert settled_output(receipt, request, WPEPU_TOKEN, ROUTER, min_out=42) == 42
