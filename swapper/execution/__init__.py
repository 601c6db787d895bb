"""Swap execution: allowances, transaction building, signing and settlement."""

from swapper.execution.allowance import AllowanceManager
from swapper.execution.builder import (
    ExecutionBuilder,
    SwapTransaction,
    compute_deadline,
    compute_min_out,
)
from swapper.execution.chain import (
    ChainReader,
    LogEntry,
    MockChainReader,
    TxReceipt,
    TxRequest,
    Web3ChainReader,
)
from swapper.execution.receipts import ensure_succeeded, settled_output
from swapper.execution.signer import CorrelatedSigner, MockSigner, Signer, SigningRequest

__all__ = [
    "AllowanceManager",
    "ExecutionBuilder",
    "SwapTransaction",
    "compute_deadline",
    "compute_min_out",
    "ChainReader",
    "LogEntry",
    "MockChainReader",
    "TxReceipt",
    "TxRequest",
    "Web3ChainReader",
    "ensure_succeeded",
    "settled_output",
    "CorrelatedSigner",
    "MockSigner",
    "Signer",
    "SigningRequest",
]
