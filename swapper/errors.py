"""Swap error classes.

Route, quote, approval, balance and swap errors abort a swap and reach the
caller. Fee collection errors never do; see ``swapper.fees``.
"""


class SwapError(Exception):
    """Base error for swap operations."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class NoRouteFound(SwapError):
    """No liquid pool across any fee tier or hop."""

    def __init__(self, reason: str = "No route found between these tokens"):
        super().__init__(reason)


class QuoteFailed(SwapError):
    """Every simulate call for the route reverted."""

    pass


class ApprovalFailed(SwapError):
    """The router allowance could not be raised."""

    pass


class InsufficientBalance(SwapError):
    """Client-side balance pre-check failed (amount or gas)."""

    pass


class SwapReverted(SwapError):
    """The swap failed on chain (slippage bound, deadline, liquidity...)."""

    pass


class FeeCollectionFailed(SwapError):
    """The post-swap fee transfer failed. Never surfaced as a swap failure."""

    pass


def classify_send_error(message: str) -> SwapError:
    """Map a signer or node error message onto a typed swap failure.

    Args:
        message: Error text returned by the signer or the node

    Returns:
        An InsufficientBalance or SwapReverted with a human-readable reason
    """
    text = message.lower()

    if "revert" in text or "call_exception" in text:
        if "slippage" in text or "too little received" in text or "stf" in text:
            return SwapReverted(
                "Slippage tolerance exceeded. The price moved too much. "
                "Try again or increase slippage tolerance."
            )
        if "liquidity" in text or text.endswith(": ls"):
            return SwapReverted(
                "Insufficient liquidity in the pool. "
                "Try a smaller amount or a different token pair."
            )
        if "allowance" in text:
            return SwapReverted("Insufficient token allowance. Please approve the token first.")
        if "transaction too old" in text or "deadline" in text:
            return SwapReverted("Swap deadline passed before the transaction was mined.")
        if "insufficient" in text or "balance" in text:
            return InsufficientBalance("Insufficient balance for swap.")
        return SwapReverted(
            "Swap transaction reverted. Possible reasons: insufficient liquidity, "
            "slippage exceeded, or insufficient balance."
        )

    if "insufficient funds" in text:
        return InsufficientBalance(f"Insufficient balance: {message}")
    if "allowance" in text:
        return SwapReverted("Insufficient token allowance. Please approve the token first.")
    return SwapReverted(message or "Swap failed")


__all__ = [
    "SwapError",
    "NoRouteFound",
    "QuoteFailed",
    "ApprovalFailed",
    "InsufficientBalance",
    "SwapReverted",
    "FeeCollectionFailed",
    "classify_send_error",
]
