"""ERC-20 calldata, ABI and event helpers."""

from __future__ import annotations

from eth_abi import decode, encode  # type: ignore[attr-defined]
from eth_utils import event_signature_to_log_topic, function_signature_to_4byte_selector

from swapper.models.types import normalize_address

APPROVE_SELECTOR = function_signature_to_4byte_selector("approve(address,uint256)")
TRANSFER_SELECTOR = function_signature_to_4byte_selector("transfer(address,uint256)")

# Transfer(address indexed from, address indexed to, uint256 value)
TRANSFER_TOPIC = event_signature_to_log_topic("Transfer(address,address,uint256)")
# WETH9 Withdrawal(address indexed src, uint256 wad)
WITHDRAWAL_TOPIC = event_signature_to_log_topic("Withdrawal(address,uint256)")

ERC20_ABI = [
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "allowance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "transfer",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]


def encode_approve(spender: str, amount: int) -> bytes:
    """Encode ERC20.approve(spender, amount)."""
    return APPROVE_SELECTOR + encode(
        ["address", "uint256"], [normalize_address(spender, validate=True), amount]
    )


def encode_transfer(to: str, amount: int) -> bytes:
    """Encode ERC20.transfer(to, amount)."""
    return TRANSFER_SELECTOR + encode(
        ["address", "uint256"], [normalize_address(to, validate=True), amount]
    )


def decode_address_args(data: bytes) -> tuple[str, int]:
    """Decode the (address, uint256) arguments of approve/transfer calldata."""
    address, amount = decode(["address", "uint256"], data[4:])
    return normalize_address(address), int(amount)


def address_topic(address: str) -> bytes:
    """Left-pad an address to a 32-byte indexed-event topic."""
    return bytes(12) + bytes.fromhex(normalize_address(address, validate=True)[2:])


__all__ = [
    "APPROVE_SELECTOR",
    "TRANSFER_SELECTOR",
    "TRANSFER_TOPIC",
    "WITHDRAWAL_TOPIC",
    "ERC20_ABI",
    "encode_approve",
    "encode_transfer",
    "decode_address_args",
    "address_topic",
]
