"""Multihop path encoding for QuoterV2.quoteExactInput and SwapRouter02.exactInput.

Layout: ``token0 (20 bytes) | fee0 (3 bytes, big-endian) | token1 | fee1 | ... | tokenN``.
Any deviation makes the router mis-route or revert.
"""

from __future__ import annotations

from collections.abc import Sequence

from swapper.constants import MAX_UINT24
from swapper.models.types import is_valid_address, normalize_address

ADDRESS_SIZE = 20
FEE_SIZE = 3
HOP_SIZE = ADDRESS_SIZE + FEE_SIZE


def encode_path(path: Sequence[str], fees: Sequence[int]) -> bytes:
    """Encode token addresses and hop fees into the router's path bytes.

    Args:
        path: Token addresses, input first
        fees: Fee tier of each hop, ``len(path) - 1`` entries

    Returns:
        Packed path bytes

    Raises:
        ValueError: On length mismatch, invalid addresses or fees outside uint24
    """
    if len(path) != len(fees) + 1:
        raise ValueError("Invalid path/fee lengths")
    if not fees:
        raise ValueError("Path needs at least one hop")

    encoded = bytearray()
    for token, fee in zip(path[:-1], fees, strict=True):
        encoded += _address_bytes(token)
        if not 0 <= fee <= MAX_UINT24:
            raise ValueError(f"Fee does not fit in uint24: {fee}")
        encoded += fee.to_bytes(FEE_SIZE, "big")
    encoded += _address_bytes(path[-1])
    return bytes(encoded)


def encode_path_hex(path: Sequence[str], fees: Sequence[int]) -> str:
    """Encode a path as ``0x``-prefixed lowercase hex."""
    return "0x" + encode_path(path, fees).hex()


def decode_path(data: bytes | str) -> tuple[list[str], list[int]]:
    """Decode path bytes back into (addresses, fees).

    Addresses come back lowercase with ``0x`` prefix.

    Raises:
        ValueError: If the length is not ``20 + 23 * hops`` with at least one hop
    """
    raw = bytes.fromhex(data[2:] if data.startswith("0x") else data) if isinstance(data, str) else data

    if len(raw) < ADDRESS_SIZE + HOP_SIZE or (len(raw) - ADDRESS_SIZE) % HOP_SIZE:
        raise ValueError(f"Invalid path length: {len(raw)} bytes")

    addresses: list[str] = []
    fees: list[int] = []
    offset = 0
    while offset + ADDRESS_SIZE < len(raw):
        addresses.append("0x" + raw[offset : offset + ADDRESS_SIZE].hex())
        offset += ADDRESS_SIZE
        fees.append(int.from_bytes(raw[offset : offset + FEE_SIZE], "big"))
        offset += FEE_SIZE
    addresses.append("0x" + raw[offset:].hex())
    return addresses, fees


def _address_bytes(address: str) -> bytes:
    normalized = normalize_address(address)
    if not is_valid_address(normalized):
        raise ValueError(f"Invalid address in path: {address}")
    return bytes.fromhex(normalized[2:])


__all__ = ["encode_path", "encode_path_hex", "decode_path"]
