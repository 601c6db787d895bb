"""Pool discovery: factory lookups and liquidity checks."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

import structlog

from swapper.constants import FEE_TIERS
from swapper.models import Pool, normalize_address, sort_addresses
from swapper.models.types import ZERO_ADDRESS

if TYPE_CHECKING:
    from web3 import AsyncWeb3

    from swapper.context import ChainContext

logger = structlog.get_logger()


class PoolSource(Protocol):
    """Raw factory and pool reads. Implementations may raise on RPC failure."""

    async def get_pool(self, token0: str, token1: str, fee: int) -> str:
        """Return the pool address from the factory (zero address if none)."""
        ...

    async def get_liquidity(self, pool_address: str) -> int:
        """Return the pool's current in-range liquidity."""
        ...


@dataclass
class MockPoolSource:
    """In-memory factory for tests.

    Pools are stored under their sorted token pair. Addresses listed in
    ``failing`` raise on ``liquidity()``, like a misbehaving pool contract.
    """

    pools: dict[tuple[str, str, int], str] = field(default_factory=dict)
    liquidity: dict[str, int] = field(default_factory=dict)
    failing: set[str] = field(default_factory=set)
    calls: list[tuple[str, tuple[object, ...]]] = field(default_factory=list)

    def add_pool(
        self,
        token_a: str,
        token_b: str,
        fee: int,
        liquidity: int = 10**18,
        address: str | None = None,
    ) -> str:
        """Register a pool and return its address."""
        token0, token1 = (normalize_address(t) for t in sort_addresses(token_a, token_b))
        if address is None:
            address = "0x" + f"{len(self.pools) + 1:x}".rjust(40, "0")
        address = normalize_address(address)
        self.pools[(token0, token1, fee)] = address
        self.liquidity[address] = liquidity
        return address

    async def get_pool(self, token0: str, token1: str, fee: int) -> str:
        self.calls.append(("get_pool", (token0, token1, fee)))
        key = (normalize_address(token0), normalize_address(token1), fee)
        return self.pools.get(key, ZERO_ADDRESS)

    async def get_liquidity(self, pool_address: str) -> int:
        address = normalize_address(pool_address)
        self.calls.append(("liquidity", (address,)))
        if address in self.failing:
            raise RuntimeError(f"liquidity() reverted for {address}")
        return self.liquidity.get(address, 0)


FACTORY_ABI = [
    {
        "name": "getPool",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "tokenA", "type": "address"},
            {"name": "tokenB", "type": "address"},
            {"name": "fee", "type": "uint24"},
        ],
        "outputs": [{"name": "pool", "type": "address"}],
    },
]

POOL_ABI = [
    {
        "name": "liquidity",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint128"}],
    },
]


class Web3PoolSource:
    """Factory and pool reads through a shared async web3 client."""

    def __init__(self, w3: AsyncWeb3, factory_address: str):
        self.w3 = w3
        self.factory = w3.eth.contract(
            address=w3.to_checksum_address(factory_address),
            abi=FACTORY_ABI,
        )

    async def get_pool(self, token0: str, token1: str, fee: int) -> str:
        address = await self.factory.functions.getPool(
            self.w3.to_checksum_address(token0),
            self.w3.to_checksum_address(token1),
            fee,
        ).call()
        return str(address)

    async def get_liquidity(self, pool_address: str) -> int:
        pool = self.w3.eth.contract(
            address=self.w3.to_checksum_address(pool_address),
            abi=POOL_ABI,
        )
        return int(await pool.functions.liquidity().call())


class PoolLocator:
    """Finds pools for a token pair and decides whether they are usable.

    Lookups never raise: a failed factory call reads as "no pool" and a failed
    liquidity call as "no liquidity" (fail-closed).
    """

    def __init__(self, context: ChainContext):
        self.source = context.pools

    async def get_pool(self, token_a: str, token_b: str, fee: int) -> str | None:
        """Return the pool address for the pair at ``fee``, or None.

        The factory indexes pools by sorted (token0, token1); unsorted input
        could produce a false negative, so addresses are sorted first.
        """
        token0, token1 = sort_addresses(token_a, token_b)
        try:
            address = await self.source.get_pool(token0, token1, fee)
        except Exception as e:
            logger.warning(
                "factory_get_pool_failed",
                token0=token0,
                token1=token1,
                fee=fee,
                error=str(e),
            )
            return None

        if not address or normalize_address(address) == ZERO_ADDRESS:
            return None
        return address

    async def has_liquidity(self, pool_address: str) -> bool:
        """True if the pool reports nonzero liquidity; any failure is False."""
        try:
            liquidity = await self.source.get_liquidity(pool_address)
        except Exception as e:
            logger.debug("pool_liquidity_failed", pool=pool_address, error=str(e))
            return False
        return liquidity > 0

    async def check_pool(self, token_a: str, token_b: str, fee: int) -> Pool:
        """Look up the pool and its liquidity in one go."""
        address = await self.get_pool(token_a, token_b, fee)
        liquid = address is not None and await self.has_liquidity(address)
        return Pool.for_pair(token_a, token_b, fee, address, liquid)

    async def check_tiers(self, token_a: str, token_b: str) -> list[Pool]:
        """Check the pair at every fee tier concurrently, in tier order."""
        return list(
            await asyncio.gather(*(self.check_pool(token_a, token_b, fee) for fee in FEE_TIERS))
        )

    async def first_liquid_tier(self, token_a: str, token_b: str) -> int | None:
        """Lowest fee tier with a liquid pool for the pair, or None."""
        for pool in await self.check_tiers(token_a, token_b):
            if pool.usable:
                return pool.fee
        return None


__all__ = [
    "PoolSource",
    "MockPoolSource",
    "Web3PoolSource",
    "PoolLocator",
    "FACTORY_ABI",
    "POOL_ABI",
]
