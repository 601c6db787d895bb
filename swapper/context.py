"""Explicit client context shared by every engine component.

There is no module-global provider: components receive a ChainContext and use
the clients it carries.
"""

from __future__ import annotations

from dataclasses import dataclass

from web3 import AsyncWeb3

from swapper.amm.uniswap_v3.pools import PoolSource, Web3PoolSource
from swapper.amm.uniswap_v3.quoter import UniswapV3Quoter, Web3UniswapV3Quoter
from swapper.config import ChainConfig
from swapper.execution.chain import ChainReader, Web3ChainReader
from swapper.execution.signer import Signer
from swapper.models import Token


@dataclass(frozen=True)
class ChainContext:
    """Configuration plus the chain clients for one deployment.

    Attributes:
        config: Chain and contract configuration
        pools: Factory and pool reads
        quoter: Simulate calls against QuoterV2
        chain: Allowance, balance, gas price and receipt reads
        signer: External collaborator that signs and broadcasts
    """

    config: ChainConfig
    pools: PoolSource
    quoter: UniswapV3Quoter
    chain: ChainReader
    signer: Signer | None = None

    @classmethod
    def connect(cls, config: ChainConfig, signer: Signer | None = None) -> ChainContext:
        """Build a context whose clients share one async web3 connection."""
        w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(config.rpc_url))
        return cls(
            config=config,
            pools=Web3PoolSource(w3, config.factory_address),
            quoter=Web3UniswapV3Quoter(w3, config.quoter_address),
            chain=Web3ChainReader(w3),
            signer=signer,
        )

    @property
    def native(self) -> Token:
        return self.config.native_token

    @property
    def wrapped_native(self) -> Token:
        return self.config.wrapped_native

    @property
    def router_address(self) -> str:
        return self.config.router_address

    def require_signer(self) -> Signer:
        if self.signer is None:
            raise RuntimeError("This operation needs a Signer; the context is read-only")
        return self.signer


__all__ = ["ChainContext"]
