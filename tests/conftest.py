"""Pytest configuration and fixtures."""

import pytest

from swapper.engine import SwapEngine
from swapper.fees import FeeConfig
from tests.helpers import FEE_WALLET, MockChain, make_chain


@pytest.fixture
def chain() -> MockChain:
    """Fresh mock-backed chain context."""
    return make_chain()


@pytest.fixture
def engine(chain: MockChain) -> SwapEngine:
    """Engine over the mock chain with fee collection disabled."""
    return SwapEngine(chain.context)


@pytest.fixture
def fee_engine(chain: MockChain) -> SwapEngine:
    """Engine over the mock chain collecting the default 0.8% fee."""
    return SwapEngine(chain.context, FeeConfig(fee_wallet=FEE_WALLET))
