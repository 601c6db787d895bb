"""Tests for SwapQuoter and best-tier selection."""

import pytest

from swapper.errors import QuoteFailed
from swapper.routing import SwapQuoter, TierQuote, best_tier
from tests.helpers import ONE, TOKEN_A, TOKEN_B, WPEPU, WPEPU_TOKEN, A, B, direct_route, two_hop_route


class TestBestTier:
    """Deterministic max over per-tier results."""

    def test_picks_highest_output(self):
        probes = [TierQuote(100, 5), TierQuote(500, 9), TierQuote(3000, 7), TierQuote(10000, None)]
        assert best_tier(probes) == TierQuote(500, 9)

    def test_tie_goes_to_earliest_tier(self):
        probes = [TierQuote(100, None), TierQuote(500, 8), TierQuote(3000, 8)]
        assert best_tier(probes).fee == 500

    def test_all_reverted(self):
        assert best_tier([TierQuote(fee, None) for fee in (100, 500)]) is None

    def test_zero_output_is_kept(self):
        assert best_tier([TierQuote(100, 0)]) == TierQuote(100, 0)


class TestDirectQuotes:
    """Direct quotes probe every tier and keep the best price."""

    @pytest.mark.asyncio
    async def test_max_over_tiers(self, chain):
        chain.quoter.set_rate(TOKEN_A, TOKEN_B, 500, 2)
        chain.quoter.set_rate(TOKEN_A, TOKEN_B, 3000, 3)
        chain.quoter.set_rate(TOKEN_A, TOKEN_B, 10000, 1)

        quote = await SwapQuoter(chain.context).quote(direct_route(A, B, fee=500), ONE)

        assert quote.amount_out == 3 * ONE
        assert quote.fee_tier == 3000
        assert quote.amount_in == ONE
        assert quote.is_direct

    @pytest.mark.asyncio
    async def test_all_tiers_probed_regardless_of_route_fee(self, chain):
        chain.quoter.set_rate(TOKEN_A, TOKEN_B, 100, 1)

        await SwapQuoter(chain.context).quote(direct_route(A, B, fee=100), 1000)

        probed = sorted(key.fee for kind, key, _amount in chain.quoter.calls if kind == "exact_input_single")
        assert probed == [100, 500, 3000, 10000]

    @pytest.mark.asyncio
    async def test_no_tier_quotes(self, chain):
        with pytest.raises(QuoteFailed, match="No liquidity found"):
            await SwapQuoter(chain.context).quote(direct_route(A, B), ONE)

    @pytest.mark.asyncio
    async def test_zero_best_output_fails(self, chain):
        chain.quoter.set_rate(TOKEN_A, TOKEN_B, 500, 0)

        with pytest.raises(QuoteFailed):
            await SwapQuoter(chain.context).quote(direct_route(A, B), ONE)

    @pytest.mark.asyncio
    async def test_non_positive_amount_rejected(self, chain):
        with pytest.raises(ValueError):
            await SwapQuoter(chain.context).quote(direct_route(A, B), 0)


class TestTwoHopQuotes:
    """Two-hop quotes use the fixed path fees."""

    @pytest.mark.asyncio
    async def test_quotes_fixed_path(self, chain):
        chain.quoter.set_path_rate([TOKEN_A, WPEPU, TOKEN_B], [500, 3000], 4, 5)
        route = two_hop_route(A, WPEPU_TOKEN, B, (500, 3000))

        quote = await SwapQuoter(chain.context).quote(route, 1000)

        assert quote.amount_out == 800
        assert quote.fee_tier is None
        assert [kind for kind, _key, _amount in chain.quoter.calls] == ["exact_input"]

    @pytest.mark.asyncio
    async def test_other_fee_pairs_not_tried(self, chain):
        chain.quoter.set_path_rate([TOKEN_A, WPEPU, TOKEN_B], [100, 100], 10)
        route = two_hop_route(A, WPEPU_TOKEN, B, (500, 3000))

        with pytest.raises(QuoteFailed, match="multihop"):
            await SwapQuoter(chain.context).quote(route, 1000)
