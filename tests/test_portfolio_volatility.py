"""
Tests for volatility classification.

Tests cover:
- Coefficient of variation tiers
- 30 day lookback filtering
- Liquidity and demand enrichment
- Summary counts independent of list truncation
- Sparkline downsampling
"""

import pytest

from cardvault.services.portfolio.constants import VolatilityClass
from cardvault.services.portfolio.holdings import project_holdings
from cardvault.services.portfolio.inputs import LiquidityObservation, PriceObservation
from cardvault.services.portfolio.volatility import (
    classify_volatility,
    coefficient_of_variation,
    compute_volatility,
    downsample,
)

from conftest import TODAY, make_entry, price_series


@pytest.fixture
def entries():
    return [
        make_entry("1", "stable", usd=9.9),
        make_entry("2", "risky", usd=3.2),
    ]


@pytest.fixture
def snapshots():
    return {
        "stable": price_series((10, 10.0), (5, 10.1), (0, 9.9)),
        "risky": [
            PriceObservation(as_of_date=s.as_of_date, usd=s.usd, demand_score=score)
            for s, score in zip(price_series((10, 5.0), (5, 7.5), (0, 3.2)), (0.2, 0.4, 0.9))
        ],
    }


class TestClassification:
    @pytest.mark.parametrize(
        "score,expected",
        [
            (0.0, VolatilityClass.STABLE),
            (0.0499, VolatilityClass.STABLE),
            (0.05, VolatilityClass.WATCH),
            (0.1499, VolatilityClass.WATCH),
            (0.15, VolatilityClass.SPECULATIVE),
        ],
    )
    def test_thresholds(self, score, expected):
        assert classify_volatility(score) is expected

    def test_coefficient_of_variation_uses_sample_deviation(self):
        assert coefficient_of_variation([10.0, 11.0, 12.0]) == pytest.approx(1 / 11)

    def test_coefficient_of_variation_needs_two_points(self):
        assert coefficient_of_variation([10.0]) is None

    def test_coefficient_of_variation_needs_positive_mean(self):
        assert coefficient_of_variation([0.0, 0.0]) is None


class TestComputeVolatility:
    """Tests for compute_volatility."""

    def test_stable_and_speculative_items(self, entries, snapshots):
        result = compute_volatility(project_holdings(entries), snapshots, {}, TODAY)

        assert [item.card_id for item in result.items] == ["risky", "stable"]
        risky, stable = result.items
        assert risky.classification == "SPECULATIVE"
        assert stable.classification == "STABLE"
        assert stable.volatility_score == 0.01
        assert risky.volatility_score == pytest.approx(0.4126, abs=1e-4)
        assert (result.summary.stable, result.summary.watch, result.summary.speculative) == (1, 0, 1)

    def test_item_price_fields(self, entries, snapshots):
        stable = compute_volatility(project_holdings(entries), snapshots, {}, TODAY).items[1]

        assert stable.sparkline == [10.0, 10.1, 9.9]
        assert stable.price_now == 9.9
        assert stable.price_change_percent == -1.0

    def test_liquidity_and_demand_enrichment(self, entries, snapshots):
        liquidity = {
            "risky": LiquidityObservation(as_of_date=TODAY, listings_count=4, buylist_count=2, buylist_high=3.1),
        }
        risky, stable = compute_volatility(project_holdings(entries), snapshots, liquidity, TODAY).items

        assert risky.listings_count == 4
        assert risky.buylist_count == 2
        assert risky.buylist_high == 3.1
        assert risky.demand_score == 0.9
        assert stable.listings_count is None
        assert stable.demand_score is None

    def test_old_snapshots_are_ignored(self, entries, snapshots):
        snapshots["stable"] = price_series((45, 100.0)) + snapshots["stable"]
        result = compute_volatility(project_holdings(entries), snapshots, {}, TODAY)

        stable = next(item for item in result.items if item.card_id == "stable")
        assert stable.classification == "STABLE"

    def test_holdings_without_history_are_skipped(self):
        entries = [make_entry("1", "lonely", usd=5.0)]
        result = compute_volatility(project_holdings(entries), {}, {}, TODAY)

        assert result.items == []
        assert (result.summary.stable, result.summary.watch, result.summary.speculative) == (0, 0, 0)

    def test_summary_counts_every_classified_holding(self):
        entries = [make_entry(str(i), f"c{i:02d}", usd=3.2) for i in range(20)]
        snapshots = {f"c{i:02d}": price_series((10, 5.0), (5, 7.5), (0, 3.2)) for i in range(20)}
        result = compute_volatility(project_holdings(entries), snapshots, {}, TODAY)

        assert len(result.items) == 15
        assert result.summary.speculative == 20
        # Equal scores fall back to card id order
        assert result.items[0].card_id == "c00"


class TestDownsample:
    def test_short_series_is_unchanged(self):
        assert downsample([1.0, 2.0], 12) == [1.0, 2.0]

    def test_long_series_keeps_endpoints(self):
        values = [float(i) for i in range(30)]
        points = downsample(values, 12)

        assert len(points) == 12
        assert points[0] == 0.0
        assert points[-1] == 29.0
        assert points == sorted(points)
