"""
Tests for watch progress and the upcoming/triggered split.
"""

import pytest
from datetime import datetime, timezone

from cardvault.services.portfolio.holdings import project_holdings
from cardvault.services.portfolio.inputs import PriceObservation, WatchRecord
from cardvault.services.portfolio.watchlist import compute_watchlist

from conftest import TODAY, make_entry, price_series


def make_watch(watch_id: str, card_id: str = "a", **overrides) -> WatchRecord:
    values = {
        "id": watch_id,
        "card_id": card_id,
        "direction": "UP",
        "price_type": "USD",
        "threshold_percent": 20.0,
        "last_price": 10.0,
    }
    values.update(overrides)
    return WatchRecord(**values)


@pytest.fixture
def holdings():
    return project_holdings(
        [
            make_entry("1", "a", usd=11.0),
            make_entry("2", "b", usd=8.0, usd_foil=None),
        ]
    )


@pytest.fixture
def snapshots():
    return {
        "a": price_series((1, 10.5), (0, 11.0)),
        "b": price_series((0, 8.0)),
    }


class TestWatchProgress:
    """Tests for progress and target computation."""

    def test_progress_toward_up_threshold(self, holdings, snapshots):
        summary = compute_watchlist([make_watch("w1")], holdings, snapshots)

        highlight = summary.upcoming[0]
        assert highlight.progress_percent == 50.0
        assert highlight.current_price == 11.0
        assert highlight.target_price == 12.0
        assert highlight.card_name == "Card a"
        assert summary.triggered == []

    def test_down_watch_is_capped_and_triggered(self, holdings, snapshots):
        watch = make_watch("w1", "b", direction="DOWN", threshold_percent=10.0)
        summary = compute_watchlist([watch], holdings, snapshots)

        highlight = summary.triggered[0]
        assert highlight.progress_percent == 200.0
        assert highlight.target_price == 9.0

    def test_move_against_direction_is_zero_progress(self, holdings, snapshots):
        watch = make_watch("w1", "b")
        assert compute_watchlist([watch], holdings, snapshots).upcoming[0].progress_percent == 0.0

    def test_missing_baseline_uses_current_price(self, holdings, snapshots):
        watch = make_watch("w1", last_price=None)
        highlight = compute_watchlist([watch], holdings, snapshots).upcoming[0]

        assert highlight.progress_percent == 0.0
        assert highlight.target_price == 13.2

    def test_without_snapshots_uses_holding_price(self, holdings):
        highlight = compute_watchlist([make_watch("w1")], holdings, {}).upcoming[0]

        assert highlight.current_price == 11.0
        assert highlight.progress_percent == 50.0

    def test_missing_price_type_has_no_progress(self, holdings, snapshots):
        watch = make_watch("w1", "b", price_type="USD_FOIL")
        highlight = compute_watchlist([watch], holdings, snapshots).upcoming[0]

        assert highlight.current_price is None
        assert highlight.progress_percent is None
        assert highlight.target_price is None

    @pytest.mark.parametrize("threshold", [0.0, -5.0])
    def test_non_positive_threshold_has_no_progress(self, holdings, snapshots, threshold):
        watch = make_watch("w1", threshold_percent=threshold, last_price=8.0)
        highlight = compute_watchlist([watch], holdings, snapshots).upcoming[0]

        assert highlight.current_price == 11.0
        assert highlight.progress_percent is None
        assert highlight.target_price is None

    def test_watch_on_unheld_card_is_skipped(self, holdings, snapshots):
        summary = compute_watchlist([make_watch("w1", "zzz")], holdings, snapshots)
        assert summary.upcoming == []
        assert summary.triggered == []


class TestWatchOrdering:
    """Tests for sorting of the upcoming and triggered lists."""

    def test_upcoming_sorted_by_progress_none_last(self, holdings, snapshots):
        watches = [
            make_watch("w1", "b", price_type="USD_FOIL"),
            make_watch("w2", threshold_percent=50.0),
            make_watch("w3"),
        ]
        upcoming = compute_watchlist(watches, holdings, snapshots).upcoming
        assert [h.id for h in upcoming] == ["w3", "w2", "w1"]

    def test_notified_watch_stays_triggered(self, holdings, snapshots):
        watch = make_watch("w1", "b", last_notified_at=datetime(2024, 6, 1, tzinfo=timezone.utc))
        summary = compute_watchlist([watch], holdings, snapshots)

        assert [h.id for h in summary.triggered] == ["w1"]
        assert summary.triggered[0].progress_percent == 0.0

    def test_triggered_sorted_most_recent_first(self, holdings, snapshots):
        watches = [
            make_watch("w1", "b", direction="DOWN", threshold_percent=5.0),
            make_watch("w2", last_notified_at=datetime(2024, 6, 1, tzinfo=timezone.utc)),
            make_watch("w3", last_notified_at=datetime(2024, 6, 20)),
        ]
        triggered = compute_watchlist(watches, holdings, snapshots).triggered

        assert [h.id for h in triggered] == ["w3", "w2", "w1"]
        assert triggered[0].last_notified_at.tzinfo is not None

    def test_numeric_ids_tie_break_in_insertion_order(self, holdings, snapshots):
        watches = [make_watch("10"), make_watch("2"), make_watch("1")]
        upcoming = compute_watchlist(watches, holdings, snapshots).upcoming
        assert [h.id for h in upcoming] == ["1", "2", "10"]

    def test_triggered_ids_tie_break_numerically(self, holdings, snapshots):
        notified = datetime(2024, 6, 1, tzinfo=timezone.utc)
        watches = [make_watch("10", last_notified_at=notified), make_watch("9", last_notified_at=notified)]
        triggered = compute_watchlist(watches, holdings, snapshots).triggered
        assert [h.id for h in triggered] == ["9", "10"]

    def test_lists_truncated_to_limit(self, holdings, snapshots):
        watches = [make_watch(f"w{i:02d}") for i in range(12)]
        assert len(compute_watchlist(watches, holdings, snapshots).upcoming) == 10


class TestFoilWatch:
    def test_foil_watch_reads_foil_price(self):
        holdings = project_holdings([make_entry("1", "a", finish="FOIL", usd=1.0, usd_foil=6.0)])
        snapshots = {"a": [PriceObservation(as_of_date=TODAY, usd=1.0, usd_foil=6.0)]}
        watch = make_watch("w1", price_type="USD_FOIL", last_price=5.0, threshold_percent=40.0)

        highlight = compute_watchlist([watch], holdings, snapshots).upcoming[0]
        assert highlight.current_price == 6.0
        assert highlight.progress_percent == 50.0
