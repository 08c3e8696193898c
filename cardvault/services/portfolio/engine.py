"""
Portfolio Analytics Service

Builds the full portfolio summary for one user from inputs that were
already loaded:

1. Price every ledger entry (holdings) and sum the totals
2. Reconstruct the value trend from price snapshots
3. Distributions and heatmaps over the classification tables
4. Movers per lookback window and the daily trend indicators
5. Volatility tiers and watch progress

The computation is pure: no session, no caching, nothing shared between
calls. Re-running it on the same inputs yields the same summary apart from
last_updated.
"""

from datetime import datetime, timezone
from typing import Optional

from cardvault.core.logging_config import get_logger
from cardvault.schemas import (
    PortfolioSummary,
    PortfolioTotals,
    PortfolioTrend,
)
from cardvault.services.portfolio.constants import PortfolioAnalyticsConfig, TrendTimeframe
from cardvault.services.portfolio.distribution import build_distributions, set_distribution_items
from cardvault.services.portfolio.heatmap import build_heatmaps
from cardvault.services.portfolio.holdings import compute_totals, project_holdings, top_holdings
from cardvault.services.portfolio.inputs import PortfolioInputs
from cardvault.services.portfolio.movers import compute_movers
from cardvault.services.portfolio.trend import build_trend
from cardvault.services.portfolio.volatility import compute_volatility
from cardvault.services.portfolio.watchlist import compute_watchlist

logger = get_logger(__name__)


class PortfolioAnalyticsService:
    """
    Example:
        inputs = PortfolioDataLoader(session).load(user)
        summary = PortfolioAnalyticsService().build_summary(inputs)
        print(summary.totals.current_value)
    """

    def __init__(self):
        self.config = PortfolioAnalyticsConfig()

    def build_summary(
        self,
        inputs: PortfolioInputs,
        timeframe: TrendTimeframe = TrendTimeframe.ALL,
        now: Optional[datetime] = None,
    ) -> PortfolioSummary:
        """
        Args:
            inputs: Ledger entries, snapshots and watches of one user
            timeframe: Window of the emitted trend series
            now: Computation time; defaults to the current UTC time

        Returns:
            PortfolioSummary; an empty collection yields zero totals and empty sections
        """
        now = now or datetime.now(timezone.utc)
        today = now.date()

        if not inputs.entries:
            return self.empty_summary(timeframe, now)

        entries = list(inputs.entries)
        holdings = project_holdings(entries)
        totals = compute_totals(entries, holdings)
        current_value = totals.current_value

        distributions = build_distributions(holdings, entries, current_value)
        movers_by_window, trend_indicators = compute_movers(holdings, entries, inputs.price_snapshots)
        volatility = compute_volatility(holdings, inputs.price_snapshots, inputs.liquidity_snapshots, today)
        watchlist = compute_watchlist(inputs.watches, holdings, inputs.price_snapshots)

        summary = PortfolioSummary(
            totals=totals,
            distribution_by_set=set_distribution_items(distributions),
            top_holdings=top_holdings(holdings, self.config.TOP_HOLDINGS_LIMIT),
            movers=movers_by_window.daily,
            trend=build_trend(
                holdings,
                inputs.price_snapshots,
                inputs.portfolio_snapshots,
                totals.cost_basis,
                today,
                timeframe,
            ),
            distributions=distributions,
            heatmaps=build_heatmaps(holdings, current_value),
            movers_by_window=movers_by_window,
            volatility=volatility,
            watchlist=watchlist,
            trend_indicators=trend_indicators,
            last_updated=now.isoformat(),
        )

        logger.info(
            "portfolio summary built",
            holdings=len(holdings),
            priced_cards=len(inputs.price_snapshots),
            watches=len(inputs.watches),
            current_value=totals.current_value,
        )
        return summary

    def empty_summary(self, timeframe: TrendTimeframe, now: datetime) -> PortfolioSummary:
        return PortfolioSummary(
            totals=PortfolioTotals(current_value=0.0, cost_basis=0.0, unrealized_gain=0.0, gain_percentage=None),
            trend=PortfolioTrend(timeframe=timeframe.value, series=[]),
            heatmaps=build_heatmaps([], 0.0),
            last_updated=now.isoformat(),
        )
