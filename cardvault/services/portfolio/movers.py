"""
Top gainers and losers over fixed lookback windows.

Each holding's change is measured from its snapshot series alone: the
latest observation is "now", the observation at or before (latest - window)
is "then". Holdings without any snapshot history are not ranked.
"""

from datetime import timedelta
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from cardvault.schemas import MoversByWindow, MoversWindow, PortfolioHolding, PortfolioMover, TrendIndicator
from cardvault.services.portfolio.constants import PortfolioAnalyticsConfig, TrendDirection
from cardvault.services.portfolio.holdings import entry_cost_basis
from cardvault.services.portfolio.inputs import LedgerEntry, PriceObservation
from cardvault.services.portfolio.series import at_or_before, percent_change, round_currency, snapshot_price


def resolve_trend_direction(percentage: Optional[float]) -> str:
    """UP/DOWN outside the +/-0.25% dead zone, FLAT inside it or without data."""
    tolerance = PortfolioAnalyticsConfig.TREND_FLAT_TOLERANCE
    if percentage is None:
        return TrendDirection.FLAT.value
    if percentage > tolerance:
        return TrendDirection.UP.value
    if percentage < -tolerance:
        return TrendDirection.DOWN.value
    return TrendDirection.FLAT.value


def compute_window_movers(
    holdings: Sequence[PortfolioHolding],
    entries: Sequence[LedgerEntry],
    price_snapshots: Mapping[str, Sequence[PriceObservation]],
    window_days: int,
    limit: int = PortfolioAnalyticsConfig.MOVERS_LIMIT,
) -> Tuple[MoversWindow, Dict[str, Optional[float]]]:
    """
    Rank holdings by value change over one window.

    Returns:
        The window's gainers/losers and card_id -> change percentage (None
        when the window start price was not positive) for every ranked card
    """
    movers: List[PortfolioMover] = []
    percentages: Dict[str, Optional[float]] = {}

    for holding, entry in zip(holdings, entries):
        series = price_snapshots.get(holding.card_id)
        if not series:
            continue

        latest = series[-1]
        then = at_or_before(series, latest.as_of_date - timedelta(days=window_days))
        price_now = snapshot_price(latest, holding.finish)
        price_then = snapshot_price(then, holding.finish) if then is not None else price_now

        gain_per_unit = price_now - price_then
        percentage = percent_change(price_now, price_then)
        percentages[holding.card_id] = percentage

        cost_basis = entry_cost_basis(entry)
        movers.append(
            PortfolioMover(
                **holding.model_dump(),
                cost_basis=round_currency(cost_basis) if cost_basis is not None else 0.0,
                gain=round_currency(gain_per_unit * holding.quantity),
                gain_per_unit=round_currency(gain_per_unit),
                gain_percentage=percentage if percentage is not None else 0.0,
            )
        )

    gainers = sorted((m for m in movers if m.gain > 0), key=lambda m: (-m.gain, m.id))[:limit]
    losers = sorted((m for m in movers if m.gain < 0), key=lambda m: (m.gain, m.id))[:limit]
    return MoversWindow(gainers=gainers, losers=losers), percentages


def compute_movers(
    holdings: Sequence[PortfolioHolding],
    entries: Sequence[LedgerEntry],
    price_snapshots: Mapping[str, Sequence[PriceObservation]],
) -> Tuple[MoversByWindow, Dict[str, TrendIndicator]]:
    """
    Movers for every configured window plus the per-card trend indicators,
    which come from the daily window.
    """
    windows: Dict[str, MoversWindow] = {}
    indicators: Dict[str, TrendIndicator] = {}

    for name, days in PortfolioAnalyticsConfig.MOVER_WINDOWS.items():
        window, percentages = compute_window_movers(holdings, entries, price_snapshots, days)
        windows[name] = window
        if name == "daily":
            indicators = {
                card_id: TrendIndicator(direction=resolve_trend_direction(percentage), percentage=percentage)
                for card_id, percentage in percentages.items()
            }

    return MoversByWindow(**windows), indicators
