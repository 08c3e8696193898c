"""
Portfolio value trend reconstructed from per-card price snapshots.

One point per date on which any held card was observed, plus today. Each
holding is valued at its latest known snapshot on that date; dates between
observations are not filled in.
"""

from datetime import date, timedelta
from typing import List, Mapping, Sequence

from cardvault.schemas import PortfolioHolding, PortfolioTrend, PortfolioTrendPoint
from cardvault.services.portfolio.constants import TrendTimeframe
from cardvault.services.portfolio.inputs import PortfolioValuePoint, PriceObservation
from cardvault.services.portfolio.series import at_or_before, round_currency, snapshot_price


def collect_trend_dates(price_snapshots: Mapping[str, Sequence[PriceObservation]], today: date) -> List[date]:
    dates = {today}
    for series in price_snapshots.values():
        dates.update(snapshot.as_of_date for snapshot in series)
    return sorted(dates)


def value_on(
    holdings: Sequence[PortfolioHolding],
    price_snapshots: Mapping[str, Sequence[PriceObservation]],
    target: date,
) -> float:
    total = 0.0
    for holding in holdings:
        snapshot = at_or_before(price_snapshots.get(holding.card_id, ()), target)
        if snapshot is None:
            price = holding.unit_price
        else:
            price = snapshot_price(snapshot, holding.finish)
        total += price * holding.quantity
    return total


def build_trend(
    holdings: Sequence[PortfolioHolding],
    price_snapshots: Mapping[str, Sequence[PriceObservation]],
    portfolio_snapshots: Mapping[str, PortfolioValuePoint],
    fallback_cost_basis: float,
    today: date,
    timeframe: TrendTimeframe = TrendTimeframe.ALL,
) -> PortfolioTrend:
    """
    Args:
        fallback_cost_basis: Cost basis used on dates without a portfolio snapshot
        timeframe: Only points dated within the timeframe are emitted
    """
    window_days = timeframe.days
    start = today - timedelta(days=window_days) if window_days is not None else None

    series: List[PortfolioTrendPoint] = []
    for point_date in collect_trend_dates(price_snapshots, today):
        if start is not None and point_date < start:
            continue

        key = point_date.isoformat()
        portfolio_point = portfolio_snapshots.get(key)

        cost_basis = fallback_cost_basis
        cash_flow = 0.0
        benchmark = None
        if portfolio_point is not None:
            if portfolio_point.cost_basis is not None:
                cost_basis = round_currency(portfolio_point.cost_basis)
            cash_flow = round_currency((portfolio_point.cash_in or 0.0) - (portfolio_point.cash_out or 0.0))
            benchmark = portfolio_point.benchmark_value

        series.append(
            PortfolioTrendPoint(
                date=key,
                value=round_currency(value_on(holdings, price_snapshots, point_date)),
                cost_basis=cost_basis,
                cash_flow=cash_flow,
                benchmark=benchmark,
            )
        )

    return PortfolioTrend(timeframe=timeframe.value, series=series)
