"""
Price stability classification of holdings.

The score is the coefficient of variation (sample standard deviation over
mean) of the card's prices in the last 30 days:

    score < 0.05          STABLE
    0.05 <= score < 0.15  WATCH
    score >= 0.15         SPECULATIVE
"""

from datetime import date, timedelta
from typing import List, Mapping, Optional, Sequence

import numpy as np

from cardvault.schemas import PortfolioHolding, PortfolioVolatility, VolatilityItem, VolatilitySummary
from cardvault.services.portfolio.constants import PortfolioAnalyticsConfig, VolatilityClass
from cardvault.services.portfolio.inputs import LiquidityObservation, PriceObservation
from cardvault.services.portfolio.series import percent_change, resolve_price, round_currency


def classify_volatility(score: float) -> VolatilityClass:
    if score < PortfolioAnalyticsConfig.VOLATILITY_WATCH_THRESHOLD:
        return VolatilityClass.STABLE
    if score < PortfolioAnalyticsConfig.VOLATILITY_SPECULATIVE_THRESHOLD:
        return VolatilityClass.WATCH
    return VolatilityClass.SPECULATIVE


def coefficient_of_variation(prices: Sequence[float]) -> Optional[float]:
    """Sample stdev / mean, None for fewer than two prices or a non-positive mean."""
    if len(prices) < 2:
        return None
    mean = float(np.mean(prices))
    if mean <= 0:
        return None
    std = float(np.std(prices, ddof=1))
    return std / mean


def downsample(values: Sequence[float], max_points: int) -> List[float]:
    """Pick values at evenly spaced indices, always keeping the first and last."""
    if len(values) <= max_points:
        return list(values)
    if max_points < 2:
        return [values[-1]]
    step = (len(values) - 1) / (max_points - 1)
    return [values[round(i * step)] for i in range(max_points)]


def compute_volatility(
    holdings: Sequence[PortfolioHolding],
    price_snapshots: Mapping[str, Sequence[PriceObservation]],
    liquidity_snapshots: Mapping[str, LiquidityObservation],
    today: date,
    limit: int = PortfolioAnalyticsConfig.VOLATILITY_LIMIT,
) -> PortfolioVolatility:
    config = PortfolioAnalyticsConfig
    cutoff = today - timedelta(days=config.VOLATILITY_LOOKBACK_DAYS)
    summary = VolatilitySummary()
    items: List[VolatilityItem] = []

    for holding in holdings:
        recent = [s for s in price_snapshots.get(holding.card_id, ()) if s.as_of_date >= cutoff]
        prices = [
            price
            for price in (resolve_price(holding.finish, s.usd, s.usd_foil) for s in recent)
            if price is not None
        ]
        if not prices:
            prices = [holding.unit_price]

        score = coefficient_of_variation(prices)
        if score is None:
            continue

        classification = classify_volatility(score)
        if classification is VolatilityClass.STABLE:
            summary.stable += 1
        elif classification is VolatilityClass.WATCH:
            summary.watch += 1
        else:
            summary.speculative += 1

        liquidity = liquidity_snapshots.get(holding.card_id)
        items.append(
            VolatilityItem(
                card_id=holding.card_id,
                name=holding.name,
                set_code=holding.set_code,
                finish=holding.finish,
                volatility_score=round_currency(score, 4),
                classification=classification.value,
                sparkline=[round_currency(p) for p in downsample(prices, config.SPARKLINE_POINTS)],
                price_now=round_currency(prices[-1]),
                price_change_percent=percent_change(prices[-1], prices[0]),
                listings_count=liquidity.listings_count if liquidity else None,
                buylist_count=liquidity.buylist_count if liquidity else None,
                buylist_high=liquidity.buylist_high if liquidity else None,
                demand_score=recent[-1].demand_score if recent else None,
            )
        )

    items.sort(key=lambda item: (-item.volatility_score, item.card_id))
    return PortfolioVolatility(summary=summary, items=items[:limit])
