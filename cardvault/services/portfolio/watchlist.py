"""
Progress of the user's price watches toward their trigger thresholds.

progress_percent is 0 at the watch baseline, 100 at the trigger price and
capped at 200; moves against the watched direction read as 0.
"""

from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from cardvault.schemas import PortfolioHolding, WatchlistHighlight, WatchlistSummary
from cardvault.services.portfolio.constants import PortfolioAnalyticsConfig
from cardvault.services.portfolio.inputs import PriceObservation, WatchRecord
from cardvault.services.portfolio.series import round_currency


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def current_watch_price(
    watch: WatchRecord,
    holding: PortfolioHolding,
    series: Sequence[PriceObservation],
) -> Optional[float]:
    """Latest snapshot price of the watched type, the live holding price without history."""
    if not series:
        return holding.unit_price
    latest = series[-1]
    return latest.usd_foil if watch.price_type == "USD_FOIL" else latest.usd


def build_highlight(
    watch: WatchRecord,
    holding: PortfolioHolding,
    series: Sequence[PriceObservation],
) -> WatchlistHighlight:
    current_price = current_watch_price(watch, holding, series)
    baseline = watch.last_price if watch.last_price is not None else current_price

    progress_percent = None
    target_price = None
    # A non-positive threshold has no trigger price to measure progress against
    if baseline is not None and baseline > 0 and current_price is not None and watch.threshold_percent > 0:
        delta_percent = (current_price - baseline) / baseline * 100
        normalized = delta_percent if watch.direction == "UP" else -delta_percent
        progress = normalized / watch.threshold_percent * 100
        progress_percent = round_currency(min(max(progress, 0.0), PortfolioAnalyticsConfig.WATCH_PROGRESS_CAP))

        multiplier = 1 + watch.threshold_percent / 100 if watch.direction == "UP" else 1 - watch.threshold_percent / 100
        target_price = round_currency(baseline * multiplier)

    return WatchlistHighlight(
        id=watch.id,
        card_id=watch.card_id,
        card_name=holding.name,
        set_code=holding.set_code,
        direction=watch.direction,
        price_type=watch.price_type,
        threshold_percent=watch.threshold_percent,
        progress_percent=progress_percent,
        current_price=round_currency(current_price) if current_price is not None else None,
        target_price=target_price,
        last_notified_at=_as_utc(watch.last_notified_at) if watch.last_notified_at else None,
    )


def watch_id_order(watch_id: str) -> Tuple[int, int, str]:
    """Numeric ids in insertion order, anything else after them by text."""
    if watch_id.isdigit():
        return (0, int(watch_id), "")
    return (1, 0, watch_id)


def is_triggered(highlight: WatchlistHighlight) -> bool:
    """Once notified, a watch stays triggered even if the price falls back."""
    if highlight.last_notified_at is not None:
        return True
    return highlight.progress_percent is not None and highlight.progress_percent >= 100


def compute_watchlist(
    watches: Sequence[WatchRecord],
    holdings: Sequence[PortfolioHolding],
    price_snapshots: Mapping[str, Sequence[PriceObservation]],
    limit: int = PortfolioAnalyticsConfig.WATCHLIST_LIMIT,
) -> WatchlistSummary:
    """
    Correlate watches with held cards.

    The watches must already be narrowed to the requesting user; watches on
    cards the user no longer holds are skipped.
    """
    holdings_by_card: Dict[str, PortfolioHolding] = {}
    for holding in holdings:
        holdings_by_card.setdefault(holding.card_id, holding)

    upcoming: List[WatchlistHighlight] = []
    triggered: List[WatchlistHighlight] = []
    for watch in watches:
        holding = holdings_by_card.get(watch.card_id)
        if holding is None:
            continue
        highlight = build_highlight(watch, holding, price_snapshots.get(watch.card_id, ()))
        (triggered if is_triggered(highlight) else upcoming).append(highlight)

    upcoming.sort(
        key=lambda h: (
            h.progress_percent is None,
            -(h.progress_percent or 0.0),
            watch_id_order(h.id),
        )
    )
    # Most recently notified first, never-notified last
    triggered.sort(key=lambda h: watch_id_order(h.id))
    triggered.sort(key=lambda h: h.last_notified_at.timestamp() if h.last_notified_at else float("-inf"), reverse=True)

    return WatchlistSummary(upcoming=upcoming[:limit], triggered=triggered[:limit])
