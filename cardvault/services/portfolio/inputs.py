"""
Input records consumed by the portfolio analytics.

These are plain in-memory snapshots of what the data loader read from the
store; the analytics never touch a session.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Mapping, Optional, Sequence


@dataclass(frozen=True)
class LedgerEntry:
    """One collection entry joined with its cached catalog attributes."""

    id: str
    card_id: str
    quantity: int
    finish: str
    name: str
    set_code: str
    acquired_price: Optional[float] = None
    rarity: Optional[str] = None
    color_identity: Optional[List[str]] = None
    formats: Optional[Dict[str, str]] = None
    usd: Optional[float] = None
    usd_foil: Optional[float] = None
    image_small: Optional[str] = None


@dataclass(frozen=True)
class PriceObservation:
    as_of_date: date
    usd: Optional[float] = None
    usd_foil: Optional[float] = None
    demand_score: Optional[float] = None


@dataclass(frozen=True)
class LiquidityObservation:
    as_of_date: date
    listings_count: Optional[int] = None
    buylist_count: Optional[int] = None
    buylist_high: Optional[float] = None


@dataclass(frozen=True)
class PortfolioValuePoint:
    cost_basis: Optional[float] = None
    cash_in: Optional[float] = None
    cash_out: Optional[float] = None
    benchmark_value: Optional[float] = None


@dataclass(frozen=True)
class WatchRecord:
    id: str
    card_id: str
    direction: str  # UP | DOWN
    price_type: str  # USD | USD_FOIL
    threshold_percent: float
    last_price: Optional[float] = None
    last_notified_at: Optional[datetime] = None


@dataclass
class PortfolioInputs:
    """
    Everything the summary is computed from.

    price_snapshots: card_id -> observations sorted ascending by date
    liquidity_snapshots: card_id -> latest observation
    portfolio_snapshots: ISO date -> user-level cash-flow record
    """

    entries: Sequence[LedgerEntry] = field(default_factory=list)
    price_snapshots: Mapping[str, Sequence[PriceObservation]] = field(default_factory=dict)
    liquidity_snapshots: Mapping[str, LiquidityObservation] = field(default_factory=dict)
    portfolio_snapshots: Mapping[str, PortfolioValuePoint] = field(default_factory=dict)
    watches: Sequence[WatchRecord] = field(default_factory=list)
