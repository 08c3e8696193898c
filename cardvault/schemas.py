from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel


# Portfolio Analytics Schemas
class PortfolioHolding(BaseModel):
    """A priced view of one collection entry."""

    id: str
    card_id: str
    name: str
    set_code: str
    quantity: int
    finish: str
    image_small: Optional[str] = None
    unit_price: float
    total_value: float
    rarity: Optional[str] = None
    color_identity: Optional[List[str]] = None
    primary_color_bucket: str
    primary_format: Optional[str] = None


class PortfolioMover(PortfolioHolding):
    cost_basis: float
    gain: float
    gain_per_unit: float
    gain_percentage: float  # 0 when the window start price is unusable


class MoversWindow(BaseModel):
    gainers: List[PortfolioMover] = []
    losers: List[PortfolioMover] = []


class MoversByWindow(BaseModel):
    daily: MoversWindow = MoversWindow()
    weekly: MoversWindow = MoversWindow()
    monthly: MoversWindow = MoversWindow()


class PortfolioTotals(BaseModel):
    current_value: float
    cost_basis: float
    unrealized_gain: float
    gain_percentage: Optional[float] = None


class SetDistributionItem(BaseModel):
    set_code: str
    total_value: float
    percentage: float


class DistributionSlice(BaseModel):
    key: str
    label: str
    total_value: float
    quantity: float  # Fractional when an entry is split across buckets
    percentage: float
    average_price: float


class PortfolioDistributions(BaseModel):
    set: List[DistributionSlice] = []
    finish: List[DistributionSlice] = []
    color_identity: List[DistributionSlice] = []
    format: List[DistributionSlice] = []
    rarity: List[DistributionSlice] = []


class HeatmapCell(BaseModel):
    x: str
    y: str
    total_value: float
    quantity: int
    percentage: float


class PortfolioHeatmap(BaseModel):
    x: List[str]
    y: List[str]
    cells: List[HeatmapCell] = []
    metric: Literal["value"] = "value"


class PortfolioHeatmaps(BaseModel):
    format_by_color: PortfolioHeatmap
    rarity_by_finish: PortfolioHeatmap


class PortfolioTrendPoint(BaseModel):
    date: str  # ISO date
    value: float
    cost_basis: Optional[float] = None
    cash_flow: Optional[float] = None
    benchmark: Optional[float] = None


class PortfolioTrend(BaseModel):
    timeframe: str
    series: List[PortfolioTrendPoint] = []


class VolatilityItem(BaseModel):
    card_id: str
    name: str
    set_code: str
    finish: str
    volatility_score: float
    classification: Literal["STABLE", "WATCH", "SPECULATIVE"]
    sparkline: List[float]
    price_now: float
    price_change_percent: Optional[float] = None
    listings_count: Optional[int] = None
    buylist_count: Optional[int] = None
    buylist_high: Optional[float] = None
    demand_score: Optional[float] = None


class VolatilitySummary(BaseModel):
    stable: int = 0
    watch: int = 0
    speculative: int = 0


class PortfolioVolatility(BaseModel):
    summary: VolatilitySummary = VolatilitySummary()
    items: List[VolatilityItem] = []


class WatchlistHighlight(BaseModel):
    id: str
    card_id: str
    card_name: str
    set_code: str
    direction: str
    price_type: str
    threshold_percent: float
    progress_percent: Optional[float] = None
    current_price: Optional[float] = None
    target_price: Optional[float] = None
    last_notified_at: Optional[datetime] = None


class WatchlistSummary(BaseModel):
    upcoming: List[WatchlistHighlight] = []
    triggered: List[WatchlistHighlight] = []


class TrendIndicator(BaseModel):
    direction: Literal["UP", "DOWN", "FLAT"]
    percentage: Optional[float] = None


class PortfolioSummary(BaseModel):
    """Full analytics view of a user's collection."""

    totals: PortfolioTotals
    distribution_by_set: List[SetDistributionItem] = []
    top_holdings: List[PortfolioHolding] = []
    movers: MoversWindow = MoversWindow()
    trend: PortfolioTrend
    distributions: PortfolioDistributions = PortfolioDistributions()
    heatmaps: PortfolioHeatmaps
    movers_by_window: MoversByWindow = MoversByWindow()
    volatility: PortfolioVolatility = PortfolioVolatility()
    watchlist: WatchlistSummary = WatchlistSummary()
    trend_indicators: Dict[str, TrendIndicator] = {}
    last_updated: str
