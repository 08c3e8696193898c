"""
Classification tables shared by the distribution, heatmap and projection code.
"""

from enum import Enum


class PortfolioAnalyticsConfig:
    """Sizes, windows and thresholds of the portfolio analytics."""

    TOP_HOLDINGS_LIMIT: int = 5
    DISTRIBUTION_LIMIT: int = 12
    MOVERS_LIMIT: int = 5
    VOLATILITY_LIMIT: int = 15
    WATCHLIST_LIMIT: int = 10

    # Mover lookback windows in days
    MOVER_WINDOWS: dict[str, int] = {"daily": 1, "weekly": 7, "monthly": 30}

    # Trend indicator dead zone, in percent
    TREND_FLAT_TOLERANCE: float = 0.25

    VOLATILITY_LOOKBACK_DAYS: int = 30
    VOLATILITY_WATCH_THRESHOLD: float = 0.05  # Coefficient of variation
    VOLATILITY_SPECULATIVE_THRESHOLD: float = 0.15
    SPARKLINE_POINTS: int = 12

    # Progress toward a watch threshold is capped at twice the threshold
    WATCH_PROGRESS_CAP: float = 200.0


class TrendTimeframe(str, Enum):
    """Trend windows the summary can be restricted to."""

    DAYS_30 = "30d"
    DAYS_90 = "90d"
    DAYS_180 = "180d"
    DAYS_365 = "365d"
    ALL = "all"

    @property
    def days(self) -> int | None:
        if self is TrendTimeframe.ALL:
            return None
        return int(self.value.rstrip("d"))


class VolatilityClass(str, Enum):
    STABLE = "STABLE"
    WATCH = "WATCH"
    SPECULATIVE = "SPECULATIVE"


class TrendDirection(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    FLAT = "FLAT"


# Formats checked in order when picking an entry's primary format
FORMAT_PRIORITY: tuple[str, ...] = (
    "commander",
    "pioneer",
    "modern",
    "standard",
    "legacy",
    "vintage",
    "historic",
    "pauper",
    "alchemy",
)

# Legalities that count as playable in a format
PLAYABLE_LEGALITIES: frozenset[str] = frozenset({"legal", "restricted"})

RARITY_TIERS: tuple[str, ...] = ("mythic", "rare", "uncommon", "common", "special")

COLOR_BUCKETS: tuple[str, ...] = ("W", "U", "B", "R", "G", "Multi", "Colorless")

COLOR_LABELS: dict[str, str] = {
    "W": "White",
    "U": "Blue",
    "B": "Black",
    "R": "Red",
    "G": "Green",
    "Multi": "Multicolor",
    "Colorless": "Colorless",
}

FINISH_ORDER: tuple[str, ...] = ("NONFOIL", "FOIL", "ETCHED")

# Finishes priced from the foil column
FOIL_FINISHES: frozenset[str] = frozenset({"FOIL", "ETCHED"})

OTHER_KEY = "other"
OTHER_LABEL = "Other"
