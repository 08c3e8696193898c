"""
Two-dimensional cross-tabs of portfolio value on fixed axes.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple

from cardvault.schemas import HeatmapCell, PortfolioHeatmap, PortfolioHeatmaps, PortfolioHolding
from cardvault.services.portfolio.constants import (
    COLOR_BUCKETS,
    FINISH_ORDER,
    FORMAT_PRIORITY,
    OTHER_LABEL,
    RARITY_TIERS,
)
from cardvault.services.portfolio.distribution import normalize_rarity
from cardvault.services.portfolio.series import round_currency

FORMAT_AXIS: List[str] = [name.capitalize() for name in FORMAT_PRIORITY] + [OTHER_LABEL]
COLOR_AXIS: List[str] = list(COLOR_BUCKETS)
RARITY_AXIS: List[str] = [tier.capitalize() for tier in RARITY_TIERS] + [OTHER_LABEL]
FINISH_AXIS: List[str] = list(FINISH_ORDER)

CellResolver = Callable[[PortfolioHolding], Tuple[str, str]]


@dataclass
class _Cell:
    total_value: float = 0.0
    quantity: int = 0


def format_bucket(holding: PortfolioHolding) -> str:
    """Axis label of the holding's primary format, Other when it is not on the axis."""
    if holding.primary_format:
        label = holding.primary_format.capitalize()
        if label in FORMAT_AXIS:
            return label
    return OTHER_LABEL


def rarity_bucket(holding: PortfolioHolding) -> str:
    tier = normalize_rarity(holding.rarity)
    return tier.capitalize() if tier else OTHER_LABEL


def _axis_position(axis: Sequence[str], value: str) -> int:
    return axis.index(value) if value in axis else len(axis)


def build_heatmap(
    holdings: Sequence[PortfolioHolding],
    x_axis: List[str],
    y_axis: List[str],
    resolver: CellResolver,
    total_value: float,
) -> PortfolioHeatmap:
    """
    Add every holding's full value and quantity to the single cell resolver
    picks for it. Only populated cells are emitted, in axis order; the axes
    themselves are always complete.
    """
    cells: Dict[Tuple[str, str], _Cell] = {}
    for holding in holdings:
        cell = cells.setdefault(resolver(holding), _Cell())
        cell.total_value += holding.total_value
        cell.quantity += holding.quantity

    ordered = sorted(
        cells.items(),
        key=lambda item: (
            _axis_position(x_axis, item[0][0]),
            _axis_position(y_axis, item[0][1]),
            item[0],
        ),
    )

    return PortfolioHeatmap(
        x=list(x_axis),
        y=list(y_axis),
        cells=[
            HeatmapCell(
                x=x,
                y=y,
                total_value=round_currency(cell.total_value),
                quantity=cell.quantity,
                percentage=round_currency(cell.total_value / total_value * 100) if total_value > 0 else 0.0,
            )
            for (x, y), cell in ordered
        ],
    )


def build_heatmaps(holdings: Sequence[PortfolioHolding], total_value: float) -> PortfolioHeatmaps:
    return PortfolioHeatmaps(
        format_by_color=build_heatmap(
            holdings,
            FORMAT_AXIS,
            COLOR_AXIS,
            lambda holding: (format_bucket(holding), holding.primary_color_bucket),
            total_value,
        ),
        rarity_by_finish=build_heatmap(
            holdings,
            RARITY_AXIS,
            FINISH_AXIS,
            lambda holding: (rarity_bucket(holding), holding.finish),
            total_value,
        ),
    )
