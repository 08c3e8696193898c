"""
Holding projection and portfolio totals.

Every summary starts by pricing each ledger entry at its finish-specific
market price; the totals are plain sums over those holdings.
"""

from typing import Dict, List, Optional, Sequence

from cardvault.schemas import PortfolioHolding, PortfolioTotals
from cardvault.services.portfolio.constants import FORMAT_PRIORITY, PLAYABLE_LEGALITIES
from cardvault.services.portfolio.inputs import LedgerEntry
from cardvault.services.portfolio.series import normalize_finish, resolve_price, round_currency


def primary_color_bucket(color_identity: Optional[Sequence[str]]) -> str:
    """Colorless, the single color code, or Multi."""
    if not color_identity:
        return "Colorless"
    if len(color_identity) == 1:
        return color_identity[0].upper()
    return "Multi"


def primary_format(formats: Optional[Dict[str, str]]) -> Optional[str]:
    """
    First playable format by priority, else the first playable format listed.
    """
    if not formats:
        return None

    for format_name in FORMAT_PRIORITY:
        if _is_playable(formats.get(format_name)):
            return format_name

    for format_name, legality in formats.items():
        if _is_playable(legality):
            return format_name

    return None


def _is_playable(legality: Optional[str]) -> bool:
    return legality is not None and legality.lower() in PLAYABLE_LEGALITIES


def to_holding(entry: LedgerEntry) -> PortfolioHolding:
    price = resolve_price(entry.finish, entry.usd, entry.usd_foil)
    unit_price = round_currency(price) if price is not None else 0.0
    return PortfolioHolding(
        id=entry.id,
        card_id=entry.card_id,
        name=entry.name,
        set_code=entry.set_code,
        quantity=entry.quantity,
        finish=normalize_finish(entry.finish),
        image_small=entry.image_small,
        unit_price=unit_price,
        total_value=round_currency(unit_price * entry.quantity),
        rarity=entry.rarity,
        color_identity=list(entry.color_identity) if entry.color_identity is not None else None,
        primary_color_bucket=primary_color_bucket(entry.color_identity),
        primary_format=primary_format(entry.formats),
    )


def project_holdings(entries: Sequence[LedgerEntry]) -> List[PortfolioHolding]:
    return [to_holding(entry) for entry in entries]


def entry_cost_basis(entry: LedgerEntry) -> Optional[float]:
    """What the entry cost in total, None when no purchase price was recorded."""
    if entry.acquired_price is None:
        return None
    return entry.acquired_price * entry.quantity


def compute_totals(entries: Sequence[LedgerEntry], holdings: Sequence[PortfolioHolding]) -> PortfolioTotals:
    """
    Current value, cost basis and unrealized gain across all holdings.

    Entries without a recorded purchase price are left out of the cost basis
    rather than counted as free.
    """
    current_value = 0.0
    cost_basis = 0.0
    for entry, holding in zip(entries, holdings):
        current_value += holding.total_value
        entry_cost = entry_cost_basis(entry)
        if entry_cost is not None:
            cost_basis += entry_cost

    unrealized_gain = current_value - cost_basis
    gain_percentage = round_currency(unrealized_gain / cost_basis * 100) if cost_basis > 0 else None

    return PortfolioTotals(
        current_value=round_currency(current_value),
        cost_basis=round_currency(cost_basis),
        unrealized_gain=round_currency(unrealized_gain),
        gain_percentage=gain_percentage,
    )


def top_holdings(holdings: Sequence[PortfolioHolding], limit: int) -> List[PortfolioHolding]:
    return sorted(holdings, key=lambda holding: (-holding.total_value, holding.id))[:limit]
