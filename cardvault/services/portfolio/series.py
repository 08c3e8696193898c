"""
Helpers shared by every analytics component: rounding, finish-aware price
resolution and the at-or-before lookup over a snapshot series.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence, TypeVar

from cardvault.services.portfolio.constants import FOIL_FINISHES
from cardvault.services.portfolio.inputs import PriceObservation

T = TypeVar("T", bound=PriceObservation)

_CENT = Decimal("0.01")


def round_currency(value: float, places: int = 2) -> float:
    """
    Round half away from zero on the float's exact binary value.

    round() is half-to-even, which would move values like 0.125 down a cent.
    """
    exponent = _CENT if places == 2 else Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP))


def normalize_finish(finish: Optional[str]) -> str:
    return finish.upper() if finish else "NONFOIL"


def resolve_price(finish: Optional[str], usd: Optional[float], usd_foil: Optional[float]) -> Optional[float]:
    """
    Pick the market price that applies to a finish.

    Foil and etched copies prefer the foil price; everything else prefers the
    regular price. Either falls back to the other column when absent.
    """
    if normalize_finish(finish) in FOIL_FINISHES:
        return usd_foil if usd_foil is not None else usd
    return usd if usd is not None else usd_foil


def snapshot_price(snapshot: PriceObservation, finish: Optional[str]) -> float:
    price = resolve_price(finish, snapshot.usd, snapshot.usd_foil)
    return price if price is not None else 0.0


def at_or_before(series: Sequence[T], target: date) -> Optional[T]:
    """
    Latest observation dated on or before target.

    When every observation is later than target the last observation of the
    series is returned instead, so a card with any history always gets a
    historical price. Returns None only for an empty series.

    The series must be sorted ascending by as_of_date.
    """
    if not series:
        return None

    found: Optional[T] = None
    for snapshot in series:
        if snapshot.as_of_date > target:
            break
        found = snapshot

    return found if found is not None else series[-1]


def percent_change(current: float, baseline: float) -> Optional[float]:
    """Percentage move from baseline, None when the baseline is not positive."""
    if baseline <= 0:
        return None
    return round_currency((current - baseline) / baseline * 100)
