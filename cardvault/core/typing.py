"""
Helpers for writing SQLModel queries that type checkers accept.

Table attributes are declared as plain Python types (`card_id: str`) but are
column descriptors at class level, so `.in_()` and `.desc()` look like errors
to a checker. Wrapping them in col() is a runtime no-op.
"""

from typing import TYPE_CHECKING, Any, Sequence, TypeVar
from datetime import datetime, timezone

if TYPE_CHECKING:
    from sqlalchemy.orm.attributes import InstrumentedAttribute

T = TypeVar("T")


def col(attr: T) -> "InstrumentedAttribute[T]":
    """
    Usage:
        select(PriceSnapshot).order_by(col(PriceSnapshot.as_of_date))
    """
    return attr  # type: ignore[return-value]


def seq(items: Any) -> Sequence[Any]:
    """
    Usage:
        select(PriceSnapshot).where(col(PriceSnapshot.card_id).in_(seq(card_ids)))
    """
    return items


def utc_now() -> datetime:
    """Timezone-aware current time, for default_factory on timestamp fields."""
    return datetime.now(timezone.utc)


__all__ = ["col", "seq", "utc_now"]
