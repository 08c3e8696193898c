"""
Historical snapshot tables.

Snapshots are append-only facts written by the ingest jobs; the analytics
code only reads them.
"""

from typing import Optional
from sqlmodel import Field, SQLModel
from sqlalchemy import Index, UniqueConstraint
from datetime import datetime, date

from cardvault.core.typing import utc_now


class PriceSnapshot(SQLModel, table=True):
    """Daily market price observation for one printing."""

    id: Optional[int] = Field(default=None, primary_key=True)
    card_id: str = Field(foreign_key="catalogcard.id", index=True)
    as_of_date: date = Field(index=True)

    usd: Optional[float] = None
    usd_foil: Optional[float] = None

    # Market context recorded alongside the price
    listings_count: Optional[int] = None
    buylist_price: Optional[float] = None
    demand_score: Optional[float] = None

    created_at: datetime = Field(default_factory=utc_now)

    __table_args__ = (
        UniqueConstraint("card_id", "as_of_date", name="uq_pricesnapshot_card_date"),
        Index("ix_pricesnapshot_card_date", "card_id", "as_of_date"),
    )


class CardLiquiditySnapshot(SQLModel, table=True):
    """Marketplace depth for one printing: active listings and buylist offers."""

    id: Optional[int] = Field(default=None, primary_key=True)
    card_id: str = Field(foreign_key="catalogcard.id", index=True)
    as_of_date: date = Field(index=True)

    listings_count: Optional[int] = None
    buylist_count: Optional[int] = None
    buylist_high: Optional[float] = None

    created_at: datetime = Field(default_factory=utc_now)

    __table_args__ = (Index("ix_cardliquiditysnapshot_card_date", "card_id", "as_of_date"),)


class PortfolioValueSnapshot(SQLModel, table=True):
    """Per-user daily cash-flow and benchmark record used to enrich the value trend."""

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    as_of_date: date = Field(index=True)

    cost_basis: Optional[float] = None
    cash_in: Optional[float] = None
    cash_out: Optional[float] = None
    benchmark_value: Optional[float] = None

    __table_args__ = (
        UniqueConstraint("user_id", "as_of_date", name="uq_portfoliovaluesnapshot_user_date"),
    )
