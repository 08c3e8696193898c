"""
PriceWatch Model - percentage-move watches on a card's market price

A watch fires when the price moves threshold_percent away from last_price in
the watched direction. Watches are addressed to a contact string rather than
a user id; the portfolio view finds a user's watches by matching contact to
the account email.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field
from enum import Enum

from cardvault.core.typing import utc_now


class WatchDirection(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


class WatchPriceType(str, Enum):
    """Which catalog price the watch follows."""

    USD = "USD"
    USD_FOIL = "USD_FOIL"


class PriceWatch(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    card_id: str = Field(index=True, foreign_key="catalogcard.id")

    direction: WatchDirection = Field(default=WatchDirection.UP)
    price_type: WatchPriceType = Field(default=WatchPriceType.USD)
    threshold_percent: float = Field(description="Percent move from last_price that triggers the watch")

    # Email address notifications go to
    contact: str = Field(index=True)

    # Baseline the next move is measured from
    last_price: Optional[float] = Field(default=None)
    last_notified_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
