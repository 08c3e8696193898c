from typing import Optional, List, Dict
from enum import Enum
from sqlmodel import Field, SQLModel, Column, JSON, Index
from datetime import datetime

from cardvault.core.typing import utc_now


class Finish(str, Enum):
    """Physical card treatment; decides which market price applies."""

    NONFOIL = "NONFOIL"
    FOIL = "FOIL"
    ETCHED = "ETCHED"


class CatalogCard(SQLModel, table=True):
    """
    Cached catalog attributes for one printing, as received from the
    upstream card-pricing API. Collection entries read their denormalized
    name/set/rarity/price fields from here.
    """

    id: str = Field(primary_key=True)  # Upstream printing id
    name: str = Field(index=True)
    set_code: str = Field(index=True)
    collector_number: str = Field(default="")
    rarity: Optional[str] = Field(default=None)
    color_identity: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    # format name -> legality ("legal", "restricted", "banned", "not_legal")
    formats: Optional[Dict[str, str]] = Field(default=None, sa_column=Column(JSON))

    # Current market prices (USD)
    usd: Optional[float] = None
    usd_foil: Optional[float] = None

    image_small: Optional[str] = None
    updated_at: datetime = Field(default_factory=utc_now)


class CollectionEntry(SQLModel, table=True):
    """One ledger line of a user's collection: a quantity of one printing in one finish."""

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    card_id: str = Field(foreign_key="catalogcard.id", index=True)

    quantity: int = Field(default=1)
    finish: str = Field(default=Finish.NONFOIL.value)
    condition: str = Field(default="NM")
    language: str = Field(default="en")

    # None when the user never recorded what they paid
    acquired_price: Optional[float] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    __table_args__ = (Index("ix_collectionentry_user_card", "user_id", "card_id"),)
