from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime

from cardvault.core.typing import utc_now


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    # Price watches are linked to accounts through this address (PriceWatch.contact)
    email: str = Field(unique=True, index=True)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)
