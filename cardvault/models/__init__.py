from .user import User
from .collection import CatalogCard, CollectionEntry, Finish
from .snapshot import PriceSnapshot, CardLiquiditySnapshot, PortfolioValueSnapshot
from .price_watch import PriceWatch, WatchDirection, WatchPriceType

__all__ = [
    "User",
    "CatalogCard",
    "CollectionEntry",
    "Finish",
    "PriceSnapshot",
    "CardLiquiditySnapshot",
    "PortfolioValueSnapshot",
    "PriceWatch",
    "WatchDirection",
    "WatchPriceType",
]
