"""
Portfolio Data Loader

Reads everything the portfolio summary needs for one user in a single
session and hands it over as plain input records:

1. Collection entries joined with their catalog attributes
2. Price snapshot series for the held cards (ascending by date)
3. Latest liquidity snapshot per held card
4. The user's portfolio value snapshots, keyed by ISO date
5. Price watches addressed to the user's email

Store failures surface as PortfolioDataUnavailable before any analytics run.
"""

from typing import Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from cardvault.core.logging_config import get_logger
from cardvault.core.typing import col, seq
from cardvault.models import (
    CardLiquiditySnapshot,
    CatalogCard,
    CollectionEntry,
    PortfolioValueSnapshot,
    PriceSnapshot,
    PriceWatch,
    WatchDirection,
    WatchPriceType,
    User,
)
from cardvault.services.portfolio.inputs import (
    LedgerEntry,
    LiquidityObservation,
    PortfolioInputs,
    PortfolioValuePoint,
    PriceObservation,
    WatchRecord,
)

logger = get_logger(__name__)


class PortfolioDataUnavailable(Exception):
    """The store could not supply the inputs of a portfolio summary."""

    def __init__(self, user_id: int | None, reason: str):
        self.user_id = user_id
        self.reason = reason
        super().__init__(f"Portfolio data unavailable for user {user_id}: {reason}")


class PortfolioDataLoader:
    def __init__(self, session: Session):
        self.session = session

    def load(self, user: User) -> PortfolioInputs:
        try:
            entries = self.load_entries(user.id)
            card_ids = sorted({entry.card_id for entry in entries})
            inputs = PortfolioInputs(
                entries=entries,
                price_snapshots=self.load_price_snapshots(card_ids),
                liquidity_snapshots=self.load_liquidity_snapshots(card_ids),
                portfolio_snapshots=self.load_portfolio_snapshots(user.id),
                watches=self.load_watches(user.email),
            )
        except SQLAlchemyError as e:
            logger.error("portfolio data load failed", user_id=user.id, error=str(e))
            raise PortfolioDataUnavailable(user.id, type(e).__name__) from e

        logger.debug(
            "portfolio data loaded",
            user_id=user.id,
            entries=len(inputs.entries),
            priced_cards=len(inputs.price_snapshots),
            watches=len(inputs.watches),
        )
        return inputs

    def load_entries(self, user_id: int | None) -> List[LedgerEntry]:
        rows = self.session.exec(
            select(CollectionEntry, CatalogCard)
            .join(CatalogCard, col(CatalogCard.id) == col(CollectionEntry.card_id))
            .where(CollectionEntry.user_id == user_id)
            .order_by(col(CollectionEntry.id))
        ).all()

        return [
            LedgerEntry(
                id=str(entry.id),
                card_id=card.id,
                quantity=entry.quantity,
                finish=entry.finish,
                name=card.name,
                set_code=card.set_code,
                acquired_price=entry.acquired_price,
                rarity=card.rarity,
                color_identity=card.color_identity,
                formats=card.formats,
                usd=card.usd,
                usd_foil=card.usd_foil,
                image_small=card.image_small,
            )
            for entry, card in rows
        ]

    def load_price_snapshots(self, card_ids: List[str]) -> Dict[str, List[PriceObservation]]:
        if not card_ids:
            return {}

        snapshots = self.session.exec(
            select(PriceSnapshot)
            .where(col(PriceSnapshot.card_id).in_(seq(card_ids)))
            .order_by(col(PriceSnapshot.card_id), col(PriceSnapshot.as_of_date))
        ).all()

        series: Dict[str, List[PriceObservation]] = {}
        for snapshot in snapshots:
            series.setdefault(snapshot.card_id, []).append(
                PriceObservation(
                    as_of_date=snapshot.as_of_date,
                    usd=snapshot.usd,
                    usd_foil=snapshot.usd_foil,
                    demand_score=snapshot.demand_score,
                )
            )
        return series

    def load_liquidity_snapshots(self, card_ids: List[str]) -> Dict[str, LiquidityObservation]:
        if not card_ids:
            return {}

        snapshots = self.session.exec(
            select(CardLiquiditySnapshot)
            .where(col(CardLiquiditySnapshot.card_id).in_(seq(card_ids)))
            .order_by(col(CardLiquiditySnapshot.card_id), col(CardLiquiditySnapshot.as_of_date))
        ).all()

        # Ascending order: later rows overwrite earlier ones
        latest: Dict[str, LiquidityObservation] = {}
        for snapshot in snapshots:
            latest[snapshot.card_id] = LiquidityObservation(
                as_of_date=snapshot.as_of_date,
                listings_count=snapshot.listings_count,
                buylist_count=snapshot.buylist_count,
                buylist_high=snapshot.buylist_high,
            )
        return latest

    def load_portfolio_snapshots(self, user_id: int | None) -> Dict[str, PortfolioValuePoint]:
        snapshots = self.session.exec(
            select(PortfolioValueSnapshot)
            .where(PortfolioValueSnapshot.user_id == user_id)
            .order_by(col(PortfolioValueSnapshot.as_of_date))
        ).all()

        return {
            snapshot.as_of_date.isoformat(): PortfolioValuePoint(
                cost_basis=snapshot.cost_basis,
                cash_in=snapshot.cash_in,
                cash_out=snapshot.cash_out,
                benchmark_value=snapshot.benchmark_value,
            )
            for snapshot in snapshots
        }

    def load_watches(self, email: str) -> List[WatchRecord]:
        """
        Watches carry no user id; they belong to whoever owns the contact
        address. Changing the account email detaches existing watches.
        """
        watches = self.session.exec(
            select(PriceWatch).where(PriceWatch.contact == email).order_by(col(PriceWatch.id))
        ).all()

        return [
            WatchRecord(
                id=str(watch.id),
                card_id=watch.card_id,
                direction=WatchDirection(watch.direction).value,
                price_type=WatchPriceType(watch.price_type).value,
                threshold_percent=watch.threshold_percent,
                last_price=watch.last_price,
                last_notified_at=watch.last_notified_at,
            )
            for watch in watches
        ]
