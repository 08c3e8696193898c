"""
Test fixtures for cardvault tests.

Provides database session fixtures and sample collection data.
"""

import os

# Tokens are signed with this key; must be set before settings load
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-portfolio-tests")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import jwt
import pytest
from datetime import date, datetime, timedelta, timezone
from typing import Generator, List
from sqlmodel import Session, SQLModel, create_engine
from sqlalchemy.pool import StaticPool

from cardvault.core.config import settings
from cardvault.models import (
    CardLiquiditySnapshot,
    CatalogCard,
    CollectionEntry,
    PortfolioValueSnapshot,
    PriceSnapshot,
    PriceWatch,
    User,
    WatchDirection,
    WatchPriceType,
)
from cardvault.services.portfolio.inputs import LedgerEntry, PriceObservation


# In-memory SQLite keeps every test isolated
TEST_DATABASE_URL = "sqlite:///:memory:"

TODAY = date(2024, 6, 30)
NOW = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


def make_entry(entry_id: str = "1", card_id: str = "card-1", **overrides) -> LedgerEntry:
    """Build a ledger entry with sensible catalog defaults."""
    values = {
        "id": entry_id,
        "card_id": card_id,
        "quantity": 1,
        "finish": "NONFOIL",
        "name": f"Card {card_id}",
        "set_code": "neo",
        "acquired_price": None,
        "rarity": "rare",
        "color_identity": ["U"],
        "formats": {"commander": "legal"},
        "usd": 10.0,
        "usd_foil": None,
    }
    values.update(overrides)
    return LedgerEntry(**values)


def make_access_token(email: str, expires_delta: timedelta = timedelta(minutes=30)) -> str:
    """Bearer token for `email`, signed the way the auth dependency expects."""
    payload = {"sub": email, "exp": datetime.now(timezone.utc) + expires_delta}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def price_series(*points, **fields) -> List[PriceObservation]:
    """(days_ago, usd) pairs relative to TODAY, oldest first."""
    return [
        PriceObservation(as_of_date=TODAY - timedelta(days=days_ago), usd=usd, **fields)
        for days_ago, usd in points
    ]


@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine with in-memory SQLite."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Generator[Session, None, None]:
    """Provide a test database session."""
    with Session(test_engine) as session:
        yield session


@pytest.fixture
def sample_user(test_session: Session) -> User:
    user = User(email="collector@example.com", is_active=True)
    test_session.add(user)
    test_session.commit()
    test_session.refresh(user)
    return user


@pytest.fixture
def sample_cards(test_session: Session) -> List[CatalogCard]:
    """A blue rare, a multicolor mythic foil and an unpriced common."""
    cards = [
        CatalogCard(
            id="neo-001",
            name="Tezzeret, Betrayer of Flesh",
            set_code="neo",
            rarity="mythic",
            color_identity=["U"],
            formats={"commander": "legal", "standard": "legal"},
            usd=4.0,
            usd_foil=9.0,
        ),
        CatalogCard(
            id="mh2-042",
            name="Fire // Ice",
            set_code="mh2",
            rarity="rare",
            color_identity=["U", "R"],
            formats={"modern": "legal", "legacy": "legal"},
            usd=1.5,
            usd_foil=6.0,
        ),
        CatalogCard(
            id="dmu-200",
            name="Shivan Devastator",
            set_code="dmu",
            rarity="common",
            color_identity=[],
            formats=None,
            usd=None,
            usd_foil=None,
        ),
    ]
    for card in cards:
        test_session.add(card)
    test_session.commit()
    return cards


@pytest.fixture
def sample_entries(test_session: Session, sample_user: User, sample_cards: List[CatalogCard]) -> List[CollectionEntry]:
    entries = [
        CollectionEntry(user_id=sample_user.id, card_id="neo-001", quantity=2, finish="NONFOIL", acquired_price=3.0),
        CollectionEntry(user_id=sample_user.id, card_id="mh2-042", quantity=1, finish="FOIL", acquired_price=5.0),
        CollectionEntry(user_id=sample_user.id, card_id="dmu-200", quantity=4, finish="NONFOIL"),
    ]
    for entry in entries:
        test_session.add(entry)
    test_session.commit()
    for entry in entries:
        test_session.refresh(entry)
    return entries


@pytest.fixture
def sample_snapshots(test_session: Session, sample_user: User, sample_cards: List[CatalogCard]):
    """Price history for neo-001, liquidity for neo-001 and one portfolio snapshot."""
    rows = [
        PriceSnapshot(card_id="neo-001", as_of_date=TODAY - timedelta(days=2), usd=3.5, usd_foil=8.0),
        PriceSnapshot(card_id="neo-001", as_of_date=TODAY - timedelta(days=1), usd=3.8, usd_foil=8.5),
        PriceSnapshot(card_id="neo-001", as_of_date=TODAY, usd=4.0, usd_foil=9.0, demand_score=0.7),
        CardLiquiditySnapshot(card_id="neo-001", as_of_date=TODAY - timedelta(days=3), listings_count=10),
        CardLiquiditySnapshot(
            card_id="neo-001", as_of_date=TODAY, listings_count=14, buylist_count=3, buylist_high=2.75
        ),
        PortfolioValueSnapshot(
            user_id=sample_user.id,
            as_of_date=TODAY - timedelta(days=1),
            cost_basis=11.0,
            cash_in=5.0,
            cash_out=1.0,
            benchmark_value=10.5,
        ),
    ]
    for row in rows:
        test_session.add(row)
    test_session.commit()
    return rows


@pytest.fixture
def sample_watches(test_session: Session, sample_user: User, sample_cards: List[CatalogCard]) -> List[PriceWatch]:
    watches = [
        PriceWatch(
            card_id="neo-001",
            direction=WatchDirection.UP,
            price_type=WatchPriceType.USD,
            threshold_percent=20.0,
            contact=sample_user.email,
            last_price=3.5,
        ),
        PriceWatch(
            card_id="neo-001",
            direction=WatchDirection.DOWN,
            price_type=WatchPriceType.USD,
            threshold_percent=10.0,
            contact="someone-else@example.com",
            last_price=4.0,
        ),
    ]
    for watch in watches:
        test_session.add(watch)
    test_session.commit()
    return watches
