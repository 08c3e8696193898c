from sqlmodel import create_engine, SQLModel, Session
import logging

from cardvault.core.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

if DATABASE_URL.startswith("sqlite"):
    # SQLite connections are used from FastAPI's threadpool
    engine = create_engine(
        DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Verify connections before use
        pool_recycle=300,
        pool_timeout=30,
    )


def get_session():
    with Session(engine) as session:
        yield session


def create_db_and_tables():
    # Import models so every table is registered on the metadata
    import cardvault.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables ensured")
