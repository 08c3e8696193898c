from contextlib import asynccontextmanager
from typing import Any, cast

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from cardvault.api import portfolio
from cardvault.core.config import settings
from cardvault.core.errors import init_sentry
from cardvault.core.logging_config import get_logger
from cardvault.db import create_db_and_tables
from cardvault.middleware.context import RequestContextMiddleware

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("CardVault API starting", environment=settings.ENVIRONMENT)
    init_sentry(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
    )
    create_db_and_tables()
    yield


app = FastAPI(title=settings.PROJECT_NAME, openapi_url=f"{settings.API_V1_STR}/openapi.json", lifespan=lifespan)

# GZip compression for responses > 1KB; summaries with long trend series compress well
app.add_middleware(cast(Any, GZipMiddleware), minimum_size=1000)

app.add_middleware(cast(Any, RequestContextMiddleware))

app.add_middleware(
    cast(Any, CORSMiddleware),
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.include_router(portfolio.router, prefix=f"{settings.API_V1_STR}/portfolio", tags=["portfolio"])


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "healthy"}
