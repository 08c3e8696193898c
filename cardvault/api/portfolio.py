from typing import Any
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from cardvault.api import deps
from cardvault.core.errors import ErrorHandler
from cardvault.core.logging_config import get_logger
from cardvault.db import get_session
from cardvault.models.user import User
from cardvault.schemas import PortfolioSummary
from cardvault.services.portfolio.constants import TrendTimeframe
from cardvault.services.portfolio.engine import PortfolioAnalyticsService
from cardvault.services.portfolio_data import PortfolioDataLoader, PortfolioDataUnavailable

logger = get_logger(__name__)

router = APIRouter()

analytics_service = PortfolioAnalyticsService()


@router.get("/summary", response_model=PortfolioSummary)
def get_portfolio_summary(
    timeframe: TrendTimeframe = Query(TrendTimeframe.ALL, description="Window of the value trend series"),
    session: Session = Depends(get_session),
    current_user: User = Depends(deps.get_current_user),
) -> Any:
    """
    Valuation, allocation, trend, movers, volatility and watch progress of
    the current user's collection.
    """
    try:
        with ErrorHandler("load_portfolio_inputs", context={"user_id": current_user.id}, reraise=True):
            inputs = PortfolioDataLoader(session).load(current_user)
    except PortfolioDataUnavailable as e:
        logger.warning("portfolio summary unavailable", user_id=current_user.id, reason=e.reason)
        raise HTTPException(status_code=503, detail="Portfolio data is temporarily unavailable")

    return analytics_service.build_summary(inputs, timeframe=timeframe)
