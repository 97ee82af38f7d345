from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.database import get_db
from ...core.errors import guard
from ...services import SummaryService
from ..deps import YearMonth, required_year_month
from ..responses import success

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("")
def monthly_stats(
    user_id: int = Query(..., ge=1),
    period: YearMonth = Depends(required_year_month),
    days: int = Query(settings.STATS_TRAILING_DAYS, ge=1, le=31),
    db: Session = Depends(get_db),
):
    with guard("Failed to fetch stats", user_id=user_id, year=period.year, month=period.month):
        result = SummaryService(db).monthly_stats(user_id, period.year, period.month, days=days)
    return success(result)
