from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from ...schemas import HolidayOut, HolidaysOut
from ...utils.holidays import get_holiday_days_in_month, get_holidays
from ...utils.kst import kst_today
from ..responses import success

router = APIRouter(prefix="/holidays", tags=["holidays"])


@router.get("")
def list_holidays(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
):
    year = year or kst_today().year
    holidays = get_holidays(year)
    result = HolidaysOut(year=year, holidays=[HolidayOut(date=h.date, name=h.name) for h in holidays])
    if month is not None:
        result.month = month
        result.holidays = [h for h in result.holidays if h.date.month == month]
        result.holiday_days = sorted(get_holiday_days_in_month(year, month))
    return success(result)
