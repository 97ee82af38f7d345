"""
Utils 패키지
"""

from .holidays import get_holidays, get_holiday_days_in_month, is_holiday
from .kst import (
    kst_date_parts,
    kst_day_range_utc,
    kst_date_range_utc,
    month_range_kst,
    last_n_days_range,
)

__all__ = [
    "get_holidays",
    "get_holiday_days_in_month",
    "is_holiday",
    "kst_date_parts",
    "kst_day_range_utc",
    "kst_date_range_utc",
    "month_range_kst",
    "last_n_days_range",
]
