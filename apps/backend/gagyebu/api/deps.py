from __future__ import annotations

from typing import NamedTuple, Optional

from fastapi import Query

from ..core.errors import BadRequestError


class YearMonth(NamedTuple):
    year: int
    month: int


def validate_year_month(year: Optional[int], month: Optional[int]) -> YearMonth:
    if year is None or month is None:
        raise BadRequestError("year and month are required")
    if not 1 <= month <= 12:
        raise BadRequestError("month must be between 1 and 12")
    if not 1900 <= year <= 9999:
        raise BadRequestError("year is out of range")
    return YearMonth(year, month)


def required_year_month(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
) -> YearMonth:
    return validate_year_month(year, month)


def optional_year_month(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
) -> Optional[YearMonth]:
    if year is None and month is None:
        return None
    return validate_year_month(year, month)
