"""
KST(UTC+9) 날짜/시간 유틸리티

저장 형식은 naive UTC datetime 입니다. KST 달력 값(연/월/일)은 항상
UTC 순간에 고정 오프셋(+9시간)을 더한 뒤 추출합니다. 일광절약시간은 없습니다.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import NamedTuple

KST_OFFSET = timedelta(hours=9)
KST = timezone(KST_OFFSET, name="KST")

# 23:59:59.999
_END_OF_DAY = time(23, 59, 59, 999000)


class KSTDateParts(NamedTuple):
    year: int
    month: int
    day: int
    day_of_week: int  # 0 = 일요일
    hours: int
    minutes: int


def as_utc_naive(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant
    return instant.astimezone(timezone.utc).replace(tzinfo=None)


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_kst(instant: datetime) -> datetime:
    """UTC 순간을 KST 벽시계 시각(naive)으로 이동

    naive 입력은 UTC 로 간주합니다.
    """
    return as_utc_naive(instant) + KST_OFFSET


def kst_date_parts(instant: datetime) -> KSTDateParts:
    """
    KST 기준 연/월/일/요일/시/분 추출

    Example:
        >>> kst_date_parts(datetime(2025, 1, 31, 15, 30))
        KSTDateParts(year=2025, month=2, day=1, day_of_week=6, hours=0, minutes=30)
    """
    kst = to_kst(instant)
    return KSTDateParts(
        year=kst.year,
        month=kst.month,
        day=kst.day,
        day_of_week=(kst.weekday() + 1) % 7,
        hours=kst.hour,
        minutes=kst.minute,
    )


def kst_today(now: datetime | None = None) -> date:
    return to_kst(now or utc_now()).date()


def kst_date_range_utc(day: date) -> tuple[datetime, datetime]:
    """KST 달력 날짜 하루를 UTC [00:00:00.000, 23:59:59.999] 범위로 변환"""
    start = datetime.combine(day, time.min) - KST_OFFSET
    end = datetime.combine(day, _END_OF_DAY) - KST_OFFSET
    return start, end


def kst_date_bounds_utc(day: date) -> tuple[datetime, datetime]:
    """조회 필터용 반개구간 [KST 00:00, 다음날 KST 00:00) (UTC)

    표시용 닫힌 범위는 .999 에서 끝나므로 그 뒤 마이크로초가 어느 날에도
    속하지 않습니다. 필터는 항상 ``>= start`` 와 ``< end`` 로 씁니다.
    """
    start = datetime.combine(day, time.min) - KST_OFFSET
    return start, start + timedelta(days=1)


def kst_day_range_utc(instant: datetime) -> tuple[datetime, datetime]:
    """주어진 순간이 속한 KST 하루의 UTC 범위"""
    return kst_date_range_utc(to_kst(instant).date())


def kst_day_start_utc(instant: datetime | None = None) -> datetime:
    return kst_day_range_utc(instant or utc_now())[0]


def kst_day_end_utc(instant: datetime | None = None) -> datetime:
    return kst_day_range_utc(instant or utc_now())[1]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_range_kst(year: int, month: int) -> tuple[datetime, datetime]:
    """KST 기준 월 1일 00:00 ~ 말일 23:59:59.999 를 UTC 로 변환"""
    start, _ = kst_date_range_utc(date(year, month, 1))
    _, end = kst_date_range_utc(date(year, month, days_in_month(year, month)))
    return start, end


def month_bounds_kst(year: int, month: int) -> tuple[datetime, datetime]:
    """KST 월의 UTC 반개구간 [1일 00:00, 다음달 1일 00:00)"""
    start, _ = kst_date_bounds_utc(date(year, month, 1))
    _, end = kst_date_bounds_utc(date(year, month, days_in_month(year, month)))
    return start, end


def last_n_days(days: int, now: datetime | None = None) -> list[date]:
    """KST 오늘을 포함한 최근 N일 (오래된 날짜부터)"""
    if days < 1:
        return []
    today = kst_today(now)
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def last_n_days_range(days: int, now: datetime | None = None) -> tuple[datetime, datetime]:
    """KST 기준 오늘부터 N일 전까지의 UTC 범위"""
    today = kst_today(now)
    start, _ = kst_date_range_utc(today - timedelta(days=max(days, 1) - 1))
    _, end = kst_date_range_utc(today)
    return start, end
