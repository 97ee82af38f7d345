"""
한국 공휴일 조회 테이블

고정 공휴일(매년 같은 월-일)과 양력으로 미리 변환해 둔 음력 공휴일
(설날, 부처님오신날, 추석 및 대체공휴일)을 합쳐 반환합니다.

음력 → 양력 변환 알고리즘은 포함하지 않습니다. 범위 밖 연도를 지원하려면
``LUNAR_HOLIDAYS`` 에 해당 연도 항목을 추가해야 합니다.
"""

from __future__ import annotations

from datetime import date
from typing import NamedTuple

FIXED_HOLIDAYS: dict[tuple[int, int], str] = {
    (1, 1): "신정",
    (3, 1): "삼일절",
    (5, 5): "어린이날",
    (6, 6): "현충일",
    (8, 15): "광복절",
    (10, 3): "개천절",
    (10, 9): "한글날",
    (12, 25): "크리스마스",
}

LUNAR_HOLIDAYS: dict[int, dict[tuple[int, int], str]] = {
    2024: {
        (2, 9): "설날 연휴",
        (2, 10): "설날",
        (2, 11): "설날 연휴",
        (2, 12): "대체공휴일",
        (5, 15): "부처님오신날",
        (9, 16): "추석 연휴",
        (9, 17): "추석",
        (9, 18): "추석 연휴",
    },
    2025: {
        (1, 28): "설날 연휴",
        (1, 29): "설날",
        (1, 30): "설날 연휴",
        (5, 5): "부처님오신날",
        (10, 5): "추석 연휴",
        (10, 6): "추석",
        (10, 7): "추석 연휴",
        (10, 8): "대체공휴일",
    },
    2026: {
        (2, 16): "설날 연휴",
        (2, 17): "설날",
        (2, 18): "설날 연휴",
        (5, 24): "부처님오신날",
        (9, 24): "추석 연휴",
        (9, 25): "추석",
        (9, 26): "추석 연휴",
    },
    2027: {
        (2, 5): "설날 연휴",
        (2, 6): "설날",
        (2, 7): "설날 연휴",
        (2, 8): "대체공휴일",
        (5, 13): "부처님오신날",
        (9, 14): "추석 연휴",
        (9, 15): "추석",
        (9, 16): "추석 연휴",
    },
    2028: {
        (1, 25): "설날 연휴",
        (1, 26): "설날",
        (1, 27): "설날 연휴",
        (5, 2): "부처님오신날",
        (10, 2): "추석 연휴",
        (10, 3): "추석",
        (10, 4): "추석 연휴",
    },
    2029: {
        (2, 12): "설날 연휴",
        (2, 13): "설날",
        (2, 14): "설날 연휴",
        (5, 20): "부처님오신날",
        (9, 21): "추석 연휴",
        (9, 22): "추석",
        (9, 23): "추석 연휴",
        (9, 24): "대체공휴일",
    },
    2030: {
        (2, 2): "설날 연휴",
        (2, 3): "설날",
        (2, 4): "설날 연휴",
        (5, 9): "부처님오신날",
        (9, 11): "추석 연휴",
        (9, 12): "추석",
        (9, 13): "추석 연휴",
    },
}


class Holiday(NamedTuple):
    date: date
    name: str


def get_holidays(year: int) -> list[Holiday]:
    """
    특정 연도의 공휴일 목록 (날짜순)

    같은 날짜에 고정/음력 공휴일이 겹치면 (예: 2025-05-05) 두 항목 모두
    반환되며 고정 공휴일이 먼저 옵니다.
    """
    holidays = [Holiday(date(year, month, day), name) for (month, day), name in FIXED_HOLIDAYS.items()]
    for (month, day), name in LUNAR_HOLIDAYS.get(year, {}).items():
        holidays.append(Holiday(date(year, month, day), name))
    return sorted(holidays, key=lambda h: h.date)


def get_holiday_days_in_month(year: int, month: int) -> set[int]:
    return {h.date.day for h in get_holidays(year) if h.date.month == month}


def is_holiday(year: int, month: int, day: int) -> bool:
    return any(
        h.date.month == month and h.date.day == day
        for h in get_holidays(year)
    )
