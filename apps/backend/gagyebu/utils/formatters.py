"""
응답 메시지/라벨용 포매팅 함수
"""

from __future__ import annotations


def format_number(value: int) -> str:
    """천단위 콤마

    Example:
        >>> format_number(1234567)
        "1,234,567"
    """
    return f"{value:,}"


def format_year_month(year: int, month: int) -> str:
    return f"{year}년 {month}월"


def format_goal_target(year: int, month: int) -> str:
    return f"{format_year_month(year, month)} 목표"
