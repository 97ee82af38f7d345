"""
거래 집계용 공통 쿼리 헬퍼

모든 집계는 DB 에서 수행합니다 (SUM / COUNT / GROUP BY). 일자별 시리즈는
KST 하루 범위마다 CASE 합계 컬럼을 하나씩 만들어 단일 쿼리로 계산합니다.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from .. import models
from ..utils.kst import kst_date_bounds_utc

Txn = models.Transaction


def txn_conditions(
    user_id: int,
    *,
    start: Optional[datetime] = None,
    before: Optional[datetime] = None,
    type_: Optional[models.TxnType] = None,
    savings: Optional[bool] = None,
) -> list:
    """삭제되지 않은 사용자 거래 필터 (기간은 [start, before) 반개구간)

    ``savings`` 가 True 면 저축 거래만, False 면 저축 거래를 제외합니다.
    """
    conds = [Txn.user_id == user_id, Txn.deleted_at.is_(None)]
    if start is not None:
        conds.append(Txn.occurred_at >= start)
    if before is not None:
        conds.append(Txn.occurred_at < before)
    if type_ is not None:
        conds.append(Txn.type == type_)
    if savings is True:
        conds.append(Txn.savings_goal_id.isnot(None))
    elif savings is False:
        conds.append(Txn.savings_goal_id.is_(None))
    return conds


def sum_and_count(db: Session, conditions: Iterable) -> tuple[int, int]:
    total, count = (
        db.query(func.coalesce(func.sum(Txn.amount), 0), func.count(Txn.id))
        .filter(*conditions)
        .one()
    )
    return int(total or 0), int(count or 0)


def sum_amount(db: Session, conditions: Iterable) -> int:
    return sum_and_count(db, conditions)[0]


def count_by_type(db: Session, conditions: Iterable) -> dict[models.TxnType, int]:
    rows = (
        db.query(Txn.type, func.count(Txn.id))
        .filter(*conditions)
        .group_by(Txn.type)
        .all()
    )
    counts = {t: 0 for t in models.TxnType}
    for txn_type, count in rows:
        counts[models.TxnType(txn_type)] = int(count)
    return counts


def sum_by_kst_day(db: Session, conditions: Iterable, days: list[date]) -> dict[date, int]:
    """KST 날짜별 금액 합계 (거래가 없는 날은 0)"""
    if not days:
        return {}
    columns = []
    for day in days:
        start, end = kst_date_bounds_utc(day)
        in_day = (Txn.occurred_at >= start) & (Txn.occurred_at < end)
        columns.append(func.coalesce(func.sum(case((in_day, Txn.amount), else_=0)), 0))
    range_start, _ = kst_date_bounds_utc(min(days))
    _, range_end = kst_date_bounds_utc(max(days))
    row = (
        db.query(*columns)
        .filter(*conditions, Txn.occurred_at >= range_start, Txn.occurred_at < range_end)
        .one()
    )
    return {day: int(value or 0) for day, value in zip(days, row)}


def percent(part: int, whole: int) -> int:
    """정수 백분율 (반올림, 분모가 0 이하이면 0)"""
    if whole <= 0:
        return 0
    numerator = part * 200 + whole
    return numerator // (2 * whole)
