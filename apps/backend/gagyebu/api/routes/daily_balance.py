from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.errors import guard
from ...schemas import DailyBalanceOut, DailyBalanceSnapshotIn
from ...services import DailyBalanceService
from ..deps import YearMonth, optional_year_month
from ..responses import success, success_list

router = APIRouter(prefix="/daily-balance", tags=["daily-balance"])


def _out(row) -> DailyBalanceOut:
    return DailyBalanceOut(
        date=row.day,
        income=row.income,
        expense=row.expense,
        savings=row.savings,
        balance=row.balance,
    )


@router.get("")
def get_daily_balances(
    user_id: int = Query(..., ge=1),
    days: int = Query(5, ge=1, le=366),
    period: Optional[YearMonth] = Depends(optional_year_month),
    db: Session = Depends(get_db),
):
    """월 지정 시 그 달 전체, 아니면 최근 N일 스냅샷 (없으면 거래로부터 계산)"""
    svc = DailyBalanceService(db)
    with guard("일별 잔액 조회 중 오류가 발생했습니다", user_id=user_id):
        if period is not None:
            series = svc.monthly(user_id, period.year, period.month)
            return success_list([DailyBalanceOut(**entry) for entry in series])

        rows = svc.recent(user_id, days)
        if not rows:
            series = svc.calculate_recent(user_id, days)
            return success_list(
                [DailyBalanceOut(**entry) for entry in series], message="거래 데이터로부터 계산된 잔액입니다"
            )
    return success_list([_out(r) for r in rows])


@router.post("")
def save_daily_balance(payload: DailyBalanceSnapshotIn, db: Session = Depends(get_db)):
    with guard("일별 잔액 저장 중 오류가 발생했습니다", user_id=payload.user_id):
        row = DailyBalanceService(db).save_snapshot(
            payload.user_id,
            payload.date,
            balance=payload.balance,
            income=payload.income,
            expense=payload.expense,
            savings=payload.savings,
        )
    return success(_out(row), "일별 잔액이 저장되었습니다")
