from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from .. import models
from ..utils.kst import (
    days_in_month,
    kst_date_bounds_utc,
    kst_today,
    last_n_days,
    to_kst,
)
from .aggregates import sum_amount, sum_by_kst_day, txn_conditions


class DailyBalanceService:
    """KST 일자별 잔액 스냅샷 관리

    balance(day) = 직전 스냅샷 잔액 + 수입 - 지출 - 저축
    (수입/지출은 저축 거래를 제외한 금액)
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _get(self, user_id: int, day: date) -> models.DailyBalance | None:
        return (
            self.db.query(models.DailyBalance)
            .filter(models.DailyBalance.user_id == user_id, models.DailyBalance.day == day)
            .first()
        )

    def _previous_balance(self, user_id: int, day: date) -> int:
        prev = (
            self.db.query(models.DailyBalance)
            .filter(models.DailyBalance.user_id == user_id, models.DailyBalance.day < day)
            .order_by(models.DailyBalance.day.desc())
            .first()
        )
        return prev.balance if prev else 0

    def _day_totals(self, user_id: int, day: date) -> tuple[int, int, int]:
        start, end = kst_date_bounds_utc(day)
        income = sum_amount(
            self.db, txn_conditions(user_id, start=start, before=end, type_=models.TxnType.INCOME, savings=False)
        )
        expense = sum_amount(
            self.db, txn_conditions(user_id, start=start, before=end, type_=models.TxnType.EXPENSE, savings=False)
        )
        savings = sum_amount(self.db, txn_conditions(user_id, start=start, before=end, savings=True))
        return income, expense, savings

    def _upsert(self, user_id: int, day: date, **values: int) -> models.DailyBalance:
        row = self._get(user_id, day)
        if row is None:
            row = models.DailyBalance(user_id=user_id, day=day, **values)
            self.db.add(row)
        else:
            for key, value in values.items():
                setattr(row, key, value)
        self.db.flush()
        return row

    def refresh_day(self, user_id: int, instant: datetime) -> models.DailyBalance:
        """거래가 속한 KST 날짜의 스냅샷을 다시 계산하고 이후 스냅샷에 전파

        커밋은 호출자가 합니다. 대기 중인 거래 변경이 보이도록 먼저 flush 합니다.
        """
        self.db.flush()
        day = to_kst(instant).date()
        row = self._recompute(user_id, day, self._previous_balance(user_id, day))

        later = (
            self.db.query(models.DailyBalance)
            .filter(models.DailyBalance.user_id == user_id, models.DailyBalance.day > day)
            .order_by(models.DailyBalance.day.asc())
            .all()
        )
        balance = row.balance
        for snapshot in later:
            balance = self._recompute(user_id, snapshot.day, balance).balance
        return row

    def _recompute(self, user_id: int, day: date, opening: int) -> models.DailyBalance:
        income, expense, savings = self._day_totals(user_id, day)
        return self._upsert(
            user_id,
            day,
            income=income,
            expense=expense,
            savings=savings,
            balance=opening + income - expense - savings,
        )

    def save_snapshot(
        self,
        user_id: int,
        day: date,
        *,
        balance: int = 0,
        income: int = 0,
        expense: int = 0,
        savings: int = 0,
    ) -> models.DailyBalance:
        row = self._upsert(user_id, day, balance=balance, income=income, expense=expense, savings=savings)
        self.db.commit()
        self.db.refresh(row)
        return row

    def recent(self, user_id: int, days: int = 5, now: Optional[datetime] = None) -> list[models.DailyBalance]:
        today = kst_today(now)
        since = today - timedelta(days=max(days, 1) - 1)
        return (
            self.db.query(models.DailyBalance)
            .filter(
                models.DailyBalance.user_id == user_id,
                models.DailyBalance.day >= since,
                models.DailyBalance.day <= today,
            )
            .order_by(models.DailyBalance.day.asc())
            .all()
        )

    def calculate_recent(self, user_id: int, days: int = 5, now: Optional[datetime] = None) -> list[dict]:
        """스냅샷이 없을 때 거래로부터 최근 N일 잔액 계산 (저장하지 않음)"""
        return self._series(user_id, last_n_days(max(days, 1), now))

    def monthly(self, user_id: int, year: int, month: int) -> list[dict]:
        """월 전체 일자별 잔액 (거래 집계 기반, 월초 이전 누적 잔액에서 시작)"""
        days = [date(year, month, d) for d in range(1, days_in_month(year, month) + 1)]
        return self._series(user_id, days)

    def _series(self, user_id: int, days: list[date]) -> list[dict]:
        before, _ = kst_date_bounds_utc(days[0])
        opening = (
            sum_amount(self.db, txn_conditions(user_id, before=before, type_=models.TxnType.INCOME, savings=False))
            - sum_amount(self.db, txn_conditions(user_id, before=before, type_=models.TxnType.EXPENSE, savings=False))
            - sum_amount(self.db, txn_conditions(user_id, before=before, savings=True))
        )

        income = sum_by_kst_day(self.db, txn_conditions(user_id, type_=models.TxnType.INCOME, savings=False), days)
        expense = sum_by_kst_day(self.db, txn_conditions(user_id, type_=models.TxnType.EXPENSE, savings=False), days)
        savings = sum_by_kst_day(self.db, txn_conditions(user_id, savings=True), days)

        series: list[dict] = []
        balance = opening
        for day in days:
            balance += income[day] - expense[day] - savings[day]
            series.append({
                "date": day,
                "income": income[day],
                "expense": expense[day],
                "savings": savings[day],
                "balance": balance,
            })
        return series
