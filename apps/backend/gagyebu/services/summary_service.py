"""
월간/일간 집계 서비스

- 총 지출(total_expense)은 저축 거래를 포함한 총액입니다.
- balance = 총 수입 - 총 지출 (저축은 한 번만 차감)
- net_amount = 총 수입 - (총 지출 - 저축) : 실제 소비 기준 순수익
- 오늘 요약의 지출 버킷은 저축 거래를 제외하고, 저축은 별도 버킷으로 보고합니다.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models, schemas
from ..utils.formatters import format_goal_target
from ..utils.kst import kst_date_bounds_utc, kst_date_parts, kst_today, last_n_days, month_bounds_kst, utc_now
from .aggregates import count_by_type, percent, sum_and_count, sum_by_kst_day, txn_conditions
from .savings_service import SavingsService

logger = logging.getLogger(__name__)

Txn = models.Transaction


def budget_usage(amount: int, used: int) -> schemas.BudgetUsageOut:
    """예산 사용률 (남은 금액은 0 미만이 되지 않고 사용률은 100에서 잘림)"""
    return schemas.BudgetUsageOut(
        amount=amount,
        used=used,
        remaining=max(0, amount - used),
        usage_percent=min(100, percent(used, amount)),
    )


class SummaryService:
    def __init__(self, db: Session) -> None:
        self.db = db

    # ---- Helpers ---------------------------------------------------------
    def _category_groups(self, conditions: list) -> list[tuple[models.Category, int, int]]:
        """카테고리별 지출 (count, total), 합계 내림차순

        하드 삭제된 카테고리의 그룹은 버립니다.
        """
        rows = (
            self.db.query(Txn.category_id, func.count(Txn.id), func.coalesce(func.sum(Txn.amount), 0))
            .filter(*conditions, Txn.type == models.TxnType.EXPENSE, Txn.category_id.isnot(None))
            .group_by(Txn.category_id)
            .all()
        )
        if not rows:
            return []
        ids = [category_id for category_id, _, _ in rows]
        lookup = {c.id: c for c in self.db.query(models.Category).filter(models.Category.id.in_(ids)).all()}
        groups = [
            (lookup[category_id], int(count), int(total))
            for category_id, count, total in rows
            if category_id in lookup
        ]
        groups.sort(key=lambda g: (-g[2], g[0].id))
        return groups

    def _month_budget(self, user_id: int, month: date) -> int:
        row = (
            self.db.query(models.Budget)
            .filter(
                models.Budget.user_id == user_id,
                models.Budget.category_id.is_(None),
                models.Budget.month == month,
                models.Budget.deleted_at.is_(None),
            )
            .first()
        )
        return row.amount if row else 0

    def _category_budgets(self, user_id: int, month: date, category_ids: list[int]) -> dict[int, int]:
        if not category_ids:
            return {}
        rows = (
            self.db.query(models.Budget.category_id, models.Budget.amount)
            .filter(
                models.Budget.user_id == user_id,
                models.Budget.month == month,
                models.Budget.category_id.in_(category_ids),
                models.Budget.deleted_at.is_(None),
            )
            .all()
        )
        return {category_id: amount for category_id, amount in rows}

    def _active_goals(self, user_id: int, today: date) -> list[models.SavingsGoal]:
        return SavingsService(self.db).active_query(user_id, today).all()

    # ---- Operations ------------------------------------------------------
    def monthly_summary(
        self,
        user_id: int,
        year: int,
        month: int,
        today: Optional[date] = None,
    ) -> schemas.MonthlySummaryOut:
        start, end = month_bounds_kst(year, month)
        month_key = date(year, month, 1)
        period = txn_conditions(user_id, start=start, before=end)

        total_income, _ = sum_and_count(self.db, period + [Txn.type == models.TxnType.INCOME])
        total_expense, _ = sum_and_count(self.db, period + [Txn.type == models.TxnType.EXPENSE])
        total_savings, savings_count = sum_and_count(self.db, period + [Txn.savings_goal_id.isnot(None)])
        counts = count_by_type(self.db, period)

        groups = self._category_groups(period)
        category_budgets = self._category_budgets(user_id, month_key, [c.id for c, _, _ in groups])
        categories: list[schemas.CategorySummaryItem] = []
        for category, count, total in groups:
            budget = category_budgets.get(category.id, category.default_budget)
            categories.append(schemas.CategorySummaryItem(
                id=category.id,
                name=category.name,
                icon=category.icon,
                color=category.color,
                count=count,
                total=total,
                budget=budget,
                budget_usage_percent=percent(total, budget) if budget is not None else None,
            ))

        goals = self._active_goals(user_id, today or kst_today())
        primary = next((g for g in goals if g.is_primary), None)
        primary_out = None
        if primary is not None:
            primary_out = schemas.PrimaryGoalOut(
                id=primary.id,
                name=primary.name,
                icon=primary.icon,
                current_amount=primary.current_amount,
                target_amount=primary.target_amount,
                target_date=format_goal_target(primary.target_year, primary.target_month),
                progress_percent=percent(primary.current_amount, primary.target_amount),
            )

        return schemas.MonthlySummaryOut(
            period=schemas.PeriodOut(year=year, month=month),
            summary=schemas.TotalsOut(
                total_income=total_income,
                total_expense=total_expense,
                total_savings=total_savings,
                net_amount=total_income - (total_expense - total_savings),
                balance=total_income - total_expense,
            ),
            budget=budget_usage(self._month_budget(user_id, month_key), total_expense),
            categories=categories,
            transaction_count=schemas.TransactionCountOut(
                income=counts[models.TxnType.INCOME],
                expense=counts[models.TxnType.EXPENSE],
                savings=savings_count,
                total=counts[models.TxnType.INCOME] + counts[models.TxnType.EXPENSE],
            ),
            savings=schemas.MonthlySavingsOut(
                total_amount=total_savings,
                target_amount=sum(g.target_amount for g in goals),
                count=savings_count,
                primary_goal=primary_out,
            ),
        )

    def trailing_expenses(
        self,
        user_id: int,
        days: int,
        now: Optional[datetime] = None,
    ) -> list[schemas.DailyAmountOut]:
        """KST 오늘로 끝나는 최근 N일 지출 합계 (정확히 N개, 날짜 오름차순)"""
        window = last_n_days(days, now)
        totals = sum_by_kst_day(self.db, txn_conditions(user_id, type_=models.TxnType.EXPENSE), window)
        return [schemas.DailyAmountOut(date=day, amount=totals[day]) for day in window]

    def monthly_stats(
        self,
        user_id: int,
        year: int,
        month: int,
        days: int = 7,
        now: Optional[datetime] = None,
    ) -> schemas.MonthlyStatsOut:
        start, end = month_bounds_kst(year, month)
        period = txn_conditions(user_id, start=start, before=end)

        total_income, income_count = sum_and_count(self.db, period + [Txn.type == models.TxnType.INCOME])
        total_expense, expense_count = sum_and_count(self.db, period + [Txn.type == models.TxnType.EXPENSE])

        breakdown = [
            schemas.CategoryBreakdownItem(
                category_id=category.id,
                category_name=category.name,
                color=category.color,
                icon=category.icon,
                count=count,
                total=total,
            )
            for category, count, total in self._category_groups(period)
        ]

        return schemas.MonthlyStatsOut(
            summary=schemas.StatsTotalsOut(
                total_income=total_income,
                total_expense=total_expense,
                balance=total_income - total_expense,
                income_count=income_count,
                expense_count=expense_count,
                transaction_count=income_count + expense_count,
            ),
            budget=budget_usage(self._month_budget(user_id, date(year, month, 1)), total_expense),
            category_breakdown=breakdown,
            last_days=self.trailing_expenses(user_id, days, now),
        )

    def today_summary(self, user_id: int, now: Optional[datetime] = None) -> schemas.TodaySummaryOut:
        now = now or utc_now()
        start, end = kst_date_bounds_utc(kst_today(now))
        parts = kst_date_parts(now)

        expense = sum_and_count(
            self.db, txn_conditions(user_id, start=start, before=end, type_=models.TxnType.EXPENSE, savings=False)
        )
        income = sum_and_count(
            self.db, txn_conditions(user_id, start=start, before=end, type_=models.TxnType.INCOME)
        )
        savings = sum_and_count(self.db, txn_conditions(user_id, start=start, before=end, savings=True))
        logger.debug("today summary user_id=%s range=%s~%s", user_id, start, end)

        return schemas.TodaySummaryOut(
            date=now if now.tzinfo else now.replace(tzinfo=timezone.utc),
            year=parts.year,
            month=parts.month,
            day=parts.day,
            day_of_week=parts.day_of_week,
            expense=schemas.BucketOut(total=expense[0], count=expense[1]),
            income=schemas.BucketOut(total=income[0], count=income[1]),
            savings=schemas.BucketOut(total=savings[0], count=savings[1]),
        )
