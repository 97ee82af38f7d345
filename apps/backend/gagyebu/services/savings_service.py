from __future__ import annotations

import logging
from datetime import date, datetime
from typing import NamedTuple, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from .. import models, schemas
from ..core.errors import BadRequestError, NotFoundError
from ..utils.formatters import format_goal_target
from ..utils.kst import kst_today, month_bounds_kst, utc_now
from .aggregates import percent
from .daily_balance_service import DailyBalanceService
from .transaction_service import validate_amount

logger = logging.getLogger(__name__)


class GoalProgress(NamedTuple):
    months_remaining: int
    amount_remaining: int
    monthly_required: int
    progress_percent: int


def months_remaining(target_year: int, target_month: int, current_year: int, current_month: int) -> int:
    # 이번 달이 목표 월이거나 지났으면 1
    return max(1, (target_year - current_year) * 12 + (target_month - current_month))


def goal_progress(
    target_amount: int,
    current_amount: int,
    target_year: int,
    target_month: int,
    current_year: int,
    current_month: int,
) -> GoalProgress:
    """
    저축 목표 진행률 계산

    Example:
        >>> goal_progress(2_000_000, 500_000, 2026, 1, 2025, 1)
        GoalProgress(months_remaining=12, amount_remaining=1500000, monthly_required=125000, progress_percent=25)
    """
    months = months_remaining(target_year, target_month, current_year, current_month)
    remaining = max(0, target_amount - current_amount)
    return GoalProgress(
        months_remaining=months,
        amount_remaining=remaining,
        monthly_required=-(-remaining // months),
        progress_percent=percent(current_amount, target_amount),
    )


class SavingsService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _query(self, user_id: int):
        return self.db.query(models.SavingsGoal).filter(
            models.SavingsGoal.user_id == user_id,
            models.SavingsGoal.deleted_at.is_(None),
        )

    def get(self, goal_id: int, user_id: int) -> models.SavingsGoal:
        goal = self._query(user_id).filter(models.SavingsGoal.id == goal_id).first()
        if goal is None:
            raise NotFoundError("Savings goal not found")
        return goal

    def _clear_primary(self, user_id: int, keep_id: Optional[int] = None) -> None:
        q = self._query(user_id).filter(models.SavingsGoal.is_primary.is_(True))
        if keep_id is not None:
            q = q.filter(models.SavingsGoal.id != keep_id)
        q.update({models.SavingsGoal.is_primary: False}, synchronize_session="fetch")

    def _this_month_savings(self, user_id: int, today: date) -> dict[int, int]:
        start, end = month_bounds_kst(today.year, today.month)
        rows = (
            self.db.query(models.Transaction.savings_goal_id, func.coalesce(func.sum(models.Transaction.amount), 0))
            .filter(
                models.Transaction.user_id == user_id,
                models.Transaction.deleted_at.is_(None),
                models.Transaction.savings_goal_id.isnot(None),
                models.Transaction.occurred_at >= start,
                models.Transaction.occurred_at < end,
            )
            .group_by(models.Transaction.savings_goal_id)
            .all()
        )
        return {goal_id: int(total) for goal_id, total in rows}

    def active_query(self, user_id: int, today: date):
        """진행 중인 목표 (목표 월이 이번 달 이후, 같은 달 포함), 대표 목표 우선"""
        return (
            self._query(user_id)
            .filter(
                or_(
                    models.SavingsGoal.target_year > today.year,
                    and_(
                        models.SavingsGoal.target_year == today.year,
                        models.SavingsGoal.target_month >= today.month,
                    ),
                )
            )
            .order_by(models.SavingsGoal.is_primary.desc(), models.SavingsGoal.created_at.desc())
        )

    def list_active(self, user_id: int, today: Optional[date] = None) -> list[schemas.SavingsGoalProgressOut]:
        today = today or kst_today()
        goals = self.active_query(user_id, today).all()
        this_month = self._this_month_savings(user_id, today)

        result = []
        for goal in goals:
            progress = goal_progress(
                goal.target_amount, goal.current_amount,
                goal.target_year, goal.target_month,
                today.year, today.month,
            )
            result.append(schemas.SavingsGoalProgressOut(
                id=goal.id,
                name=goal.name,
                icon=goal.icon,
                target_date=format_goal_target(goal.target_year, goal.target_month),
                current_amount=goal.current_amount,
                target_amount=goal.target_amount,
                target_year=goal.target_year,
                target_month=goal.target_month,
                is_primary=goal.is_primary,
                this_month_savings=this_month.get(goal.id, 0),
                **progress._asdict(),
            ))
        return result

    def create(self, payload: schemas.SavingsGoalCreate) -> models.SavingsGoal:
        goal = models.SavingsGoal(
            user_id=payload.user_id,
            name=payload.name.strip(),
            icon=payload.icon,
            target_amount=payload.target_amount,
            current_amount=payload.current_amount,
            target_year=payload.target_year,
            target_month=payload.target_month,
            is_primary=False,
        )
        self.db.add(goal)
        self.db.commit()
        self.db.refresh(goal)
        return goal

    def update(self, goal_id: int, payload: schemas.SavingsGoalUpdate) -> models.SavingsGoal:
        goal = self.get(goal_id, payload.user_id)
        patch = payload.model_dump(exclude_unset=True, exclude={"user_id"})
        for key in ("name", "icon", "target_amount", "target_year", "target_month", "is_primary"):
            if key in patch and patch[key] is None:
                raise BadRequestError(f"{key} cannot be null")
        if patch.get("is_primary"):
            self._clear_primary(payload.user_id, keep_id=goal.id)
        if "name" in patch:
            patch["name"] = patch["name"].strip()
        for key, value in patch.items():
            setattr(goal, key, value)
        self.db.commit()
        self.db.refresh(goal)
        return goal

    def set_primary(self, goal_id: int, user_id: int, is_primary: bool) -> models.SavingsGoal:
        goal = self.get(goal_id, user_id)
        if is_primary:
            self._clear_primary(user_id, keep_id=goal.id)
        goal.is_primary = is_primary
        self.db.commit()
        self.db.refresh(goal)
        return goal

    def delete(self, goal_id: int, user_id: int) -> None:
        goal = self.get(goal_id, user_id)
        goal.soft_delete()
        goal.is_primary = False
        self.db.commit()

    def deposit(
        self,
        goal_id: int,
        user_id: int,
        amount: int,
        now: Optional[datetime] = None,
    ) -> tuple[models.SavingsGoal, models.Transaction]:
        """목표에 저축 입금

        목표 금액 증가와 저축 거래(EXPENSE, 카테고리 없음) 생성, 일별 잔액 갱신을
        한 번의 커밋으로 처리합니다. 실패하면 모두 롤백됩니다.
        """
        validate_amount(amount)
        goal = self.get(goal_id, user_id)
        occurred_at = now or utc_now()

        try:
            # 동시 입금에도 누락이 없도록 DB 에서 증가
            goal.current_amount = models.SavingsGoal.current_amount + amount
            txn = models.Transaction(
                user_id=user_id,
                type=models.TxnType.EXPENSE,
                amount=amount,
                occurred_at=occurred_at,
                description=f"{goal.name} 저축",
                category_id=None,
                savings_goal_id=goal.id,
            )
            self.db.add(txn)
            DailyBalanceService(self.db).refresh_day(user_id, occurred_at)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.warning("savings deposit rolled back goal_id=%s user_id=%s amount=%s", goal_id, user_id, amount)
            raise

        self.db.refresh(goal)
        self.db.refresh(txn)
        return goal, txn

    def summary(self, user_id: int) -> schemas.SavingsSummaryOut:
        total_current, total_target, count = (
            self.db.query(
                func.coalesce(func.sum(models.SavingsGoal.current_amount), 0),
                func.coalesce(func.sum(models.SavingsGoal.target_amount), 0),
                func.count(models.SavingsGoal.id),
            )
            .filter(models.SavingsGoal.user_id == user_id, models.SavingsGoal.deleted_at.is_(None))
            .one()
        )
        return schemas.SavingsSummaryOut(
            total_current_amount=int(total_current),
            total_target_amount=int(total_target),
            goals_count=int(count),
            progress_percent=percent(int(total_current), int(total_target)),
        )
