from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from .. import models, schemas
from ..core.errors import BadRequestError, NotFoundError


class BudgetService:
    """월별 예산 (category_id 가 NULL 이면 월 전체 예산)"""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _match(self, user_id: int, category_id: Optional[int], month: date):
        q = self.db.query(models.Budget).filter(
            models.Budget.user_id == user_id,
            models.Budget.month == month,
        )
        if category_id is None:
            return q.filter(models.Budget.category_id.is_(None))
        return q.filter(models.Budget.category_id == category_id)

    def upsert(self, payload: schemas.BudgetUpsert) -> models.Budget:
        """(사용자, 카테고리, 월) 기준 생성 또는 갱신

        같은 요청을 반복해도 행은 하나만 유지됩니다. 삭제된 행이 있으면 복구합니다.
        """
        if payload.amount < 0:
            raise BadRequestError("amount must be 0 or greater")
        if payload.category_id is not None:
            category = (
                self.db.query(models.Category)
                .filter(
                    models.Category.id == payload.category_id,
                    models.Category.user_id == payload.user_id,
                    models.Category.type == models.TxnType.EXPENSE,
                    models.Category.deleted_at.is_(None),
                )
                .first()
            )
            if category is None:
                raise BadRequestError("Invalid category or category type mismatch")

        month = date(payload.year, payload.month, 1)
        budget = self._match(payload.user_id, payload.category_id, month).first()
        if budget is None:
            budget = models.Budget(
                user_id=payload.user_id,
                category_id=payload.category_id,
                month=month,
                amount=payload.amount,
            )
            self.db.add(budget)
        else:
            budget.amount = payload.amount
            budget.deleted_at = None
        self.db.commit()
        self.db.refresh(budget)
        return budget

    def list(self, user_id: int, year: Optional[int] = None, month: Optional[int] = None) -> list[models.Budget]:
        """예산 목록

        특정 월 조회 시 기본 예산이 있는 지출 카테고리 중 그 달 예산 행이 없는
        카테고리는 기본 예산으로 행을 만들어 함께 반환합니다. 명시적으로 삭제된
        예산은 다시 만들지 않습니다.
        """
        q = self.db.query(models.Budget).filter(
            models.Budget.user_id == user_id,
            models.Budget.deleted_at.is_(None),
        )
        if year is None or month is None:
            return q.order_by(models.Budget.month.desc(), models.Budget.id.asc()).all()

        month_key = date(year, month, 1)
        existing = {
            category_id
            for (category_id,) in self.db.query(models.Budget.category_id).filter(
                models.Budget.user_id == user_id,
                models.Budget.month == month_key,
                models.Budget.category_id.isnot(None),
            )
        }
        defaults = (
            self.db.query(models.Category)
            .filter(
                models.Category.user_id == user_id,
                models.Category.type == models.TxnType.EXPENSE,
                models.Category.default_budget.isnot(None),
                models.Category.deleted_at.is_(None),
            )
            .all()
        )
        created = [
            models.Budget(user_id=user_id, category_id=c.id, month=month_key, amount=c.default_budget)
            for c in defaults
            if c.id not in existing
        ]
        if created:
            self.db.add_all(created)
            self.db.commit()

        return (
            q.filter(models.Budget.month == month_key)
            .order_by(models.Budget.category_id.is_(None).desc(), models.Budget.id.asc())
            .all()
        )

    def delete(self, user_id: int, year: int, month: int, category_id: Optional[int] = None) -> None:
        budget = (
            self._match(user_id, category_id, date(year, month, 1))
            .filter(models.Budget.deleted_at.is_(None))
            .first()
        )
        if budget is None:
            raise NotFoundError("Budget not found")
        budget.soft_delete()
        self.db.commit()
