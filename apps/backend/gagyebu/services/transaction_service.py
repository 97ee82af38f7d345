from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .. import models, schemas
from ..core.config import settings
from ..core.errors import BadRequestError, NotFoundError
from ..utils.kst import as_utc_naive, kst_date_parts, month_bounds_kst, utc_now
from .daily_balance_service import DailyBalanceService

logger = logging.getLogger(__name__)

Txn = models.Transaction

INVALID_CATEGORY = "Invalid category or category type mismatch"


def validate_amount(amount: Optional[int]) -> int:
    """거래 금액 검증 (양의 정수, 최대 1000억)"""
    if amount is None:
        raise BadRequestError("amount is required")
    if amount <= 0:
        raise BadRequestError("amount must be greater than 0")
    if amount > settings.MAX_TRANSACTION_AMOUNT:
        raise BadRequestError(f"amount must not exceed {settings.MAX_TRANSACTION_AMOUNT:,}")
    return amount


class TransactionService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.balances = DailyBalanceService(db)

    # ---- Helpers ---------------------------------------------------------
    def _query(self, user_id: int):
        return self.db.query(Txn).filter(Txn.user_id == user_id, Txn.deleted_at.is_(None))

    def get(self, txn_id: int, user_id: int) -> models.Transaction:
        txn = self._query(user_id).filter(Txn.id == txn_id).first()
        if txn is None:
            raise NotFoundError("Transaction not found")
        return txn

    def _check_category(self, user_id: int, category_id: int, txn_type: models.TxnType) -> models.Category:
        category = (
            self.db.query(models.Category)
            .filter(
                models.Category.id == category_id,
                models.Category.user_id == user_id,
                models.Category.type == txn_type,
                models.Category.deleted_at.is_(None),
            )
            .first()
        )
        if category is None:
            raise BadRequestError(INVALID_CATEGORY)
        return category

    def _shift_goal(self, goal_id: int, delta: int) -> None:
        goal = self.db.get(models.SavingsGoal, goal_id)
        if goal is None:
            return
        goal.current_amount = max(0, goal.current_amount + delta)

    # ---- CRUD ------------------------------------------------------------
    def create(self, payload: schemas.TransactionCreate) -> models.Transaction:
        amount = validate_amount(payload.amount)
        if payload.category_id is not None:
            self._check_category(payload.user_id, payload.category_id, payload.type)
        occurred_at = as_utc_naive(payload.occurred_at) if payload.occurred_at else utc_now()
        description = payload.description.strip() if payload.description else None

        txn = Txn(
            user_id=payload.user_id,
            type=payload.type,
            amount=amount,
            occurred_at=occurred_at,
            description=description or None,
            category_id=payload.category_id,
        )
        try:
            self.db.add(txn)
            self.balances.refresh_day(payload.user_id, occurred_at)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(txn)
        return txn

    def update(self, txn_id: int, payload: schemas.TransactionUpdate) -> models.Transaction:
        """전달된 필드만 수정 (category_id 를 null 로 보내면 카테고리 해제)"""
        txn = self.get(txn_id, payload.user_id)
        fields = payload.model_fields_set
        previous_day = txn.occurred_at
        previous_amount = txn.amount

        for key in ("type", "amount", "occurred_at"):
            if key in fields and getattr(payload, key) is None:
                raise BadRequestError(f"{key} cannot be null")

        new_type = payload.type if "type" in fields else txn.type
        if txn.is_savings:
            if new_type != models.TxnType.EXPENSE:
                raise BadRequestError("Savings transactions must stay EXPENSE")
            if "category_id" in fields and payload.category_id is not None:
                raise BadRequestError("Savings transactions cannot have a category")

        new_category_id = payload.category_id if "category_id" in fields else txn.category_id
        if new_category_id is not None and ("category_id" in fields or new_type != txn.type):
            self._check_category(payload.user_id, new_category_id, new_type)

        if "amount" in fields:
            txn.amount = validate_amount(payload.amount)
        if "description" in fields:
            txn.description = payload.description.strip() if payload.description else None
        if "occurred_at" in fields:
            txn.occurred_at = as_utc_naive(payload.occurred_at)
        txn.type = new_type
        txn.category_id = new_category_id

        try:
            if txn.is_savings and txn.amount != previous_amount:
                self._shift_goal(txn.savings_goal_id, txn.amount - previous_amount)
            self.balances.refresh_day(txn.user_id, previous_day)
            if txn.occurred_at != previous_day:
                self.balances.refresh_day(txn.user_id, txn.occurred_at)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(txn)
        return txn

    def delete(self, txn_id: int, user_id: int) -> None:
        txn = self.get(txn_id, user_id)
        try:
            txn.soft_delete()
            if txn.is_savings:
                self._shift_goal(txn.savings_goal_id, -txn.amount)
            self.balances.refresh_day(user_id, txn.occurred_at)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # ---- Listing ---------------------------------------------------------
    def list_filtered(self, query: schemas.TransactionQuery) -> tuple[list[models.Transaction], Optional[int], bool]:
        """필터/정렬/커서 페이지네이션 조회

        Returns:
            (rows, next_cursor, has_more)
        """
        q = self._query(query.user_id)

        if query.year is not None and query.month is not None:
            start, end = month_bounds_kst(query.year, query.month)
            q = q.filter(Txn.occurred_at >= start, Txn.occurred_at < end)
        elif query.start_year is not None and query.start_month is not None:
            start, _ = month_bounds_kst(query.start_year, query.start_month)
            q = q.filter(Txn.occurred_at >= start)
            if query.end_year is not None and query.end_month is not None:
                _, end = month_bounds_kst(query.end_year, query.end_month)
                q = q.filter(Txn.occurred_at < end)

        if query.savings_only:
            q = q.filter(Txn.savings_goal_id.isnot(None))
        elif query.type is not None:
            q = q.filter(Txn.type == query.type)
            if query.type == models.TxnType.EXPENSE:
                # 지출 필터는 저축 거래 제외
                q = q.filter(Txn.savings_goal_id.is_(None))

        if query.category_ids:
            q = q.filter(Txn.category_id.in_(query.category_ids))
        if query.search:
            q = q.filter(Txn.description.ilike(f"%{query.search.strip()}%"))
        if query.min_amount is not None:
            q = q.filter(Txn.amount >= query.min_amount)
        if query.max_amount is not None:
            q = q.filter(Txn.amount <= query.max_amount)

        q = self._apply_sort(q, query.user_id, query.sort, query.cursor)

        limit = max(1, min(query.limit, settings.MAX_PAGE_LIMIT))
        rows = q.limit(limit + 1).all()
        has_more = len(rows) > limit
        rows = rows[:limit]
        next_cursor = rows[-1].id if has_more and rows else None
        return rows, next_cursor, has_more

    def _apply_sort(self, q, user_id: int, sort: str, cursor: Optional[int]):
        """정렬 + 키셋 커서 (커서는 직전 페이지 마지막 거래 id, 본인 거래만)"""
        anchor = None
        if cursor is not None:
            anchor = self._query(user_id).filter(Txn.id == cursor).first()

        if sort == "oldest":
            if anchor is not None:
                q = q.filter(or_(
                    Txn.occurred_at > anchor.occurred_at,
                    (Txn.occurred_at == anchor.occurred_at) & (Txn.id > anchor.id),
                ))
            return q.order_by(Txn.occurred_at.asc(), Txn.id.asc())
        if sort == "expensive":
            if anchor is not None:
                q = q.filter(or_(
                    Txn.amount < anchor.amount,
                    (Txn.amount == anchor.amount) & (Txn.id < anchor.id),
                ))
            return q.order_by(Txn.amount.desc(), Txn.id.desc())
        if sort == "cheapest":
            if anchor is not None:
                q = q.filter(or_(
                    Txn.amount > anchor.amount,
                    (Txn.amount == anchor.amount) & (Txn.id > anchor.id),
                ))
            return q.order_by(Txn.amount.asc(), Txn.id.asc())

        if anchor is not None:
            q = q.filter(or_(
                Txn.occurred_at < anchor.occurred_at,
                (Txn.occurred_at == anchor.occurred_at) & (Txn.id < anchor.id),
            ))
        return q.order_by(Txn.occurred_at.desc(), Txn.id.desc())

    def recent(
        self,
        user_id: int,
        *,
        limit: int = 10,
        offset: int = 0,
        txn_type: Optional[models.TxnType] = None,
    ) -> tuple[list[models.Transaction], int]:
        q = self._query(user_id)
        if txn_type is not None:
            q = q.filter(Txn.type == txn_type)
        total = q.count()
        rows = (
            q.order_by(Txn.occurred_at.desc(), Txn.id.desc())
            .offset(max(0, offset))
            .limit(max(1, min(limit, settings.MAX_PAGE_LIMIT)))
            .all()
        )
        return rows, total

    def oldest_date(self, user_id: int) -> schemas.OldestDateOut:
        oldest: Optional[datetime] = (
            self.db.query(Txn.occurred_at)
            .filter(Txn.user_id == user_id, Txn.deleted_at.is_(None))
            .order_by(Txn.occurred_at.asc())
            .limit(1)
            .scalar()
        )
        if oldest is None:
            return schemas.OldestDateOut()
        parts = kst_date_parts(oldest)
        return schemas.OldestDateOut(date=oldest.replace(tzinfo=timezone.utc), year=parts.year, month=parts.month)
