from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.errors import guard
from ...schemas import BudgetOut, BudgetUpsert
from ...services import BudgetService
from ..deps import YearMonth, optional_year_month, required_year_month
from ..responses import success, success_list

router = APIRouter(prefix="/budgets", tags=["budgets"])


@router.get("")
def list_budgets(
    user_id: int = Query(..., ge=1),
    period: Optional[YearMonth] = Depends(optional_year_month),
    db: Session = Depends(get_db),
):
    year, month = period if period else (None, None)
    with guard("Failed to fetch budgets", user_id=user_id, year=year, month=month):
        rows = BudgetService(db).list(user_id, year, month)
    return success_list([BudgetOut.model_validate(r) for r in rows])


@router.post("")
def upsert_budget(payload: BudgetUpsert, db: Session = Depends(get_db)):
    with guard("Failed to save budget", user_id=payload.user_id):
        row = BudgetService(db).upsert(payload)
    return success(BudgetOut.model_validate(row), "예산이 저장되었습니다")


@router.delete("")
def delete_budget(
    user_id: int = Query(..., ge=1),
    category_id: Optional[int] = Query(None),
    period: YearMonth = Depends(required_year_month),
    db: Session = Depends(get_db),
):
    with guard("Failed to delete budget", user_id=user_id, category_id=category_id):
        BudgetService(db).delete(user_id, period.year, period.month, category_id)
    return success(None, "예산이 삭제되었습니다")
