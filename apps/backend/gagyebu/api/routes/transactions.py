from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.database import get_db
from ...core.errors import guard
from ...models import TxnType
from ...schemas import (
    TransactionCreate,
    TransactionOut,
    TransactionQuery,
    TransactionSort,
    TransactionUpdate,
)
from ...services import SummaryService, TransactionService
from ..deps import YearMonth, required_year_month, validate_year_month
from ..responses import paginated, success

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("")
def list_transactions(
    user_id: int = Query(..., ge=1),
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    start_year: Optional[int] = Query(None),
    start_month: Optional[int] = Query(None),
    end_year: Optional[int] = Query(None),
    end_month: Optional[int] = Query(None),
    type: Optional[TxnType] = Query(None),
    category_id: Optional[list[int]] = Query(None),
    search: Optional[str] = Query(None),
    min_amount: Optional[int] = Query(None, ge=0),
    max_amount: Optional[int] = Query(None, ge=0),
    savings_only: bool = Query(False),
    sort: TransactionSort = Query("recent"),
    cursor: Optional[int] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db),
):
    if year is not None or month is not None:
        validate_year_month(year, month)
    if start_year is not None or start_month is not None:
        validate_year_month(start_year, start_month)
    if end_year is not None or end_month is not None:
        validate_year_month(end_year, end_month)

    query = TransactionQuery(
        user_id=user_id,
        year=year,
        month=month,
        start_year=start_year,
        start_month=start_month,
        end_year=end_year,
        end_month=end_month,
        type=type,
        category_ids=category_id or [],
        search=search,
        min_amount=min_amount,
        max_amount=max_amount,
        savings_only=savings_only,
        sort=sort,
        cursor=cursor,
        limit=limit,
    )
    with guard("Failed to fetch transactions", user_id=user_id):
        rows, next_cursor, has_more = TransactionService(db).list_filtered(query)
    return paginated([TransactionOut.model_validate(r) for r in rows], next_cursor, has_more)


@router.post("", status_code=201)
def create_transaction(payload: TransactionCreate, db: Session = Depends(get_db)):
    with guard("Failed to create transaction", user_id=payload.user_id):
        row = TransactionService(db).create(payload)
    return success(TransactionOut.model_validate(row), "거래가 추가되었습니다")


@router.get("/recent")
def recent_transactions(
    user_id: int = Query(..., ge=1),
    limit: int = Query(10, ge=1),
    offset: int = Query(0, ge=0),
    type: Optional[TxnType] = Query(None),
    db: Session = Depends(get_db),
):
    limit = min(limit, settings.MAX_PAGE_LIMIT)
    with guard("Failed to fetch recent transactions", user_id=user_id):
        rows, total = TransactionService(db).recent(user_id, limit=limit, offset=offset, txn_type=type)
    return {
        "success": True,
        "data": jsonable_encoder([TransactionOut.model_validate(r) for r in rows]),
        "count": len(rows),
        "total_count": total,
        "has_more": offset + len(rows) < total,
        "limit": limit,
        "offset": offset,
    }


@router.get("/oldest-date")
def oldest_transaction_date(user_id: int = Query(..., ge=1), db: Session = Depends(get_db)):
    with guard("Failed to fetch oldest transaction date", user_id=user_id):
        result = TransactionService(db).oldest_date(user_id)
    return success(result)


@router.get("/summary")
def monthly_summary(
    user_id: int = Query(..., ge=1),
    period: YearMonth = Depends(required_year_month),
    db: Session = Depends(get_db),
):
    with guard("Failed to fetch summary", user_id=user_id, year=period.year, month=period.month):
        result = SummaryService(db).monthly_summary(user_id, period.year, period.month)
    return success(result)


@router.get("/today")
def today_summary(user_id: int = Query(..., ge=1), db: Session = Depends(get_db)):
    with guard("Failed to fetch today summary", user_id=user_id):
        result = SummaryService(db).today_summary(user_id)
    return success(result)


@router.patch("/{txn_id}")
def update_transaction(txn_id: int, payload: TransactionUpdate, db: Session = Depends(get_db)):
    with guard("Failed to update transaction", user_id=payload.user_id, txn_id=txn_id):
        row = TransactionService(db).update(txn_id, payload)
    return success(TransactionOut.model_validate(row), "거래가 수정되었습니다")


@router.delete("/{txn_id}")
def delete_transaction(txn_id: int, user_id: int = Query(..., ge=1), db: Session = Depends(get_db)):
    with guard("Failed to delete transaction", user_id=user_id, txn_id=txn_id):
        TransactionService(db).delete(txn_id, user_id)
    return success(None, "거래가 삭제되었습니다")
