from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.errors import guard
from ...models import TxnType
from ...schemas import CategoryCreate, CategoryOut, CategorySeedRequest, CategoryUpdate
from ...services import CategoryService
from ..responses import success, success_list

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
def list_categories(
    user_id: int = Query(..., ge=1),
    type: Optional[TxnType] = Query(None),
    db: Session = Depends(get_db),
):
    with guard("Failed to fetch categories", user_id=user_id):
        rows = CategoryService(db).list(user_id, type)
    return success_list([CategoryOut.model_validate(r) for r in rows])


@router.post("", status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    with guard("Failed to create category", user_id=payload.user_id):
        row = CategoryService(db).create(payload)
    return success(CategoryOut.model_validate(row), "카테고리가 생성되었습니다")


@router.post("/seed", status_code=201)
def seed_categories(payload: CategorySeedRequest, db: Session = Depends(get_db)):
    with guard("Failed to seed categories", user_id=payload.user_id):
        rows = CategoryService(db).seed(payload.user_id)
    return success([CategoryOut.model_validate(r) for r in rows], f"{len(rows)}개의 기본 카테고리가 생성되었습니다")


@router.patch("/{category_id}")
def update_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)):
    with guard("Failed to update category", user_id=payload.user_id, category_id=category_id):
        row = CategoryService(db).update(category_id, payload)
    return success(CategoryOut.model_validate(row))


@router.delete("/{category_id}")
def delete_category(category_id: int, user_id: int = Query(..., ge=1), db: Session = Depends(get_db)):
    with guard("Failed to delete category", user_id=user_id, category_id=category_id):
        CategoryService(db).delete(category_id, user_id)
    return success(None, "카테고리가 삭제되었습니다")
