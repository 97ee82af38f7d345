from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from .. import models, schemas
from ..core.errors import BadRequestError, ConflictError, NotFoundError

DEFAULT_COLOR = "#6366F1"
DEFAULT_ICON = "💰"

DUPLICATE_CATEGORY = "이미 존재하는 카테고리입니다"

# (name, icon, color)
DEFAULT_EXPENSE_CATEGORIES = [
    ("식비", "🍽️", "#EF4444"),
    ("교통비", "🚗", "#F59E0B"),
    ("쇼핑", "🛍️", "#EC4899"),
    ("문화생활", "🎬", "#8B5CF6"),
    ("의료", "🏥", "#14B8A6"),
    ("주거비", "🏠", "#6366F1"),
    ("통신비", "📱", "#3B82F6"),
    ("대출이자", "💳", "#DC2626"),
    ("기타지출", "💸", "#64748B"),
]

DEFAULT_INCOME_CATEGORIES = [
    ("급여", "💰", "#10B981"),
    ("부수입", "💵", "#059669"),
    ("용돈", "🎁", "#34D399"),
    ("기타수입", "💎", "#6EE7B7"),
]


class CategoryService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _query(self, user_id: int):
        return self.db.query(models.Category).filter(
            models.Category.user_id == user_id,
            models.Category.deleted_at.is_(None),
        )

    def get(self, category_id: int, user_id: int) -> models.Category:
        category = self._query(user_id).filter(models.Category.id == category_id).first()
        if category is None:
            raise NotFoundError("Category not found")
        return category

    def _find_by_name(
        self, user_id: int, name: str, txn_type: models.TxnType, *, include_deleted: bool = False
    ) -> models.Category | None:
        q = self.db.query(models.Category).filter(
            models.Category.user_id == user_id,
            models.Category.name == name,
            models.Category.type == txn_type,
        )
        if not include_deleted:
            q = q.filter(models.Category.deleted_at.is_(None))
        # 활성 행 우선
        return q.order_by(models.Category.deleted_at.isnot(None), models.Category.id).first()

    def list(self, user_id: int, txn_type: Optional[models.TxnType] = None) -> list[models.Category]:
        q = self._query(user_id)
        if txn_type is not None:
            q = q.filter(models.Category.type == txn_type)
        return q.order_by(models.Category.name.asc(), models.Category.id.asc()).all()

    def create(self, payload: schemas.CategoryCreate) -> models.Category:
        name = payload.name.strip()
        if not name:
            raise BadRequestError("name is required")
        existing = self._find_by_name(payload.user_id, name, payload.type, include_deleted=True)
        if existing is not None and not existing.is_deleted:
            raise ConflictError(DUPLICATE_CATEGORY)

        default_budget = payload.default_budget if payload.type == models.TxnType.EXPENSE else None
        if existing is not None:
            # 삭제된 같은 이름 카테고리 복구
            category = existing
            category.deleted_at = None
            category.color = payload.color or DEFAULT_COLOR
            category.icon = payload.icon or DEFAULT_ICON
            category.default_budget = default_budget
        else:
            category = models.Category(
                user_id=payload.user_id,
                name=name,
                type=payload.type,
                color=payload.color or DEFAULT_COLOR,
                icon=payload.icon or DEFAULT_ICON,
                default_budget=default_budget,
            )
            self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def update(self, category_id: int, payload: schemas.CategoryUpdate) -> models.Category:
        category = self.get(category_id, payload.user_id)
        patch = payload.model_dump(exclude_unset=True, exclude={"user_id"})
        for key in ("name", "type"):
            if key in patch and patch[key] is None:
                raise BadRequestError(f"{key} cannot be null")

        name = patch["name"].strip() if "name" in patch else category.name
        new_type = patch.get("type", category.type)
        if not name:
            raise BadRequestError("name is required")

        if name != category.name or new_type != category.type:
            duplicate = self._find_by_name(payload.user_id, name, new_type)
            if duplicate is not None and duplicate.id != category.id:
                raise ConflictError(DUPLICATE_CATEGORY)

        if new_type != category.type:
            in_use = (
                self.db.query(models.Transaction.id)
                .filter(
                    models.Transaction.category_id == category.id,
                    models.Transaction.deleted_at.is_(None),
                )
                .first()
            )
            if in_use is not None:
                raise ConflictError("Category is used by transactions of another type")
            budgeted = (
                self.db.query(models.Budget.id)
                .filter(
                    models.Budget.category_id == category.id,
                    models.Budget.deleted_at.is_(None),
                )
                .first()
            )
            if budgeted is not None:
                raise ConflictError("Category is used by budgets of another type")

        category.name = name
        category.type = new_type
        if "color" in patch:
            category.color = patch["color"] or DEFAULT_COLOR
        if "icon" in patch:
            category.icon = patch["icon"] or DEFAULT_ICON
        if "default_budget" in patch:
            category.default_budget = patch["default_budget"]
        if category.type != models.TxnType.EXPENSE:
            category.default_budget = None

        self.db.commit()
        self.db.refresh(category)
        return category

    def delete(self, category_id: int, user_id: int) -> None:
        category = self.get(category_id, user_id)
        category.soft_delete()
        self.db.commit()

    def seed(self, user_id: int) -> list[models.Category]:
        """기본 카테고리 생성 (지출 9개 + 수입 4개)

        이미 활성 카테고리가 있으면 409.
        """
        if self._query(user_id).first() is not None:
            raise ConflictError("이미 카테고리가 존재합니다")

        rows = [
            models.Category(user_id=user_id, name=name, type=models.TxnType.EXPENSE, icon=icon, color=color)
            for name, icon, color in DEFAULT_EXPENSE_CATEGORIES
        ]
        rows += [
            models.Category(user_id=user_id, name=name, type=models.TxnType.INCOME, icon=icon, color=color)
            for name, icon, color in DEFAULT_INCOME_CATEGORIES
        ]
        try:
            self.db.add_all(rows)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        for row in rows:
            self.db.refresh(row)
        return rows
