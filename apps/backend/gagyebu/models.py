from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Index,
    Boolean,
    BigInteger,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .core.database import Base, utcnow_naive


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow_naive, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow_naive, onupdate=utcnow_naive, nullable=False)


class SoftDeleteMixin:
    """Rows are never physically removed; reads filter on ``deleted_at IS NULL``."""

    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        self.deleted_at = utcnow_naive()


class TxnType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class User(Base, TimestampMixin, SoftDeleteMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str | None] = mapped_column(String(100))

    __table_args__ = (
        Index("ix_user_email", "email"),
    )


class Category(Base, TimestampMixin, SoftDeleteMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[TxnType] = mapped_column(SAEnum(TxnType, name="txn_type"), nullable=False)
    color: Mapped[str | None] = mapped_column(String(16))
    icon: Mapped[str | None] = mapped_column(String(16))
    # 지출 카테고리만 사용 (월별 예산이 없을 때 자동 적용)
    default_budget: Mapped[int | None] = mapped_column(BigInteger)

    __table_args__ = (
        Index("ix_category_user_type", "user_id", "type"),
        CheckConstraint("default_budget IS NULL OR default_budget >= 0", name="ck_category_default_budget"),
    )


class SavingsGoal(Base, TimestampMixin, SoftDeleteMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon: Mapped[str | None] = mapped_column(String(16))
    target_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    current_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    target_year: Mapped[int] = mapped_column(Integer, nullable=False)
    target_month: Mapped[int] = mapped_column(Integer, nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("target_amount > 0", name="ck_goal_target_positive"),
        CheckConstraint("current_amount >= 0", name="ck_goal_current_non_negative"),
        CheckConstraint("target_month BETWEEN 1 AND 12", name="ck_goal_target_month"),
    )


class Transaction(Base, TimestampMixin, SoftDeleteMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id"), nullable=False)
    type: Mapped[TxnType] = mapped_column(SAEnum(TxnType, name="txn_type"), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # UTC instant (naive)
    occurred_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow_naive)
    description: Mapped[str | None] = mapped_column(Text)
    category_id: Mapped[int | None] = mapped_column(ForeignKey("category.id"))
    savings_goal_id: Mapped[int | None] = mapped_column(ForeignKey("savingsgoal.id"))

    category: Mapped["Category | None"] = relationship("Category", lazy="joined")
    savings_goal: Mapped["SavingsGoal | None"] = relationship("SavingsGoal")

    @property
    def is_savings(self) -> bool:
        return self.savings_goal_id is not None

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_txn_amount_positive"),
        CheckConstraint(
            "savings_goal_id IS NULL OR (type = 'EXPENSE' AND category_id IS NULL)",
            name="ck_txn_savings_is_uncategorized_expense",
        ),
        Index("ix_txn_user_date", "user_id", "occurred_at"),
        Index("ix_txn_savings_goal", "savings_goal_id"),
    )


class Budget(Base, TimestampMixin, SoftDeleteMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id"), nullable=False)
    # NULL = 월 전체 예산
    category_id: Mapped[int | None] = mapped_column(ForeignKey("category.id"))
    # 해당 월 1일
    month: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    category: Mapped["Category | None"] = relationship("Category", lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "category_id", "month", name="uq_budget_month"),
        CheckConstraint("amount >= 0", name="ck_budget_amount_non_negative"),
    )


class DailyBalance(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id"), nullable=False)
    # KST 기준 달력 날짜
    day: Mapped[date] = mapped_column("date", Date, nullable=False)
    income: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    expense: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    savings: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_balance_user_date"),
    )
