from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    computed_field,
    field_validator,
)

from .models import TxnType
from .utils.formatters import format_goal_target


def _attach_utc(value: datetime | None) -> datetime | None:
    # DB 값은 naive UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class _UtcOut(BaseModel):
    """Base for ORM-backed outputs whose timestamps are stored as naive UTC."""

    model_config = ConfigDict(from_attributes=True)

    @field_validator("occurred_at", "created_at", "updated_at", check_fields=False, mode="after")
    @classmethod
    def _utc(cls, value: datetime | None) -> datetime | None:
        return _attach_utc(value)


# ===== Users / Auth =====

class SignupRequest(BaseModel):
    email: EmailStr
    password: str
    name: str | None = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class PasswordChangeRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    current_password: str
    new_password: str


class AccountDeleteRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    password: str


class UserOut(_UtcOut):
    id: int
    email: str
    name: str | None
    created_at: datetime
    updated_at: datetime


# ===== Categories =====

class CategoryCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    name: str = Field(min_length=1, max_length=100)
    type: TxnType
    color: str | None = Field(default=None, max_length=16)
    icon: str | None = Field(default=None, max_length=16)
    default_budget: int | None = Field(default=None, ge=0)


class CategoryUpdate(BaseModel):
    """Each field is applied only when present in the request body."""

    user_id: int = Field(..., gt=0)
    name: str | None = Field(default=None, min_length=1, max_length=100)
    type: TxnType | None = None
    color: str | None = Field(default=None, max_length=16)
    icon: str | None = Field(default=None, max_length=16)
    default_budget: int | None = Field(default=None, ge=0)


class CategorySeedRequest(BaseModel):
    user_id: int = Field(..., gt=0)


class CategoryRef(BaseModel):
    id: int
    name: str
    type: TxnType
    color: str | None
    icon: str | None

    model_config = ConfigDict(from_attributes=True)


class CategoryOut(_UtcOut):
    id: int
    user_id: int
    name: str
    type: TxnType
    color: str | None
    icon: str | None
    default_budget: int | None
    created_at: datetime


# ===== Transactions =====

class TransactionCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    type: TxnType
    amount: int
    description: str | None = Field(default=None, max_length=500)
    category_id: int | None = None
    occurred_at: datetime | None = None


class TransactionUpdate(BaseModel):
    """Each field is applied only when present; ``category_id: null`` clears it."""

    user_id: int = Field(..., gt=0)
    type: TxnType | None = None
    amount: int | None = None
    description: str | None = Field(default=None, max_length=500)
    category_id: int | None = None
    occurred_at: datetime | None = None


class TransactionOut(_UtcOut):
    id: int
    user_id: int
    type: TxnType
    amount: int
    occurred_at: datetime
    description: str | None
    category_id: int | None
    savings_goal_id: int | None
    category: CategoryRef | None = None
    created_at: datetime


TransactionSort = Literal["recent", "oldest", "expensive", "cheapest"]


class TransactionQuery(BaseModel):
    user_id: int
    year: int | None = None
    month: int | None = None
    start_year: int | None = None
    start_month: int | None = None
    end_year: int | None = None
    end_month: int | None = None
    type: TxnType | None = None
    category_ids: list[int] = Field(default_factory=list)
    search: str | None = None
    min_amount: int | None = None
    max_amount: int | None = None
    savings_only: bool = False
    sort: TransactionSort = "recent"
    cursor: int | None = None
    limit: int = 20


# ===== Budgets =====

class BudgetUpsert(BaseModel):
    user_id: int = Field(..., gt=0)
    category_id: int | None = None
    amount: int
    year: int = Field(..., ge=1900, le=9999)
    month: int = Field(..., ge=1, le=12)


class BudgetOut(_UtcOut):
    id: int
    user_id: int
    category_id: int | None
    month: date
    amount: int
    category: CategoryRef | None = None


# ===== Savings =====

class SavingsGoalCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    name: str = Field(min_length=1, max_length=100)
    icon: str = Field(min_length=1, max_length=16)
    target_amount: int = Field(..., gt=0)
    current_amount: int = Field(default=0, ge=0)
    target_year: int = Field(..., ge=1900, le=9999)
    target_month: int = Field(..., ge=1, le=12)


class SavingsGoalUpdate(BaseModel):
    user_id: int = Field(..., gt=0)
    name: str | None = Field(default=None, min_length=1, max_length=100)
    icon: str | None = Field(default=None, min_length=1, max_length=16)
    target_amount: int | None = Field(default=None, gt=0)
    target_year: int | None = Field(default=None, ge=1900, le=9999)
    target_month: int | None = Field(default=None, ge=1, le=12)
    is_primary: bool | None = None


class SavingsGoalPrimaryUpdate(BaseModel):
    user_id: int = Field(..., gt=0)
    is_primary: bool


class SavingsDepositRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    amount: int


class SavingsGoalOut(_UtcOut):
    id: int
    user_id: int
    name: str
    icon: str | None
    target_amount: int
    current_amount: int
    target_year: int
    target_month: int
    is_primary: bool
    created_at: datetime

    @computed_field(return_type=str)
    def target_date(self) -> str:
        return format_goal_target(self.target_year, self.target_month)


class SavingsGoalProgressOut(BaseModel):
    id: int
    name: str
    icon: str | None
    target_date: str
    current_amount: int
    target_amount: int
    target_year: int
    target_month: int
    is_primary: bool
    months_remaining: int
    amount_remaining: int
    monthly_required: int
    progress_percent: int
    this_month_savings: int


class SavingsDepositOut(BaseModel):
    savings_goal: SavingsGoalOut
    transaction: TransactionOut


class SavingsSummaryOut(BaseModel):
    total_current_amount: int
    total_target_amount: int
    goals_count: int
    progress_percent: int


# ===== Summaries =====

class PeriodOut(BaseModel):
    year: int
    month: int


class TotalsOut(BaseModel):
    total_income: int
    total_expense: int
    total_savings: int
    net_amount: int
    balance: int


class BudgetUsageOut(BaseModel):
    amount: int
    used: int
    remaining: int
    usage_percent: int


class CategorySummaryItem(BaseModel):
    id: int
    name: str
    icon: str | None
    color: str | None
    count: int
    total: int
    budget: int | None = None
    budget_usage_percent: int | None = None


class TransactionCountOut(BaseModel):
    income: int
    expense: int
    savings: int
    total: int


class PrimaryGoalOut(BaseModel):
    id: int
    name: str
    icon: str | None
    current_amount: int
    target_amount: int
    target_date: str
    progress_percent: int


class MonthlySavingsOut(BaseModel):
    total_amount: int
    target_amount: int
    count: int
    primary_goal: PrimaryGoalOut | None = None


class MonthlySummaryOut(BaseModel):
    period: PeriodOut
    summary: TotalsOut
    budget: BudgetUsageOut
    categories: list[CategorySummaryItem]
    transaction_count: TransactionCountOut
    savings: MonthlySavingsOut


class StatsTotalsOut(BaseModel):
    total_income: int
    total_expense: int
    balance: int
    income_count: int
    expense_count: int
    transaction_count: int


class CategoryBreakdownItem(BaseModel):
    category_id: int
    category_name: str
    color: str | None
    icon: str | None
    count: int
    total: int


class DailyAmountOut(BaseModel):
    date: date
    amount: int


class MonthlyStatsOut(BaseModel):
    summary: StatsTotalsOut
    budget: BudgetUsageOut
    category_breakdown: list[CategoryBreakdownItem]
    last_days: list[DailyAmountOut]


class BucketOut(BaseModel):
    total: int
    count: int


class TodaySummaryOut(BaseModel):
    date: datetime
    year: int
    month: int
    day: int
    day_of_week: int
    expense: BucketOut
    income: BucketOut
    savings: BucketOut


class OldestDateOut(BaseModel):
    date: Optional[datetime] = None
    year: Optional[int] = None
    month: Optional[int] = None


# ===== Daily balance =====

class DailyBalanceOut(BaseModel):
    date: date
    income: int
    expense: int
    savings: int
    balance: int


class DailyBalanceSnapshotIn(BaseModel):
    user_id: int = Field(..., gt=0)
    date: date
    balance: int = 0
    income: int = 0
    expense: int = 0
    savings: int = 0


# ===== Holidays =====

class HolidayOut(BaseModel):
    date: date
    name: str


class HolidaysOut(BaseModel):
    year: int
    holidays: list[HolidayOut]
    month: int | None = None
    holiday_days: list[int] | None = None
