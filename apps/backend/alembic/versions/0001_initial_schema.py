"""initial schema: users, categories, transactions, budgets, savings goals, daily balances

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-11-20 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    txn_type = sa.Enum("INCOME", "EXPENSE", name="txn_type")

    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("name", sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=False)

    op.create_table(
        "category",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", txn_type, nullable=False),
        sa.Column("color", sa.String(length=16), nullable=True),
        sa.Column("icon", sa.String(length=16), nullable=True),
        sa.Column("default_budget", sa.BigInteger(), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ),
        sa.CheckConstraint("default_budget IS NULL OR default_budget >= 0", name="ck_category_default_budget"),
    )
    op.create_index("ix_category_user_type", "category", ["user_id", "type"], unique=False)

    op.create_table(
        "savingsgoal",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("icon", sa.String(length=16), nullable=True),
        sa.Column("target_amount", sa.BigInteger(), nullable=False),
        sa.Column("current_amount", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("target_year", sa.Integer(), nullable=False),
        sa.Column("target_month", sa.Integer(), nullable=False),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ),
        sa.CheckConstraint("target_amount > 0", name="ck_goal_target_positive"),
        sa.CheckConstraint("current_amount >= 0", name="ck_goal_current_non_negative"),
        sa.CheckConstraint("target_month BETWEEN 1 AND 12", name="ck_goal_target_month"),
    )

    op.create_table(
        "transaction",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", txn_type, nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("occurred_at", sa.DateTime(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("savings_goal_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ),
        sa.ForeignKeyConstraint(["category_id"], ["category.id"], ),
        sa.ForeignKeyConstraint(["savings_goal_id"], ["savingsgoal.id"], ),
        sa.CheckConstraint("amount > 0", name="ck_txn_amount_positive"),
        sa.CheckConstraint(
            "savings_goal_id IS NULL OR (type = 'EXPENSE' AND category_id IS NULL)",
            name="ck_txn_savings_is_uncategorized_expense",
        ),
    )
    op.create_index("ix_txn_user_date", "transaction", ["user_id", "occurred_at"], unique=False)
    op.create_index("ix_txn_savings_goal", "transaction", ["savings_goal_id"], unique=False)

    op.create_table(
        "budget",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("month", sa.Date(), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ),
        sa.ForeignKeyConstraint(["category_id"], ["category.id"], ),
        sa.UniqueConstraint("user_id", "category_id", "month", name="uq_budget_month"),
        sa.CheckConstraint("amount >= 0", name="ck_budget_amount_non_negative"),
    )

    op.create_table(
        "dailybalance",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("income", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("expense", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("savings", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("balance", sa.BigInteger(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ),
        sa.UniqueConstraint("user_id", "date", name="uq_daily_balance_user_date"),
    )


def downgrade() -> None:
    op.drop_table("dailybalance")
    op.drop_table("budget")
    op.drop_index("ix_txn_savings_goal", table_name="transaction")
    op.drop_index("ix_txn_user_date", table_name="transaction")
    op.drop_table("transaction")
    op.drop_table("savingsgoal")
    op.drop_index("ix_category_user_type", table_name="category")
    op.drop_table("category")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
    sa.Enum(name="txn_type").drop(op.get_bind(), checkfirst=True)
