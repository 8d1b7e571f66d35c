"""initial schema: users, groups, group_members, expenses, expense_splits, payments

Revision ID: 20261018_initial
Revises:
"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "20261018_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("telegram_id", sa.BigInteger(), nullable=False),
        sa.Column("username", sa.String(), nullable=True),
        sa.Column("first_name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("photo_url", sa.String(), nullable=True),
        sa.Column("language_code", sa.String(length=8), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_telegram_id", "users", ["telegram_id"], unique=True)
    op.create_index("ix_users_username", "users", ["username"])
    op.create_index("ix_users_name", "users", ["name"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_phone", "users", ["phone"], unique=True)

    op.create_table(
        "groups",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False,
                  comment="Создатель группы (первый участник)"),
        sa.Column("created_at", sa.DateTime(), nullable=False, comment="Когда создана группа"),
    )
    op.create_index("ix_groups_id", "groups", ["id"])
    op.create_index("ix_groups_name", "groups", ["name"])

    op.create_table(
        "group_members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("joined_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),
    )
    op.create_index("ix_group_members_id", "group_members", ["id"])
    op.create_index("ix_group_members_group_id", "group_members", ["group_id"])
    op.create_index("ix_group_members_user_id", "group_members", ["user_id"])
    op.create_index("ix_group_members_deleted_at", "group_members", ["deleted_at"])
    op.create_index("ix_group_members_group_active", "group_members", ["group_id", "deleted_at"])
    op.create_index("ix_group_members_user_active", "group_members", ["user_id", "deleted_at"])

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id"), nullable=False,
                  comment="ID группы, к которой относится расход"),
        sa.Column("description", sa.String(), nullable=False, comment="Описание расхода"),
        sa.Column("amount", sa.Numeric(18, 6), nullable=False, comment="Сумма расхода (> 0)"),
        sa.Column("paid_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, comment="Кто оплатил"),
        sa.Column("split_type", sa.String(), nullable=True,
                  comment="Тип деления ('equal', 'amount', 'percentage'); NULL у старых записей"),
        sa.Column("date", sa.DateTime(), nullable=False, comment="Дата расхода"),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False,
                  comment="Пользователь, создавший расход"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
    )
    op.create_index("ix_expenses_id", "expenses", ["id"])
    op.create_index("ix_expenses_group_date", "expenses", ["group_id", "date"])

    op.create_table(
        "expense_splits",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("expense_id", sa.Integer(), sa.ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False,
                  comment="ID расхода"),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False,
                  comment="ID участника группы"),
        sa.Column("amount", sa.Numeric(18, 6), nullable=False, comment="Доля участника в сумме расхода"),
        sa.Column("percentage", sa.Numeric(9, 6), nullable=True, comment="Доля участника в процентах (0..100)"),
        sa.UniqueConstraint("expense_id", "user_id", name="uq_expense_splits_expense_user"),
    )
    op.create_index("ix_expense_splits_id", "expense_splits", ["id"])
    op.create_index("ix_expense_splits_expense", "expense_splits", ["expense_id"])
    op.create_index("ix_expense_splits_user", "expense_splits", ["user_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("from_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, comment="Кто отдал деньги"),
        sa.Column("to_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, comment="Кто получил деньги"),
        sa.Column("amount", sa.Numeric(18, 6), nullable=False, comment="Сумма перевода (> 0)"),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        sa.CheckConstraint("from_user_id <> to_user_id", name="ck_payments_not_self"),
    )
    op.create_index("ix_payments_id", "payments", ["id"])
    op.create_index("ix_payments_group_date", "payments", ["group_id", "date"])
    op.create_index("ix_payments_from_user", "payments", ["from_user_id"])
    op.create_index("ix_payments_to_user", "payments", ["to_user_id"])


def downgrade() -> None:
    op.drop_table("payments")
    op.drop_table("expense_splits")
    op.drop_table("expenses")
    op.drop_table("group_members")
    op.drop_table("groups")
    op.drop_table("users")
