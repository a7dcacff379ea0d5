"""Create church, EBD and financial ledger tables.

Revision ID: 001_create_ebd_and_financial_core
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_create_ebd_and_financial_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


attendance_status_enum = sa.Enum(
    "presente", "ausente", "justificado", name="ebd_attendance_status"
)
note_type_enum = sa.Enum(
    "observation",
    "behavior",
    "progress",
    "special_need",
    "praise",
    "concern",
    name="ebd_note_type",
)
account_plan_type_enum = sa.Enum("receita", "despesa", name="account_plan_type")
bank_account_type_enum = sa.Enum(
    "caixa", "conta_corrente", "poupanca", "digital", name="bank_account_type"
)
entry_type_enum = sa.Enum("receita", "despesa", name="financial_entry_type")
entry_status_enum = sa.Enum(
    "pendente", "confirmado", "cancelado", "estornado", name="financial_entry_status"
)


def _uuid() -> postgresql.UUID:
    return postgresql.UUID(as_uuid=True)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def _updated_at() -> sa.Column:
    return sa.Column(
        "updated_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def _flag(name: str, default: str) -> sa.Column:
    return sa.Column(
        name, sa.Boolean(), nullable=False, server_default=sa.text(default)
    )


def upgrade() -> None:
    op.create_table(
        "churches",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        _flag("is_active", "true"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "members",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("church_id", _uuid(), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        _created_at(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["church_id"], ["churches.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_members_church_id", "members", ["church_id"])

    op.create_table(
        "ebd_terms",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("church_id", _uuid(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("theme", sa.String(length=200), nullable=True),
        sa.Column("magazine_title", sa.String(length=200), nullable=True),
        _flag("is_active", "true"),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint("end_date > start_date", name="ck_ebd_terms_date_order"),
        sa.ForeignKeyConstraint(["church_id"], ["churches.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_ebd_terms_church_id", "ebd_terms", ["church_id"])
    op.create_index(
        "uq_ebd_terms_one_active_per_church",
        "ebd_terms",
        ["church_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "ebd_classes",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("church_id", _uuid(), nullable=False),
        sa.Column("term_id", _uuid(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("age_range_start", sa.Integer(), nullable=True),
        sa.Column("age_range_end", sa.Integer(), nullable=True),
        sa.Column("room", sa.String(length=50), nullable=True),
        sa.Column("max_capacity", sa.Integer(), nullable=True),
        sa.Column("teacher_id", _uuid(), nullable=True),
        sa.Column("aux_teacher_id", _uuid(), nullable=True),
        sa.Column("congregation_id", _uuid(), nullable=True),
        _flag("is_active", "true"),
        _created_at(),
        _updated_at(),
        sa.CheckConstraint(
            "max_capacity IS NULL OR max_capacity > 0",
            name="ck_ebd_classes_capacity_positive",
        ),
        sa.ForeignKeyConstraint(["church_id"], ["churches.id"]),
        sa.ForeignKeyConstraint(["term_id"], ["ebd_terms.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["teacher_id"], ["members.id"]),
        sa.ForeignKeyConstraint(["aux_teacher_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_ebd_classes_church_id", "ebd_classes", ["church_id"])
    op.create_index("ix_ebd_classes_term_id", "ebd_classes", ["term_id"])

    op.create_table(
        "ebd_enrollments",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("class_id", _uuid(), nullable=False),
        sa.Column("term_id", _uuid(), nullable=False),
        sa.Column("member_id", _uuid(), nullable=False),
        sa.Column("enrolled_at", sa.Date(), nullable=False),
        sa.Column("left_at", sa.Date(), nullable=True),
        _flag("is_active", "true"),
        sa.ForeignKeyConstraint(
            ["class_id"], ["ebd_classes.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["term_id"], ["ebd_terms.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_ebd_enrollments_class_id", "ebd_enrollments", ["class_id"])
    op.create_index("ix_ebd_enrollments_member_id", "ebd_enrollments", ["member_id"])
    op.create_index(
        "uq_ebd_enrollments_active_class_member",
        "ebd_enrollments",
        ["class_id", "member_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )
    op.create_index(
        "uq_ebd_enrollments_active_term_member",
        "ebd_enrollments",
        ["term_id", "member_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "ebd_lessons",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("church_id", _uuid(), nullable=False),
        sa.Column("class_id", _uuid(), nullable=False),
        sa.Column("lesson_date", sa.Date(), nullable=False),
        sa.Column("lesson_number", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(length=200), nullable=True),
        sa.Column("theme", sa.String(length=200), nullable=True),
        sa.Column("bible_text", sa.String(length=200), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("teacher_id", _uuid(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(["church_id"], ["churches.id"]),
        sa.ForeignKeyConstraint(
            ["class_id"], ["ebd_classes.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["teacher_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_ebd_lessons_church_id", "ebd_lessons", ["church_id"])
    op.create_index("ix_ebd_lessons_class_id", "ebd_lessons", ["class_id"])

    op.create_table(
        "ebd_attendances",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("lesson_id", _uuid(), nullable=False),
        sa.Column("member_id", _uuid(), nullable=False),
        sa.Column("status", attendance_status_enum, nullable=False),
        _flag("brought_bible", "false"),
        _flag("brought_magazine", "false"),
        sa.Column("offering_amount", sa.Numeric(12, 2), nullable=True),
        _flag("is_visitor", "false"),
        sa.Column("visitor_name", sa.String(length=200), nullable=True),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("registered_by", _uuid(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["lesson_id"], ["ebd_lessons.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "lesson_id", "member_id", name="uq_ebd_attendances_lesson_member"
        ),
    )
    op.create_index("ix_ebd_attendances_lesson_id", "ebd_attendances", ["lesson_id"])

    op.create_table(
        "ebd_student_notes",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("church_id", _uuid(), nullable=False),
        sa.Column("member_id", _uuid(), nullable=False),
        sa.Column("term_id", _uuid(), nullable=True),
        sa.Column("note_type", note_type_enum, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        _flag("is_private", "true"),
        sa.Column("created_by", _uuid(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(["church_id"], ["churches.id"]),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"]),
        sa.ForeignKeyConstraint(["term_id"], ["ebd_terms.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_ebd_student_notes_church_id", "ebd_student_notes", ["church_id"]
    )
    op.create_index(
        "ix_ebd_student_notes_member_id", "ebd_student_notes", ["member_id"]
    )

    op.create_table(
        "account_plans",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("church_id", _uuid(), nullable=False),
        sa.Column("parent_id", _uuid(), nullable=True),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("type", account_plan_type_enum, nullable=False),
        sa.Column("level", sa.Integer(), nullable=False, server_default="1"),
        _flag("is_active", "true"),
        _created_at(),
        sa.ForeignKeyConstraint(["church_id"], ["churches.id"]),
        sa.ForeignKeyConstraint(["parent_id"], ["account_plans.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("church_id", "code", name="uq_account_plans_church_code"),
    )
    op.create_index("ix_account_plans_church_id", "account_plans", ["church_id"])

    op.create_table(
        "bank_accounts",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("church_id", _uuid(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("type", bank_account_type_enum, nullable=False),
        sa.Column("bank_name", sa.String(length=100), nullable=True),
        sa.Column("agency", sa.String(length=20), nullable=True),
        sa.Column("account_number", sa.String(length=30), nullable=True),
        sa.Column(
            "initial_balance", sa.Numeric(12, 2), nullable=False, server_default="0"
        ),
        sa.Column(
            "current_balance", sa.Numeric(12, 2), nullable=False, server_default="0"
        ),
        _flag("is_active", "true"),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(["church_id"], ["churches.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bank_accounts_church_id", "bank_accounts", ["church_id"])

    op.create_table(
        "financial_entries",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("church_id", _uuid(), nullable=False),
        sa.Column("type", entry_type_enum, nullable=False),
        sa.Column("account_plan_id", _uuid(), nullable=False),
        sa.Column("bank_account_id", _uuid(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column("description", sa.String(length=300), nullable=False),
        sa.Column("payment_method", sa.String(length=30), nullable=True),
        sa.Column("member_id", _uuid(), nullable=True),
        sa.Column("supplier_name", sa.String(length=200), nullable=True),
        sa.Column("status", entry_status_enum, nullable=False),
        _flag("is_closed", "false"),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("closed_by", _uuid(), nullable=True),
        sa.Column("registered_by", _uuid(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_financial_entries_amount_positive"),
        sa.ForeignKeyConstraint(["church_id"], ["churches.id"]),
        sa.ForeignKeyConstraint(["account_plan_id"], ["account_plans.id"]),
        sa.ForeignKeyConstraint(["bank_account_id"], ["bank_accounts.id"]),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_financial_entries_church_entry_date",
        "financial_entries",
        ["church_id", "entry_date"],
    )
    op.create_index(
        "ix_financial_entries_bank_account_id",
        "financial_entries",
        ["bank_account_id"],
    )

    op.create_table(
        "monthly_closings",
        sa.Column("id", _uuid(), nullable=False),
        sa.Column("church_id", _uuid(), nullable=False),
        sa.Column("reference_month", sa.Date(), nullable=False),
        sa.Column("total_income", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_expense", sa.Numeric(12, 2), nullable=False),
        sa.Column("balance", sa.Numeric(12, 2), nullable=False),
        sa.Column("previous_balance", sa.Numeric(12, 2), nullable=False),
        sa.Column("accumulated_balance", sa.Numeric(12, 2), nullable=False),
        sa.Column("closed_by", _uuid(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            "EXTRACT(DAY FROM reference_month) = 1",
            name="ck_monthly_closings_reference_month_first_day",
        ),
        sa.ForeignKeyConstraint(["church_id"], ["churches.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "church_id", "reference_month", name="uq_monthly_closings_church_month"
        ),
    )
    op.create_index(
        "ix_monthly_closings_church_id", "monthly_closings", ["church_id"]
    )


def downgrade() -> None:
    op.drop_table("monthly_closings")
    op.drop_table("financial_entries")
    op.drop_table("bank_accounts")
    op.drop_table("account_plans")
    op.drop_table("ebd_student_notes")
    op.drop_table("ebd_attendances")
    op.drop_table("ebd_lessons")
    op.drop_table("ebd_enrollments")
    op.drop_table("ebd_classes")
    op.drop_table("ebd_terms")
    op.drop_table("members")
    op.drop_table("churches")

    bind = op.get_bind()
    for enum_type in (
        entry_status_enum,
        entry_type_enum,
        bank_account_type_enum,
        account_plan_type_enum,
        note_type_enum,
        attendance_status_enum,
    ):
        enum_type.drop(bind, checkfirst=True)
