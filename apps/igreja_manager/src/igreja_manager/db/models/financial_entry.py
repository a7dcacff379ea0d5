"""Financial entry ORM model."""

from __future__ import annotations

import enum
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from igreja_manager.db.base import Base, utc_now


class EntryType(enum.StrEnum):
    """Income (receita) or expense (despesa)."""

    RECEITA = "receita"
    DESPESA = "despesa"


class EntryStatus(enum.StrEnum):
    """Lifecycle states; only confirmed entries move account balances."""

    PENDENTE = "pendente"
    CONFIRMADO = "confirmado"
    CANCELADO = "cancelado"
    ESTORNADO = "estornado"


class FinancialEntry(Base):
    """Income or expense posted against a bank account."""

    __tablename__ = "financial_entries"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_financial_entries_amount_positive"),
        Index("ix_financial_entries_church_entry_date", "church_id", "entry_date"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    church_id: Mapped[UUID] = mapped_column(
        ForeignKey("churches.id"), nullable=False
    )
    type: Mapped[EntryType] = mapped_column(
        Enum(
            EntryType,
            name="financial_entry_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    account_plan_id: Mapped[UUID] = mapped_column(
        ForeignKey("account_plans.id"), nullable=False
    )
    bank_account_id: Mapped[UUID] = mapped_column(
        ForeignKey("bank_accounts.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    description: Mapped[str] = mapped_column(String(300), nullable=False)
    payment_method: Mapped[str | None] = mapped_column(String(30), nullable=True)
    member_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("members.id"), nullable=True
    )
    supplier_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[EntryStatus] = mapped_column(
        Enum(
            EntryStatus,
            name="financial_entry_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=EntryStatus.CONFIRMADO,
    )
    is_closed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    closed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    closed_by: Mapped[UUID | None] = mapped_column(nullable=True)
    registered_by: Mapped[UUID | None] = mapped_column(nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
