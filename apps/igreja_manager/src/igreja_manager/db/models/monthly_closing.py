"""Monthly closing ORM model."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from igreja_manager.db.base import Base, utc_now


class MonthlyClosing(Base):
    """Frozen totals for one church and calendar month."""

    __tablename__ = "monthly_closings"
    __table_args__ = (
        UniqueConstraint(
            "church_id", "reference_month", name="uq_monthly_closings_church_month"
        ),
        CheckConstraint(
            "EXTRACT(DAY FROM reference_month) = 1",
            name="ck_monthly_closings_reference_month_first_day",
        ).ddl_if(dialect="postgresql"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    church_id: Mapped[UUID] = mapped_column(
        ForeignKey("churches.id"), nullable=False, index=True
    )
    reference_month: Mapped[date] = mapped_column(Date, nullable=False)
    total_income: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_expense: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    previous_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    accumulated_balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    closed_by: Mapped[UUID | None] = mapped_column(nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )
