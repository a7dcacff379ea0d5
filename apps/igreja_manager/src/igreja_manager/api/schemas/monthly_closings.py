"""Schemas for monthly closing endpoints."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from igreja_manager.api.schemas.common import MONEY_PATTERN, SIGNED_MONEY_PATTERN
from igreja_manager.db.models.monthly_closing import MonthlyClosing
from igreja_manager.domain.money import format_money
from igreja_manager.domain.periods import format_reference_month

REFERENCE_MONTH_PATTERN = r"^[0-9]{4}-(0[1-9]|1[0-2])(-[0-9]{2})?$"


class CloseMonthRequest(BaseModel):
    """Month accepted as YYYY-MM or any ISO date inside the month."""

    reference_month: str = Field(pattern=REFERENCE_MONTH_PATTERN)
    notes: str | None = None


class MonthlyClosingResponse(BaseModel):
    id: UUID
    reference_month: str = Field(pattern=r"^[0-9]{4}-(0[1-9]|1[0-2])$")
    total_income: str = Field(pattern=MONEY_PATTERN)
    total_expense: str = Field(pattern=MONEY_PATTERN)
    balance: str = Field(pattern=SIGNED_MONEY_PATTERN)
    previous_balance: str = Field(pattern=SIGNED_MONEY_PATTERN)
    accumulated_balance: str = Field(pattern=SIGNED_MONEY_PATTERN)
    closed_by: UUID | None
    notes: str | None
    created_at: datetime

    @classmethod
    def from_model(cls, closing: MonthlyClosing) -> MonthlyClosingResponse:
        return cls(
            id=closing.id,
            reference_month=format_reference_month(closing.reference_month),
            total_income=format_money(closing.total_income),
            total_expense=format_money(closing.total_expense),
            balance=format_money(closing.balance),
            previous_balance=format_money(closing.previous_balance),
            accumulated_balance=format_money(closing.accumulated_balance),
            closed_by=closing.closed_by,
            notes=closing.notes,
            created_at=closing.created_at,
        )
