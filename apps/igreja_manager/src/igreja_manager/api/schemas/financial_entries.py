"""Schemas for financial entry and balance endpoints."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from igreja_manager.api.schemas.common import MONEY_PATTERN, SIGNED_MONEY_PATTERN
from igreja_manager.db.models.financial_entry import FinancialEntry
from igreja_manager.domain.money import format_money
from igreja_manager.repositories.financial_entry_repository import AccountPlanTotal
from igreja_manager.services.financial_entry_service import BalanceReport


def _validate_positive_amount(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        amount_decimal = Decimal(value)
    except InvalidOperation as exc:
        raise ValueError("Amount must be a decimal number.") from exc
    if amount_decimal <= Decimal("0"):
        raise ValueError("Amount must be greater than zero.")
    return value


class CreateFinancialEntryRequest(BaseModel):
    """Payload for registering income or expense."""

    type: str = Field(min_length=1, max_length=20)
    account_plan_id: UUID
    bank_account_id: UUID
    amount: str = Field(pattern=MONEY_PATTERN)
    entry_date: date
    description: str = Field(min_length=1, max_length=300)
    status: str = Field(default="confirmado", min_length=1, max_length=20)
    due_date: date | None = None
    payment_date: date | None = None
    payment_method: str | None = Field(default=None, max_length=30)
    member_id: UUID | None = None
    supplier_name: str | None = Field(default=None, max_length=200)
    notes: str | None = None

    @field_validator("description")
    @classmethod
    def validate_description(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Description cannot be blank.")
        return trimmed

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, value: str) -> str:
        return _validate_positive_amount(value) or value


class UpdateFinancialEntryRequest(BaseModel):
    account_plan_id: UUID | None = None
    bank_account_id: UUID | None = None
    amount: str | None = Field(default=None, pattern=MONEY_PATTERN)
    entry_date: date | None = None
    due_date: date | None = None
    payment_date: date | None = None
    description: str | None = Field(default=None, min_length=1, max_length=300)
    payment_method: str | None = Field(default=None, max_length=30)
    supplier_name: str | None = Field(default=None, max_length=200)
    notes: str | None = None
    status: str | None = Field(default=None, min_length=1, max_length=20)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, value: str | None) -> str | None:
        return _validate_positive_amount(value)


class FinancialEntryResponse(BaseModel):
    id: UUID
    type: str
    account_plan_id: UUID
    bank_account_id: UUID
    amount: str = Field(pattern=MONEY_PATTERN)
    entry_date: date
    due_date: date | None
    payment_date: date | None
    description: str
    payment_method: str | None
    member_id: UUID | None
    supplier_name: str | None
    status: str
    is_closed: bool
    closed_at: datetime | None
    notes: str | None
    created_at: datetime

    @classmethod
    def from_model(cls, entry: FinancialEntry) -> FinancialEntryResponse:
        return cls(
            id=entry.id,
            type=entry.type.value,
            account_plan_id=entry.account_plan_id,
            bank_account_id=entry.bank_account_id,
            amount=format_money(entry.amount),
            entry_date=entry.entry_date,
            due_date=entry.due_date,
            payment_date=entry.payment_date,
            description=entry.description,
            payment_method=entry.payment_method,
            member_id=entry.member_id,
            supplier_name=entry.supplier_name,
            status=entry.status.value,
            is_closed=entry.is_closed,
            closed_at=entry.closed_at,
            notes=entry.notes,
            created_at=entry.created_at,
        )


class AccountPlanTotalResponse(BaseModel):
    account_plan_id: UUID
    code: str
    name: str
    type: str
    total: str = Field(pattern=MONEY_PATTERN)

    @classmethod
    def from_total(cls, item: AccountPlanTotal) -> AccountPlanTotalResponse:
        return cls(
            account_plan_id=item.account_plan_id,
            code=item.code,
            name=item.name,
            type=item.type.value,
            total=format_money(item.total),
        )


class BalanceReportResponse(BaseModel):
    date_from: date | None
    date_to: date | None
    total_income: str = Field(pattern=MONEY_PATTERN)
    total_expense: str = Field(pattern=MONEY_PATTERN)
    balance: str = Field(pattern=SIGNED_MONEY_PATTERN)
    by_account_plan: list[AccountPlanTotalResponse]

    @classmethod
    def from_report(cls, report: BalanceReport) -> BalanceReportResponse:
        return cls(
            date_from=report.date_from,
            date_to=report.date_to,
            total_income=format_money(report.total_income),
            total_expense=format_money(report.total_expense),
            balance=format_money(report.balance),
            by_account_plan=[
                AccountPlanTotalResponse.from_total(item)
                for item in report.by_account_plan
            ],
        )
