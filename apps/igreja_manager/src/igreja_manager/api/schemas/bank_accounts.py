"""Schemas for bank account endpoints."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field

from igreja_manager.api.schemas.common import SIGNED_MONEY_PATTERN
from igreja_manager.db.models.bank_account import BankAccount
from igreja_manager.domain.money import format_money


class CreateBankAccountRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: str = Field(min_length=1, max_length=20)
    bank_name: str | None = Field(default=None, max_length=100)
    agency: str | None = Field(default=None, max_length=20)
    account_number: str | None = Field(default=None, max_length=30)
    initial_balance: str = Field(default="0.00", pattern=SIGNED_MONEY_PATTERN)


class UpdateBankAccountRequest(BaseModel):
    """Balances are not editable here."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    bank_name: str | None = Field(default=None, max_length=100)
    agency: str | None = Field(default=None, max_length=20)
    account_number: str | None = Field(default=None, max_length=30)
    is_active: bool | None = None


class BankAccountResponse(BaseModel):
    id: UUID
    name: str
    type: str
    bank_name: str | None
    agency: str | None
    account_number: str | None
    initial_balance: str = Field(pattern=SIGNED_MONEY_PATTERN)
    current_balance: str = Field(pattern=SIGNED_MONEY_PATTERN)
    is_active: bool

    @classmethod
    def from_model(cls, account: BankAccount) -> BankAccountResponse:
        return cls(
            id=account.id,
            name=account.name,
            type=account.type.value,
            bank_name=account.bank_name,
            agency=account.agency,
            account_number=account.account_number,
            initial_balance=format_money(account.initial_balance),
            current_balance=format_money(account.current_balance),
            is_active=account.is_active,
        )
