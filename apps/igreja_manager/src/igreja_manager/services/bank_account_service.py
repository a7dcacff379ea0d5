"""Bank account management service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from igreja_manager.db.models.bank_account import BankAccount, BankAccountType
from igreja_manager.domain.errors import (
    NotFoundError,
    ValidationError,
    compose_error_message,
)
from igreja_manager.domain.money import quantize_money
from igreja_manager.repositories.bank_account_repository import (
    BankAccountListFilters,
)

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def refresh(self, instance: object) -> None: ...


class BankAccountRepositoryProtocol(Protocol):
    def list_accounts(
        self, filters: BankAccountListFilters
    ) -> tuple[list[BankAccount], int]: ...

    def get_account(
        self, *, church_id: UUID, account_id: UUID
    ) -> BankAccount | None: ...

    def add(self, account: BankAccount) -> BankAccount: ...

    def flush(self) -> None: ...


@dataclass(slots=True, frozen=True)
class CreateBankAccountInput:
    church_id: UUID
    name: str
    type: str
    bank_name: str | None = None
    agency: str | None = None
    account_number: str | None = None
    initial_balance: Decimal = Decimal("0.00")


@dataclass(slots=True, frozen=True)
class UpdateBankAccountInput:
    """Balance fields are absent on purpose: only the ledger moves them."""

    church_id: UUID
    account_id: UUID
    name: str | None = None
    bank_name: str | None = None
    agency: str | None = None
    account_number: str | None = None
    is_active: bool | None = None


def parse_bank_account_type(value: str) -> BankAccountType:
    try:
        return BankAccountType(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in BankAccountType)
        raise ValidationError(
            message=compose_error_message(
                cause=f"Invalid bank account type: {value!r}.",
                action=f"Use one of: {allowed}.",
            ),
            details={"type": value},
        ) from exc


class BankAccountService:
    """Creates and maintains bank accounts."""

    def __init__(
        self,
        *,
        bank_account_repository: BankAccountRepositoryProtocol,
        session: SessionProtocol,
    ) -> None:
        self._bank_account_repository = bank_account_repository
        self._session = session

    def list_accounts(
        self, filters: BankAccountListFilters
    ) -> tuple[list[BankAccount], int]:
        return self._bank_account_repository.list_accounts(filters)

    def get_account(self, *, church_id: UUID, account_id: UUID) -> BankAccount:
        account = self._bank_account_repository.get_account(
            church_id=church_id, account_id=account_id
        )
        if account is None:
            raise NotFoundError.for_entity("Bank account", account_id)
        return account

    def create_account(self, payload: CreateBankAccountInput) -> BankAccount:
        account_type = parse_bank_account_type(payload.type)
        initial_balance = quantize_money(payload.initial_balance)

        try:
            account = self._bank_account_repository.add(
                BankAccount(
                    church_id=payload.church_id,
                    name=payload.name.strip(),
                    type=account_type,
                    bank_name=payload.bank_name,
                    agency=payload.agency,
                    account_number=payload.account_number,
                    initial_balance=initial_balance,
                    current_balance=initial_balance,
                    is_active=True,
                )
            )
            self._session.commit()
            self._session.refresh(account)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "bank_account_created",
            extra={"bank_account_id": str(account.id), "type": account_type.value},
        )
        return account

    def update_account(self, payload: UpdateBankAccountInput) -> BankAccount:
        account = self.get_account(
            church_id=payload.church_id, account_id=payload.account_id
        )
        try:
            for field_name in ("bank_name", "agency", "account_number", "is_active"):
                value = getattr(payload, field_name)
                if value is not None:
                    setattr(account, field_name, value)
            if payload.name is not None:
                account.name = payload.name.strip()
            self._bank_account_repository.flush()
            self._session.commit()
            self._session.refresh(account)
        except Exception:
            self._session.rollback()
            raise
        return account
