"""Persistence operations for bank accounts."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from igreja_manager.db.models.bank_account import BankAccount


@dataclass(frozen=True, slots=True)
class BankAccountListFilters:
    """Filters for bank account listing."""

    church_id: UUID
    is_active: bool | None = None
    limit: int = 20
    offset: int = 0


class BankAccountRepository:
    """Repository for bank accounts and their atomic balance movement."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_accounts(
        self, filters: BankAccountListFilters
    ) -> tuple[list[BankAccount], int]:
        statement = select(BankAccount).where(
            BankAccount.church_id == filters.church_id
        )
        if filters.is_active is not None:
            statement = statement.where(BankAccount.is_active.is_(filters.is_active))

        total_statement = select(func.count()).select_from(statement.subquery())
        total = int(self._session.scalar(total_statement) or 0)

        page_statement = (
            statement.order_by(BankAccount.name.asc())
            .limit(filters.limit)
            .offset(filters.offset)
        )
        return list(self._session.scalars(page_statement).all()), total

    def get_account(self, *, church_id: UUID, account_id: UUID) -> BankAccount | None:
        statement = select(BankAccount).where(
            BankAccount.id == account_id,
            BankAccount.church_id == church_id,
        )
        return self._session.scalar(statement)

    def adjust_balance(self, *, account_id: UUID, delta: Decimal) -> None:
        """Increment current_balance in a single statement."""
        self._session.execute(
            update(BankAccount)
            .where(BankAccount.id == account_id)
            .values(current_balance=BankAccount.current_balance + delta)
            .execution_options(synchronize_session="fetch")
        )

    def add(self, account: BankAccount) -> BankAccount:
        self._session.add(account)
        self._session.flush()
        return account

    def flush(self) -> None:
        self._session.flush()
