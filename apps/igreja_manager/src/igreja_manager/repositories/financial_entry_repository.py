"""Persistence and aggregation queries for financial entries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.orm import Session

from igreja_manager.db.models.account_plan import AccountPlan
from igreja_manager.db.models.financial_entry import (
    EntryStatus,
    EntryType,
    FinancialEntry,
)
from igreja_manager.domain.money import to_money


@dataclass(frozen=True, slots=True)
class FinancialEntryFilters:
    """Supported filters for entry listing."""

    church_id: UUID
    type: EntryType | None = None
    status: EntryStatus | None = None
    account_plan_id: UUID | None = None
    bank_account_id: UUID | None = None
    member_id: UUID | None = None
    date_from: date | None = None
    date_to: date | None = None
    search: str | None = None
    limit: int = 20
    offset: int = 0


@dataclass(frozen=True, slots=True)
class AccountPlanTotal:
    """Confirmed total grouped by account plan."""

    account_plan_id: UUID
    code: str
    name: str
    type: EntryType
    total: Decimal


@dataclass(frozen=True, slots=True)
class FrozenEntry:
    """Figures of one entry frozen by a monthly closing."""

    type: EntryType
    status: EntryStatus
    amount: Decimal


class FinancialEntryRepository:
    """Repository for ledger entries."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_entries(
        self, filters: FinancialEntryFilters
    ) -> tuple[list[FinancialEntry], int]:
        statement = self._apply_filters(select(FinancialEntry), filters)

        total_statement = select(func.count()).select_from(statement.subquery())
        total = int(self._session.scalar(total_statement) or 0)

        page_statement = (
            statement.order_by(
                FinancialEntry.entry_date.desc(),
                FinancialEntry.created_at.desc(),
            )
            .limit(filters.limit)
            .offset(filters.offset)
        )
        return list(self._session.scalars(page_statement).all()), total

    def get_entry(self, *, church_id: UUID, entry_id: UUID) -> FinancialEntry | None:
        statement = select(FinancialEntry).where(
            FinancialEntry.id == entry_id,
            FinancialEntry.church_id == church_id,
            FinancialEntry.deleted_at.is_(None),
        )
        return self._session.scalar(statement)

    def get_entry_for_update(
        self, *, church_id: UUID, entry_id: UUID
    ) -> FinancialEntry | None:
        statement = (
            select(FinancialEntry)
            .where(
                FinancialEntry.id == entry_id,
                FinancialEntry.church_id == church_id,
                FinancialEntry.deleted_at.is_(None),
            )
            .with_for_update()
        )
        return self._session.scalar(statement)

    def add(self, entry: FinancialEntry) -> FinancialEntry:
        self._session.add(entry)
        self._session.flush()
        return entry

    def flush(self) -> None:
        self._session.flush()

    def sum_confirmed(
        self,
        *,
        church_id: UUID,
        entry_type: EntryType,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> Decimal:
        statement = select(func.coalesce(func.sum(FinancialEntry.amount), 0)).where(
            FinancialEntry.church_id == church_id,
            FinancialEntry.type == entry_type,
            FinancialEntry.status == EntryStatus.CONFIRMADO,
            FinancialEntry.deleted_at.is_(None),
        )
        if date_from is not None:
            statement = statement.where(FinancialEntry.entry_date >= date_from)
        if date_to is not None:
            statement = statement.where(FinancialEntry.entry_date <= date_to)
        return to_money(self._session.scalar(statement))

    def totals_by_account_plan(
        self,
        *,
        church_id: UUID,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[AccountPlanTotal]:
        statement = (
            select(
                AccountPlan.id,
                AccountPlan.code,
                AccountPlan.name,
                FinancialEntry.type,
                func.coalesce(func.sum(FinancialEntry.amount), 0),
            )
            .join(AccountPlan, AccountPlan.id == FinancialEntry.account_plan_id)
            .where(
                FinancialEntry.church_id == church_id,
                FinancialEntry.status == EntryStatus.CONFIRMADO,
                FinancialEntry.deleted_at.is_(None),
            )
            .group_by(
                AccountPlan.id,
                AccountPlan.code,
                AccountPlan.name,
                FinancialEntry.type,
            )
            .order_by(AccountPlan.code.asc())
        )
        if date_from is not None:
            statement = statement.where(FinancialEntry.entry_date >= date_from)
        if date_to is not None:
            statement = statement.where(FinancialEntry.entry_date <= date_to)
        return [
            AccountPlanTotal(
                account_plan_id=plan_id,
                code=code,
                name=name,
                type=EntryType(entry_type),
                total=to_money(total),
            )
            for plan_id, code, name, entry_type, total in self._session.execute(
                statement
            ).all()
        ]

    def freeze_entries(
        self,
        *,
        church_id: UUID,
        date_from: date,
        date_to: date,
        closed_by: UUID | None,
        closed_at: datetime,
    ) -> list[FrozenEntry]:
        """Freeze every live, still open entry dated inside the range.

        Returns the frozen rows so totals match exactly what was closed.
        """
        statement = (
            update(FinancialEntry)
            .where(
                FinancialEntry.church_id == church_id,
                FinancialEntry.entry_date >= date_from,
                FinancialEntry.entry_date <= date_to,
                FinancialEntry.deleted_at.is_(None),
                FinancialEntry.is_closed.is_(False),
            )
            .values(is_closed=True, closed_by=closed_by, closed_at=closed_at)
            .returning(
                FinancialEntry.type, FinancialEntry.status, FinancialEntry.amount
            )
        )
        rows = self._session.execute(
            statement, execution_options={"synchronize_session": "fetch"}
        ).all()
        return [
            FrozenEntry(
                type=EntryType(entry_type),
                status=EntryStatus(status),
                amount=to_money(amount),
            )
            for entry_type, status, amount in rows
        ]

    @staticmethod
    def _apply_filters(
        statement: Select[tuple[FinancialEntry]],
        filters: FinancialEntryFilters,
    ) -> Select[tuple[FinancialEntry]]:
        typed_statement = statement.where(
            FinancialEntry.church_id == filters.church_id,
            FinancialEntry.deleted_at.is_(None),
        )
        if filters.type is not None:
            typed_statement = typed_statement.where(
                FinancialEntry.type == filters.type
            )
        if filters.status is not None:
            typed_statement = typed_statement.where(
                FinancialEntry.status == filters.status
            )
        if filters.account_plan_id is not None:
            typed_statement = typed_statement.where(
                FinancialEntry.account_plan_id == filters.account_plan_id
            )
        if filters.bank_account_id is not None:
            typed_statement = typed_statement.where(
                FinancialEntry.bank_account_id == filters.bank_account_id
            )
        if filters.member_id is not None:
            typed_statement = typed_statement.where(
                FinancialEntry.member_id == filters.member_id
            )
        if filters.date_from is not None:
            typed_statement = typed_statement.where(
                FinancialEntry.entry_date >= filters.date_from
            )
        if filters.date_to is not None:
            typed_statement = typed_statement.where(
                FinancialEntry.entry_date <= filters.date_to
            )
        if filters.search:
            typed_statement = typed_statement.where(
                FinancialEntry.description.ilike(f"%{filters.search.strip()}%")
            )
        return typed_statement
