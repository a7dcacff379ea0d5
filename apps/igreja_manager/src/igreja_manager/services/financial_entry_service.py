"""Financial ledger service: entries and the bank balances they move."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from igreja_manager.db.models.account_plan import AccountPlan
from igreja_manager.db.models.bank_account import BankAccount
from igreja_manager.db.models.financial_entry import (
    EntryStatus,
    EntryType,
    FinancialEntry,
)
from igreja_manager.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    compose_error_message,
)
from igreja_manager.domain.ledger_rules import (
    CREATABLE_STATUSES,
    balance_adjustment,
    balance_effect,
    reversal_adjustment,
    validate_status_transition,
)
from igreja_manager.domain.money import ZERO, quantize_money
from igreja_manager.domain.periods import normalize_reference_month
from igreja_manager.repositories.financial_entry_repository import (
    AccountPlanTotal,
    FinancialEntryFilters,
)

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def refresh(self, instance: object) -> None: ...


class FinancialEntryRepositoryProtocol(Protocol):
    """Entry repository contract consumed by service."""

    def list_entries(
        self, filters: FinancialEntryFilters
    ) -> tuple[list[FinancialEntry], int]: ...

    def get_entry(
        self, *, church_id: UUID, entry_id: UUID
    ) -> FinancialEntry | None: ...

    def get_entry_for_update(
        self, *, church_id: UUID, entry_id: UUID
    ) -> FinancialEntry | None: ...

    def add(self, entry: FinancialEntry) -> FinancialEntry: ...

    def flush(self) -> None: ...

    def sum_confirmed(
        self,
        *,
        church_id: UUID,
        entry_type: EntryType,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> Decimal: ...

    def totals_by_account_plan(
        self,
        *,
        church_id: UUID,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[AccountPlanTotal]: ...


class BankAccountRepositoryProtocol(Protocol):
    """Bank account operations needed by the ledger."""

    def get_account(
        self, *, church_id: UUID, account_id: UUID
    ) -> BankAccount | None: ...

    def adjust_balance(self, *, account_id: UUID, delta: Decimal) -> None: ...


class AccountPlanLookupProtocol(Protocol):
    def get_plan(self, *, church_id: UUID, plan_id: UUID) -> AccountPlan | None: ...


class ClosedMonthLookupProtocol(Protocol):
    def lock_ledger(self, church_id: UUID) -> None: ...

    def exists_for_month(self, *, church_id: UUID, reference_month: date) -> bool: ...


@dataclass(slots=True, frozen=True)
class CreateEntryInput:
    """Input model for entry creation."""

    church_id: UUID
    type: str
    account_plan_id: UUID
    bank_account_id: UUID
    amount: Decimal
    entry_date: date
    description: str
    status: str = EntryStatus.CONFIRMADO.value
    due_date: date | None = None
    payment_date: date | None = None
    payment_method: str | None = None
    member_id: UUID | None = None
    supplier_name: str | None = None
    notes: str | None = None
    registered_by: UUID | None = None


@dataclass(slots=True, frozen=True)
class UpdateEntryInput:
    """Partial update; None leaves the field unchanged."""

    church_id: UUID
    entry_id: UUID
    account_plan_id: UUID | None = None
    bank_account_id: UUID | None = None
    amount: Decimal | None = None
    entry_date: date | None = None
    due_date: date | None = None
    payment_date: date | None = None
    description: str | None = None
    payment_method: str | None = None
    supplier_name: str | None = None
    notes: str | None = None
    status: str | None = None


@dataclass(slots=True, frozen=True)
class BalanceReport:
    """Confirmed totals for a period."""

    date_from: date | None
    date_to: date | None
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    by_account_plan: list[AccountPlanTotal]


def parse_entry_type(value: str) -> EntryType:
    try:
        return EntryType(value)
    except ValueError as exc:
        raise ValidationError(
            message=compose_error_message(
                cause=f"Invalid entry type: {value!r}.",
                action="Use receita or despesa.",
            ),
            details={"type": value},
        ) from exc


def parse_entry_status(value: str) -> EntryStatus:
    try:
        return EntryStatus(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in EntryStatus)
        raise ValidationError(
            message=compose_error_message(
                cause=f"Invalid entry status: {value!r}.",
                action=f"Use one of: {allowed}.",
            ),
            details={"status": value},
        ) from exc


def _positive_amount(amount: Decimal) -> Decimal:
    value = quantize_money(amount)
    if value <= ZERO:
        raise ValidationError(
            message=compose_error_message(
                cause="Amount must be greater than zero.",
                action="Provide a positive decimal amount with two digits.",
            ),
            details={"amount": str(amount)},
        )
    return value


def _closed_entry_conflict(entry_id: UUID) -> ConflictError:
    return ConflictError(
        message=compose_error_message(
            cause="Entry belongs to a closed month and cannot change.",
            action="Register a new entry in an open month instead.",
        ),
        details={"entry_id": str(entry_id)},
    )


class FinancialEntryService:
    """Keeps bank balances equal to initial balance plus confirmed entries."""

    def __init__(
        self,
        *,
        entry_repository: FinancialEntryRepositoryProtocol,
        bank_account_repository: BankAccountRepositoryProtocol,
        account_plan_repository: AccountPlanLookupProtocol,
        closing_repository: ClosedMonthLookupProtocol,
        session: SessionProtocol,
    ) -> None:
        self._entry_repository = entry_repository
        self._bank_account_repository = bank_account_repository
        self._account_plan_repository = account_plan_repository
        self._closing_repository = closing_repository
        self._session = session

    def list_entries(
        self, filters: FinancialEntryFilters
    ) -> tuple[list[FinancialEntry], int]:
        return self._entry_repository.list_entries(filters)

    def get_entry(self, *, church_id: UUID, entry_id: UUID) -> FinancialEntry:
        entry = self._entry_repository.get_entry(church_id=church_id, entry_id=entry_id)
        if entry is None:
            raise NotFoundError.for_entity("Financial entry", entry_id)
        return entry

    def create_entry(self, payload: CreateEntryInput) -> FinancialEntry:
        """Register an entry and apply it to the bank balance when confirmed."""

        entry_type = parse_entry_type(payload.type)
        status = parse_entry_status(payload.status)
        if status not in CREATABLE_STATUSES:
            raise ValidationError(
                message=compose_error_message(
                    cause=f"Entries cannot be created as {status.value}.",
                    action="Use pendente or confirmado.",
                ),
                details={"status": status.value},
            )
        amount = _positive_amount(payload.amount)
        self._require_active_plan(payload.church_id, payload.account_plan_id)
        self._require_active_account(payload.church_id, payload.bank_account_id)
        try:
            self._closing_repository.lock_ledger(payload.church_id)
            self._ensure_month_open(payload.church_id, payload.entry_date)
            entry = self._entry_repository.add(
                FinancialEntry(
                    church_id=payload.church_id,
                    type=entry_type,
                    account_plan_id=payload.account_plan_id,
                    bank_account_id=payload.bank_account_id,
                    amount=amount,
                    entry_date=payload.entry_date,
                    due_date=payload.due_date,
                    payment_date=payload.payment_date,
                    description=payload.description.strip(),
                    payment_method=payload.payment_method,
                    member_id=payload.member_id,
                    supplier_name=payload.supplier_name,
                    status=status,
                    is_closed=False,
                    notes=payload.notes,
                    registered_by=payload.registered_by,
                )
            )
            if status == EntryStatus.CONFIRMADO:
                self._apply(
                    entry.bank_account_id, balance_adjustment(entry_type, amount)
                )
            self._session.commit()
            self._session.refresh(entry)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "financial_entry_created",
            extra={
                "entry_id": str(entry.id),
                "type": entry_type.value,
                "status": status.value,
                "amount": str(amount),
            },
        )
        return entry

    def update_entry(self, payload: UpdateEntryInput) -> FinancialEntry:
        """Apply a partial update, moving balances by the change in effect."""

        try:
            self._closing_repository.lock_ledger(payload.church_id)
            entry = self._entry_repository.get_entry_for_update(
                church_id=payload.church_id, entry_id=payload.entry_id
            )
            if entry is None:
                raise NotFoundError.for_entity("Financial entry", payload.entry_id)
            if entry.is_closed:
                raise _closed_entry_conflict(entry.id)

            target_status = (
                parse_entry_status(payload.status)
                if payload.status is not None
                else entry.status
            )
            validate_status_transition(entry.status, target_status)
            target_amount = (
                _positive_amount(payload.amount)
                if payload.amount is not None
                else entry.amount
            )
            target_account_id = payload.bank_account_id or entry.bank_account_id
            if payload.bank_account_id is not None:
                self._require_active_account(payload.church_id, target_account_id)
            if payload.account_plan_id is not None:
                self._require_active_plan(payload.church_id, payload.account_plan_id)
            if (
                payload.entry_date is not None
                and normalize_reference_month(payload.entry_date)
                != normalize_reference_month(entry.entry_date)
            ):
                self._ensure_month_open(payload.church_id, payload.entry_date)

            old_effect = balance_effect(
                status=entry.status,
                entry_type=entry.type,
                amount=entry.amount,
                bank_account_id=entry.bank_account_id,
            )
            new_effect = balance_effect(
                status=target_status,
                entry_type=entry.type,
                amount=target_amount,
                bank_account_id=target_account_id,
            )
            if old_effect != new_effect:
                if old_effect is not None:
                    self._apply(old_effect[0], -old_effect[1])
                if new_effect is not None:
                    self._apply(new_effect[0], new_effect[1])

            entry.status = target_status
            entry.amount = target_amount
            entry.bank_account_id = target_account_id
            for field_name in (
                "account_plan_id",
                "entry_date",
                "due_date",
                "payment_date",
                "payment_method",
                "supplier_name",
                "notes",
            ):
                value = getattr(payload, field_name)
                if value is not None:
                    setattr(entry, field_name, value)
            if payload.description is not None:
                entry.description = payload.description.strip()
            self._entry_repository.flush()
            self._session.commit()
            self._session.refresh(entry)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "financial_entry_updated",
            extra={"entry_id": str(entry.id), "status": entry.status.value},
        )
        return entry

    def delete_entry(self, *, church_id: UUID, entry_id: UUID) -> FinancialEntry:
        """Soft-delete the entry, reversing its balance effect if confirmed."""

        try:
            self._closing_repository.lock_ledger(church_id)
            entry = self._entry_repository.get_entry_for_update(
                church_id=church_id, entry_id=entry_id
            )
            if entry is None:
                raise NotFoundError.for_entity("Financial entry", entry_id)
            if entry.is_closed:
                raise _closed_entry_conflict(entry.id)

            if entry.status == EntryStatus.CONFIRMADO:
                self._apply(
                    entry.bank_account_id,
                    reversal_adjustment(entry.type, entry.amount),
                )
            entry.status = EntryStatus.CANCELADO
            entry.deleted_at = datetime.now(tz=UTC)
            self._entry_repository.flush()
            self._session.commit()
            self._session.refresh(entry)
        except Exception:
            self._session.rollback()
            raise

        logger.info("financial_entry_deleted", extra={"entry_id": str(entry_id)})
        return entry

    def balance_report(
        self,
        *,
        church_id: UUID,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> BalanceReport:
        window = {"church_id": church_id, "date_from": date_from, "date_to": date_to}
        income = self._entry_repository.sum_confirmed(
            entry_type=EntryType.RECEITA, **window
        )
        expense = self._entry_repository.sum_confirmed(
            entry_type=EntryType.DESPESA, **window
        )
        return BalanceReport(
            date_from=date_from,
            date_to=date_to,
            total_income=income,
            total_expense=expense,
            balance=quantize_money(income - expense),
            by_account_plan=self._entry_repository.totals_by_account_plan(**window),
        )

    def _apply(self, account_id: UUID, delta: Decimal) -> None:
        self._bank_account_repository.adjust_balance(account_id=account_id, delta=delta)
        logger.info(
            "bank_balance_adjusted",
            extra={"bank_account_id": str(account_id), "delta": str(delta)},
        )

    def _require_active_plan(self, church_id: UUID, plan_id: UUID) -> None:
        plan = self._account_plan_repository.get_plan(
            church_id=church_id, plan_id=plan_id
        )
        if plan is None or not plan.is_active:
            raise ValidationError(
                message=compose_error_message(
                    cause="Account plan does not exist or is inactive.",
                    action="Use an active account plan of this church.",
                ),
                details={"account_plan_id": str(plan_id)},
            )

    def _require_active_account(self, church_id: UUID, account_id: UUID) -> None:
        account = self._bank_account_repository.get_account(
            church_id=church_id, account_id=account_id
        )
        if account is None or not account.is_active:
            raise ValidationError(
                message=compose_error_message(
                    cause="Bank account does not exist or is inactive.",
                    action="Use an active bank account of this church.",
                ),
                details={"bank_account_id": str(account_id)},
            )

    def _ensure_month_open(self, church_id: UUID, entry_date: date) -> None:
        reference_month = normalize_reference_month(entry_date)
        if self._closing_repository.exists_for_month(
            church_id=church_id, reference_month=reference_month
        ):
            raise ConflictError(
                message=compose_error_message(
                    cause="The entry date falls in a closed month.",
                    action="Use a date in an open month.",
                ),
                details={"reference_month": reference_month.isoformat()},
            )
