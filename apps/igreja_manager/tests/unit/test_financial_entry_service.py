from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from igreja_manager.db.models.account_plan import AccountPlan, AccountPlanType
from igreja_manager.db.models.bank_account import BankAccount, BankAccountType
from igreja_manager.db.models.financial_entry import (
    EntryStatus,
    EntryType,
    FinancialEntry,
)
from igreja_manager.domain.errors import ConflictError, ValidationError
from igreja_manager.services.financial_entry_service import (
    CreateEntryInput,
    FinancialEntryService,
    UpdateEntryInput,
)

CHURCH_ID = uuid4()


class FakeSession:
    def __init__(self) -> None:
        self.commits = 0
        self.rolled_back = False

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rolled_back = True

    def refresh(self, instance: object) -> None:
        _ = instance


@dataclass
class FakeEntryRepository:
    entries: dict[UUID, FinancialEntry] = field(default_factory=dict)

    def get_entry_for_update(
        self, *, church_id: UUID, entry_id: UUID
    ) -> FinancialEntry | None:
        entry = self.entries.get(entry_id)
        if entry is None or entry.church_id != church_id or entry.deleted_at:
            return None
        return entry

    def add(self, entry: FinancialEntry) -> FinancialEntry:
        entry.id = uuid4()
        self.entries[entry.id] = entry
        return entry

    def flush(self) -> None:
        return None


@dataclass
class FakeBankAccountRepository:
    accounts: dict[UUID, BankAccount] = field(default_factory=dict)

    def get_account(self, *, church_id: UUID, account_id: UUID) -> BankAccount | None:
        account = self.accounts.get(account_id)
        if account is None or account.church_id != church_id:
            return None
        return account

    def adjust_balance(self, *, account_id: UUID, delta: Decimal) -> None:
        self.accounts[account_id].current_balance += delta


@dataclass
class FakeAccountPlanRepository:
    plans: dict[UUID, AccountPlan] = field(default_factory=dict)

    def get_plan(self, *, church_id: UUID, plan_id: UUID) -> AccountPlan | None:
        return self.plans.get(plan_id)


@dataclass
class FakeClosingRepository:
    closed_months: set[date] = field(default_factory=set)
    locked: list[UUID] = field(default_factory=list)

    def lock_ledger(self, church_id: UUID) -> None:
        self.locked.append(church_id)

    def exists_for_month(self, *, church_id: UUID, reference_month: date) -> bool:
        return reference_month in self.closed_months


@dataclass
class Ledger:
    service: FinancialEntryService
    session: FakeSession
    entries: FakeEntryRepository
    accounts: FakeBankAccountRepository
    closings: FakeClosingRepository
    account: BankAccount
    plan: AccountPlan


def build_ledger(*, initial_balance: str = "100.00") -> Ledger:
    account = BankAccount(
        id=uuid4(),
        church_id=CHURCH_ID,
        name="Caixa",
        type=BankAccountType.CAIXA,
        initial_balance=Decimal(initial_balance),
        current_balance=Decimal(initial_balance),
        is_active=True,
    )
    plan = AccountPlan(
        id=uuid4(),
        church_id=CHURCH_ID,
        code="1.01",
        name="Dizimos",
        type=AccountPlanType.RECEITA,
        level=1,
        is_active=True,
    )
    session = FakeSession()
    entries = FakeEntryRepository()
    accounts = FakeBankAccountRepository(accounts={account.id: account})
    closings = FakeClosingRepository()
    service = FinancialEntryService(
        entry_repository=entries,
        bank_account_repository=accounts,
        account_plan_repository=FakeAccountPlanRepository(plans={plan.id: plan}),
        closing_repository=closings,
        session=session,
    )
    return Ledger(service, session, entries, accounts, closings, account, plan)


def create_input(
    ledger: Ledger,
    *,
    entry_type: str = "receita",
    amount: str = "50.00",
    status: str = "confirmado",
    entry_date: date = date(2026, 3, 10),
) -> CreateEntryInput:
    return CreateEntryInput(
        church_id=CHURCH_ID,
        type=entry_type,
        account_plan_id=ledger.plan.id,
        bank_account_id=ledger.account.id,
        amount=Decimal(amount),
        entry_date=entry_date,
        description="  Oferta de domingo ",
        status=status,
    )


def test_create_confirmed_entry_moves_balance() -> None:
    ledger = build_ledger()

    entry = ledger.service.create_entry(create_input(ledger))

    assert entry.status == EntryStatus.CONFIRMADO
    assert entry.description == "Oferta de domingo"
    assert ledger.account.current_balance == Decimal("150.00")
    assert ledger.session.commits == 1


def test_create_pending_entry_keeps_balance() -> None:
    ledger = build_ledger()

    ledger.service.create_entry(create_input(ledger, status="pendente"))

    assert ledger.account.current_balance == Decimal("100.00")


def test_create_rejects_terminal_status_and_non_positive_amount() -> None:
    ledger = build_ledger()

    with pytest.raises(ValidationError):
        ledger.service.create_entry(create_input(ledger, status="estornado"))
    with pytest.raises(ValidationError):
        ledger.service.create_entry(create_input(ledger, amount="0.00"))

    assert ledger.entries.entries == {}


def test_create_rejects_entry_in_closed_month() -> None:
    ledger = build_ledger()
    ledger.closings.closed_months.add(date(2026, 3, 1))

    with pytest.raises(ConflictError):
        ledger.service.create_entry(create_input(ledger))

    assert ledger.account.current_balance == Decimal("100.00")
    assert ledger.closings.locked == [CHURCH_ID]
    assert ledger.session.rolled_back is True


def test_create_rejects_inactive_bank_account() -> None:
    ledger = build_ledger()
    ledger.account.is_active = False

    with pytest.raises(ValidationError):
        ledger.service.create_entry(create_input(ledger))


def test_update_amount_applies_only_the_difference() -> None:
    ledger = build_ledger()
    entry = ledger.service.create_entry(create_input(ledger, amount="50.00"))

    ledger.service.update_entry(
        UpdateEntryInput(
            church_id=CHURCH_ID, entry_id=entry.id, amount=Decimal("30.00")
        )
    )

    assert entry.amount == Decimal("30.00")
    assert ledger.account.current_balance == Decimal("130.00")


def test_confirming_pending_expense_debits_account() -> None:
    ledger = build_ledger()
    entry = ledger.service.create_entry(
        create_input(ledger, entry_type="despesa", amount="40.00", status="pendente")
    )

    ledger.service.update_entry(
        UpdateEntryInput(church_id=CHURCH_ID, entry_id=entry.id, status="confirmado")
    )

    assert ledger.account.current_balance == Decimal("60.00")


def test_reversing_confirmed_entry_restores_balance() -> None:
    ledger = build_ledger()
    entry = ledger.service.create_entry(create_input(ledger))

    ledger.service.update_entry(
        UpdateEntryInput(church_id=CHURCH_ID, entry_id=entry.id, status="estornado")
    )

    assert entry.status == EntryStatus.ESTORNADO
    assert ledger.account.current_balance == Decimal("100.00")


def test_moving_entry_between_accounts_transfers_effect() -> None:
    ledger = build_ledger()
    other = BankAccount(
        id=uuid4(),
        church_id=CHURCH_ID,
        name="Poupanca",
        type=BankAccountType.POUPANCA,
        initial_balance=Decimal("0.00"),
        current_balance=Decimal("0.00"),
        is_active=True,
    )
    ledger.accounts.accounts[other.id] = other
    entry = ledger.service.create_entry(create_input(ledger))

    ledger.service.update_entry(
        UpdateEntryInput(
            church_id=CHURCH_ID, entry_id=entry.id, bank_account_id=other.id
        )
    )

    assert ledger.account.current_balance == Decimal("100.00")
    assert other.current_balance == Decimal("50.00")


def test_invalid_transition_rolls_back() -> None:
    ledger = build_ledger()
    entry = ledger.service.create_entry(create_input(ledger))

    with pytest.raises(ValidationError):
        ledger.service.update_entry(
            UpdateEntryInput(church_id=CHURCH_ID, entry_id=entry.id, status="pendente")
        )

    assert ledger.session.rolled_back is True
    assert ledger.account.current_balance == Decimal("150.00")


def test_closed_entry_cannot_be_updated_or_deleted() -> None:
    ledger = build_ledger()
    entry = ledger.service.create_entry(create_input(ledger))
    entry.is_closed = True

    with pytest.raises(ConflictError):
        ledger.service.update_entry(
            UpdateEntryInput(church_id=CHURCH_ID, entry_id=entry.id, notes="ajuste")
        )
    with pytest.raises(ConflictError):
        ledger.service.delete_entry(church_id=CHURCH_ID, entry_id=entry.id)


def test_delete_confirmed_entry_reverts_balance_and_soft_deletes() -> None:
    ledger = build_ledger()
    entry = ledger.service.create_entry(
        create_input(ledger, entry_type="despesa", amount="20.00")
    )
    assert ledger.account.current_balance == Decimal("80.00")

    deleted = ledger.service.delete_entry(church_id=CHURCH_ID, entry_id=entry.id)

    assert deleted.status == EntryStatus.CANCELADO
    assert deleted.deleted_at is not None
    assert ledger.account.current_balance == Decimal("100.00")


def test_moving_entry_date_into_closed_month_is_rejected() -> None:
    ledger = build_ledger()
    entry = ledger.service.create_entry(create_input(ledger))
    ledger.closings.closed_months.add(date(2026, 2, 1))

    with pytest.raises(ConflictError):
        ledger.service.update_entry(
            UpdateEntryInput(
                church_id=CHURCH_ID, entry_id=entry.id, entry_date=date(2026, 2, 20)
            )
        )

    assert entry.entry_date == date(2026, 3, 10)
    assert entry.type == EntryType.RECEITA


def test_every_ledger_write_takes_the_church_lock() -> None:
    ledger = build_ledger()

    entry = ledger.service.create_entry(create_input(ledger))
    ledger.service.update_entry(
        UpdateEntryInput(church_id=CHURCH_ID, entry_id=entry.id, notes="ajuste")
    )
    ledger.service.delete_entry(church_id=CHURCH_ID, entry_id=entry.id)

    assert ledger.closings.locked == [CHURCH_ID, CHURCH_ID, CHURCH_ID]
