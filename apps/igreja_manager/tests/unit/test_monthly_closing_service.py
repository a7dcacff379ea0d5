from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from igreja_manager.db.models.financial_entry import EntryStatus, EntryType
from igreja_manager.db.models.monthly_closing import MonthlyClosing
from igreja_manager.domain.errors import ConflictError
from igreja_manager.repositories.financial_entry_repository import FrozenEntry
from igreja_manager.services.monthly_closing_service import (
    CloseMonthInput,
    MonthlyClosingService,
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
class FakeClosingRepository:
    calls: list[str]
    closings: list[MonthlyClosing] = field(default_factory=list)

    def list_closings(
        self, *, church_id: UUID, limit: int = 20, offset: int = 0
    ) -> tuple[list[MonthlyClosing], int]:
        return self.closings[offset : offset + limit], len(self.closings)

    def lock_ledger(self, church_id: UUID) -> None:
        self.calls.append(f"lock:{church_id}")

    def exists_for_month(self, *, church_id: UUID, reference_month: date) -> bool:
        return any(c.reference_month == reference_month for c in self.closings)

    def get_latest_before(
        self, *, church_id: UUID, reference_month: date
    ) -> MonthlyClosing | None:
        earlier = [c for c in self.closings if c.reference_month < reference_month]
        return max(earlier, key=lambda c: c.reference_month, default=None)

    def add(self, closing: MonthlyClosing) -> MonthlyClosing:
        self.closings.append(closing)
        return closing


@dataclass
class FakeEntryRepository:
    calls: list[str]
    frozen: list[FrozenEntry]

    def freeze_entries(
        self,
        *,
        church_id: UUID,
        date_from: date,
        date_to: date,
        closed_by: UUID | None,
        closed_at: datetime,
    ) -> list[FrozenEntry]:
        self.calls.append(f"freeze:{date_from.isoformat()}:{date_to.isoformat()}")
        frozen, self.frozen = self.frozen, []
        return frozen


def build_service(
    frozen: list[FrozenEntry],
) -> tuple[MonthlyClosingService, FakeClosingRepository, list[str], FakeSession]:
    calls: list[str] = []
    closings = FakeClosingRepository(calls=calls)
    session = FakeSession()
    service = MonthlyClosingService(
        closing_repository=closings,
        entry_repository=FakeEntryRepository(calls=calls, frozen=frozen),
        session=session,
    )
    return service, closings, calls, session


def test_totals_come_from_the_frozen_confirmed_rows() -> None:
    service, _, calls, session = build_service(
        [
            FrozenEntry(EntryType.RECEITA, EntryStatus.CONFIRMADO, Decimal("300.00")),
            FrozenEntry(EntryType.RECEITA, EntryStatus.PENDENTE, Decimal("999.00")),
            FrozenEntry(EntryType.DESPESA, EntryStatus.CONFIRMADO, Decimal("120.50")),
            FrozenEntry(EntryType.DESPESA, EntryStatus.CANCELADO, Decimal("40.00")),
        ]
    )

    closing = service.close_month(
        CloseMonthInput(church_id=CHURCH_ID, reference_month=date(2026, 3, 17))
    )

    assert closing.reference_month == date(2026, 3, 1)
    assert closing.total_income == Decimal("300.00")
    assert closing.total_expense == Decimal("120.50")
    assert closing.balance == Decimal("179.50")
    assert closing.accumulated_balance == Decimal("179.50")
    assert calls == [f"lock:{CHURCH_ID}", "freeze:2026-03-01:2026-03-31"]
    assert session.commits == 1


def test_accumulated_balance_carries_previous_closing() -> None:
    service, closings, _, _ = build_service(
        [FrozenEntry(EntryType.DESPESA, EntryStatus.CONFIRMADO, Decimal("50.00"))]
    )
    closings.closings.append(
        MonthlyClosing(
            church_id=CHURCH_ID,
            reference_month=date(2026, 2, 1),
            accumulated_balance=Decimal("200.00"),
        )
    )

    closing = service.close_month(
        CloseMonthInput(church_id=CHURCH_ID, reference_month=date(2026, 3, 1))
    )

    assert closing.previous_balance == Decimal("200.00")
    assert closing.accumulated_balance == Decimal("150.00")


def test_duplicate_month_is_rejected_after_the_lock_without_freezing() -> None:
    service, closings, calls, session = build_service([])
    closings.closings.append(
        MonthlyClosing(
            church_id=CHURCH_ID,
            reference_month=date(2026, 3, 1),
            accumulated_balance=Decimal("0.00"),
        )
    )

    with pytest.raises(ConflictError):
        service.close_month(
            CloseMonthInput(church_id=CHURCH_ID, reference_month=date(2026, 3, 5))
        )

    assert calls == [f"lock:{CHURCH_ID}"]
    assert session.rolled_back is True
    assert session.commits == 0
