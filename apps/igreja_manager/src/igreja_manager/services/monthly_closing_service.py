"""Monthly closing: freeze a month's entries and record its totals."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from igreja_manager.db.models.financial_entry import EntryStatus, EntryType
from igreja_manager.db.models.monthly_closing import MonthlyClosing
from igreja_manager.domain.errors import ConflictError, compose_error_message
from igreja_manager.domain.money import ZERO, quantize_money
from igreja_manager.domain.periods import (
    format_reference_month,
    month_bounds,
    normalize_reference_month,
)
from igreja_manager.repositories.financial_entry_repository import FrozenEntry

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def refresh(self, instance: object) -> None: ...


class MonthlyClosingRepositoryProtocol(Protocol):
    def list_closings(
        self, *, church_id: UUID, limit: int = 20, offset: int = 0
    ) -> tuple[list[MonthlyClosing], int]: ...

    def lock_ledger(self, church_id: UUID) -> None: ...

    def exists_for_month(self, *, church_id: UUID, reference_month: date) -> bool: ...

    def get_latest_before(
        self, *, church_id: UUID, reference_month: date
    ) -> MonthlyClosing | None: ...

    def add(self, closing: MonthlyClosing) -> MonthlyClosing: ...


class EntryFreezeProtocol(Protocol):
    def freeze_entries(
        self,
        *,
        church_id: UUID,
        date_from: date,
        date_to: date,
        closed_by: UUID | None,
        closed_at: datetime,
    ) -> list[FrozenEntry]: ...


@dataclass(slots=True, frozen=True)
class CloseMonthInput:
    church_id: UUID
    reference_month: date
    closed_by: UUID | None = None
    notes: str | None = None


def confirmed_total(entries: list[FrozenEntry], entry_type: EntryType) -> Decimal:
    return quantize_money(
        sum(
            (
                entry.amount
                for entry in entries
                if entry.type == entry_type and entry.status == EntryStatus.CONFIRMADO
            ),
            ZERO,
        )
    )


class MonthlyClosingService:
    """Closes months once; closed months are immutable afterwards."""

    def __init__(
        self,
        *,
        closing_repository: MonthlyClosingRepositoryProtocol,
        entry_repository: EntryFreezeProtocol,
        session: SessionProtocol,
    ) -> None:
        self._closing_repository = closing_repository
        self._entry_repository = entry_repository
        self._session = session

    def list_closings(
        self, *, church_id: UUID, limit: int = 20, offset: int = 0
    ) -> tuple[list[MonthlyClosing], int]:
        return self._closing_repository.list_closings(
            church_id=church_id, limit=limit, offset=offset
        )

    def close_month(self, payload: CloseMonthInput) -> MonthlyClosing:
        """Freeze the month's entries and store totals of the frozen rows."""

        reference_month = normalize_reference_month(payload.reference_month)
        first_day, last_day = month_bounds(reference_month)

        try:
            self._closing_repository.lock_ledger(payload.church_id)
            if self._closing_repository.exists_for_month(
                church_id=payload.church_id, reference_month=reference_month
            ):
                raise ConflictError(
                    message=compose_error_message(
                        cause=(
                            f"Month {format_reference_month(reference_month)} "
                            "is already closed."
                        ),
                        action="Pick a month that has not been closed yet.",
                    ),
                    details={"reference_month": reference_month.isoformat()},
                )

            frozen = self._entry_repository.freeze_entries(
                church_id=payload.church_id,
                date_from=first_day,
                date_to=last_day,
                closed_by=payload.closed_by,
                closed_at=datetime.now(tz=UTC),
            )
            total_income = confirmed_total(frozen, EntryType.RECEITA)
            total_expense = confirmed_total(frozen, EntryType.DESPESA)
            previous = self._closing_repository.get_latest_before(
                church_id=payload.church_id, reference_month=reference_month
            )
            previous_balance = (
                quantize_money(previous.accumulated_balance) if previous else ZERO
            )
            balance = quantize_money(total_income - total_expense)

            closing = self._closing_repository.add(
                MonthlyClosing(
                    church_id=payload.church_id,
                    reference_month=reference_month,
                    total_income=total_income,
                    total_expense=total_expense,
                    balance=balance,
                    previous_balance=previous_balance,
                    accumulated_balance=quantize_money(previous_balance + balance),
                    closed_by=payload.closed_by,
                    notes=payload.notes,
                )
            )
            self._session.commit()
            self._session.refresh(closing)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "month_closed",
            extra={
                "church_id": str(payload.church_id),
                "reference_month": format_reference_month(reference_month),
                "entries_frozen": len(frozen),
                "accumulated_balance": str(closing.accumulated_balance),
            },
        )
        return closing
