"""Persistence operations for monthly closings."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from igreja_manager.db.models.church import Church
from igreja_manager.db.models.monthly_closing import MonthlyClosing


class MonthlyClosingRepository:
    """Repository for closed months."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_closings(
        self, *, church_id: UUID, limit: int = 20, offset: int = 0
    ) -> tuple[list[MonthlyClosing], int]:
        statement = select(MonthlyClosing).where(
            MonthlyClosing.church_id == church_id
        )
        total_statement = select(func.count()).select_from(statement.subquery())
        total = int(self._session.scalar(total_statement) or 0)

        page_statement = (
            statement.order_by(MonthlyClosing.reference_month.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(self._session.scalars(page_statement).all()), total

    def exists_for_month(self, *, church_id: UUID, reference_month: date) -> bool:
        statement = select(MonthlyClosing.id).where(
            MonthlyClosing.church_id == church_id,
            MonthlyClosing.reference_month == reference_month,
        )
        return self._session.scalar(statement) is not None

    def get_latest_before(
        self, *, church_id: UUID, reference_month: date
    ) -> MonthlyClosing | None:
        statement = (
            select(MonthlyClosing)
            .where(
                MonthlyClosing.church_id == church_id,
                MonthlyClosing.reference_month < reference_month,
            )
            .order_by(MonthlyClosing.reference_month.desc())
            .limit(1)
        )
        return self._session.scalar(statement)

    def add(self, closing: MonthlyClosing) -> MonthlyClosing:
        self._session.add(closing)
        self._session.flush()
        return closing

    def lock_ledger(self, church_id: UUID) -> None:
        """Serialize ledger writes and closings of one church until commit."""
        statement = select(Church.id).where(Church.id == church_id).with_for_update()
        self._session.execute(statement)
