"""Persistence operations for account plans."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from igreja_manager.db.models.account_plan import AccountPlan, AccountPlanType


@dataclass(frozen=True, slots=True)
class AccountPlanListFilters:
    """Filters for account plan listing."""

    church_id: UUID
    type: AccountPlanType | None = None
    is_active: bool | None = None
    limit: int = 20
    offset: int = 0


class AccountPlanRepository:
    """Repository for the chart of accounts."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_plans(
        self, filters: AccountPlanListFilters
    ) -> tuple[list[AccountPlan], int]:
        statement = select(AccountPlan).where(
            AccountPlan.church_id == filters.church_id
        )
        if filters.type is not None:
            statement = statement.where(AccountPlan.type == filters.type)
        if filters.is_active is not None:
            statement = statement.where(AccountPlan.is_active.is_(filters.is_active))

        total_statement = select(func.count()).select_from(statement.subquery())
        total = int(self._session.scalar(total_statement) or 0)

        page_statement = (
            statement.order_by(AccountPlan.code.asc())
            .limit(filters.limit)
            .offset(filters.offset)
        )
        return list(self._session.scalars(page_statement).all()), total

    def get_plan(self, *, church_id: UUID, plan_id: UUID) -> AccountPlan | None:
        statement = select(AccountPlan).where(
            AccountPlan.id == plan_id,
            AccountPlan.church_id == church_id,
        )
        return self._session.scalar(statement)

    def code_in_use(
        self, *, church_id: UUID, code: str, exclude_plan_id: UUID | None = None
    ) -> bool:
        statement = select(AccountPlan.id).where(
            AccountPlan.church_id == church_id,
            AccountPlan.code == code,
        )
        if exclude_plan_id is not None:
            statement = statement.where(AccountPlan.id != exclude_plan_id)
        return self._session.scalar(statement) is not None

    def add(self, plan: AccountPlan) -> AccountPlan:
        self._session.add(plan)
        self._session.flush()
        return plan

    def flush(self) -> None:
        self._session.flush()
