"""Account plan (chart of accounts) service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from igreja_manager.db.models.account_plan import AccountPlan, AccountPlanType
from igreja_manager.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    compose_error_message,
)
from igreja_manager.repositories.account_plan_repository import (
    AccountPlanListFilters,
)

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def refresh(self, instance: object) -> None: ...


class AccountPlanRepositoryProtocol(Protocol):
    def list_plans(
        self, filters: AccountPlanListFilters
    ) -> tuple[list[AccountPlan], int]: ...

    def get_plan(self, *, church_id: UUID, plan_id: UUID) -> AccountPlan | None: ...

    def code_in_use(
        self, *, church_id: UUID, code: str, exclude_plan_id: UUID | None = None
    ) -> bool: ...

    def add(self, plan: AccountPlan) -> AccountPlan: ...

    def flush(self) -> None: ...


@dataclass(slots=True, frozen=True)
class CreateAccountPlanInput:
    church_id: UUID
    code: str
    name: str
    type: str
    parent_id: UUID | None = None


@dataclass(slots=True, frozen=True)
class UpdateAccountPlanInput:
    church_id: UUID
    plan_id: UUID
    code: str | None = None
    name: str | None = None
    is_active: bool | None = None


def parse_account_plan_type(value: str) -> AccountPlanType:
    try:
        return AccountPlanType(value)
    except ValueError as exc:
        raise ValidationError(
            message=compose_error_message(
                cause=f"Invalid account plan type: {value!r}.",
                action="Use receita or despesa.",
            ),
            details={"type": value},
        ) from exc


def _code_conflict(code: str) -> ConflictError:
    return ConflictError(
        message=compose_error_message(
            cause=f"Account plan code {code!r} is already in use.",
            action="Choose a different code.",
        ),
        details={"code": code},
    )


class AccountPlanService:
    """Maintains the hierarchical chart of accounts."""

    def __init__(
        self,
        *,
        account_plan_repository: AccountPlanRepositoryProtocol,
        session: SessionProtocol,
    ) -> None:
        self._account_plan_repository = account_plan_repository
        self._session = session

    def list_plans(
        self, filters: AccountPlanListFilters
    ) -> tuple[list[AccountPlan], int]:
        return self._account_plan_repository.list_plans(filters)

    def get_plan(self, *, church_id: UUID, plan_id: UUID) -> AccountPlan:
        plan = self._account_plan_repository.get_plan(
            church_id=church_id, plan_id=plan_id
        )
        if plan is None:
            raise NotFoundError.for_entity("Account plan", plan_id)
        return plan

    def create_plan(self, payload: CreateAccountPlanInput) -> AccountPlan:
        plan_type = parse_account_plan_type(payload.type)
        code = payload.code.strip()
        if self._account_plan_repository.code_in_use(
            church_id=payload.church_id, code=code
        ):
            raise _code_conflict(code)

        level = 1
        if payload.parent_id is not None:
            parent = self.get_plan(
                church_id=payload.church_id, plan_id=payload.parent_id
            )
            level = parent.level + 1

        try:
            plan = self._account_plan_repository.add(
                AccountPlan(
                    church_id=payload.church_id,
                    parent_id=payload.parent_id,
                    code=code,
                    name=payload.name.strip(),
                    type=plan_type,
                    level=level,
                    is_active=True,
                )
            )
            self._session.commit()
            self._session.refresh(plan)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "account_plan_created",
            extra={"account_plan_id": str(plan.id), "code": code},
        )
        return plan

    def update_plan(self, payload: UpdateAccountPlanInput) -> AccountPlan:
        plan = self.get_plan(church_id=payload.church_id, plan_id=payload.plan_id)
        if payload.code is not None:
            code = payload.code.strip()
            if self._account_plan_repository.code_in_use(
                church_id=payload.church_id, code=code, exclude_plan_id=plan.id
            ):
                raise _code_conflict(code)

        try:
            if payload.code is not None:
                plan.code = payload.code.strip()
            if payload.name is not None:
                plan.name = payload.name.strip()
            if payload.is_active is not None:
                plan.is_active = payload.is_active
            self._account_plan_repository.flush()
            self._session.commit()
            self._session.refresh(plan)
        except Exception:
            self._session.rollback()
            raise
        return plan
