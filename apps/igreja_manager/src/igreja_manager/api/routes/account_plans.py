"""Chart of accounts routes."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from igreja_manager.api.dependencies import (
    Page,
    get_account_plan_service,
    get_audit_trail,
)
from igreja_manager.api.schemas.account_plans import (
    AccountPlanResponse,
    CreateAccountPlanRequest,
    UpdateAccountPlanRequest,
)
from igreja_manager.api.schemas.common import ApiResponse, ok, paginated
from igreja_manager.api.security import FinancialReader, FinancialWriter
from igreja_manager.repositories.account_plan_repository import (
    AccountPlanListFilters,
)
from igreja_manager.services.account_plan_service import (
    AccountPlanService,
    CreateAccountPlanInput,
    UpdateAccountPlanInput,
    parse_account_plan_type,
)
from igreja_manager.services.audit_service import AuditTrail

router = APIRouter(prefix="/financial/account-plans", tags=["Account Plans"])

PlanServiceDep = Annotated[AccountPlanService, Depends(get_account_plan_service)]
AuditDep = Annotated[AuditTrail, Depends(get_audit_trail)]


@router.get(
    "",
    response_model=ApiResponse[list[AccountPlanResponse]],
    responses={400: {"description": "Invalid type filter"}},
)
def list_plans(
    context: FinancialReader,
    service: PlanServiceDep,
    page: Page,
    type: str | None = None,
    is_active: bool | None = None,
) -> ApiResponse[list[AccountPlanResponse]]:
    items, total = service.list_plans(
        AccountPlanListFilters(
            church_id=context.church_id,
            type=parse_account_plan_type(type) if type else None,
            is_active=is_active,
            limit=page.per_page,
            offset=page.offset,
        )
    )
    return paginated(
        [AccountPlanResponse.from_model(item) for item in items],
        page=page.page,
        per_page=page.per_page,
        total=total,
    )


@router.post(
    "",
    response_model=ApiResponse[AccountPlanResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid payload"},
        404: {"description": "Parent plan not found"},
        409: {"description": "Code already in use"},
    },
)
def create_plan(
    payload: CreateAccountPlanRequest,
    context: FinancialWriter,
    service: PlanServiceDep,
    audit: AuditDep,
) -> ApiResponse[AccountPlanResponse]:
    plan = service.create_plan(
        CreateAccountPlanInput(
            church_id=context.church_id,
            code=payload.code,
            name=payload.name,
            type=payload.type,
            parent_id=payload.parent_id,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="create",
        entity_type="account_plan",
        entity_id=plan.id,
    )
    return ok(AccountPlanResponse.from_model(plan), message="Account plan created")


@router.get(
    "/{plan_id}",
    response_model=ApiResponse[AccountPlanResponse],
    responses={404: {"description": "Account plan not found"}},
)
def get_plan(
    plan_id: UUID, context: FinancialReader, service: PlanServiceDep
) -> ApiResponse[AccountPlanResponse]:
    plan = service.get_plan(church_id=context.church_id, plan_id=plan_id)
    return ok(AccountPlanResponse.from_model(plan))


@router.put(
    "/{plan_id}",
    response_model=ApiResponse[AccountPlanResponse],
    responses={
        404: {"description": "Account plan not found"},
        409: {"description": "Code already in use"},
    },
)
def update_plan(
    plan_id: UUID,
    payload: UpdateAccountPlanRequest,
    context: FinancialWriter,
    service: PlanServiceDep,
    audit: AuditDep,
) -> ApiResponse[AccountPlanResponse]:
    plan = service.update_plan(
        UpdateAccountPlanInput(
            church_id=context.church_id,
            plan_id=plan_id,
            code=payload.code,
            name=payload.name,
            is_active=payload.is_active,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="update",
        entity_type="account_plan",
        entity_id=plan.id,
    )
    return ok(AccountPlanResponse.from_model(plan), message="Account plan updated")
