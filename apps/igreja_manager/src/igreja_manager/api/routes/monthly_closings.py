"""Monthly closing routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from igreja_manager.api.dependencies import (
    Page,
    get_audit_trail,
    get_monthly_closing_service,
)
from igreja_manager.api.schemas.common import ApiResponse, ok, paginated
from igreja_manager.api.schemas.monthly_closings import (
    CloseMonthRequest,
    MonthlyClosingResponse,
)
from igreja_manager.api.security import FinancialReader, FinancialWriter
from igreja_manager.domain.errors import ValidationError, compose_error_message
from igreja_manager.domain.periods import parse_reference_month
from igreja_manager.services.audit_service import AuditTrail
from igreja_manager.services.monthly_closing_service import (
    CloseMonthInput,
    MonthlyClosingService,
)

router = APIRouter(prefix="/financial/monthly-closings", tags=["Monthly Closings"])

ClosingServiceDep = Annotated[
    MonthlyClosingService, Depends(get_monthly_closing_service)
]
AuditDep = Annotated[AuditTrail, Depends(get_audit_trail)]


@router.get("", response_model=ApiResponse[list[MonthlyClosingResponse]])
def list_closings(
    context: FinancialReader, service: ClosingServiceDep, page: Page
) -> ApiResponse[list[MonthlyClosingResponse]]:
    items, total = service.list_closings(
        church_id=context.church_id, limit=page.per_page, offset=page.offset
    )
    return paginated(
        [MonthlyClosingResponse.from_model(item) for item in items],
        page=page.page,
        per_page=page.per_page,
        total=total,
    )


@router.post(
    "",
    response_model=ApiResponse[MonthlyClosingResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid reference month"},
        409: {"description": "Month already closed"},
    },
)
def close_month(
    payload: CloseMonthRequest,
    context: FinancialWriter,
    service: ClosingServiceDep,
    audit: AuditDep,
) -> ApiResponse[MonthlyClosingResponse]:
    """Close a month: totals are frozen and its entries become immutable."""

    try:
        reference_month = parse_reference_month(payload.reference_month)
    except ValueError as exc:
        raise ValidationError(
            message=compose_error_message(
                cause=f"Invalid reference month: {payload.reference_month}.",
                action="Send the month as YYYY-MM.",
            )
        ) from exc

    closing = service.close_month(
        CloseMonthInput(
            church_id=context.church_id,
            reference_month=reference_month,
            closed_by=context.user_id,
            notes=payload.notes,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="close_month",
        entity_type="monthly_closing",
        entity_id=closing.id,
    )
    return ok(MonthlyClosingResponse.from_model(closing), message="Month closed")
