"""Financial entry and balance routes."""

from __future__ import annotations

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from igreja_manager.api.dependencies import (
    Page,
    get_audit_trail,
    get_financial_entry_service,
)
from igreja_manager.api.schemas.common import ApiResponse, ok, paginated
from igreja_manager.api.schemas.financial_entries import (
    BalanceReportResponse,
    CreateFinancialEntryRequest,
    FinancialEntryResponse,
    UpdateFinancialEntryRequest,
)
from igreja_manager.api.security import FinancialReader, FinancialWriter
from igreja_manager.domain.money import to_money
from igreja_manager.repositories.financial_entry_repository import (
    FinancialEntryFilters,
)
from igreja_manager.services.audit_service import AuditTrail
from igreja_manager.services.financial_entry_service import (
    CreateEntryInput,
    FinancialEntryService,
    UpdateEntryInput,
    parse_entry_status,
    parse_entry_type,
)

router = APIRouter(prefix="/financial/entries", tags=["Financial Entries"])
balance_router = APIRouter(prefix="/financial", tags=["Financial Reports"])

EntryServiceDep = Annotated[
    FinancialEntryService, Depends(get_financial_entry_service)
]
AuditDep = Annotated[AuditTrail, Depends(get_audit_trail)]


@router.get(
    "",
    response_model=ApiResponse[list[FinancialEntryResponse]],
    responses={400: {"description": "Invalid query filters"}},
)
def list_entries(
    context: FinancialReader,
    service: EntryServiceDep,
    page: Page,
    type: str | None = None,
    status: str | None = None,
    account_plan_id: UUID | None = None,
    bank_account_id: UUID | None = None,
    member_id: UUID | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    search: Annotated[str | None, Query(min_length=1, max_length=100)] = None,
) -> ApiResponse[list[FinancialEntryResponse]]:
    """List non-deleted entries, newest entry date first."""

    items, total = service.list_entries(
        FinancialEntryFilters(
            church_id=context.church_id,
            type=parse_entry_type(type) if type else None,
            status=parse_entry_status(status) if status else None,
            account_plan_id=account_plan_id,
            bank_account_id=bank_account_id,
            member_id=member_id,
            date_from=date_from,
            date_to=date_to,
            search=search,
            limit=page.per_page,
            offset=page.offset,
        )
    )
    return paginated(
        [FinancialEntryResponse.from_model(item) for item in items],
        page=page.page,
        per_page=page.per_page,
        total=total,
    )


@router.post(
    "",
    response_model=ApiResponse[FinancialEntryResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid payload, plan or bank account"},
        409: {"description": "Month already closed"},
    },
)
def create_entry(
    payload: CreateFinancialEntryRequest,
    context: FinancialWriter,
    service: EntryServiceDep,
    audit: AuditDep,
) -> ApiResponse[FinancialEntryResponse]:
    """Create an entry; confirmed entries move the bank balance at once."""

    entry = service.create_entry(
        CreateEntryInput(
            church_id=context.church_id,
            type=payload.type,
            account_plan_id=payload.account_plan_id,
            bank_account_id=payload.bank_account_id,
            amount=to_money(payload.amount),
            entry_date=payload.entry_date,
            description=payload.description,
            status=payload.status,
            due_date=payload.due_date,
            payment_date=payload.payment_date,
            payment_method=payload.payment_method,
            member_id=payload.member_id,
            supplier_name=payload.supplier_name,
            notes=payload.notes,
            registered_by=context.user_id,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="create",
        entity_type="financial_entry",
        entity_id=entry.id,
    )
    return ok(FinancialEntryResponse.from_model(entry), message="Entry created")


@router.get(
    "/{entry_id}",
    response_model=ApiResponse[FinancialEntryResponse],
    responses={404: {"description": "Entry not found"}},
)
def get_entry(
    entry_id: UUID, context: FinancialReader, service: EntryServiceDep
) -> ApiResponse[FinancialEntryResponse]:
    entry = service.get_entry(church_id=context.church_id, entry_id=entry_id)
    return ok(FinancialEntryResponse.from_model(entry))


@router.put(
    "/{entry_id}",
    response_model=ApiResponse[FinancialEntryResponse],
    responses={
        400: {"description": "Invalid payload or status transition"},
        404: {"description": "Entry not found"},
        409: {"description": "Entry or target month is closed"},
    },
)
def update_entry(
    entry_id: UUID,
    payload: UpdateFinancialEntryRequest,
    context: FinancialWriter,
    service: EntryServiceDep,
    audit: AuditDep,
) -> ApiResponse[FinancialEntryResponse]:
    entry = service.update_entry(
        UpdateEntryInput(
            church_id=context.church_id,
            entry_id=entry_id,
            account_plan_id=payload.account_plan_id,
            bank_account_id=payload.bank_account_id,
            amount=to_money(payload.amount) if payload.amount is not None else None,
            entry_date=payload.entry_date,
            due_date=payload.due_date,
            payment_date=payload.payment_date,
            description=payload.description,
            payment_method=payload.payment_method,
            supplier_name=payload.supplier_name,
            notes=payload.notes,
            status=payload.status,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="update",
        entity_type="financial_entry",
        entity_id=entry.id,
    )
    return ok(FinancialEntryResponse.from_model(entry), message="Entry updated")


@router.delete(
    "/{entry_id}",
    response_model=ApiResponse[FinancialEntryResponse],
    responses={
        404: {"description": "Entry not found"},
        409: {"description": "Entry belongs to a closed month"},
    },
)
def delete_entry(
    entry_id: UUID,
    context: FinancialWriter,
    service: EntryServiceDep,
    audit: AuditDep,
) -> ApiResponse[FinancialEntryResponse]:
    """Soft delete an entry, reverting its balance effect when confirmed."""

    entry = service.delete_entry(church_id=context.church_id, entry_id=entry_id)
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="delete",
        entity_type="financial_entry",
        entity_id=entry.id,
    )
    return ok(FinancialEntryResponse.from_model(entry), message="Entry deleted")


@balance_router.get("/balance", response_model=ApiResponse[BalanceReportResponse])
def balance_report(
    context: FinancialReader,
    service: EntryServiceDep,
    date_from: date | None = None,
    date_to: date | None = None,
) -> ApiResponse[BalanceReportResponse]:
    report = service.balance_report(
        church_id=context.church_id, date_from=date_from, date_to=date_to
    )
    return ok(BalanceReportResponse.from_report(report))
