"""Bank account routes."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from igreja_manager.api.dependencies import (
    Page,
    get_audit_trail,
    get_bank_account_service,
)
from igreja_manager.api.schemas.bank_accounts import (
    BankAccountResponse,
    CreateBankAccountRequest,
    UpdateBankAccountRequest,
)
from igreja_manager.api.schemas.common import ApiResponse, ok, paginated
from igreja_manager.api.security import FinancialReader, FinancialWriter
from igreja_manager.domain.money import to_money
from igreja_manager.repositories.bank_account_repository import (
    BankAccountListFilters,
)
from igreja_manager.services.audit_service import AuditTrail
from igreja_manager.services.bank_account_service import (
    BankAccountService,
    CreateBankAccountInput,
    UpdateBankAccountInput,
)

router = APIRouter(prefix="/financial/bank-accounts", tags=["Bank Accounts"])

AccountServiceDep = Annotated[BankAccountService, Depends(get_bank_account_service)]
AuditDep = Annotated[AuditTrail, Depends(get_audit_trail)]


@router.get("", response_model=ApiResponse[list[BankAccountResponse]])
def list_accounts(
    context: FinancialReader,
    service: AccountServiceDep,
    page: Page,
    is_active: bool | None = None,
) -> ApiResponse[list[BankAccountResponse]]:
    items, total = service.list_accounts(
        BankAccountListFilters(
            church_id=context.church_id,
            is_active=is_active,
            limit=page.per_page,
            offset=page.offset,
        )
    )
    return paginated(
        [BankAccountResponse.from_model(item) for item in items],
        page=page.page,
        per_page=page.per_page,
        total=total,
    )


@router.post(
    "",
    response_model=ApiResponse[BankAccountResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid payload"}},
)
def create_account(
    payload: CreateBankAccountRequest,
    context: FinancialWriter,
    service: AccountServiceDep,
    audit: AuditDep,
) -> ApiResponse[BankAccountResponse]:
    """Create an account; current balance starts at the initial balance."""

    account = service.create_account(
        CreateBankAccountInput(
            church_id=context.church_id,
            name=payload.name,
            type=payload.type,
            bank_name=payload.bank_name,
            agency=payload.agency,
            account_number=payload.account_number,
            initial_balance=to_money(payload.initial_balance),
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="create",
        entity_type="bank_account",
        entity_id=account.id,
    )
    return ok(BankAccountResponse.from_model(account), message="Account created")


@router.get(
    "/{account_id}",
    response_model=ApiResponse[BankAccountResponse],
    responses={404: {"description": "Bank account not found"}},
)
def get_account(
    account_id: UUID, context: FinancialReader, service: AccountServiceDep
) -> ApiResponse[BankAccountResponse]:
    account = service.get_account(church_id=context.church_id, account_id=account_id)
    return ok(BankAccountResponse.from_model(account))


@router.put(
    "/{account_id}",
    response_model=ApiResponse[BankAccountResponse],
    responses={404: {"description": "Bank account not found"}},
)
def update_account(
    account_id: UUID,
    payload: UpdateBankAccountRequest,
    context: FinancialWriter,
    service: AccountServiceDep,
    audit: AuditDep,
) -> ApiResponse[BankAccountResponse]:
    account = service.update_account(
        UpdateBankAccountInput(
            church_id=context.church_id,
            account_id=account_id,
            name=payload.name,
            bank_name=payload.bank_name,
            agency=payload.agency,
            account_number=payload.account_number,
            is_active=payload.is_active,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="update",
        entity_type="bank_account",
        entity_id=account.id,
    )
    return ok(BankAccountResponse.from_model(account), message="Account updated")
