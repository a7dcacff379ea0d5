"""EBD term routes."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from igreja_manager.api.dependencies import (
    Page,
    get_audit_trail,
    get_class_service,
    get_ebd_report_service,
    get_term_service,
)
from igreja_manager.api.schemas.classes import ClassResponse, CloneClassesRequest
from igreja_manager.api.schemas.common import ApiResponse, ok, paginated
from igreja_manager.api.schemas.terms import (
    CreateTermRequest,
    RankedClassResponse,
    TermReportResponse,
    TermResponse,
    UpdateTermRequest,
)
from igreja_manager.api.security import EbdReader, EbdWriter
from igreja_manager.services.audit_service import AuditTrail
from igreja_manager.services.class_service import ClassService, CloneClassesInput
from igreja_manager.services.ebd_report_service import EbdReportService
from igreja_manager.services.term_service import (
    CreateTermInput,
    TermService,
    UpdateTermInput,
)

router = APIRouter(prefix="/ebd/terms", tags=["EBD Terms"])

TermServiceDep = Annotated[TermService, Depends(get_term_service)]
AuditDep = Annotated[AuditTrail, Depends(get_audit_trail)]


@router.get("", response_model=ApiResponse[list[TermResponse]])
def list_terms(
    context: EbdReader,
    service: TermServiceDep,
    page: Page,
    is_active: bool | None = None,
) -> ApiResponse[list[TermResponse]]:
    """List terms, most recent first."""

    items, total = service.list_terms(
        church_id=context.church_id,
        is_active=is_active,
        limit=page.per_page,
        offset=page.offset,
    )
    return paginated(
        [TermResponse.from_model(item) for item in items],
        page=page.page,
        per_page=page.per_page,
        total=total,
    )


@router.post(
    "",
    response_model=ApiResponse[TermResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid payload"}},
)
def create_term(
    payload: CreateTermRequest,
    context: EbdWriter,
    service: TermServiceDep,
    audit: AuditDep,
) -> ApiResponse[TermResponse]:
    """Create a term and make it the only active one."""

    term = service.create_term(
        CreateTermInput(
            church_id=context.church_id,
            name=payload.name,
            start_date=payload.start_date,
            end_date=payload.end_date,
            theme=payload.theme,
            magazine_title=payload.magazine_title,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="create",
        entity_type="ebd_term",
        entity_id=term.id,
    )
    return ok(TermResponse.from_model(term), message="Term created")


@router.get(
    "/{term_id}",
    response_model=ApiResponse[TermResponse],
    responses={404: {"description": "Term not found"}},
)
def get_term(
    term_id: UUID, context: EbdReader, service: TermServiceDep
) -> ApiResponse[TermResponse]:
    term = service.get_term(church_id=context.church_id, term_id=term_id)
    return ok(TermResponse.from_model(term))


@router.put(
    "/{term_id}",
    response_model=ApiResponse[TermResponse],
    responses={
        400: {"description": "Invalid payload"},
        404: {"description": "Term not found"},
    },
)
def update_term(
    term_id: UUID,
    payload: UpdateTermRequest,
    context: EbdWriter,
    service: TermServiceDep,
    audit: AuditDep,
) -> ApiResponse[TermResponse]:
    """Update provided fields; activating a term deactivates the others."""

    term = service.update_term(
        UpdateTermInput(
            church_id=context.church_id,
            term_id=term_id,
            name=payload.name,
            start_date=payload.start_date,
            end_date=payload.end_date,
            theme=payload.theme,
            magazine_title=payload.magazine_title,
            is_active=payload.is_active,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="update",
        entity_type="ebd_term",
        entity_id=term.id,
    )
    return ok(TermResponse.from_model(term), message="Term updated")


@router.delete(
    "/{term_id}",
    response_model=ApiResponse[None],
    responses={404: {"description": "Term not found"}},
)
def delete_term(
    term_id: UUID,
    context: EbdWriter,
    service: TermServiceDep,
    audit: AuditDep,
) -> ApiResponse[None]:
    """Delete the term with its classes, lessons and attendance."""

    service.delete_term(church_id=context.church_id, term_id=term_id)
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="delete",
        entity_type="ebd_term",
        entity_id=term_id,
    )
    return ok(None, message="Term deleted")


@router.get(
    "/{term_id}/report",
    response_model=ApiResponse[TermReportResponse],
    responses={404: {"description": "Term not found"}},
)
def term_report(
    term_id: UUID,
    context: EbdReader,
    service: Annotated[EbdReportService, Depends(get_ebd_report_service)],
) -> ApiResponse[TermReportResponse]:
    report = service.term_report(church_id=context.church_id, term_id=term_id)
    return ok(TermReportResponse.from_report(report))


@router.get(
    "/{term_id}/ranking",
    response_model=ApiResponse[list[RankedClassResponse]],
    responses={404: {"description": "Term not found"}},
)
def term_ranking(
    term_id: UUID,
    context: EbdReader,
    service: Annotated[EbdReportService, Depends(get_ebd_report_service)],
) -> ApiResponse[list[RankedClassResponse]]:
    """Rank the term's classes by average presence."""

    ranking = service.term_ranking(church_id=context.church_id, term_id=term_id)
    return ok([RankedClassResponse.from_ranked(item) for item in ranking])


@router.post(
    "/{term_id}/clone-classes",
    response_model=ApiResponse[list[ClassResponse]],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Source and target terms are the same"},
        404: {"description": "Term not found"},
    },
)
def clone_classes(
    term_id: UUID,
    payload: CloneClassesRequest,
    context: EbdWriter,
    service: Annotated[ClassService, Depends(get_class_service)],
    audit: AuditDep,
) -> ApiResponse[list[ClassResponse]]:
    """Copy the classes of another term into this one."""

    cloned = service.clone_classes(
        CloneClassesInput(
            church_id=context.church_id,
            source_term_id=payload.source_term_id,
            target_term_id=term_id,
            include_enrollments=payload.include_enrollments,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="clone_classes",
        entity_type="ebd_term",
        entity_id=term_id,
    )
    return ok(
        [
            ClassResponse.from_model(item.ebd_class, enrolled_count=item.enrolled_count)
            for item in cloned
        ],
        message="Classes cloned",
    )
