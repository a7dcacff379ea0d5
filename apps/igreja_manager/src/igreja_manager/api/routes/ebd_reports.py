"""Cross-term EBD report routes."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from igreja_manager.api.dependencies import get_ebd_report_service
from igreja_manager.api.schemas.common import ApiResponse, ok
from igreja_manager.api.schemas.ebd_reports import (
    AbsentStudentResponse,
    TermComparisonResponse,
)
from igreja_manager.api.security import EbdReader
from igreja_manager.domain.errors import ValidationError, compose_error_message
from igreja_manager.services.ebd_report_service import (
    DEFAULT_MIN_CONSECUTIVE_ABSENCES,
    EbdReportService,
)

router = APIRouter(prefix="/ebd/reports", tags=["EBD Reports"])

ReportServiceDep = Annotated[EbdReportService, Depends(get_ebd_report_service)]


def parse_term_ids(raw: str) -> list[UUID]:
    """Parse a comma-separated list of term ids."""
    parts = [part.strip() for part in raw.split(",") if part.strip()]
    try:
        term_ids = [UUID(part) for part in parts]
    except ValueError as exc:
        raise ValidationError(
            message=compose_error_message(
                cause="term_ids must contain valid UUIDs.",
                action="Send term ids separated by commas.",
            ),
            details={"term_ids": raw},
        ) from exc
    if not term_ids:
        raise ValidationError(
            message=compose_error_message(
                cause="No term id was provided.",
                action="Send at least one term id.",
            )
        )
    return term_ids


@router.get(
    "/comparison",
    response_model=ApiResponse[list[TermComparisonResponse]],
    responses={400: {"description": "Invalid term ids"}},
)
def term_comparison(
    context: EbdReader,
    service: ReportServiceDep,
    term_ids: Annotated[str, Query(min_length=1)],
) -> ApiResponse[list[TermComparisonResponse]]:
    """Compare headline figures of several terms side by side."""

    items = service.term_comparison(
        church_id=context.church_id, term_ids=parse_term_ids(term_ids)
    )
    return ok([TermComparisonResponse.from_comparison(item) for item in items])


@router.get(
    "/absent-students",
    response_model=ApiResponse[list[AbsentStudentResponse]],
)
def absent_students(
    context: EbdReader,
    service: ReportServiceDep,
    min_absences: Annotated[
        int, Query(ge=1, le=52)
    ] = DEFAULT_MIN_CONSECUTIVE_ABSENCES,
) -> ApiResponse[list[AbsentStudentResponse]]:
    """Students of the active term missing their latest lessons in a row."""

    items = service.absent_students(
        church_id=context.church_id, min_absences=min_absences
    )
    return ok([AbsentStudentResponse.from_absent(item) for item in items])
