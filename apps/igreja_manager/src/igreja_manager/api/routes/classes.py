"""EBD class, enrollment and class report routes."""

from __future__ import annotations

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from igreja_manager.api.dependencies import (
    Page,
    get_attendance_service,
    get_audit_trail,
    get_class_service,
)
from igreja_manager.api.schemas.attendance import ClassAttendanceReportResponse
from igreja_manager.api.schemas.classes import (
    ClassResponse,
    CreateClassRequest,
    EnrollMemberRequest,
    EnrollmentResponse,
    UpdateClassRequest,
)
from igreja_manager.api.schemas.common import ApiResponse, ok, paginated
from igreja_manager.api.security import EbdReader, EbdWriter
from igreja_manager.repositories.class_repository import ClassListFilters
from igreja_manager.services.attendance_service import AttendanceService
from igreja_manager.services.audit_service import AuditTrail
from igreja_manager.services.class_service import (
    ClassService,
    CreateClassInput,
    UpdateClassInput,
)

router = APIRouter(prefix="/ebd/classes", tags=["EBD Classes"])

ClassServiceDep = Annotated[ClassService, Depends(get_class_service)]
AuditDep = Annotated[AuditTrail, Depends(get_audit_trail)]


@router.get("", response_model=ApiResponse[list[ClassResponse]])
def list_classes(
    context: EbdReader,
    service: ClassServiceDep,
    page: Page,
    term_id: UUID | None = None,
    is_active: bool | None = None,
    teacher_id: UUID | None = None,
    search: Annotated[str | None, Query(min_length=1, max_length=100)] = None,
) -> ApiResponse[list[ClassResponse]]:
    """List classes with their active enrollment count."""

    rows, total = service.list_classes(
        ClassListFilters(
            church_id=context.church_id,
            term_id=term_id,
            is_active=is_active,
            teacher_id=teacher_id,
            search=search,
            limit=page.per_page,
            offset=page.offset,
        )
    )
    return paginated(
        [
            ClassResponse.from_model(ebd_class, enrolled_count=count)
            for ebd_class, count in rows
        ],
        page=page.page,
        per_page=page.per_page,
        total=total,
    )


@router.post(
    "",
    response_model=ApiResponse[ClassResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid payload"},
        404: {"description": "Term not found"},
    },
)
def create_class(
    payload: CreateClassRequest,
    context: EbdWriter,
    service: ClassServiceDep,
    audit: AuditDep,
) -> ApiResponse[ClassResponse]:
    ebd_class = service.create_class(
        CreateClassInput(
            church_id=context.church_id,
            term_id=payload.term_id,
            name=payload.name,
            age_range_start=payload.age_range_start,
            age_range_end=payload.age_range_end,
            room=payload.room,
            max_capacity=payload.max_capacity,
            teacher_id=payload.teacher_id,
            aux_teacher_id=payload.aux_teacher_id,
            congregation_id=payload.congregation_id,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="create",
        entity_type="ebd_class",
        entity_id=ebd_class.id,
    )
    return ok(
        ClassResponse.from_model(ebd_class, enrolled_count=0), message="Class created"
    )


@router.get(
    "/{class_id}",
    response_model=ApiResponse[ClassResponse],
    responses={404: {"description": "Class not found"}},
)
def get_class(
    class_id: UUID, context: EbdReader, service: ClassServiceDep
) -> ApiResponse[ClassResponse]:
    ebd_class = service.get_class(church_id=context.church_id, class_id=class_id)
    return ok(
        ClassResponse.from_model(
            ebd_class, enrolled_count=service.get_enrolled_count(ebd_class.id)
        )
    )


@router.put(
    "/{class_id}",
    response_model=ApiResponse[ClassResponse],
    responses={
        400: {"description": "Invalid payload"},
        404: {"description": "Class not found"},
    },
)
def update_class(
    class_id: UUID,
    payload: UpdateClassRequest,
    context: EbdWriter,
    service: ClassServiceDep,
    audit: AuditDep,
) -> ApiResponse[ClassResponse]:
    ebd_class = service.update_class(
        UpdateClassInput(
            church_id=context.church_id,
            class_id=class_id,
            name=payload.name,
            age_range_start=payload.age_range_start,
            age_range_end=payload.age_range_end,
            room=payload.room,
            max_capacity=payload.max_capacity,
            teacher_id=payload.teacher_id,
            aux_teacher_id=payload.aux_teacher_id,
            is_active=payload.is_active,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="update",
        entity_type="ebd_class",
        entity_id=ebd_class.id,
    )
    return ok(
        ClassResponse.from_model(
            ebd_class, enrolled_count=service.get_enrolled_count(ebd_class.id)
        ),
        message="Class updated",
    )


@router.delete(
    "/{class_id}",
    response_model=ApiResponse[None],
    responses={404: {"description": "Class not found"}},
)
def delete_class(
    class_id: UUID,
    context: EbdWriter,
    service: ClassServiceDep,
    audit: AuditDep,
) -> ApiResponse[None]:
    """Delete the class with its lessons, attendance and enrollments."""

    service.delete_class(church_id=context.church_id, class_id=class_id)
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="delete",
        entity_type="ebd_class",
        entity_id=class_id,
    )
    return ok(None, message="Class deleted")


@router.get(
    "/{class_id}/enrollments",
    response_model=ApiResponse[list[EnrollmentResponse]],
    responses={404: {"description": "Class not found"}},
)
def list_enrollments(
    class_id: UUID, context: EbdReader, service: ClassServiceDep
) -> ApiResponse[list[EnrollmentResponse]]:
    rows = service.list_enrollments(church_id=context.church_id, class_id=class_id)
    return ok(
        [
            EnrollmentResponse.from_model(enrollment, member_name=member_name)
            for enrollment, member_name in rows
        ]
    )


@router.post(
    "/{class_id}/enrollments",
    response_model=ApiResponse[EnrollmentResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Class is full"},
        404: {"description": "Class or member not found"},
        409: {"description": "Member already enrolled in this term"},
    },
)
def enroll_member(
    class_id: UUID,
    payload: EnrollMemberRequest,
    context: EbdWriter,
    service: ClassServiceDep,
    audit: AuditDep,
) -> ApiResponse[EnrollmentResponse]:
    """Enroll a member; one active enrollment per member per term."""

    enrollment = service.enroll_member(
        church_id=context.church_id, class_id=class_id, member_id=payload.member_id
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="enroll",
        entity_type="ebd_enrollment",
        entity_id=enrollment.id,
    )
    return ok(EnrollmentResponse.from_model(enrollment), message="Member enrolled")


@router.delete(
    "/{class_id}/enrollments/{enrollment_id}",
    response_model=ApiResponse[EnrollmentResponse],
    responses={404: {"description": "Enrollment not found"}},
)
def remove_enrollment(
    class_id: UUID,
    enrollment_id: UUID,
    context: EbdWriter,
    service: ClassServiceDep,
    audit: AuditDep,
) -> ApiResponse[EnrollmentResponse]:
    """End an enrollment; the record is kept with left_at set."""

    enrollment = service.remove_enrollment(
        church_id=context.church_id, class_id=class_id, enrollment_id=enrollment_id
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="unenroll",
        entity_type="ebd_enrollment",
        entity_id=enrollment.id,
    )
    return ok(EnrollmentResponse.from_model(enrollment), message="Enrollment ended")


@router.get(
    "/{class_id}/report",
    response_model=ApiResponse[ClassAttendanceReportResponse],
    responses={404: {"description": "Class not found"}},
)
def class_report(
    class_id: UUID,
    context: EbdReader,
    service: Annotated[AttendanceService, Depends(get_attendance_service)],
    date_from: date | None = None,
    date_to: date | None = None,
) -> ApiResponse[ClassAttendanceReportResponse]:
    report = service.class_report(
        church_id=context.church_id,
        class_id=class_id,
        date_from=date_from,
        date_to=date_to,
    )
    return ok(ClassAttendanceReportResponse.from_report(report))
