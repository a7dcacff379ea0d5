"""EBD lesson and attendance routes."""

from __future__ import annotations

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from igreja_manager.api.dependencies import (
    Page,
    get_attendance_service,
    get_audit_trail,
    get_lesson_service,
)
from igreja_manager.api.schemas.attendance import (
    AttendanceResponse,
    RecordAttendanceRequest,
)
from igreja_manager.api.schemas.common import ApiResponse, ok, paginated
from igreja_manager.api.schemas.lessons import (
    CreateLessonRequest,
    LessonResponse,
    UpdateLessonRequest,
)
from igreja_manager.api.security import EbdReader, EbdWriter
from igreja_manager.repositories.lesson_repository import LessonListFilters
from igreja_manager.services.attendance_service import (
    AttendanceService,
    RecordAttendanceInput,
)
from igreja_manager.services.audit_service import AuditTrail
from igreja_manager.services.lesson_service import (
    CreateLessonInput,
    LessonService,
    UpdateLessonInput,
)

router = APIRouter(prefix="/ebd/lessons", tags=["EBD Lessons"])

LessonServiceDep = Annotated[LessonService, Depends(get_lesson_service)]
AttendanceServiceDep = Annotated[AttendanceService, Depends(get_attendance_service)]
AuditDep = Annotated[AuditTrail, Depends(get_audit_trail)]


@router.get("", response_model=ApiResponse[list[LessonResponse]])
def list_lessons(
    context: EbdReader,
    service: LessonServiceDep,
    page: Page,
    class_id: UUID | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> ApiResponse[list[LessonResponse]]:
    items, total = service.list_lessons(
        LessonListFilters(
            church_id=context.church_id,
            class_id=class_id,
            date_from=date_from,
            date_to=date_to,
            limit=page.per_page,
            offset=page.offset,
        )
    )
    return paginated(
        [LessonResponse.from_model(item) for item in items],
        page=page.page,
        per_page=page.per_page,
        total=total,
    )


@router.post(
    "",
    response_model=ApiResponse[LessonResponse],
    status_code=status.HTTP_201_CREATED,
    responses={404: {"description": "Class not found"}},
)
def create_lesson(
    payload: CreateLessonRequest,
    context: EbdWriter,
    service: LessonServiceDep,
    audit: AuditDep,
) -> ApiResponse[LessonResponse]:
    lesson = service.create_lesson(
        CreateLessonInput(
            church_id=context.church_id,
            class_id=payload.class_id,
            lesson_date=payload.lesson_date,
            lesson_number=payload.lesson_number,
            title=payload.title,
            theme=payload.theme,
            bible_text=payload.bible_text,
            summary=payload.summary,
            teacher_id=payload.teacher_id,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="create",
        entity_type="ebd_lesson",
        entity_id=lesson.id,
    )
    return ok(LessonResponse.from_model(lesson), message="Lesson created")


@router.get(
    "/{lesson_id}",
    response_model=ApiResponse[LessonResponse],
    responses={404: {"description": "Lesson not found"}},
)
def get_lesson(
    lesson_id: UUID, context: EbdReader, service: LessonServiceDep
) -> ApiResponse[LessonResponse]:
    lesson = service.get_lesson(church_id=context.church_id, lesson_id=lesson_id)
    return ok(LessonResponse.from_model(lesson))


@router.put(
    "/{lesson_id}",
    response_model=ApiResponse[LessonResponse],
    responses={404: {"description": "Lesson not found"}},
)
def update_lesson(
    lesson_id: UUID,
    payload: UpdateLessonRequest,
    context: EbdWriter,
    service: LessonServiceDep,
    audit: AuditDep,
) -> ApiResponse[LessonResponse]:
    lesson = service.update_lesson(
        UpdateLessonInput(
            church_id=context.church_id,
            lesson_id=lesson_id,
            lesson_date=payload.lesson_date,
            lesson_number=payload.lesson_number,
            title=payload.title,
            theme=payload.theme,
            bible_text=payload.bible_text,
            summary=payload.summary,
            teacher_id=payload.teacher_id,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="update",
        entity_type="ebd_lesson",
        entity_id=lesson.id,
    )
    return ok(LessonResponse.from_model(lesson), message="Lesson updated")


@router.delete(
    "/{lesson_id}",
    response_model=ApiResponse[None],
    responses={
        404: {"description": "Lesson not found"},
        409: {"description": "Lesson has attendance and force is false"},
    },
)
def delete_lesson(
    lesson_id: UUID,
    context: EbdWriter,
    service: LessonServiceDep,
    audit: AuditDep,
    force: bool = False,
) -> ApiResponse[None]:
    service.delete_lesson(church_id=context.church_id, lesson_id=lesson_id, force=force)
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="delete",
        entity_type="ebd_lesson",
        entity_id=lesson_id,
    )
    return ok(None, message="Lesson deleted")


@router.get(
    "/{lesson_id}/attendance",
    response_model=ApiResponse[list[AttendanceResponse]],
    responses={404: {"description": "Lesson not found"}},
)
def list_attendance(
    lesson_id: UUID, context: EbdReader, service: AttendanceServiceDep
) -> ApiResponse[list[AttendanceResponse]]:
    rows = service.list_for_lesson(church_id=context.church_id, lesson_id=lesson_id)
    return ok(
        [
            AttendanceResponse.from_model(attendance, member_name=member_name)
            for attendance, member_name in rows
        ]
    )


@router.post(
    "/{lesson_id}/attendance",
    response_model=ApiResponse[list[AttendanceResponse]],
    responses={
        400: {"description": "Invalid status or edit window expired"},
        404: {"description": "Lesson not found"},
    },
)
def record_attendance(
    lesson_id: UUID,
    payload: RecordAttendanceRequest,
    context: EbdWriter,
    service: AttendanceServiceDep,
    audit: AuditDep,
) -> ApiResponse[list[AttendanceResponse]]:
    """Upsert a batch of attendance records; all or nothing."""

    saved = service.record_attendance(
        RecordAttendanceInput(
            church_id=context.church_id,
            lesson_id=lesson_id,
            records=tuple(record.to_input() for record in payload.records),
            registered_by=context.user_id,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="record_attendance",
        entity_type="ebd_lesson",
        entity_id=lesson_id,
    )
    return ok(
        [AttendanceResponse.from_model(item) for item in saved],
        message="Attendance recorded",
    )
