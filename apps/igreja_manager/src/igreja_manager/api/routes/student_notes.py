"""Student note routes."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from igreja_manager.api.dependencies import get_audit_trail, get_student_note_service
from igreja_manager.api.schemas.common import ApiResponse, ok
from igreja_manager.api.schemas.student_notes import (
    CreateStudentNoteRequest,
    StudentNoteResponse,
    UpdateStudentNoteRequest,
)
from igreja_manager.api.security import EbdReader, EbdWriter
from igreja_manager.repositories.student_note_repository import StudentNoteFilters
from igreja_manager.services.audit_service import AuditTrail
from igreja_manager.services.student_note_service import (
    CreateStudentNoteInput,
    StudentNoteService,
    UpdateStudentNoteInput,
    parse_note_type,
)

router = APIRouter(prefix="/ebd/students/{member_id}/notes", tags=["EBD Notes"])

NoteServiceDep = Annotated[StudentNoteService, Depends(get_student_note_service)]
AuditDep = Annotated[AuditTrail, Depends(get_audit_trail)]


@router.get(
    "",
    response_model=ApiResponse[list[StudentNoteResponse]],
    responses={404: {"description": "Member not found"}},
)
def list_notes(
    member_id: UUID,
    context: EbdReader,
    service: NoteServiceDep,
    term_id: UUID | None = None,
    note_type: str | None = None,
) -> ApiResponse[list[StudentNoteResponse]]:
    """List notes; private ones only for callers allowed to write EBD data."""

    notes = service.list_notes(
        StudentNoteFilters(
            church_id=context.church_id,
            member_id=member_id,
            term_id=term_id,
            note_type=parse_note_type(note_type) if note_type else None,
            include_private=context.has_permission("ebd:write"),
        )
    )
    return ok([StudentNoteResponse.from_model(note) for note in notes])


@router.post(
    "",
    response_model=ApiResponse[StudentNoteResponse],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid note type"},
        404: {"description": "Member or term not found"},
    },
)
def create_note(
    member_id: UUID,
    payload: CreateStudentNoteRequest,
    context: EbdWriter,
    service: NoteServiceDep,
    audit: AuditDep,
) -> ApiResponse[StudentNoteResponse]:
    note = service.create_note(
        CreateStudentNoteInput(
            church_id=context.church_id,
            member_id=member_id,
            note_type=payload.note_type,
            content=payload.content,
            created_by=context.user_id,
            title=payload.title,
            term_id=payload.term_id,
            is_private=payload.is_private,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="create",
        entity_type="ebd_student_note",
        entity_id=note.id,
    )
    return ok(StudentNoteResponse.from_model(note), message="Note created")


@router.put(
    "/{note_id}",
    response_model=ApiResponse[StudentNoteResponse],
    responses={
        403: {"description": "Caller is not the note author"},
        404: {"description": "Note not found"},
    },
)
def update_note(
    member_id: UUID,
    note_id: UUID,
    payload: UpdateStudentNoteRequest,
    context: EbdWriter,
    service: NoteServiceDep,
    audit: AuditDep,
) -> ApiResponse[StudentNoteResponse]:
    note = service.update_note(
        UpdateStudentNoteInput(
            church_id=context.church_id,
            member_id=member_id,
            note_id=note_id,
            requested_by=context.user_id,
            note_type=payload.note_type,
            title=payload.title,
            content=payload.content,
            is_private=payload.is_private,
        )
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="update",
        entity_type="ebd_student_note",
        entity_id=note.id,
    )
    return ok(StudentNoteResponse.from_model(note), message="Note updated")


@router.delete(
    "/{note_id}",
    response_model=ApiResponse[None],
    responses={
        403: {"description": "Caller is not the note author"},
        404: {"description": "Note not found"},
    },
)
def delete_note(
    member_id: UUID,
    note_id: UUID,
    context: EbdWriter,
    service: NoteServiceDep,
    audit: AuditDep,
) -> ApiResponse[None]:
    service.delete_note(
        church_id=context.church_id,
        member_id=member_id,
        note_id=note_id,
        requested_by=context.user_id,
    )
    audit.record(
        church_id=context.church_id,
        actor_id=context.user_id,
        action="delete",
        entity_type="ebd_student_note",
        entity_id=note_id,
    )
    return ok(None, message="Note deleted")
