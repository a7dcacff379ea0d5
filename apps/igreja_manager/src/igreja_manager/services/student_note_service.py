"""Teacher notes about EBD students."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from igreja_manager.db.models.ebd_student_note import EbdStudentNote, NoteType
from igreja_manager.db.models.ebd_term import EbdTerm
from igreja_manager.db.models.member import Member
from igreja_manager.domain.errors import (
    ForbiddenError,
    NotFoundError,
    ValidationError,
    compose_error_message,
)
from igreja_manager.repositories.student_note_repository import StudentNoteFilters

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def refresh(self, instance: object) -> None: ...


class StudentNoteRepositoryProtocol(Protocol):
    def list_notes(self, filters: StudentNoteFilters) -> list[EbdStudentNote]: ...

    def get_note(
        self, *, church_id: UUID, member_id: UUID, note_id: UUID
    ) -> EbdStudentNote | None: ...

    def add(self, note: EbdStudentNote) -> EbdStudentNote: ...

    def flush(self) -> None: ...

    def delete(self, note: EbdStudentNote) -> None: ...


class MemberLookupProtocol(Protocol):
    def get_member(self, *, church_id: UUID, member_id: UUID) -> Member | None: ...


class TermLookupProtocol(Protocol):
    def get_term(self, *, church_id: UUID, term_id: UUID) -> EbdTerm | None: ...


@dataclass(slots=True, frozen=True)
class CreateStudentNoteInput:
    """Input model for note creation."""

    church_id: UUID
    member_id: UUID
    note_type: str
    content: str
    created_by: UUID
    title: str | None = None
    term_id: UUID | None = None
    is_private: bool = True


@dataclass(slots=True, frozen=True)
class UpdateStudentNoteInput:
    """Partial update; None leaves the field unchanged."""

    church_id: UUID
    member_id: UUID
    note_id: UUID
    requested_by: UUID
    note_type: str | None = None
    title: str | None = None
    content: str | None = None
    is_private: bool | None = None


def parse_note_type(value: str) -> NoteType:
    try:
        return NoteType(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in NoteType)
        raise ValidationError(
            message=compose_error_message(
                cause=f"Invalid note_type: {value!r}.",
                action=f"Use one of: {allowed}.",
            ),
            details={"note_type": value},
        ) from exc


class StudentNoteService:
    """Notes are editable only by their author."""

    def __init__(
        self,
        *,
        note_repository: StudentNoteRepositoryProtocol,
        member_repository: MemberLookupProtocol,
        term_repository: TermLookupProtocol,
        session: SessionProtocol,
    ) -> None:
        self._note_repository = note_repository
        self._member_repository = member_repository
        self._term_repository = term_repository
        self._session = session

    def list_notes(self, filters: StudentNoteFilters) -> list[EbdStudentNote]:
        self._require_member(filters.church_id, filters.member_id)
        return self._note_repository.list_notes(filters)

    def create_note(self, payload: CreateStudentNoteInput) -> EbdStudentNote:
        self._require_member(payload.church_id, payload.member_id)
        note_type = parse_note_type(payload.note_type)
        if payload.term_id is not None and (
            self._term_repository.get_term(
                church_id=payload.church_id, term_id=payload.term_id
            )
            is None
        ):
            raise NotFoundError.for_entity("Term", payload.term_id)
        if not payload.content.strip():
            raise ValidationError(
                message=compose_error_message(
                    cause="Note content is empty.",
                    action="Send a non-empty content.",
                )
            )

        try:
            note = self._note_repository.add(
                EbdStudentNote(
                    church_id=payload.church_id,
                    member_id=payload.member_id,
                    term_id=payload.term_id,
                    note_type=note_type,
                    title=payload.title,
                    content=payload.content.strip(),
                    is_private=payload.is_private,
                    created_by=payload.created_by,
                )
            )
            self._session.commit()
            self._session.refresh(note)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "student_note_created",
            extra={"note_id": str(note.id), "member_id": str(payload.member_id)},
        )
        return note

    def update_note(self, payload: UpdateStudentNoteInput) -> EbdStudentNote:
        note = self._get_owned_note(
            church_id=payload.church_id,
            member_id=payload.member_id,
            note_id=payload.note_id,
            requested_by=payload.requested_by,
        )
        note_type = None
        if payload.note_type is not None:
            note_type = parse_note_type(payload.note_type)

        try:
            if note_type is not None:
                note.note_type = note_type
            if payload.title is not None:
                note.title = payload.title
            if payload.content is not None:
                note.content = payload.content.strip()
            if payload.is_private is not None:
                note.is_private = payload.is_private
            self._note_repository.flush()
            self._session.commit()
            self._session.refresh(note)
        except Exception:
            self._session.rollback()
            raise
        return note

    def delete_note(
        self, *, church_id: UUID, member_id: UUID, note_id: UUID, requested_by: UUID
    ) -> None:
        note = self._get_owned_note(
            church_id=church_id,
            member_id=member_id,
            note_id=note_id,
            requested_by=requested_by,
        )
        try:
            self._note_repository.delete(note)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info("student_note_deleted", extra={"note_id": str(note_id)})

    def _require_member(self, church_id: UUID, member_id: UUID) -> None:
        if self._member_repository.get_member(
            church_id=church_id, member_id=member_id
        ) is None:
            raise NotFoundError.for_entity("Member", member_id)

    def _get_owned_note(
        self, *, church_id: UUID, member_id: UUID, note_id: UUID, requested_by: UUID
    ) -> EbdStudentNote:
        note = self._note_repository.get_note(
            church_id=church_id, member_id=member_id, note_id=note_id
        )
        if note is None:
            raise NotFoundError.for_entity("Note", note_id)
        if note.created_by != requested_by:
            raise ForbiddenError(
                message=compose_error_message(
                    cause="Only the author can change this note.",
                    action="Ask the note author to make the change.",
                )
            )
        return note
