"""Persistence operations for student notes."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from igreja_manager.db.models.ebd_student_note import EbdStudentNote, NoteType


@dataclass(frozen=True, slots=True)
class StudentNoteFilters:
    """Filters for listing the notes of one student."""

    church_id: UUID
    member_id: UUID
    term_id: UUID | None = None
    note_type: NoteType | None = None
    include_private: bool = False


class StudentNoteRepository:
    """Repository for student notes."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_notes(self, filters: StudentNoteFilters) -> list[EbdStudentNote]:
        statement = select(EbdStudentNote).where(
            EbdStudentNote.church_id == filters.church_id,
            EbdStudentNote.member_id == filters.member_id,
        )
        if filters.term_id is not None:
            statement = statement.where(EbdStudentNote.term_id == filters.term_id)
        if filters.note_type is not None:
            statement = statement.where(EbdStudentNote.note_type == filters.note_type)
        if not filters.include_private:
            statement = statement.where(EbdStudentNote.is_private.is_(False))
        statement = statement.order_by(EbdStudentNote.created_at.desc())
        return list(self._session.scalars(statement).all())

    def get_note(
        self, *, church_id: UUID, member_id: UUID, note_id: UUID
    ) -> EbdStudentNote | None:
        statement = select(EbdStudentNote).where(
            EbdStudentNote.id == note_id,
            EbdStudentNote.church_id == church_id,
            EbdStudentNote.member_id == member_id,
        )
        return self._session.scalar(statement)

    def add(self, note: EbdStudentNote) -> EbdStudentNote:
        self._session.add(note)
        self._session.flush()
        return note

    def flush(self) -> None:
        self._session.flush()

    def delete(self, note: EbdStudentNote) -> None:
        self._session.delete(note)
        self._session.flush()
