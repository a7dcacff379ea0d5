"""Persistence operations for EBD terms."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.orm import Session

from igreja_manager.db.models.ebd_attendance import EbdAttendance
from igreja_manager.db.models.ebd_class import EbdClass
from igreja_manager.db.models.ebd_enrollment import EbdEnrollment
from igreja_manager.db.models.ebd_lesson import EbdLesson
from igreja_manager.db.models.ebd_student_note import EbdStudentNote
from igreja_manager.db.models.ebd_term import EbdTerm


@dataclass(frozen=True, slots=True)
class TermListFilters:
    """Supported filters for term listing."""

    church_id: UUID
    is_active: bool | None = None
    limit: int = 20
    offset: int = 0


class TermRepository:
    """Repository for term lookup, activation and cascading removal."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_terms(self, filters: TermListFilters) -> tuple[list[EbdTerm], int]:
        statement = self._apply_filters(select(EbdTerm), filters)

        total_statement = select(func.count()).select_from(statement.subquery())
        total = int(self._session.scalar(total_statement) or 0)

        page_statement = (
            statement.order_by(EbdTerm.start_date.desc(), EbdTerm.created_at.desc())
            .limit(filters.limit)
            .offset(filters.offset)
        )
        return list(self._session.scalars(page_statement).all()), total

    def get_term(self, *, church_id: UUID, term_id: UUID) -> EbdTerm | None:
        statement = select(EbdTerm).where(
            EbdTerm.id == term_id,
            EbdTerm.church_id == church_id,
        )
        return self._session.scalar(statement)

    def deactivate_active_terms(
        self, *, church_id: UUID, exclude_term_id: UUID | None = None
    ) -> int:
        """Clear the active flag on every other active term of the church."""
        statement = update(EbdTerm).where(
            EbdTerm.church_id == church_id,
            EbdTerm.is_active.is_(True),
        )
        if exclude_term_id is not None:
            statement = statement.where(EbdTerm.id != exclude_term_id)
        result = self._session.execute(statement.values(is_active=False))
        return int(result.rowcount or 0)

    def add(self, term: EbdTerm) -> EbdTerm:
        self._session.add(term)
        self._session.flush()
        return term

    def flush(self) -> None:
        self._session.flush()

    def delete_term_cascade(self, term: EbdTerm) -> None:
        """Remove a term with its classes, lessons, attendances and enrollments."""
        class_ids = select(EbdClass.id).where(EbdClass.term_id == term.id)
        lesson_ids = select(EbdLesson.id).where(EbdLesson.class_id.in_(class_ids))

        statements = (
            delete(EbdAttendance).where(EbdAttendance.lesson_id.in_(lesson_ids)),
            delete(EbdLesson).where(EbdLesson.class_id.in_(class_ids)),
            delete(EbdEnrollment).where(EbdEnrollment.term_id == term.id),
            delete(EbdClass).where(EbdClass.term_id == term.id),
            update(EbdStudentNote)
            .where(EbdStudentNote.term_id == term.id)
            .values(term_id=None),
        )
        for statement in statements:
            self._session.execute(
                statement.execution_options(synchronize_session=False)
            )
        self._session.delete(term)
        self._session.flush()

    @staticmethod
    def _apply_filters(
        statement: Select[tuple[EbdTerm]],
        filters: TermListFilters,
    ) -> Select[tuple[EbdTerm]]:
        typed_statement = statement.where(EbdTerm.church_id == filters.church_id)
        if filters.is_active is not None:
            typed_statement = typed_statement.where(
                EbdTerm.is_active.is_(filters.is_active)
            )
        return typed_statement
