"""Persistence operations for EBD lessons."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from sqlalchemy import Select, delete, func, select
from sqlalchemy.orm import Session

from igreja_manager.db.models.ebd_attendance import EbdAttendance
from igreja_manager.db.models.ebd_lesson import EbdLesson


@dataclass(frozen=True, slots=True)
class LessonListFilters:
    """Supported filters for lesson listing."""

    church_id: UUID
    class_id: UUID | None = None
    date_from: date | None = None
    date_to: date | None = None
    limit: int = 20
    offset: int = 0


class LessonRepository:
    """Repository for lesson lookup and removal."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_lessons(self, filters: LessonListFilters) -> tuple[list[EbdLesson], int]:
        statement = self._apply_filters(select(EbdLesson), filters)

        total_statement = select(func.count()).select_from(statement.subquery())
        total = int(self._session.scalar(total_statement) or 0)

        page_statement = (
            statement.order_by(
                EbdLesson.lesson_date.desc(), EbdLesson.created_at.desc()
            )
            .limit(filters.limit)
            .offset(filters.offset)
        )
        return list(self._session.scalars(page_statement).all()), total

    def get_lesson(self, *, church_id: UUID, lesson_id: UUID) -> EbdLesson | None:
        statement = select(EbdLesson).where(
            EbdLesson.id == lesson_id,
            EbdLesson.church_id == church_id,
        )
        return self._session.scalar(statement)

    def count_attendances(self, lesson_id: UUID) -> int:
        statement = select(func.count(EbdAttendance.id)).where(
            EbdAttendance.lesson_id == lesson_id
        )
        return int(self._session.scalar(statement) or 0)

    def add(self, lesson: EbdLesson) -> EbdLesson:
        self._session.add(lesson)
        self._session.flush()
        return lesson

    def flush(self) -> None:
        self._session.flush()

    def delete_lesson(self, lesson: EbdLesson) -> None:
        self._session.execute(
            delete(EbdAttendance)
            .where(EbdAttendance.lesson_id == lesson.id)
            .execution_options(synchronize_session=False)
        )
        self._session.delete(lesson)
        self._session.flush()

    @staticmethod
    def _apply_filters(
        statement: Select[tuple[EbdLesson]],
        filters: LessonListFilters,
    ) -> Select[tuple[EbdLesson]]:
        typed_statement = statement.where(EbdLesson.church_id == filters.church_id)
        if filters.class_id is not None:
            typed_statement = typed_statement.where(
                EbdLesson.class_id == filters.class_id
            )
        if filters.date_from is not None:
            typed_statement = typed_statement.where(
                EbdLesson.lesson_date >= filters.date_from
            )
        if filters.date_to is not None:
            typed_statement = typed_statement.where(
                EbdLesson.lesson_date <= filters.date_to
            )
        return typed_statement
