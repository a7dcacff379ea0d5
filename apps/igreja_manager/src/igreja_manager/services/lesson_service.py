"""EBD lesson service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from igreja_manager.db.models.ebd_class import EbdClass
from igreja_manager.db.models.ebd_lesson import EbdLesson
from igreja_manager.domain.errors import (
    ConflictError,
    NotFoundError,
    compose_error_message,
)
from igreja_manager.repositories.lesson_repository import LessonListFilters

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def refresh(self, instance: object) -> None: ...


class LessonRepositoryProtocol(Protocol):
    """Lesson repository contract consumed by service."""

    def list_lessons(
        self, filters: LessonListFilters
    ) -> tuple[list[EbdLesson], int]: ...

    def get_lesson(self, *, church_id: UUID, lesson_id: UUID) -> EbdLesson | None: ...

    def count_attendances(self, lesson_id: UUID) -> int: ...

    def add(self, lesson: EbdLesson) -> EbdLesson: ...

    def flush(self) -> None: ...

    def delete_lesson(self, lesson: EbdLesson) -> None: ...


class ClassLookupProtocol(Protocol):
    """Class lookup used to scope lessons."""

    def get_class(self, *, church_id: UUID, class_id: UUID) -> EbdClass | None: ...


@dataclass(slots=True, frozen=True)
class CreateLessonInput:
    """Input model for lesson creation."""

    church_id: UUID
    class_id: UUID
    lesson_date: date
    lesson_number: int | None = None
    title: str | None = None
    theme: str | None = None
    bible_text: str | None = None
    summary: str | None = None
    teacher_id: UUID | None = None


@dataclass(slots=True, frozen=True)
class UpdateLessonInput:
    """Partial update; None leaves the field unchanged."""

    church_id: UUID
    lesson_id: UUID
    lesson_date: date | None = None
    lesson_number: int | None = None
    title: str | None = None
    theme: str | None = None
    bible_text: str | None = None
    summary: str | None = None
    teacher_id: UUID | None = None


class LessonService:
    """Creates and maintains lessons of a class."""

    def __init__(
        self,
        *,
        lesson_repository: LessonRepositoryProtocol,
        class_repository: ClassLookupProtocol,
        session: SessionProtocol,
    ) -> None:
        self._lesson_repository = lesson_repository
        self._class_repository = class_repository
        self._session = session

    def list_lessons(self, filters: LessonListFilters) -> tuple[list[EbdLesson], int]:
        return self._lesson_repository.list_lessons(filters)

    def get_lesson(self, *, church_id: UUID, lesson_id: UUID) -> EbdLesson:
        lesson = self._lesson_repository.get_lesson(
            church_id=church_id, lesson_id=lesson_id
        )
        if lesson is None:
            raise NotFoundError.for_entity("Lesson", lesson_id)
        return lesson

    def create_lesson(self, payload: CreateLessonInput) -> EbdLesson:
        ebd_class = self._class_repository.get_class(
            church_id=payload.church_id, class_id=payload.class_id
        )
        if ebd_class is None:
            raise NotFoundError.for_entity("Class", payload.class_id)

        try:
            lesson = self._lesson_repository.add(
                EbdLesson(
                    church_id=payload.church_id,
                    class_id=ebd_class.id,
                    lesson_date=payload.lesson_date,
                    lesson_number=payload.lesson_number,
                    title=payload.title,
                    theme=payload.theme,
                    bible_text=payload.bible_text,
                    summary=payload.summary,
                    teacher_id=payload.teacher_id or ebd_class.teacher_id,
                )
            )
            self._session.commit()
            self._session.refresh(lesson)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "lesson_created",
            extra={
                "lesson_id": str(lesson.id),
                "class_id": str(ebd_class.id),
                "lesson_date": lesson.lesson_date.isoformat(),
            },
        )
        return lesson

    def update_lesson(self, payload: UpdateLessonInput) -> EbdLesson:
        lesson = self.get_lesson(
            church_id=payload.church_id, lesson_id=payload.lesson_id
        )
        try:
            for field_name in (
                "lesson_date",
                "lesson_number",
                "title",
                "theme",
                "bible_text",
                "summary",
                "teacher_id",
            ):
                value = getattr(payload, field_name)
                if value is not None:
                    setattr(lesson, field_name, value)
            self._lesson_repository.flush()
            self._session.commit()
            self._session.refresh(lesson)
        except Exception:
            self._session.rollback()
            raise
        return lesson

    def delete_lesson(
        self, *, church_id: UUID, lesson_id: UUID, force: bool = False
    ) -> None:
        lesson = self.get_lesson(church_id=church_id, lesson_id=lesson_id)
        attendance_count = self._lesson_repository.count_attendances(lesson.id)
        if attendance_count and not force:
            raise ConflictError(
                message=compose_error_message(
                    cause="Lesson already has attendance records.",
                    action="Retry with force=true to delete the attendance too.",
                ),
                details={"attendance_count": attendance_count},
            )

        try:
            self._lesson_repository.delete_lesson(lesson)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "lesson_deleted",
            extra={"lesson_id": str(lesson_id), "attendance_removed": attendance_count},
        )
