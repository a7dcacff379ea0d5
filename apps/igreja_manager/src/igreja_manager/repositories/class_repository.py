"""Persistence operations for EBD classes and enrollments."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import Select, delete, func, select
from sqlalchemy.orm import Session

from igreja_manager.db.models.ebd_attendance import EbdAttendance
from igreja_manager.db.models.ebd_class import EbdClass
from igreja_manager.db.models.ebd_enrollment import EbdEnrollment
from igreja_manager.db.models.ebd_lesson import EbdLesson
from igreja_manager.db.models.member import Member


@dataclass(frozen=True, slots=True)
class ClassListFilters:
    """Supported filters for class listing."""

    church_id: UUID
    term_id: UUID | None = None
    is_active: bool | None = None
    teacher_id: UUID | None = None
    search: str | None = None
    limit: int = 20
    offset: int = 0


class ClassRepository:
    """Repository for classes and the enrollments attached to them."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_classes(
        self, filters: ClassListFilters
    ) -> tuple[list[tuple[EbdClass, int]], int]:
        """Return page of classes paired with their active enrollment count."""
        base_statement = self._apply_filters(select(EbdClass), filters)
        total_statement = select(func.count()).select_from(base_statement.subquery())
        total = int(self._session.scalar(total_statement) or 0)

        enrolled_count = (
            select(func.count(EbdEnrollment.id))
            .where(
                EbdEnrollment.class_id == EbdClass.id,
                EbdEnrollment.is_active.is_(True),
            )
            .correlate(EbdClass)
            .scalar_subquery()
        )
        page_statement = (
            self._apply_filters(select(EbdClass, enrolled_count), filters)
            .order_by(EbdClass.name.asc(), EbdClass.created_at.asc())
            .limit(filters.limit)
            .offset(filters.offset)
        )
        rows = self._session.execute(page_statement).all()
        return [(ebd_class, int(count or 0)) for ebd_class, count in rows], total

    def get_class(self, *, church_id: UUID, class_id: UUID) -> EbdClass | None:
        statement = select(EbdClass).where(
            EbdClass.id == class_id,
            EbdClass.church_id == church_id,
        )
        return self._session.scalar(statement)

    def get_class_for_update(
        self, *, church_id: UUID, class_id: UUID
    ) -> EbdClass | None:
        statement = (
            select(EbdClass)
            .where(
                EbdClass.id == class_id,
                EbdClass.church_id == church_id,
            )
            .with_for_update()
        )
        return self._session.scalar(statement)

    def count_active_enrollments(self, class_id: UUID) -> int:
        statement = select(func.count(EbdEnrollment.id)).where(
            EbdEnrollment.class_id == class_id,
            EbdEnrollment.is_active.is_(True),
        )
        return int(self._session.scalar(statement) or 0)

    def has_active_enrollment_in_class(
        self, *, class_id: UUID, member_id: UUID
    ) -> bool:
        statement = select(EbdEnrollment.id).where(
            EbdEnrollment.class_id == class_id,
            EbdEnrollment.member_id == member_id,
            EbdEnrollment.is_active.is_(True),
        )
        return self._session.scalar(statement) is not None

    def find_active_enrollment_in_term(
        self, *, term_id: UUID, member_id: UUID
    ) -> EbdEnrollment | None:
        statement = select(EbdEnrollment).where(
            EbdEnrollment.term_id == term_id,
            EbdEnrollment.member_id == member_id,
            EbdEnrollment.is_active.is_(True),
        )
        return self._session.scalar(statement)

    def list_enrollments(
        self, class_id: UUID
    ) -> list[tuple[EbdEnrollment, str | None]]:
        statement = (
            select(EbdEnrollment, Member.full_name)
            .outerjoin(Member, Member.id == EbdEnrollment.member_id)
            .where(EbdEnrollment.class_id == class_id)
            .order_by(EbdEnrollment.is_active.desc(), Member.full_name.asc())
        )
        return [
            (enrollment, member_name)
            for enrollment, member_name in self._session.execute(statement).all()
        ]

    def get_enrollment(
        self, *, class_id: UUID, enrollment_id: UUID
    ) -> EbdEnrollment | None:
        statement = select(EbdEnrollment).where(
            EbdEnrollment.id == enrollment_id,
            EbdEnrollment.class_id == class_id,
        )
        return self._session.scalar(statement)

    def add(self, ebd_class: EbdClass) -> EbdClass:
        self._session.add(ebd_class)
        self._session.flush()
        return ebd_class

    def add_enrollment(self, enrollment: EbdEnrollment) -> EbdEnrollment:
        self._session.add(enrollment)
        self._session.flush()
        return enrollment

    def list_term_classes(self, term_id: UUID) -> list[EbdClass]:
        statement = (
            select(EbdClass)
            .where(EbdClass.term_id == term_id)
            .order_by(EbdClass.name.asc(), EbdClass.created_at.asc())
        )
        return list(self._session.scalars(statement).all())

    def active_member_ids(self, class_id: UUID) -> list[UUID]:
        statement = select(EbdEnrollment.member_id).where(
            EbdEnrollment.class_id == class_id,
            EbdEnrollment.is_active.is_(True),
        )
        return list(self._session.scalars(statement).all())

    def active_member_ids_in_term(self, term_id: UUID) -> set[UUID]:
        statement = select(EbdEnrollment.member_id).where(
            EbdEnrollment.term_id == term_id,
            EbdEnrollment.is_active.is_(True),
        )
        return set(self._session.scalars(statement).all())

    def delete_class_cascade(self, ebd_class: EbdClass) -> None:
        """Remove a class with its lessons, attendances and enrollments."""
        lesson_ids = select(EbdLesson.id).where(EbdLesson.class_id == ebd_class.id)

        statements = (
            delete(EbdAttendance).where(EbdAttendance.lesson_id.in_(lesson_ids)),
            delete(EbdLesson).where(EbdLesson.class_id == ebd_class.id),
            delete(EbdEnrollment).where(EbdEnrollment.class_id == ebd_class.id),
        )
        for statement in statements:
            self._session.execute(
                statement.execution_options(synchronize_session=False)
            )
        self._session.delete(ebd_class)
        self._session.flush()

    def flush(self) -> None:
        self._session.flush()

    @staticmethod
    def _apply_filters(statement: Select, filters: ClassListFilters) -> Select:
        typed_statement = statement.where(EbdClass.church_id == filters.church_id)
        if filters.term_id is not None:
            typed_statement = typed_statement.where(
                EbdClass.term_id == filters.term_id
            )
        if filters.is_active is not None:
            typed_statement = typed_statement.where(
                EbdClass.is_active.is_(filters.is_active)
            )
        if filters.teacher_id is not None:
            typed_statement = typed_statement.where(
                EbdClass.teacher_id == filters.teacher_id
            )
        if filters.search:
            typed_statement = typed_statement.where(
                EbdClass.name.ilike(f"%{filters.search.strip()}%")
            )
        return typed_statement
