"""Term-level counters used by EBD reports."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from igreja_manager.db.models.ebd_attendance import AttendanceStatus, EbdAttendance
from igreja_manager.db.models.ebd_class import EbdClass
from igreja_manager.db.models.ebd_enrollment import EbdEnrollment
from igreja_manager.db.models.ebd_lesson import EbdLesson
from igreja_manager.db.models.ebd_term import EbdTerm
from igreja_manager.db.models.member import Member


@dataclass(frozen=True, slots=True)
class AttendanceLine:
    """One attendance record with its member, class and lesson date."""

    member_id: UUID
    member_name: str
    class_id: UUID
    class_name: str
    lesson_date: date
    status: AttendanceStatus


class EbdReportRepository:
    """Counts across the classes of one term."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @staticmethod
    def term_class_ids(term_id: UUID) -> Select:
        return select(EbdClass.id).where(EbdClass.term_id == term_id)

    @staticmethod
    def single_class_ids(class_id: UUID) -> Select:
        return select(EbdClass.id).where(EbdClass.id == class_id)

    def list_term_classes(
        self, term_id: UUID
    ) -> list[tuple[EbdClass, str | None, int]]:
        """Classes of the term with teacher name and active enrollment count."""
        enrolled_count = (
            select(func.count(EbdEnrollment.id))
            .where(
                EbdEnrollment.class_id == EbdClass.id,
                EbdEnrollment.is_active.is_(True),
            )
            .correlate(EbdClass)
            .scalar_subquery()
        )
        statement = (
            select(EbdClass, Member.full_name, enrolled_count)
            .outerjoin(Member, Member.id == EbdClass.teacher_id)
            .where(EbdClass.term_id == term_id)
            .order_by(EbdClass.name.asc())
        )
        return [
            (ebd_class, teacher_name, int(count or 0))
            for ebd_class, teacher_name, count in self._session.execute(
                statement
            ).all()
        ]

    def count_distinct_active_students(self, term_id: UUID) -> int:
        statement = select(func.count(func.distinct(EbdEnrollment.member_id))).where(
            EbdEnrollment.term_id == term_id,
            EbdEnrollment.is_active.is_(True),
        )
        return int(self._session.scalar(statement) or 0)

    def active_term_attendance(self, church_id: UUID) -> list[AttendanceLine]:
        """Member attendance in the church's active term, newest lesson first."""
        statement = (
            select(
                EbdAttendance.member_id,
                Member.full_name,
                EbdClass.id,
                EbdClass.name,
                EbdLesson.lesson_date,
                EbdAttendance.status,
            )
            .join(EbdLesson, EbdLesson.id == EbdAttendance.lesson_id)
            .join(EbdClass, EbdClass.id == EbdLesson.class_id)
            .join(EbdTerm, EbdTerm.id == EbdClass.term_id)
            .join(Member, Member.id == EbdAttendance.member_id)
            .where(
                EbdTerm.church_id == church_id,
                EbdTerm.is_active.is_(True),
                EbdAttendance.is_visitor.is_(False),
            )
            .order_by(
                EbdAttendance.member_id,
                EbdClass.id,
                EbdLesson.lesson_date.desc(),
            )
        )
        return [
            AttendanceLine(
                member_id=member_id,
                member_name=member_name,
                class_id=class_id,
                class_name=class_name,
                lesson_date=lesson_date,
                status=status,
            )
            for (
                member_id,
                member_name,
                class_id,
                class_name,
                lesson_date,
                status,
            ) in self._session.execute(statement).all()
        ]
