"""Persistence and aggregation queries for lesson attendance."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import Select, case, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from igreja_manager.db.models.ebd_attendance import AttendanceStatus, EbdAttendance
from igreja_manager.db.models.ebd_lesson import EbdLesson
from igreja_manager.db.models.member import Member
from igreja_manager.domain.money import to_money

UPSERT_KEY_COLUMNS = frozenset({"lesson_id", "member_id"})


@dataclass(frozen=True, slots=True)
class LessonPresence:
    """Present and total attendance records for one lesson."""

    lesson_id: UUID
    present: int
    total: int


@dataclass(frozen=True, slots=True)
class PresentMaterialCounts:
    """How many present records brought a bible or magazine."""

    present: int
    bibles: int
    magazines: int


class AttendanceRepository:
    """Repository for attendance upserts and lesson-scoped aggregates."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert(self, values: dict[str, Any]) -> UUID:
        """Insert the member's record for the lesson or overwrite it in place."""
        if self._session.get_bind().dialect.name == "sqlite":
            statement = sqlite.insert(EbdAttendance).values(**values)
        else:
            statement = postgresql.insert(EbdAttendance).values(**values)
        statement = statement.on_conflict_do_update(
            index_elements=[EbdAttendance.lesson_id, EbdAttendance.member_id],
            set_={
                name: statement.excluded[name]
                for name in values
                if name not in UPSERT_KEY_COLUMNS
            },
        ).returning(EbdAttendance.id)
        return self._session.execute(statement).scalar_one()

    def get_many(self, attendance_ids: Collection[UUID]) -> list[EbdAttendance]:
        statement = (
            select(EbdAttendance)
            .where(EbdAttendance.id.in_(set(attendance_ids)))
            .execution_options(populate_existing=True)
        )
        return list(self._session.scalars(statement).all())

    def list_for_lesson(
        self, lesson_id: UUID
    ) -> list[tuple[EbdAttendance, str | None]]:
        statement = (
            select(EbdAttendance, Member.full_name)
            .outerjoin(Member, Member.id == EbdAttendance.member_id)
            .where(EbdAttendance.lesson_id == lesson_id)
            .order_by(Member.full_name.asc(), EbdAttendance.created_at.asc())
        )
        return [
            (attendance, member_name)
            for attendance, member_name in self._session.execute(statement).all()
        ]

    def count_lessons(
        self,
        *,
        class_ids: Select,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> int:
        statement = select(func.count(EbdLesson.id)).where(
            EbdLesson.class_id.in_(class_ids)
        )
        statement = self._apply_date_range(statement, date_from, date_to)
        return int(self._session.scalar(statement) or 0)

    def presence_by_lesson(
        self,
        *,
        class_ids: Select,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[LessonPresence]:
        """Per-lesson present/total counts for lessons that have records."""
        present_case = case(
            (EbdAttendance.status == AttendanceStatus.PRESENTE, 1),
            else_=0,
        )
        statement = (
            select(
                EbdAttendance.lesson_id,
                func.coalesce(func.sum(present_case), 0),
                func.count(EbdAttendance.id),
            )
            .join(EbdLesson, EbdLesson.id == EbdAttendance.lesson_id)
            .where(EbdLesson.class_id.in_(class_ids))
            .group_by(EbdAttendance.lesson_id)
        )
        statement = self._apply_date_range(statement, date_from, date_to)
        return [
            LessonPresence(lesson_id=lesson_id, present=int(present), total=int(total))
            for lesson_id, present, total in self._session.execute(statement).all()
        ]

    def total_offerings(
        self,
        *,
        class_ids: Select,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> Decimal:
        statement = (
            select(func.coalesce(func.sum(EbdAttendance.offering_amount), 0))
            .join(EbdLesson, EbdLesson.id == EbdAttendance.lesson_id)
            .where(EbdLesson.class_id.in_(class_ids))
        )
        statement = self._apply_date_range(statement, date_from, date_to)
        return to_money(self._session.scalar(statement))

    def present_material_counts(
        self,
        *,
        class_ids: Select,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> PresentMaterialCounts:
        statement = (
            select(
                func.count(EbdAttendance.id),
                func.coalesce(
                    func.sum(case((EbdAttendance.brought_bible.is_(True), 1), else_=0)),
                    0,
                ),
                func.coalesce(
                    func.sum(
                        case((EbdAttendance.brought_magazine.is_(True), 1), else_=0)
                    ),
                    0,
                ),
            )
            .join(EbdLesson, EbdLesson.id == EbdAttendance.lesson_id)
            .where(
                EbdLesson.class_id.in_(class_ids),
                EbdAttendance.status == AttendanceStatus.PRESENTE,
            )
        )
        statement = self._apply_date_range(statement, date_from, date_to)
        present, bibles, magazines = self._session.execute(statement).one()
        return PresentMaterialCounts(
            present=int(present or 0),
            bibles=int(bibles or 0),
            magazines=int(magazines or 0),
        )

    @staticmethod
    def _apply_date_range(
        statement: Select, date_from: date | None, date_to: date | None
    ) -> Select:
        if date_from is not None:
            statement = statement.where(EbdLesson.lesson_date >= date_from)
        if date_to is not None:
            statement = statement.where(EbdLesson.lesson_date <= date_to)
        return statement
