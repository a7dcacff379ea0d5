"""Attendance recording and class attendance reporting."""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy import Select

from igreja_manager.db.models.ebd_attendance import AttendanceStatus, EbdAttendance
from igreja_manager.db.models.ebd_class import EbdClass
from igreja_manager.db.models.ebd_lesson import EbdLesson
from igreja_manager.domain.errors import (
    NotFoundError,
    ValidationError,
    compose_error_message,
)
from igreja_manager.domain.money import quantize_money
from igreja_manager.domain.periods import days_between, local_today
from igreja_manager.repositories.attendance_repository import (
    LessonPresence,
    PresentMaterialCounts,
)
from igreja_manager.repositories.ebd_report_repository import EbdReportRepository

logger = logging.getLogger(__name__)

ATTENDANCE_EDIT_WINDOW_DAYS = 7


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class AttendanceRepositoryProtocol(Protocol):
    """Attendance repository contract consumed by service."""

    def upsert(self, values: dict[str, Any]) -> UUID: ...

    def get_many(self, attendance_ids: Collection[UUID]) -> list[EbdAttendance]: ...

    def list_for_lesson(
        self, lesson_id: UUID
    ) -> list[tuple[EbdAttendance, str | None]]: ...

    def count_lessons(
        self,
        *,
        class_ids: Select,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> int: ...

    def presence_by_lesson(
        self,
        *,
        class_ids: Select,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[LessonPresence]: ...

    def total_offerings(
        self,
        *,
        class_ids: Select,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> Decimal: ...

    def present_material_counts(
        self,
        *,
        class_ids: Select,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> PresentMaterialCounts: ...


class LessonLookupProtocol(Protocol):
    def get_lesson(self, *, church_id: UUID, lesson_id: UUID) -> EbdLesson | None: ...


class ClassLookupProtocol(Protocol):
    def get_class(self, *, church_id: UUID, class_id: UUID) -> EbdClass | None: ...


class MemberLookupProtocol(Protocol):
    def existing_member_ids(
        self, *, church_id: UUID, member_ids: Collection[UUID]
    ) -> set[UUID]: ...


@dataclass(slots=True, frozen=True)
class AttendanceRecordInput:
    """One member line of an attendance batch."""

    member_id: UUID
    status: str
    brought_bible: bool = False
    brought_magazine: bool = False
    offering_amount: Decimal | None = None
    is_visitor: bool = False
    visitor_name: str | None = None
    notes: str | None = None


@dataclass(slots=True, frozen=True)
class RecordAttendanceInput:
    """Attendance batch for one lesson."""

    church_id: UUID
    lesson_id: UUID
    records: tuple[AttendanceRecordInput, ...]
    registered_by: UUID | None = None


@dataclass(slots=True, frozen=True)
class ClassAttendanceReport:
    """Attendance aggregates for a class over an optional date range."""

    class_id: UUID
    total_lessons: int
    average_attendance: float
    total_offering: Decimal
    bible_percentage: float
    magazine_percentage: float


def percentage(part: int, whole: int) -> float:
    """Return part/whole as a percentage rounded to two places, 0 if empty."""
    if whole <= 0:
        return 0.0
    return round(part / whole * 100.0, 2)


def average_present(presence: list[LessonPresence]) -> float:
    if not presence:
        return 0.0
    return round(sum(item.present for item in presence) / len(presence), 2)


def average_presence_percentage(presence: list[LessonPresence]) -> float:
    if not presence:
        return 0.0
    ratios = [percentage(item.present, item.total) for item in presence]
    return round(sum(ratios) / len(ratios), 2)


def parse_attendance_status(value: str) -> AttendanceStatus:
    try:
        return AttendanceStatus(value)
    except ValueError as exc:
        raise ValidationError(
            message=compose_error_message(
                cause=f"Invalid attendance status: {value!r}.",
                action="Use one of: presente, ausente, justificado.",
            ),
            details={"status": value},
        ) from exc


class AttendanceService:
    """Records attendance batches inside the lesson edit window."""

    def __init__(
        self,
        *,
        attendance_repository: AttendanceRepositoryProtocol,
        lesson_repository: LessonLookupProtocol,
        class_repository: ClassLookupProtocol,
        member_repository: MemberLookupProtocol,
        session: SessionProtocol,
    ) -> None:
        self._attendance_repository = attendance_repository
        self._lesson_repository = lesson_repository
        self._class_repository = class_repository
        self._member_repository = member_repository
        self._session = session

    def record_attendance(self, payload: RecordAttendanceInput) -> list[EbdAttendance]:
        """Upsert every record of the batch, or none of them."""

        lesson = self._lesson_repository.get_lesson(
            church_id=payload.church_id, lesson_id=payload.lesson_id
        )
        if lesson is None:
            raise NotFoundError.for_entity("Lesson", payload.lesson_id)

        days_since_lesson = days_between(lesson.lesson_date, local_today())
        if days_since_lesson > ATTENDANCE_EDIT_WINDOW_DAYS:
            raise ValidationError(
                message=compose_error_message(
                    cause=(
                        f"Attendance can only be edited up to "
                        f"{ATTENDANCE_EDIT_WINDOW_DAYS} days after the lesson."
                    ),
                    action="Ask an administrator to correct older records.",
                ),
                details={"days_since_lesson": days_since_lesson},
            )

        statuses = [
            parse_attendance_status(record.status) for record in payload.records
        ]
        member_ids = {record.member_id for record in payload.records}
        missing = member_ids - self._member_repository.existing_member_ids(
            church_id=payload.church_id, member_ids=member_ids
        )
        if missing:
            raise NotFoundError(
                message=compose_error_message(
                    cause="Some attendance records reference unknown members.",
                    action="Check the member identifiers and retry.",
                ),
                details={"member_ids": sorted(str(member_id) for member_id in missing)},
            )

        try:
            saved_ids = [
                self._attendance_repository.upsert(
                    {
                        "lesson_id": lesson.id,
                        "member_id": record.member_id,
                        "status": status,
                        "brought_bible": record.brought_bible,
                        "brought_magazine": record.brought_magazine,
                        "offering_amount": (
                            quantize_money(record.offering_amount)
                            if record.offering_amount is not None
                            else None
                        ),
                        "is_visitor": record.is_visitor,
                        "visitor_name": record.visitor_name,
                        "notes": record.notes,
                        "registered_by": payload.registered_by,
                    }
                )
                for record, status in zip(payload.records, statuses, strict=True)
            ]
            by_id = {
                attendance.id: attendance
                for attendance in self._attendance_repository.get_many(saved_ids)
            }
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        saved = [by_id[attendance_id] for attendance_id in dict.fromkeys(saved_ids)]
        logger.info(
            "attendance_recorded",
            extra={"lesson_id": str(lesson.id), "records": len(saved)},
        )
        return saved

    def list_for_lesson(
        self, *, church_id: UUID, lesson_id: UUID
    ) -> list[tuple[EbdAttendance, str | None]]:
        lesson = self._lesson_repository.get_lesson(
            church_id=church_id, lesson_id=lesson_id
        )
        if lesson is None:
            raise NotFoundError.for_entity("Lesson", lesson_id)
        return self._attendance_repository.list_for_lesson(lesson.id)

    def class_report(
        self,
        *,
        church_id: UUID,
        class_id: UUID,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> ClassAttendanceReport:
        ebd_class = self._class_repository.get_class(
            church_id=church_id, class_id=class_id
        )
        if ebd_class is None:
            raise NotFoundError.for_entity("Class", class_id)

        class_ids = EbdReportRepository.single_class_ids(ebd_class.id)
        window = {"class_ids": class_ids, "date_from": date_from, "date_to": date_to}
        presence = self._attendance_repository.presence_by_lesson(**window)
        materials = self._attendance_repository.present_material_counts(**window)
        return ClassAttendanceReport(
            class_id=ebd_class.id,
            total_lessons=self._attendance_repository.count_lessons(**window),
            average_attendance=average_present(presence),
            total_offering=self._attendance_repository.total_offerings(**window),
            bible_percentage=percentage(materials.bibles, materials.present),
            magazine_percentage=percentage(materials.magazines, materials.present),
        )
