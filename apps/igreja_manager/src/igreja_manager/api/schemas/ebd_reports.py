"""Schemas for cross-term EBD reports."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from pydantic import BaseModel

from igreja_manager.domain.money import format_money
from igreja_manager.services.ebd_report_service import AbsentStudent, TermComparison


class TermComparisonResponse(BaseModel):
    term_id: UUID
    term_name: str
    total_students: int
    total_lessons: int
    average_attendance_percentage: float
    total_offerings: str

    @classmethod
    def from_comparison(cls, item: TermComparison) -> TermComparisonResponse:
        return cls(
            term_id=item.term_id,
            term_name=item.term_name,
            total_students=item.total_students,
            total_lessons=item.total_lessons,
            average_attendance_percentage=item.average_attendance_percentage,
            total_offerings=format_money(item.total_offerings),
        )


class AbsentStudentResponse(BaseModel):
    member_id: UUID
    member_name: str
    class_id: UUID
    class_name: str
    consecutive_absences: int
    last_present_date: date | None

    @classmethod
    def from_absent(cls, item: AbsentStudent) -> AbsentStudentResponse:
        return cls(
            member_id=item.member_id,
            member_name=item.member_name,
            class_id=item.class_id,
            class_name=item.class_name,
            consecutive_absences=item.consecutive_absences,
            last_present_date=item.last_present_date,
        )
