"""Schemas for attendance endpoints and class reports."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from igreja_manager.api.schemas.common import MONEY_PATTERN
from igreja_manager.db.models.ebd_attendance import EbdAttendance
from igreja_manager.domain.money import format_money
from igreja_manager.services.attendance_service import (
    AttendanceRecordInput,
    ClassAttendanceReport,
)


class AttendanceRecordRequest(BaseModel):
    """One line of an attendance batch; status is checked by the service."""

    member_id: UUID
    status: str = Field(min_length=1, max_length=20)
    brought_bible: bool = False
    brought_magazine: bool = False
    offering_amount: str | None = Field(default=None, pattern=MONEY_PATTERN)
    is_visitor: bool = False
    visitor_name: str | None = Field(default=None, max_length=200)
    notes: str | None = Field(default=None, max_length=500)

    def to_input(self) -> AttendanceRecordInput:
        return AttendanceRecordInput(
            member_id=self.member_id,
            status=self.status,
            brought_bible=self.brought_bible,
            brought_magazine=self.brought_magazine,
            offering_amount=(
                Decimal(self.offering_amount)
                if self.offering_amount is not None
                else None
            ),
            is_visitor=self.is_visitor,
            visitor_name=self.visitor_name,
            notes=self.notes,
        )


class RecordAttendanceRequest(BaseModel):
    records: list[AttendanceRecordRequest] = Field(min_length=1)


class AttendanceResponse(BaseModel):
    id: UUID
    lesson_id: UUID
    member_id: UUID
    member_name: str | None = None
    status: str
    brought_bible: bool
    brought_magazine: bool
    offering_amount: str | None
    is_visitor: bool
    visitor_name: str | None
    notes: str | None

    @classmethod
    def from_model(
        cls, attendance: EbdAttendance, *, member_name: str | None = None
    ) -> AttendanceResponse:
        return cls(
            id=attendance.id,
            lesson_id=attendance.lesson_id,
            member_id=attendance.member_id,
            member_name=member_name,
            status=attendance.status.value,
            brought_bible=attendance.brought_bible,
            brought_magazine=attendance.brought_magazine,
            offering_amount=(
                format_money(attendance.offering_amount)
                if attendance.offering_amount is not None
                else None
            ),
            is_visitor=attendance.is_visitor,
            visitor_name=attendance.visitor_name,
            notes=attendance.notes,
        )


class ClassAttendanceReportResponse(BaseModel):
    class_id: UUID
    total_lessons: int
    average_attendance: float
    total_offering: str
    bible_percentage: float
    magazine_percentage: float

    @classmethod
    def from_report(
        cls, report: ClassAttendanceReport
    ) -> ClassAttendanceReportResponse:
        return cls(
            class_id=report.class_id,
            total_lessons=report.total_lessons,
            average_attendance=report.average_attendance,
            total_offering=format_money(report.total_offering),
            bible_percentage=report.bible_percentage,
            magazine_percentage=report.magazine_percentage,
        )
