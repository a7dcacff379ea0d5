"""Schemas for term endpoints."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from igreja_manager.db.models.ebd_term import EbdTerm
from igreja_manager.domain.money import format_money
from igreja_manager.services.ebd_report_service import (
    ClassSummary,
    RankedClass,
    TermReport,
)


class CreateTermRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    start_date: date
    end_date: date
    theme: str | None = Field(default=None, max_length=200)
    magazine_title: str | None = Field(default=None, max_length=200)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Name cannot be blank.")
        return trimmed

    @model_validator(mode="after")
    def validate_dates(self) -> CreateTermRequest:
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date.")
        return self


class UpdateTermRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    start_date: date | None = None
    end_date: date | None = None
    theme: str | None = Field(default=None, max_length=200)
    magazine_title: str | None = Field(default=None, max_length=200)
    is_active: bool | None = None


class TermResponse(BaseModel):
    id: UUID
    name: str
    start_date: date
    end_date: date
    theme: str | None
    magazine_title: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, term: EbdTerm) -> TermResponse:
        return cls(
            id=term.id,
            name=term.name,
            start_date=term.start_date,
            end_date=term.end_date,
            theme=term.theme,
            magazine_title=term.magazine_title,
            is_active=term.is_active,
            created_at=term.created_at,
            updated_at=term.updated_at,
        )


class ClassSummaryResponse(BaseModel):
    class_id: UUID
    class_name: str
    teacher_name: str | None
    enrolled_students: int
    total_lessons: int
    attendance_percentage: float
    total_offerings: str

    @classmethod
    def from_summary(cls, summary: ClassSummary) -> ClassSummaryResponse:
        return cls(
            class_id=summary.class_id,
            class_name=summary.class_name,
            teacher_name=summary.teacher_name,
            enrolled_students=summary.enrolled_students,
            total_lessons=summary.total_lessons,
            attendance_percentage=summary.attendance_percentage,
            total_offerings=format_money(summary.total_offerings),
        )


class TermReportResponse(BaseModel):
    """Attendance and offering figures across every class of a term."""

    term: TermResponse
    total_classes: int
    total_students: int
    total_lessons: int
    average_attendance_percentage: float
    total_offerings: str
    bible_percentage: float
    magazine_percentage: float
    classes_summary: list[ClassSummaryResponse]

    @classmethod
    def from_report(cls, report: TermReport) -> TermReportResponse:
        return cls(
            term=TermResponse.from_model(report.term),
            total_classes=report.total_classes,
            total_students=report.total_students,
            total_lessons=report.total_lessons,
            average_attendance_percentage=report.average_attendance_percentage,
            total_offerings=format_money(report.total_offerings),
            bible_percentage=report.bible_percentage,
            magazine_percentage=report.magazine_percentage,
            classes_summary=[
                ClassSummaryResponse.from_summary(item)
                for item in report.classes_summary
            ],
        )


class RankedClassResponse(ClassSummaryResponse):
    rank: int

    @classmethod
    def from_ranked(cls, ranked: RankedClass) -> RankedClassResponse:
        summary = ClassSummaryResponse.from_summary(ranked.summary)
        return cls(rank=ranked.rank, **summary.model_dump())
