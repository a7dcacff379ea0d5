"""Schemas for class and enrollment endpoints."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from igreja_manager.db.models.ebd_class import EbdClass
from igreja_manager.db.models.ebd_enrollment import EbdEnrollment


class CreateClassRequest(BaseModel):
    term_id: UUID
    name: str = Field(min_length=1, max_length=100)
    age_range_start: int | None = Field(default=None, ge=0)
    age_range_end: int | None = Field(default=None, ge=0)
    room: str | None = Field(default=None, max_length=50)
    max_capacity: int | None = Field(default=None, ge=1)
    teacher_id: UUID | None = None
    aux_teacher_id: UUID | None = None
    congregation_id: UUID | None = None

    @model_validator(mode="after")
    def validate_age_range(self) -> CreateClassRequest:
        if (
            self.age_range_start is not None
            and self.age_range_end is not None
            and self.age_range_end < self.age_range_start
        ):
            raise ValueError("age_range_end must not be lower than age_range_start.")
        return self


class UpdateClassRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    age_range_start: int | None = Field(default=None, ge=0)
    age_range_end: int | None = Field(default=None, ge=0)
    room: str | None = Field(default=None, max_length=50)
    max_capacity: int | None = Field(default=None, ge=1)
    teacher_id: UUID | None = None
    aux_teacher_id: UUID | None = None
    is_active: bool | None = None


class ClassResponse(BaseModel):
    id: UUID
    term_id: UUID
    name: str
    age_range_start: int | None
    age_range_end: int | None
    room: str | None
    max_capacity: int | None
    teacher_id: UUID | None
    aux_teacher_id: UUID | None
    congregation_id: UUID | None
    is_active: bool
    enrolled_count: int
    created_at: datetime

    @classmethod
    def from_model(cls, ebd_class: EbdClass, *, enrolled_count: int) -> ClassResponse:
        return cls(
            id=ebd_class.id,
            term_id=ebd_class.term_id,
            name=ebd_class.name,
            age_range_start=ebd_class.age_range_start,
            age_range_end=ebd_class.age_range_end,
            room=ebd_class.room,
            max_capacity=ebd_class.max_capacity,
            teacher_id=ebd_class.teacher_id,
            aux_teacher_id=ebd_class.aux_teacher_id,
            congregation_id=ebd_class.congregation_id,
            is_active=ebd_class.is_active,
            enrolled_count=enrolled_count,
            created_at=ebd_class.created_at,
        )


class EnrollMemberRequest(BaseModel):
    member_id: UUID


class EnrollmentResponse(BaseModel):
    id: UUID
    class_id: UUID
    term_id: UUID
    member_id: UUID
    member_name: str | None = None
    enrolled_at: date
    left_at: date | None
    is_active: bool

    @classmethod
    def from_model(
        cls, enrollment: EbdEnrollment, *, member_name: str | None = None
    ) -> EnrollmentResponse:
        return cls(
            id=enrollment.id,
            class_id=enrollment.class_id,
            term_id=enrollment.term_id,
            member_id=enrollment.member_id,
            member_name=member_name,
            enrolled_at=enrollment.enrolled_at,
            left_at=enrollment.left_at,
            is_active=enrollment.is_active,
        )


class CloneClassesRequest(BaseModel):
    source_term_id: UUID
    include_enrollments: bool = False
