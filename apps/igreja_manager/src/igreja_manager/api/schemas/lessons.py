"""Schemas for lesson endpoints."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from igreja_manager.db.models.ebd_lesson import EbdLesson


class CreateLessonRequest(BaseModel):
    class_id: UUID
    lesson_date: date
    lesson_number: int | None = Field(default=None, ge=1)
    title: str | None = Field(default=None, max_length=200)
    theme: str | None = Field(default=None, max_length=200)
    bible_text: str | None = Field(default=None, max_length=200)
    summary: str | None = None
    teacher_id: UUID | None = None


class UpdateLessonRequest(BaseModel):
    lesson_date: date | None = None
    lesson_number: int | None = Field(default=None, ge=1)
    title: str | None = Field(default=None, max_length=200)
    theme: str | None = Field(default=None, max_length=200)
    bible_text: str | None = Field(default=None, max_length=200)
    summary: str | None = None
    teacher_id: UUID | None = None


class LessonResponse(BaseModel):
    id: UUID
    class_id: UUID
    lesson_date: date
    lesson_number: int | None
    title: str | None
    theme: str | None
    bible_text: str | None
    summary: str | None
    teacher_id: UUID | None
    created_at: datetime

    @classmethod
    def from_model(cls, lesson: EbdLesson) -> LessonResponse:
        return cls(
            id=lesson.id,
            class_id=lesson.class_id,
            lesson_date=lesson.lesson_date,
            lesson_number=lesson.lesson_number,
            title=lesson.title,
            theme=lesson.theme,
            bible_text=lesson.bible_text,
            summary=lesson.summary,
            teacher_id=lesson.teacher_id,
            created_at=lesson.created_at,
        )
