"""Schemas for student note endpoints."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from igreja_manager.db.models.ebd_student_note import EbdStudentNote


class CreateStudentNoteRequest(BaseModel):
    note_type: str = Field(min_length=1, max_length=30)
    content: str = Field(min_length=1)
    title: str | None = Field(default=None, max_length=200)
    term_id: UUID | None = None
    is_private: bool = True


class UpdateStudentNoteRequest(BaseModel):
    note_type: str | None = Field(default=None, min_length=1, max_length=30)
    content: str | None = Field(default=None, min_length=1)
    title: str | None = Field(default=None, max_length=200)
    is_private: bool | None = None


class StudentNoteResponse(BaseModel):
    id: UUID
    member_id: UUID
    term_id: UUID | None
    note_type: str
    title: str | None
    content: str
    is_private: bool
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, note: EbdStudentNote) -> StudentNoteResponse:
        return cls(
            id=note.id,
            member_id=note.member_id,
            term_id=note.term_id,
            note_type=note.note_type.value,
            title=note.title,
            content=note.content,
            is_private=note.is_private,
            created_by=note.created_by,
            created_at=note.created_at,
            updated_at=note.updated_at,
        )
