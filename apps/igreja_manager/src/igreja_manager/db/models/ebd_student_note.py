"""EBD student note ORM model."""

from __future__ import annotations

import enum
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from igreja_manager.db.base import Base, utc_now


class NoteType(enum.StrEnum):
    """Supported note categories."""

    OBSERVATION = "observation"
    BEHAVIOR = "behavior"
    PROGRESS = "progress"
    SPECIAL_NEED = "special_need"
    PRAISE = "praise"
    CONCERN = "concern"


class EbdStudentNote(Base):
    """Teacher note about a student, optionally tied to a term."""

    __tablename__ = "ebd_student_notes"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    church_id: Mapped[UUID] = mapped_column(
        ForeignKey("churches.id"), nullable=False, index=True
    )
    member_id: Mapped[UUID] = mapped_column(
        ForeignKey("members.id"), nullable=False, index=True
    )
    term_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("ebd_terms.id", ondelete="SET NULL"), nullable=True
    )
    note_type: Mapped[NoteType] = mapped_column(
        Enum(
            NoteType,
            name="ebd_note_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_private: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true"
    )
    created_by: Mapped[UUID] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
    )
