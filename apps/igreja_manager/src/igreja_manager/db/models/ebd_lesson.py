"""EBD lesson ORM model."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from igreja_manager.db.base import Base, utc_now


class EbdLesson(Base):
    """Single lesson given to a class on a date."""

    __tablename__ = "ebd_lessons"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    church_id: Mapped[UUID] = mapped_column(
        ForeignKey("churches.id"), nullable=False, index=True
    )
    class_id: Mapped[UUID] = mapped_column(
        ForeignKey("ebd_classes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    lesson_date: Mapped[date] = mapped_column(Date, nullable=False)
    lesson_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    theme: Mapped[str | None] = mapped_column(String(200), nullable=True)
    bible_text: Mapped[str | None] = mapped_column(String(200), nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    teacher_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("members.id"), nullable=True
    )
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
