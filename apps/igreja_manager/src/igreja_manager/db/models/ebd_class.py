"""EBD class ORM model."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from igreja_manager.db.base import Base, utc_now


class EbdClass(Base):
    """Class of students belonging to exactly one term."""

    __tablename__ = "ebd_classes"
    __table_args__ = (
        CheckConstraint(
            "max_capacity IS NULL OR max_capacity > 0",
            name="ck_ebd_classes_capacity_positive",
        ),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    church_id: Mapped[UUID] = mapped_column(
        ForeignKey("churches.id"), nullable=False, index=True
    )
    term_id: Mapped[UUID] = mapped_column(
        ForeignKey("ebd_terms.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    age_range_start: Mapped[int | None] = mapped_column(Integer, nullable=True)
    age_range_end: Mapped[int | None] = mapped_column(Integer, nullable=True)
    room: Mapped[str | None] = mapped_column(String(50), nullable=True)
    max_capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    teacher_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("members.id"), nullable=True
    )
    aux_teacher_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("members.id"), nullable=True
    )
    congregation_id: Mapped[UUID | None] = mapped_column(nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default="true",
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
