"""EBD attendance ORM model."""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from igreja_manager.db.base import Base, utc_now


class AttendanceStatus(enum.StrEnum):
    """Supported attendance statuses (present, absent, justified)."""

    PRESENTE = "presente"
    AUSENTE = "ausente"
    JUSTIFICADO = "justificado"


class EbdAttendance(Base):
    """Attendance of one member (or visitor) at one lesson."""

    __tablename__ = "ebd_attendances"
    __table_args__ = (
        UniqueConstraint(
            "lesson_id", "member_id", name="uq_ebd_attendances_lesson_member"
        ),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    lesson_id: Mapped[UUID] = mapped_column(
        ForeignKey("ebd_lessons.id", ondelete="CASCADE"), nullable=False, index=True
    )
    member_id: Mapped[UUID] = mapped_column(ForeignKey("members.id"), nullable=False)
    status: Mapped[AttendanceStatus] = mapped_column(
        Enum(
            AttendanceStatus,
            name="ebd_attendance_status",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    brought_bible: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    brought_magazine: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    offering_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    is_visitor: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
    visitor_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    registered_by: Mapped[UUID | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )
