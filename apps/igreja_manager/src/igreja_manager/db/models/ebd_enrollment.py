"""EBD enrollment ORM model."""

from __future__ import annotations

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, ForeignKey, Index, text
from sqlalchemy.orm import Mapped, mapped_column

from igreja_manager.db.base import Base


class EbdEnrollment(Base):
    """Member enrolled in a class; ended enrollments are kept for history."""

    __tablename__ = "ebd_enrollments"
    __table_args__ = (
        Index(
            "uq_ebd_enrollments_active_class_member",
            "class_id",
            "member_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
        Index(
            "uq_ebd_enrollments_active_term_member",
            "term_id",
            "member_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    class_id: Mapped[UUID] = mapped_column(
        ForeignKey("ebd_classes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    term_id: Mapped[UUID] = mapped_column(
        ForeignKey("ebd_terms.id", ondelete="CASCADE"), nullable=False
    )
    member_id: Mapped[UUID] = mapped_column(
        ForeignKey("members.id"), nullable=False, index=True
    )
    enrolled_at: Mapped[date] = mapped_column(Date, nullable=False)
    left_at: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default="true",
    )
