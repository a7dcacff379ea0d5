"""Account plan (chart of accounts) ORM model."""

from __future__ import annotations

import enum
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from igreja_manager.db.base import Base, utc_now


class AccountPlanType(enum.StrEnum):
    """Income or expense classification."""

    RECEITA = "receita"
    DESPESA = "despesa"


class AccountPlan(Base):
    """Hierarchical category used to classify financial entries."""

    __tablename__ = "account_plans"
    __table_args__ = (
        UniqueConstraint("church_id", "code", name="uq_account_plans_church_code"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    church_id: Mapped[UUID] = mapped_column(
        ForeignKey("churches.id"), nullable=False, index=True
    )
    parent_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("account_plans.id"), nullable=True
    )
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    type: Mapped[AccountPlanType] = mapped_column(
        Enum(
            AccountPlanType,
            name="account_plan_type",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
    )
    level: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default="1"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )
