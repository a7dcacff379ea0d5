"""Read-only member lookups."""

from __future__ import annotations

from collections.abc import Collection
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from igreja_manager.db.models.member import Member


class MemberRepository:
    """Repository for member existence checks scoped by church."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_member(self, *, church_id: UUID, member_id: UUID) -> Member | None:
        statement = select(Member).where(
            Member.id == member_id,
            Member.church_id == church_id,
            Member.deleted_at.is_(None),
        )
        return self._session.scalar(statement)

    def existing_member_ids(
        self, *, church_id: UUID, member_ids: Collection[UUID]
    ) -> set[UUID]:
        """Return which of the given ids are live members of the church."""
        if not member_ids:
            return set()
        statement = select(Member.id).where(
            Member.id.in_(set(member_ids)),
            Member.church_id == church_id,
            Member.deleted_at.is_(None),
        )
        return set(self._session.scalars(statement).all())
