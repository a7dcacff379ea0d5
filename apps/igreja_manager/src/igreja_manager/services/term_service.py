"""EBD term management service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from igreja_manager.db.models.ebd_term import EbdTerm
from igreja_manager.domain.errors import (
    NotFoundError,
    ValidationError,
    compose_error_message,
)
from igreja_manager.repositories.term_repository import TermListFilters

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def refresh(self, instance: object) -> None: ...


class TermRepositoryProtocol(Protocol):
    """Term repository contract consumed by service."""

    def list_terms(self, filters: TermListFilters) -> tuple[list[EbdTerm], int]: ...

    def get_term(self, *, church_id: UUID, term_id: UUID) -> EbdTerm | None: ...

    def deactivate_active_terms(
        self, *, church_id: UUID, exclude_term_id: UUID | None = None
    ) -> int: ...

    def add(self, term: EbdTerm) -> EbdTerm: ...

    def flush(self) -> None: ...

    def delete_term_cascade(self, term: EbdTerm) -> None: ...


@dataclass(slots=True, frozen=True)
class CreateTermInput:
    """Input model for term creation."""

    church_id: UUID
    name: str
    start_date: date
    end_date: date
    theme: str | None = None
    magazine_title: str | None = None


@dataclass(slots=True, frozen=True)
class UpdateTermInput:
    """Partial update; None leaves the field unchanged."""

    church_id: UUID
    term_id: UUID
    name: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    theme: str | None = None
    magazine_title: str | None = None
    is_active: bool | None = None


def _ensure_date_order(start_date: date, end_date: date) -> None:
    if end_date <= start_date:
        raise ValidationError(
            message=compose_error_message(
                cause="Term end_date must be after start_date.",
                action="Send an end_date later than start_date.",
            ),
            details={
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
            },
        )


class TermService:
    """Keeps at most one active term per church."""

    def __init__(
        self,
        *,
        term_repository: TermRepositoryProtocol,
        session: SessionProtocol,
    ) -> None:
        self._term_repository = term_repository
        self._session = session

    def list_terms(
        self,
        *,
        church_id: UUID,
        is_active: bool | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[EbdTerm], int]:
        return self._term_repository.list_terms(
            TermListFilters(
                church_id=church_id, is_active=is_active, limit=limit, offset=offset
            )
        )

    def get_term(self, *, church_id: UUID, term_id: UUID) -> EbdTerm:
        term = self._term_repository.get_term(church_id=church_id, term_id=term_id)
        if term is None:
            raise NotFoundError.for_entity("Term", term_id)
        return term

    def create_term(self, payload: CreateTermInput) -> EbdTerm:
        """Create a term as the church's only active one."""

        _ensure_date_order(payload.start_date, payload.end_date)
        try:
            deactivated = self._term_repository.deactivate_active_terms(
                church_id=payload.church_id
            )
            term = self._term_repository.add(
                EbdTerm(
                    church_id=payload.church_id,
                    name=payload.name.strip(),
                    start_date=payload.start_date,
                    end_date=payload.end_date,
                    theme=payload.theme,
                    magazine_title=payload.magazine_title,
                    is_active=True,
                )
            )
            self._session.commit()
            self._session.refresh(term)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "term_created",
            extra={
                "term_id": str(term.id),
                "church_id": str(payload.church_id),
                "deactivated_terms": deactivated,
            },
        )
        return term

    def update_term(self, payload: UpdateTermInput) -> EbdTerm:
        term = self.get_term(church_id=payload.church_id, term_id=payload.term_id)

        start_date = payload.start_date or term.start_date
        end_date = payload.end_date or term.end_date
        _ensure_date_order(start_date, end_date)

        try:
            if payload.is_active:
                self._term_repository.deactivate_active_terms(
                    church_id=payload.church_id, exclude_term_id=term.id
                )
            if payload.name is not None:
                term.name = payload.name.strip()
            term.start_date = start_date
            term.end_date = end_date
            if payload.theme is not None:
                term.theme = payload.theme
            if payload.magazine_title is not None:
                term.magazine_title = payload.magazine_title
            if payload.is_active is not None:
                term.is_active = payload.is_active
            self._term_repository.flush()
            self._session.commit()
            self._session.refresh(term)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "term_updated",
            extra={"term_id": str(term.id), "is_active": term.is_active},
        )
        return term

    def delete_term(self, *, church_id: UUID, term_id: UUID) -> None:
        """Delete the term and everything that hangs off it, atomically."""

        term = self.get_term(church_id=church_id, term_id=term_id)
        try:
            self._term_repository.delete_term_cascade(term)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "term_deleted",
            extra={"term_id": str(term_id), "church_id": str(church_id)},
        )
