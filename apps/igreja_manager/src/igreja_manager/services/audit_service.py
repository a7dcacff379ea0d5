"""Audit trail for mutating operations."""

from __future__ import annotations

import logging
from typing import Protocol
from uuid import UUID

logger = logging.getLogger(__name__)


class AuditTrail(Protocol):
    """Receives one event per successful mutation."""

    def record(
        self,
        *,
        church_id: UUID,
        actor_id: UUID | None,
        action: str,
        entity_type: str,
        entity_id: UUID | str,
    ) -> None: ...


class LoggingAuditTrail:
    """Writes audit events to the application log."""

    def record(
        self,
        *,
        church_id: UUID,
        actor_id: UUID | None,
        action: str,
        entity_type: str,
        entity_id: UUID | str,
    ) -> None:
        logger.info(
            "audit_event",
            extra={
                "church_id": str(church_id),
                "actor_id": str(actor_id) if actor_id else None,
                "action": action,
                "entity_type": entity_type,
                "entity_id": str(entity_id),
            },
        )
