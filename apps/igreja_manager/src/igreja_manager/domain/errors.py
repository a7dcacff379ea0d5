"""Domain exceptions used across API and services."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any


def compose_error_message(*, cause: str, action: str) -> str:
    """Build a user-facing error message with cause and corrective action."""

    return f"Cause: {cause} Action: {action}"


@dataclass(slots=True)
class DomainError(Exception):
    """Base exception for predictable domain failures."""

    code: str
    message: str
    status_code: int
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


class ValidationError(DomainError):
    """Raised when input is malformed or violates a business rule."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message
            or compose_error_message(
                cause="Request data violates business rules.",
                action="Adjust the input fields and try again.",
            ),
            status_code=HTTPStatus.BAD_REQUEST,
            details=details or {},
        )


class UnauthorizedError(DomainError):
    """Raised when the bearer credential is missing or invalid."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="UNAUTHORIZED",
            message=message
            or compose_error_message(
                cause="Authentication credential is missing or invalid.",
                action="Send a valid bearer token in the Authorization header.",
            ),
            status_code=HTTPStatus.UNAUTHORIZED,
            details=details or {},
        )


class ForbiddenError(DomainError):
    """Raised when the caller lacks permission or ownership."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="FORBIDDEN",
            message=message
            or compose_error_message(
                cause="Insufficient permission for this action.",
                action="Ask an administrator to grant the required permission.",
            ),
            status_code=HTTPStatus.FORBIDDEN,
            details=details or {},
        )


class NotFoundError(DomainError):
    """Raised when an entity is absent or outside the caller's tenant."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="NOT_FOUND",
            message=message
            or compose_error_message(
                cause="The requested resource was not found.",
                action="Check the identifier and retry.",
            ),
            status_code=HTTPStatus.NOT_FOUND,
            details=details or {},
        )

    @classmethod
    def for_entity(cls, entity: str, entity_id: object | None = None) -> NotFoundError:
        details = {"id": str(entity_id)} if entity_id is not None else None
        return cls(
            message=compose_error_message(
                cause=f"{entity} was not found.",
                action=f"Check the {entity.lower()} identifier and retry.",
            ),
            details=details,
        )


class ConflictError(DomainError):
    """Raised on uniqueness or state violations."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="CONFLICT",
            message=message
            or compose_error_message(
                cause="The request conflicts with the current resource state.",
                action="Reload the resource and retry.",
            ),
            status_code=HTTPStatus.CONFLICT,
            details=details or {},
        )


class InternalError(DomainError):
    """Raised when a downstream dependency fails unexpectedly."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="INTERNAL_ERROR",
            message=message
            or compose_error_message(
                cause="An unexpected internal error occurred.",
                action="Retry later or contact support if the error persists.",
            ),
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            details=details or {},
        )
