"""Global API exception handlers producing the error envelope."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from igreja_manager.domain.errors import (
    ConflictError,
    DomainError,
    InternalError,
    ValidationError,
    compose_error_message,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class KnownConstraint:
    """Unique constraint with the columns SQLite reports instead of its name."""

    cause: str
    columns: tuple[str, ...]

    def matches(self, name: str, error_text: str) -> bool:
        return name in error_text or ", ".join(self.columns) in error_text


KNOWN_UNIQUE_CONSTRAINTS = {
    "uq_ebd_terms_one_active_per_church": KnownConstraint(
        "Another term is already active.", ("ebd_terms.church_id",)
    ),
    "uq_ebd_enrollments_active_class_member": KnownConstraint(
        "Member is already enrolled in this class.",
        ("ebd_enrollments.class_id", "ebd_enrollments.member_id"),
    ),
    "uq_ebd_enrollments_active_term_member": KnownConstraint(
        "Member is already enrolled in another class of this term.",
        ("ebd_enrollments.term_id", "ebd_enrollments.member_id"),
    ),
    "uq_ebd_attendances_lesson_member": KnownConstraint(
        "Attendance for this member was recorded concurrently.",
        ("ebd_attendances.lesson_id", "ebd_attendances.member_id"),
    ),
    "uq_monthly_closings_church_month": KnownConstraint(
        "This month is already closed.",
        ("monthly_closings.church_id", "monthly_closings.reference_month"),
    ),
    "uq_account_plans_church_code": KnownConstraint(
        "Account plan code is already in use.",
        ("account_plans.church_id", "account_plans.code"),
    ),
}


def _error_payload(code: str, message: str, details: dict[str, Any]) -> dict[str, Any]:
    error: dict[str, Any] = {
        "code": code,
        "message": message,
    }
    if details:
        error["details"] = details
    return {"success": False, "error": error}


def _error_response(exc: DomainError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_payload(exc.code, exc.message, jsonable_encoder(exc.details)),
    )


async def handle_domain_error(_: Request, exc: DomainError) -> JSONResponse:
    """Serialize domain error to the error envelope."""

    return _error_response(exc)


async def handle_validation_error(
    _: Request, exc: RequestValidationError
) -> JSONResponse:
    """Map request validation failures to HTTP 400."""

    return _error_response(
        ValidationError(
            message=compose_error_message(
                cause="Request payload validation failed.",
                action="Fix the invalid fields and send the request again.",
            ),
            details={"errors": jsonable_encoder(exc.errors())},
        )
    )


async def handle_integrity_error(_: Request, exc: IntegrityError) -> JSONResponse:
    """Translate unique-constraint races into conflicts."""

    error_text = str(exc.orig)
    for constraint, known in KNOWN_UNIQUE_CONSTRAINTS.items():
        if known.matches(constraint, error_text):
            return _error_response(
                ConflictError(
                    message=compose_error_message(
                        cause=known.cause,
                        action="Reload the resource and retry.",
                    ),
                    details={"constraint": constraint},
                )
            )

    logger.warning("integrity_error", extra={"error": error_text})
    return _error_response(
        ConflictError(
            message=compose_error_message(
                cause="A persistence constraint was violated.",
                action="Review request data consistency and retry.",
            )
        )
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Serialize unexpected failures with a generic message."""

    logger.exception(
        "unhandled_error",
        extra={"path": request.url.path, "error_type": type(exc).__name__},
    )
    internal_error = InternalError()
    return JSONResponse(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        content=_error_payload(internal_error.code, internal_error.message, {}),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach all global handlers to the FastAPI application."""

    app.add_exception_handler(DomainError, cast(Any, handle_domain_error))
    app.add_exception_handler(
        RequestValidationError, cast(Any, handle_validation_error)
    )
    app.add_exception_handler(IntegrityError, cast(Any, handle_integrity_error))
    app.add_exception_handler(Exception, handle_unexpected_error)
