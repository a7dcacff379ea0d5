"""Bearer credential validation and permission checks."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from igreja_manager.core.settings import get_settings
from igreja_manager.domain.errors import (
    ForbiddenError,
    UnauthorizedError,
    compose_error_message,
)

SUPER_ADMIN_ROLE = "super_admin"

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Authenticated caller: user, tenant and granted permissions."""

    user_id: UUID
    church_id: UUID
    role: str
    permissions: frozenset[str] = field(default_factory=frozenset)

    def has_permission(self, permission: str) -> bool:
        if self.role == SUPER_ADMIN_ROLE or "*" in self.permissions:
            return True
        if permission in self.permissions:
            return True
        module, _, _ = permission.partition(":")
        return f"{module}:*" in self.permissions


def decode_access_token(token: str) -> RequestContext:
    settings = get_settings()
    try:
        claims = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
        return RequestContext(
            user_id=UUID(str(claims["sub"])),
            church_id=UUID(str(claims["church_id"])),
            role=str(claims.get("role", "")),
            permissions=frozenset(claims.get("permissions") or ()),
        )
    except (JWTError, KeyError, TypeError, ValueError) as exc:
        raise UnauthorizedError(
            message=compose_error_message(
                cause="Bearer token is invalid or expired.",
                action="Sign in again and retry with a fresh token.",
            )
        ) from exc


def get_request_context(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> RequestContext:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError()
    return decode_access_token(credentials.credentials)


def require_permission(permission: str) -> Callable[..., RequestContext]:
    """Build a dependency that rejects callers lacking the permission."""

    def dependency(
        context: Annotated[RequestContext, Depends(get_request_context)],
    ) -> RequestContext:
        if not context.has_permission(permission):
            raise ForbiddenError(details={"required_permission": permission})
        return context

    return dependency


EbdReader = Annotated[RequestContext, Depends(require_permission("ebd:read"))]
EbdWriter = Annotated[RequestContext, Depends(require_permission("ebd:write"))]
FinancialReader = Annotated[
    RequestContext, Depends(require_permission("financial:read"))
]
FinancialWriter = Annotated[
    RequestContext, Depends(require_permission("financial:write"))
]
