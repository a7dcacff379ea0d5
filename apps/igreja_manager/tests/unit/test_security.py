from __future__ import annotations

from uuid import uuid4

import pytest
from jose import jwt

from igreja_manager.api.security import RequestContext, decode_access_token
from igreja_manager.core.settings import get_settings
from igreja_manager.domain.errors import UnauthorizedError


def build_context(*permissions: str, role: str = "teacher") -> RequestContext:
    return RequestContext(
        user_id=uuid4(),
        church_id=uuid4(),
        role=role,
        permissions=frozenset(permissions),
    )


def test_exact_permission_is_granted() -> None:
    context = build_context("ebd:read")

    assert context.has_permission("ebd:read") is True
    assert context.has_permission("ebd:write") is False
    assert context.has_permission("financial:read") is False


def test_module_wildcard_grants_every_action_of_module() -> None:
    context = build_context("financial:*")

    assert context.has_permission("financial:write") is True
    assert context.has_permission("ebd:read") is False


def test_global_wildcard_and_super_admin_grant_everything() -> None:
    assert build_context("*").has_permission("financial:write") is True
    assert build_context(role="super_admin").has_permission("ebd:write") is True


def test_decode_access_token_reads_claims() -> None:
    settings = get_settings()
    user_id = uuid4()
    church_id = uuid4()
    token = jwt.encode(
        {
            "sub": str(user_id),
            "church_id": str(church_id),
            "role": "treasurer",
            "permissions": ["financial:*"],
        },
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )

    context = decode_access_token(token)

    assert context.user_id == user_id
    assert context.church_id == church_id
    assert context.permissions == frozenset({"financial:*"})


def test_decode_access_token_rejects_foreign_signature() -> None:
    token = jwt.encode(
        {"sub": str(uuid4()), "church_id": str(uuid4())},
        "another-secret",
        algorithm="HS256",
    )

    with pytest.raises(UnauthorizedError):
        decode_access_token(token)


def test_decode_access_token_requires_church_claim() -> None:
    settings = get_settings()
    token = jwt.encode(
        {"sub": str(uuid4())}, settings.jwt_secret, algorithm=settings.jwt_algorithm
    )

    with pytest.raises(UnauthorizedError):
        decode_access_token(token)
