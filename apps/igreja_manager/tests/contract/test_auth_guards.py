from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient

if TYPE_CHECKING:
    from conftest import HeaderFactory


@pytest.mark.parametrize(
    "path",
    ["/v1/ebd/terms", "/v1/financial/entries", "/v1/financial/monthly-closings"],
)
def test_missing_bearer_token_returns_401(client: TestClient, path: str) -> None:
    response = client.get(path)

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


def test_malformed_token_returns_401(client: TestClient) -> None:
    response = client.get(
        "/v1/ebd/terms", headers={"Authorization": "Bearer not-a-token"}
    )

    assert response.status_code == 401


def test_missing_permission_returns_403(
    client: TestClient, auth_headers: HeaderFactory
) -> None:
    ebd_only = auth_headers("ebd:read")

    financial = client.get("/v1/financial/bank-accounts", headers=ebd_only)
    ebd_write = client.post(
        "/v1/ebd/terms",
        json={"name": "T1", "start_date": "2026-01-01", "end_date": "2026-03-31"},
        headers=ebd_only,
    )

    assert financial.status_code == 403
    assert financial.json()["error"]["details"] == {
        "required_permission": "financial:read"
    }
    assert ebd_write.status_code == 403


def test_super_admin_bypasses_permission_list(
    client: TestClient, auth_headers: HeaderFactory
) -> None:
    response = client.get(
        "/v1/financial/bank-accounts", headers=auth_headers("none", role="super_admin")
    )

    assert response.status_code == 200


def test_records_of_other_church_are_not_visible(
    client: TestClient,
    auth_headers: HeaderFactory,
    foreign_auth_headers: dict[str, str],
) -> None:
    created = client.post(
        "/v1/ebd/terms",
        json={"name": "T1", "start_date": "2026-01-01", "end_date": "2026-03-31"},
        headers=auth_headers(),
    ).json()["data"]

    response = client.get(
        f"/v1/ebd/terms/{created['id']}", headers=foreign_auth_headers
    )

    assert response.status_code == 404
