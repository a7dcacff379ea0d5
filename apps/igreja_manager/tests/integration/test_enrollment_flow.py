from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from igreja_manager.db.models.ebd_enrollment import EbdEnrollment
from igreja_manager.domain.periods import local_today
from igreja_manager.repositories.class_repository import ClassRepository

if TYPE_CHECKING:
    from conftest import HeaderFactory, Seeder


def enroll(
    client: TestClient, headers: dict[str, str], class_id: object, member_id: object
) -> httpx.Response:
    return client.post(
        f"/v1/ebd/classes/{class_id}/enrollments",
        json={"member_id": str(member_id)},
        headers=headers,
    )


def test_class_capacity_and_single_class_per_term(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder
) -> None:
    headers = auth_headers()
    term = seed.term()
    juniors = seed.ebd_class(term.id, name="Juniores", max_capacity=2)
    adults = seed.ebd_class(term.id, name="Adultos")
    ana, bia, caio = seed.member("Ana"), seed.member("Bia"), seed.member("Caio")

    assert enroll(client, headers, juniors.id, ana.id).status_code == 201
    assert enroll(client, headers, juniors.id, bia.id).status_code == 201

    full = enroll(client, headers, juniors.id, caio.id)
    assert full.status_code == 400
    assert full.json()["error"]["details"] == {"max_capacity": 2, "enrolled": 2}

    other_class = enroll(client, headers, adults.id, ana.id)
    assert other_class.status_code == 409
    assert other_class.json()["error"]["details"]["class_id"] == str(juniors.id)

    same_class = enroll(client, headers, juniors.id, ana.id)
    assert same_class.status_code == 409

    class_body = client.get(f"/v1/ebd/classes/{juniors.id}", headers=headers).json()
    assert class_body["data"]["enrolled_count"] == 2


def test_removing_enrollment_frees_seat_and_keeps_history(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder
) -> None:
    headers = auth_headers()
    term = seed.term()
    juniors = seed.ebd_class(term.id, max_capacity=1)
    ana, bia = seed.member("Ana"), seed.member("Bia")
    enrollment = enroll(client, headers, juniors.id, ana.id).json()["data"]

    removed = client.delete(
        f"/v1/ebd/classes/{juniors.id}/enrollments/{enrollment['id']}",
        headers=headers,
    )

    assert removed.status_code == 200
    assert removed.json()["data"]["is_active"] is False
    assert removed.json()["data"]["left_at"] is not None
    assert enroll(client, headers, juniors.id, bia.id).status_code == 201
    assert enroll(client, headers, juniors.id, ana.id).status_code == 400


def test_enrollment_lookups_return_404(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder
) -> None:
    headers = auth_headers()
    term = seed.term()
    juniors = seed.ebd_class(term.id)
    member = seed.member()

    missing_class = enroll(client, headers, uuid4(), member.id)
    missing_member = enroll(client, headers, juniors.id, uuid4())

    assert missing_class.status_code == 404
    assert missing_member.status_code == 404


def test_list_enrollments_includes_member_names(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder
) -> None:
    headers = auth_headers()
    term = seed.term()
    juniors = seed.ebd_class(term.id)
    member = seed.member("Debora Lima")
    enroll(client, headers, juniors.id, member.id)

    response = client.get(f"/v1/ebd/classes/{juniors.id}/enrollments", headers=headers)

    assert response.status_code == 200
    assert [item["member_name"] for item in response.json()["data"]] == [
        "Debora Lima"
    ]


def test_capacity_cannot_drop_below_active_enrollments(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder
) -> None:
    headers = auth_headers()
    term = seed.term()
    juniors = seed.ebd_class(term.id, max_capacity=3)
    for name in ("Ana", "Bia", "Caio"):
        enroll(client, headers, juniors.id, seed.member(name).id)

    shrink = client.put(
        f"/v1/ebd/classes/{juniors.id}", json={"max_capacity": 1}, headers=headers
    )
    grow = client.put(
        f"/v1/ebd/classes/{juniors.id}", json={"max_capacity": 5}, headers=headers
    )
    exact = client.put(
        f"/v1/ebd/classes/{juniors.id}", json={"max_capacity": 3}, headers=headers
    )

    assert shrink.status_code == 400
    assert shrink.json()["error"]["details"] == {"max_capacity": 1, "enrolled": 3}
    assert grow.status_code == 200
    assert grow.json()["data"]["max_capacity"] == 5
    assert exact.status_code == 200
    assert exact.json()["data"]["enrolled_count"] == 3


def test_lost_enrollment_race_maps_to_conflict_with_constraint(
    client: TestClient,
    auth_headers: HeaderFactory,
    seed: Seeder,
    db_session: Session,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    headers = auth_headers()
    term = seed.term()
    juniors = seed.ebd_class(term.id, name="Juniores")
    adults = seed.ebd_class(term.id, name="Adultos")
    member = seed.member()
    db_session.add(
        EbdEnrollment(
            class_id=juniors.id,
            term_id=term.id,
            member_id=member.id,
            enrolled_at=local_today(),
            is_active=True,
        )
    )
    db_session.commit()
    # The concurrent writer committed after this request's pre-check ran.
    monkeypatch.setattr(
        ClassRepository, "find_active_enrollment_in_term", lambda *_, **__: None
    )

    response = enroll(client, headers, adults.id, member.id)

    assert response.status_code == 409
    assert response.json()["error"]["details"] == {
        "constraint": "uq_ebd_enrollments_active_term_member"
    }
    listed = client.get(f"/v1/ebd/classes/{adults.id}/enrollments", headers=headers)
    assert listed.json()["data"] == []
