from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING
from uuid import uuid4

from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from igreja_manager.db.models.church import Church
from igreja_manager.db.models.ebd_attendance import EbdAttendance
from igreja_manager.db.models.member import Member
from igreja_manager.domain.periods import local_today

if TYPE_CHECKING:
    from conftest import HeaderFactory, Seeder


def test_recording_twice_updates_instead_of_duplicating(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder, db_session: Session
) -> None:
    headers = auth_headers()
    term = seed.term()
    ebd_class = seed.ebd_class(term.id)
    ana, bia = seed.member("Ana"), seed.member("Bia")
    lesson = seed.lesson(ebd_class.id, local_today() - timedelta(days=7))
    url = f"/v1/ebd/lessons/{lesson.id}/attendance"

    first = client.post(
        url,
        json={
            "records": [
                {"member_id": str(ana.id), "status": "presente", "brought_bible": True},
                {"member_id": str(bia.id), "status": "ausente"},
            ]
        },
        headers=headers,
    )
    second = client.post(
        url,
        json={
            "records": [
                {
                    "member_id": str(bia.id),
                    "status": "justificado",
                    "notes": "Viagem",
                }
            ]
        },
        headers=headers,
    )

    assert first.status_code == 200
    assert second.status_code == 200
    assert db_session.scalar(select(func.count()).select_from(EbdAttendance)) == 2
    listed = client.get(url, headers=headers).json()["data"]
    statuses = {item["member_name"]: item["status"] for item in listed}
    assert statuses == {"Ana": "presente", "Bia": "justificado"}


def test_attendance_window_closes_after_seven_days(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder
) -> None:
    term = seed.term()
    ebd_class = seed.ebd_class(term.id)
    member = seed.member()
    old_lesson = seed.lesson(ebd_class.id, local_today() - timedelta(days=8))

    response = client.post(
        f"/v1/ebd/lessons/{old_lesson.id}/attendance",
        json={"records": [{"member_id": str(member.id), "status": "presente"}]},
        headers=auth_headers(),
    )

    assert response.status_code == 400
    assert response.json()["error"]["details"] == {"days_since_lesson": 8}


def test_invalid_status_rejects_whole_batch(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder, db_session: Session
) -> None:
    term = seed.term()
    ebd_class = seed.ebd_class(term.id)
    ana, bia = seed.member("Ana"), seed.member("Bia")
    lesson = seed.lesson(ebd_class.id, local_today())

    response = client.post(
        f"/v1/ebd/lessons/{lesson.id}/attendance",
        json={
            "records": [
                {"member_id": str(ana.id), "status": "presente"},
                {"member_id": str(bia.id), "status": "atrasado"},
            ]
        },
        headers=auth_headers(),
    )

    assert response.status_code == 400
    assert db_session.scalar(select(func.count()).select_from(EbdAttendance)) == 0


def test_class_report_aggregates_lessons_in_range(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder
) -> None:
    headers = auth_headers()
    term = seed.term()
    ebd_class = seed.ebd_class(term.id)
    ana, bia = seed.member("Ana"), seed.member("Bia")
    today = local_today()
    for offset, records in (
        (
            2,
            [
                {
                    "member_id": str(ana.id),
                    "status": "presente",
                    "brought_bible": True,
                    "brought_magazine": True,
                    "offering_amount": "10.00",
                },
                {"member_id": str(bia.id), "status": "presente"},
            ],
        ),
        (
            1,
            [
                {
                    "member_id": str(ana.id),
                    "status": "presente",
                    "brought_bible": True,
                    "offering_amount": "5.50",
                },
                {"member_id": str(bia.id), "status": "ausente"},
            ],
        ),
    ):
        lesson = seed.lesson(ebd_class.id, today - timedelta(days=offset))
        recorded = client.post(
            f"/v1/ebd/lessons/{lesson.id}/attendance",
            json={"records": records},
            headers=headers,
        )
        assert recorded.status_code == 200

    response = client.get(
        f"/v1/ebd/classes/{ebd_class.id}/report",
        params={"date_from": (today - timedelta(days=3)).isoformat()},
        headers=headers,
    )

    report = response.json()["data"]
    assert response.status_code == 200
    assert report["total_lessons"] == 2
    assert report["average_attendance"] == 1.5
    assert report["total_offering"] == "15.50"
    assert report["bible_percentage"] == 66.67
    assert report["magazine_percentage"] == 33.33


def test_attendance_window_is_open_on_the_seventh_day(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder
) -> None:
    term = seed.term()
    ebd_class = seed.ebd_class(term.id)
    member = seed.member()
    lesson = seed.lesson(ebd_class.id, local_today() - timedelta(days=7))

    response = client.post(
        f"/v1/ebd/lessons/{lesson.id}/attendance",
        json={"records": [{"member_id": str(member.id), "status": "presente"}]},
        headers=auth_headers(),
    )

    assert response.status_code == 200
    assert response.json()["data"][0]["status"] == "presente"


def test_unknown_or_foreign_members_reject_whole_batch(
    client: TestClient,
    auth_headers: HeaderFactory,
    seed: Seeder,
    db_session: Session,
) -> None:
    term = seed.term()
    ebd_class = seed.ebd_class(term.id)
    ana = seed.member("Ana")
    other_church = Church(id=uuid4(), name="Outra Igreja", is_active=True)
    outsider = Member(church_id=other_church.id, full_name="Visitante Externo")
    db_session.add_all([other_church, outsider])
    db_session.commit()
    ghost_id = uuid4()
    lesson = seed.lesson(ebd_class.id, local_today())

    response = client.post(
        f"/v1/ebd/lessons/{lesson.id}/attendance",
        json={
            "records": [
                {"member_id": str(ana.id), "status": "presente"},
                {"member_id": str(outsider.id), "status": "presente"},
                {"member_id": str(ghost_id), "status": "ausente"},
            ]
        },
        headers=auth_headers(),
    )

    assert response.status_code == 404
    assert response.json()["error"]["details"] == {
        "member_ids": sorted([str(outsider.id), str(ghost_id)])
    }
    assert db_session.scalar(select(func.count()).select_from(EbdAttendance)) == 0


def test_repeated_member_in_one_batch_keeps_the_last_record(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder, db_session: Session
) -> None:
    term = seed.term()
    ebd_class = seed.ebd_class(term.id)
    ana = seed.member("Ana")
    lesson = seed.lesson(ebd_class.id, local_today())

    response = client.post(
        f"/v1/ebd/lessons/{lesson.id}/attendance",
        json={
            "records": [
                {"member_id": str(ana.id), "status": "ausente"},
                {"member_id": str(ana.id), "status": "presente", "notes": "Chegou"},
            ]
        },
        headers=auth_headers(),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert [(item["status"], item["notes"]) for item in data] == [
        ("presente", "Chegou")
    ]
    assert db_session.scalar(select(func.count()).select_from(EbdAttendance)) == 1
