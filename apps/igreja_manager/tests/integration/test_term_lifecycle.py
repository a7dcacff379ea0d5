from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from igreja_manager.db.models.ebd_attendance import AttendanceStatus, EbdAttendance
from igreja_manager.db.models.ebd_class import EbdClass
from igreja_manager.db.models.ebd_enrollment import EbdEnrollment
from igreja_manager.db.models.ebd_lesson import EbdLesson
from igreja_manager.db.models.ebd_student_note import EbdStudentNote, NoteType

if TYPE_CHECKING:
    from conftest import HeaderFactory, Seeder


def create_term(client: TestClient, headers: dict[str, str], name: str) -> dict:
    response = client.post(
        "/v1/ebd/terms",
        json={"name": name, "start_date": "2026-01-01", "end_date": "2026-03-31"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["data"]


def test_creating_term_deactivates_previous_active_term(
    client: TestClient, auth_headers: HeaderFactory
) -> None:
    headers = auth_headers()
    first = create_term(client, headers, "1o Trimestre")
    second = create_term(client, headers, "2o Trimestre")

    active_response = client.get(
        "/v1/ebd/terms", params={"is_active": True}, headers=headers
    )

    body = active_response.json()
    assert body["meta"]["total"] == 1
    assert body["data"][0]["id"] == second["id"]
    first_now = client.get(f"/v1/ebd/terms/{first['id']}", headers=headers).json()
    assert first_now["data"]["is_active"] is False


def test_reactivating_term_keeps_single_active_term(
    client: TestClient, auth_headers: HeaderFactory
) -> None:
    headers = auth_headers()
    first = create_term(client, headers, "1o Trimestre")
    create_term(client, headers, "2o Trimestre")

    response = client.put(
        f"/v1/ebd/terms/{first['id']}", json={"is_active": True}, headers=headers
    )

    assert response.status_code == 200
    active = client.get(
        "/v1/ebd/terms", params={"is_active": True}, headers=headers
    ).json()
    assert [item["id"] for item in active["data"]] == [first["id"]]


def test_term_with_end_before_start_is_rejected(
    client: TestClient, auth_headers: HeaderFactory
) -> None:
    response = client.post(
        "/v1/ebd/terms",
        json={"name": "Invalido", "start_date": "2026-03-31", "end_date": "2026-01-01"},
        headers=auth_headers(),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_deleting_term_removes_dependents_and_detaches_notes(
    client: TestClient,
    auth_headers: HeaderFactory,
    seed: Seeder,
    db_session: Session,
    user_id: UUID,
) -> None:
    term = seed.term()
    ebd_class = seed.ebd_class(term.id)
    member = seed.member()
    lesson = seed.lesson(ebd_class.id, date(2026, 2, 1))
    db_session.add_all(
        [
            EbdEnrollment(
                class_id=ebd_class.id,
                term_id=term.id,
                member_id=member.id,
                enrolled_at=date(2026, 1, 5),
                is_active=True,
            ),
            EbdAttendance(
                lesson_id=lesson.id,
                member_id=member.id,
                status=AttendanceStatus.PRESENTE,
            ),
            EbdStudentNote(
                church_id=seed.church_id,
                member_id=member.id,
                term_id=term.id,
                note_type=NoteType.PROGRESS,
                content="Evoluiu bem",
                created_by=user_id,
            ),
        ]
    )
    db_session.commit()

    response = client.delete(f"/v1/ebd/terms/{term.id}", headers=auth_headers())

    assert response.status_code == 200
    assert response.json()["success"] is True
    for model in (EbdClass, EbdLesson, EbdEnrollment, EbdAttendance):
        assert db_session.scalar(select(func.count()).select_from(model)) == 0
    assert db_session.scalar(select(EbdStudentNote.term_id)) is None
    missing = client.get(f"/v1/ebd/terms/{term.id}", headers=auth_headers())
    assert missing.status_code == 404
