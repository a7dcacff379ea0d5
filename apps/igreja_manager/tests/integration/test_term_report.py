from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from igreja_manager.db.models.ebd_enrollment import EbdEnrollment
from igreja_manager.domain.periods import local_today

if TYPE_CHECKING:
    from conftest import HeaderFactory, Seeder


def test_term_report_summarizes_each_class(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder, db_session: Session
) -> None:
    headers = auth_headers("ebd:read", "ebd:write")
    term = seed.term()
    teacher = seed.member("Prof. Joao")
    youth = seed.ebd_class(term.id, name="Jovens")
    adults = seed.ebd_class(term.id, name="Adultos")
    youth.teacher_id = teacher.id
    ana, bia, caio = seed.member("Ana"), seed.member("Bia"), seed.member("Caio")
    for ebd_class, member in ((youth, ana), (youth, bia), (adults, caio)):
        db_session.add(
            EbdEnrollment(
                class_id=ebd_class.id,
                term_id=term.id,
                member_id=member.id,
                enrolled_at=local_today(),
                is_active=True,
            )
        )
    db_session.commit()
    lesson = seed.lesson(youth.id, local_today())
    client.post(
        f"/v1/ebd/lessons/{lesson.id}/attendance",
        json={
            "records": [
                {
                    "member_id": str(ana.id),
                    "status": "presente",
                    "brought_bible": True,
                    "offering_amount": "12.00",
                },
                {"member_id": str(bia.id), "status": "ausente"},
            ]
        },
        headers=headers,
    )

    response = client.get(f"/v1/ebd/terms/{term.id}/report", headers=headers)

    report = response.json()["data"]
    assert response.status_code == 200
    assert report["term"]["id"] == str(term.id)
    assert report["total_classes"] == 2
    assert report["total_students"] == 3
    assert report["total_lessons"] == 1
    assert report["average_attendance_percentage"] == 50.0
    assert report["total_offerings"] == "12.00"
    assert report["bible_percentage"] == 100.0
    summaries = {item["class_name"]: item for item in report["classes_summary"]}
    assert summaries["Jovens"]["teacher_name"] == "Prof. Joao"
    assert summaries["Jovens"]["enrolled_students"] == 2
    assert summaries["Jovens"]["attendance_percentage"] == 50.0
    assert summaries["Adultos"]["total_lessons"] == 0
    assert summaries["Adultos"]["total_offerings"] == "0.00"


def test_term_report_for_unknown_term_returns_404(
    client: TestClient, auth_headers: HeaderFactory
) -> None:
    response = client.get(f"/v1/ebd/terms/{uuid4()}/report", headers=auth_headers())

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"
