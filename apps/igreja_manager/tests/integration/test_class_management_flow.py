from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from igreja_manager.db.models.ebd_attendance import EbdAttendance
from igreja_manager.db.models.ebd_class import EbdClass
from igreja_manager.db.models.ebd_enrollment import EbdEnrollment
from igreja_manager.db.models.ebd_lesson import EbdLesson
from igreja_manager.db.models.ebd_term import EbdTerm
from igreja_manager.db.models.member import Member
from igreja_manager.domain.periods import local_today

if TYPE_CHECKING:
    from conftest import HeaderFactory, Seeder


def count(db_session: Session, model: type) -> int:
    return int(db_session.scalar(select(func.count()).select_from(model)) or 0)


def enroll_directly(
    db_session: Session, ebd_class: EbdClass, member: Member
) -> EbdEnrollment:
    enrollment = EbdEnrollment(
        class_id=ebd_class.id,
        term_id=ebd_class.term_id,
        member_id=member.id,
        enrolled_at=local_today(),
        is_active=True,
    )
    db_session.add(enrollment)
    db_session.commit()
    return enrollment


def test_delete_class_removes_lessons_attendance_and_enrollments(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder, db_session: Session
) -> None:
    headers = auth_headers()
    term = seed.term()
    doomed = seed.ebd_class(term.id, name="Juniores")
    kept = seed.ebd_class(term.id, name="Adultos")
    ana, bia = seed.member("Ana"), seed.member("Bia")
    enroll_directly(db_session, doomed, ana)
    enroll_directly(db_session, kept, bia)
    lesson = seed.lesson(doomed.id, local_today())
    seed.lesson(kept.id, local_today())
    recorded = client.post(
        f"/v1/ebd/lessons/{lesson.id}/attendance",
        json={"records": [{"member_id": str(ana.id), "status": "presente"}]},
        headers=headers,
    )
    assert recorded.status_code == 200

    response = client.delete(f"/v1/ebd/classes/{doomed.id}", headers=headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Class deleted"
    gone = client.get(f"/v1/ebd/classes/{doomed.id}", headers=headers)
    assert gone.status_code == 404
    assert count(db_session, EbdAttendance) == 0
    assert count(db_session, EbdLesson) == 1
    assert count(db_session, EbdEnrollment) == 1
    assert count(db_session, EbdClass) == 1


def test_delete_class_of_another_church_returns_404(
    client: TestClient,
    foreign_auth_headers: dict[str, str],
    seed: Seeder,
    db_session: Session,
) -> None:
    term = seed.term()
    ebd_class = seed.ebd_class(term.id)

    response = client.delete(
        f"/v1/ebd/classes/{ebd_class.id}", headers=foreign_auth_headers
    )

    assert response.status_code == 404
    assert count(db_session, EbdClass) == 1


def test_clone_classes_copies_structure_without_enrollments(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder, db_session: Session
) -> None:
    headers = auth_headers()
    source = seed.term(name="1o Trimestre")
    target = seed.term(name="2o Trimestre", is_active=False)
    seed.ebd_class(source.id, name="Jovens", max_capacity=10)
    adults = seed.ebd_class(source.id, name="Adultos")
    enroll_directly(db_session, adults, seed.member("Ana"))

    response = client.post(
        f"/v1/ebd/terms/{target.id}/clone-classes",
        json={"source_term_id": str(source.id)},
        headers=headers,
    )

    assert response.status_code == 201
    cloned = response.json()["data"]
    assert [item["name"] for item in cloned] == ["Adultos", "Jovens"]
    assert {item["term_id"] for item in cloned} == {str(target.id)}
    assert [item["max_capacity"] for item in cloned] == [None, 10]
    assert [item["enrolled_count"] for item in cloned] == [0, 0]
    assert count(db_session, EbdEnrollment) == 1


def test_clone_classes_with_enrollments_skips_members_in_target_term(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder, db_session: Session
) -> None:
    headers = auth_headers()
    source = seed.term(name="1o Trimestre")
    target = seed.term(name="2o Trimestre", is_active=False)
    youth = seed.ebd_class(source.id, name="Jovens")
    ana, bia = seed.member("Ana"), seed.member("Bia")
    enroll_directly(db_session, youth, ana)
    enroll_directly(db_session, youth, bia)
    existing = seed.ebd_class(target.id, name="Discipulado")
    enroll_directly(db_session, existing, bia)

    response = client.post(
        f"/v1/ebd/terms/{target.id}/clone-classes",
        json={"source_term_id": str(source.id), "include_enrollments": True},
        headers=headers,
    )

    assert response.status_code == 201
    cloned = response.json()["data"]
    assert [(item["name"], item["enrolled_count"]) for item in cloned] == [
        ("Jovens", 1)
    ]
    enrolled = client.get(
        f"/v1/ebd/classes/{cloned[0]['id']}/enrollments", headers=headers
    ).json()["data"]
    assert [item["member_id"] for item in enrolled] == [str(ana.id)]


def test_clone_classes_rejects_same_term_and_unknown_source(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder, db_session: Session
) -> None:
    headers = auth_headers()
    term = seed.term()
    seed.ebd_class(term.id)
    url = f"/v1/ebd/terms/{term.id}/clone-classes"

    same = client.post(url, json={"source_term_id": str(term.id)}, headers=headers)
    unknown = client.post(url, json={"source_term_id": str(uuid4())}, headers=headers)

    assert same.status_code == 400
    assert same.json()["error"]["details"] == {"term_id": str(term.id)}
    assert unknown.status_code == 404
    assert count(db_session, EbdClass) == 1
    assert count(db_session, EbdTerm) == 1
