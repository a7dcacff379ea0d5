import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError

from igreja_manager.api.error_handlers import register_error_handlers
from igreja_manager.domain.errors import ConflictError, NotFoundError


class Payload(BaseModel):
    name: str = Field(min_length=1)


def build_app() -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/missing")
    def missing() -> None:
        raise NotFoundError(message="Term not found")

    @app.get("/conflict")
    def conflict() -> None:
        raise ConflictError(message="Month closed", details={"month": "2026-03"})

    @app.post("/payload")
    def payload(body: Payload) -> dict[str, str]:
        return {"name": body.name}

    @app.get("/crash")
    def crash() -> None:
        raise RuntimeError("database exploded")

    return app


def test_domain_error_handler_returns_error_envelope() -> None:
    client = TestClient(build_app())

    response = client.get("/missing")

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "error": {"code": "NOT_FOUND", "message": "Term not found"},
    }


def test_domain_error_handler_includes_details_when_present() -> None:
    client = TestClient(build_app())

    response = client.get("/conflict")

    assert response.status_code == 409
    assert response.json()["error"]["details"] == {"month": "2026-03"}


def test_request_validation_maps_to_400() -> None:
    client = TestClient(build_app())

    response = client.post("/payload", json={"name": ""})

    body = response.json()
    assert response.status_code == 400
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["details"]["errors"][0]["loc"] == ["body", "name"]


def test_unexpected_error_hides_internal_message() -> None:
    client = TestClient(build_app(), raise_server_exceptions=False)

    response = client.get("/crash")

    body = response.json()
    assert response.status_code == 500
    assert body["error"]["code"] == "INTERNAL_ERROR"
    assert "exploded" not in body["error"]["message"]


def build_integrity_app(error_text: str) -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/race")
    def race() -> None:
        raise IntegrityError("INSERT", {}, Exception(error_text))

    return app


@pytest.mark.parametrize(
    ("error_text", "constraint"),
    [
        (
            'duplicate key value violates unique constraint '
            '"uq_monthly_closings_church_month"',
            "uq_monthly_closings_church_month",
        ),
        (
            "UNIQUE constraint failed: ebd_enrollments.class_id, "
            "ebd_enrollments.member_id",
            "uq_ebd_enrollments_active_class_member",
        ),
        (
            "UNIQUE constraint failed: ebd_terms.church_id",
            "uq_ebd_terms_one_active_per_church",
        ),
    ],
)
def test_known_unique_violation_maps_to_conflict(
    error_text: str, constraint: str
) -> None:
    client = TestClient(build_integrity_app(error_text))

    response = client.get("/race")

    assert response.status_code == 409
    assert response.json()["error"]["details"] == {"constraint": constraint}


def test_unknown_integrity_error_is_a_generic_conflict() -> None:
    client = TestClient(build_integrity_app("NOT NULL constraint failed: x.y"))

    response = client.get("/race")

    assert response.status_code == 409
    assert "details" not in response.json()["error"]
