from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.testclient import TestClient

from igreja_manager.db.models.account_plan import AccountPlanType

if TYPE_CHECKING:
    from conftest import HeaderFactory, Seeder


def post_entry(
    client: TestClient,
    headers: dict[str, str],
    *,
    entry_type: str,
    plan_id: object,
    account_id: object,
    amount: str,
    entry_date: str,
) -> dict:
    response = client.post(
        "/v1/financial/entries",
        json={
            "type": entry_type,
            "account_plan_id": str(plan_id),
            "bank_account_id": str(account_id),
            "amount": amount,
            "entry_date": entry_date,
            "description": "Movimento do mes",
        },
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()["data"]


def test_closing_freezes_month_and_chains_accumulated_balance(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder
) -> None:
    headers = auth_headers("financial:*")
    account = seed.bank_account(initial_balance="0.00")
    income = seed.account_plan(code="1.01")
    expense = seed.account_plan(code="2.01", plan_type=AccountPlanType.DESPESA)
    march_entry = post_entry(
        client,
        headers,
        entry_type="receita",
        plan_id=income.id,
        account_id=account.id,
        amount="500.00",
        entry_date="2026-03-08",
    )
    post_entry(
        client,
        headers,
        entry_type="despesa",
        plan_id=expense.id,
        account_id=account.id,
        amount="200.00",
        entry_date="2026-03-20",
    )
    post_entry(
        client,
        headers,
        entry_type="despesa",
        plan_id=expense.id,
        account_id=account.id,
        amount="50.00",
        entry_date="2026-04-02",
    )

    march = client.post(
        "/v1/financial/monthly-closings",
        json={"reference_month": "2026-03", "notes": "Conferido"},
        headers=headers,
    )
    april = client.post(
        "/v1/financial/monthly-closings",
        json={"reference_month": "2026-04-15"},
        headers=headers,
    )

    assert march.status_code == 201
    march_body = march.json()["data"]
    assert march_body["reference_month"] == "2026-03"
    assert march_body["total_income"] == "500.00"
    assert march_body["total_expense"] == "200.00"
    assert march_body["balance"] == "300.00"
    assert march_body["previous_balance"] == "0.00"
    assert march_body["accumulated_balance"] == "300.00"
    april_body = april.json()["data"]
    assert april_body["balance"] == "-50.00"
    assert april_body["previous_balance"] == "300.00"
    assert april_body["accumulated_balance"] == "250.00"

    frozen = client.get(
        f"/v1/financial/entries/{march_entry['id']}", headers=headers
    ).json()["data"]
    assert frozen["is_closed"] is True
    assert frozen["closed_at"] is not None

    listed = client.get("/v1/financial/monthly-closings", headers=headers).json()
    assert [item["reference_month"] for item in listed["data"]] == [
        "2026-04",
        "2026-03",
    ]


def test_closed_month_rejects_changes(
    client: TestClient, auth_headers: HeaderFactory, seed: Seeder
) -> None:
    headers = auth_headers("financial:*")
    account = seed.bank_account()
    income = seed.account_plan()
    entry = post_entry(
        client,
        headers,
        entry_type="receita",
        plan_id=income.id,
        account_id=account.id,
        amount="10.00",
        entry_date="2026-03-08",
    )
    closed = client.post(
        "/v1/financial/monthly-closings",
        json={"reference_month": "2026-03"},
        headers=headers,
    )
    assert closed.status_code == 201

    duplicate = client.post(
        "/v1/financial/monthly-closings",
        json={"reference_month": "2026-03"},
        headers=headers,
    )
    update = client.put(
        f"/v1/financial/entries/{entry['id']}",
        json={"amount": "20.00"},
        headers=headers,
    )
    delete = client.delete(f"/v1/financial/entries/{entry['id']}", headers=headers)
    late_entry = client.post(
        "/v1/financial/entries",
        json={
            "type": "receita",
            "account_plan_id": str(income.id),
            "bank_account_id": str(account.id),
            "amount": "5.00",
            "entry_date": "2026-03-30",
            "description": "Oferta atrasada",
        },
        headers=headers,
    )

    assert duplicate.status_code == 409
    assert update.status_code == 409
    assert delete.status_code == 409
    assert late_entry.status_code == 409
    assert all(
        response.json()["error"]["code"] == "CONFLICT"
        for response in (duplicate, update, delete, late_entry)
    )


def test_invalid_reference_month_is_rejected(
    client: TestClient, auth_headers: HeaderFactory
) -> None:
    response = client.post(
        "/v1/financial/monthly-closings",
        json={"reference_month": "2026-02-31"},
        headers=auth_headers("financial:write"),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
