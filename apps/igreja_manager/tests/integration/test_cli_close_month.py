from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.orm import Session, sessionmaker
from typer.testing import CliRunner

from igreja_manager import cli
from igreja_manager.db.models.financial_entry import (
    EntryStatus,
    EntryType,
    FinancialEntry,
)

if TYPE_CHECKING:
    from conftest import Seeder

runner = CliRunner()


@pytest.fixture
def cli_session_factory(
    monkeypatch: pytest.MonkeyPatch, sqlite_session_factory: sessionmaker[Session]
) -> sessionmaker[Session]:
    monkeypatch.setattr(cli, "SessionFactory", sqlite_session_factory)
    return sqlite_session_factory


def test_close_month_command_prints_totals(
    cli_session_factory: sessionmaker[Session], seed: Seeder, db_session: Session
) -> None:
    account = seed.bank_account()
    plan = seed.account_plan()
    db_session.add(
        FinancialEntry(
            church_id=seed.church_id,
            type=EntryType.RECEITA,
            account_plan_id=plan.id,
            bank_account_id=account.id,
            amount=Decimal("42.00"),
            entry_date=date(2026, 5, 3),
            description="Oferta especial",
            status=EntryStatus.CONFIRMADO,
            is_closed=False,
        )
    )
    db_session.commit()

    result = runner.invoke(
        cli.app,
        ["close-month", "--church-id", str(seed.church_id), "--month", "2026-05"],
    )

    assert result.exit_code == 0
    assert "Fechamento 2026-05" in result.output
    assert "Receitas: 42.00" in result.output
    assert "Saldo acumulado: 42.00" in result.output


def test_close_month_command_fails_on_duplicate(
    cli_session_factory: sessionmaker[Session], seed: Seeder
) -> None:
    arguments = [
        "close-month",
        "--church-id",
        str(seed.church_id),
        "--month",
        "2026-05",
    ]

    first = runner.invoke(cli.app, arguments)
    second = runner.invoke(cli.app, arguments)

    assert first.exit_code == 0
    assert second.exit_code == 1


def test_close_month_command_rejects_bad_month(
    cli_session_factory: sessionmaker[Session], seed: Seeder
) -> None:
    result = runner.invoke(
        cli.app,
        ["close-month", "--church-id", str(seed.church_id), "--month", "maio"],
    )

    assert result.exit_code == 2
