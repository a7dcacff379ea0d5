"""CLI bootstrap for igreja-manager."""

from datetime import date
from uuid import UUID

import typer

from igreja_manager.core.logging import configure_logging
from igreja_manager.core.settings import get_settings
from igreja_manager.db.session import SessionFactory
from igreja_manager.domain.errors import DomainError
from igreja_manager.domain.money import format_money
from igreja_manager.domain.periods import format_reference_month, parse_reference_month
from igreja_manager.repositories.financial_entry_repository import (
    FinancialEntryRepository,
)
from igreja_manager.repositories.monthly_closing_repository import (
    MonthlyClosingRepository,
)
from igreja_manager.services.monthly_closing_service import (
    CloseMonthInput,
    MonthlyClosingService,
)

app = typer.Typer(help="Administrative commands for EBD and financial records.")


def _parse_month(value: str) -> date:
    try:
        return parse_reference_month(value)
    except ValueError as exc:
        raise typer.BadParameter("Use the YYYY-MM format.") from exc


MONTH_OPTION = typer.Option(..., "--month", help="Month to close (YYYY-MM).")
CHURCH_OPTION = typer.Option(..., "--church-id", help="Church identifier.")
CLOSED_BY_OPTION = typer.Option(None, "--closed-by", help="User closing the month.")
NOTES_OPTION = typer.Option(None, "--notes")


@app.command("healthcheck")
def healthcheck() -> None:
    """Verify that the CLI entrypoint is available."""
    typer.echo("igreja-manager is ready")


@app.command("close-month")
def close_month(
    church_id: UUID = CHURCH_OPTION,
    month: str = MONTH_OPTION,
    closed_by: UUID | None = CLOSED_BY_OPTION,
    notes: str | None = NOTES_OPTION,
) -> None:
    """Close one month for a church and print its totals."""
    configure_logging(get_settings().log_level)
    reference_month = _parse_month(month)
    with SessionFactory() as session:
        service = MonthlyClosingService(
            closing_repository=MonthlyClosingRepository(session),
            entry_repository=FinancialEntryRepository(session),
            session=session,
        )
        try:
            closing = service.close_month(
                CloseMonthInput(
                    church_id=church_id,
                    reference_month=reference_month,
                    closed_by=closed_by,
                    notes=notes,
                )
            )
        except DomainError as exc:
            typer.echo(exc.message, err=True)
            raise typer.Exit(code=1) from exc

    typer.echo(f"Fechamento {format_reference_month(closing.reference_month)}")
    typer.echo(f"Receitas: {format_money(closing.total_income)}")
    typer.echo(f"Despesas: {format_money(closing.total_expense)}")
    typer.echo(f"Saldo do mes: {format_money(closing.balance)}")
    typer.echo(f"Saldo acumulado: {format_money(closing.accumulated_balance)}")


def main() -> None:
    """Run the igreja-manager CLI application."""
    app()


if __name__ == "__main__":
    main()
