"""Balance and status rules for financial entries."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from igreja_manager.db.models.financial_entry import EntryStatus, EntryType
from igreja_manager.domain.errors import ValidationError, compose_error_message
from igreja_manager.domain.money import quantize_money

TERMINAL_STATUSES = frozenset({EntryStatus.CANCELADO, EntryStatus.ESTORNADO})
CREATABLE_STATUSES = frozenset({EntryStatus.PENDENTE, EntryStatus.CONFIRMADO})

ALLOWED_TRANSITIONS: dict[EntryStatus, frozenset[EntryStatus]] = {
    EntryStatus.PENDENTE: frozenset({EntryStatus.CONFIRMADO, EntryStatus.CANCELADO}),
    EntryStatus.CONFIRMADO: frozenset(
        {EntryStatus.CANCELADO, EntryStatus.ESTORNADO}
    ),
    EntryStatus.CANCELADO: frozenset(),
    EntryStatus.ESTORNADO: frozenset(),
}


def balance_adjustment(entry_type: EntryType, amount: Decimal) -> Decimal:
    """Signed balance delta of a confirmed entry."""
    value = quantize_money(amount)
    return value if entry_type == EntryType.RECEITA else -value


def reversal_adjustment(entry_type: EntryType, amount: Decimal) -> Decimal:
    """Delta that undoes balance_adjustment for the same entry."""
    return -balance_adjustment(entry_type, amount)


def balance_effect(
    *,
    status: EntryStatus,
    entry_type: EntryType,
    amount: Decimal,
    bank_account_id: UUID,
) -> tuple[UUID, Decimal] | None:
    """Return (account, delta) applied by an entry state, or None if unconfirmed."""
    if status != EntryStatus.CONFIRMADO:
        return None
    return bank_account_id, balance_adjustment(entry_type, amount)


def validate_status_transition(current: EntryStatus, target: EntryStatus) -> None:
    """Raise ValidationError when target is not reachable from current."""
    if current == target:
        return
    if target in ALLOWED_TRANSITIONS[current]:
        return
    if current in TERMINAL_STATUSES:
        cause = f"Entry status {current.value} is final."
    else:
        cause = f"Entry cannot move from {current.value} to {target.value}."
    raise ValidationError(
        message=compose_error_message(
            cause=cause,
            action="Create a new entry instead of changing this one.",
        ),
        details={"current_status": current.value, "target_status": target.value},
    )
