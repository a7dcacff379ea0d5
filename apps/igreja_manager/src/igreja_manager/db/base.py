"""SQLAlchemy base metadata and model registration utilities."""

from datetime import UTC, datetime
from importlib import import_module

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


def utc_now() -> datetime:
    """Timestamp factory shared by model defaults."""

    return datetime.now(tz=UTC)


def import_orm_models() -> None:
    """Import ORM models so metadata is fully populated."""

    modules = (
        "igreja_manager.db.models.church",
        "igreja_manager.db.models.member",
        "igreja_manager.db.models.ebd_term",
        "igreja_manager.db.models.ebd_class",
        "igreja_manager.db.models.ebd_enrollment",
        "igreja_manager.db.models.ebd_lesson",
        "igreja_manager.db.models.ebd_attendance",
        "igreja_manager.db.models.ebd_student_note",
        "igreja_manager.db.models.account_plan",
        "igreja_manager.db.models.bank_account",
        "igreja_manager.db.models.financial_entry",
        "igreja_manager.db.models.monthly_closing",
    )
    for module_name in modules:
        import_module(module_name)
