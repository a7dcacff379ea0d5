from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import date
from decimal import Decimal
from typing import TypeVar
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from igreja_manager.api.app import create_app
from igreja_manager.core.settings import get_settings
from igreja_manager.db.base import Base, import_orm_models
from igreja_manager.db.models.account_plan import AccountPlan, AccountPlanType
from igreja_manager.db.models.bank_account import BankAccount, BankAccountType
from igreja_manager.db.models.church import Church
from igreja_manager.db.models.ebd_class import EbdClass
from igreja_manager.db.models.ebd_lesson import EbdLesson
from igreja_manager.db.models.ebd_term import EbdTerm
from igreja_manager.db.models.member import Member
from igreja_manager.db.session import get_db_session

ModelT = TypeVar("ModelT")
HeaderFactory = Callable[..., dict[str, str]]


@pytest.fixture
def sqlite_session_factory() -> Generator[sessionmaker[Session], None, None]:
    import_orm_models()
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(
        bind=engine,
        class_=Session,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
    try:
        yield factory
    finally:
        Base.metadata.drop_all(engine)


@pytest.fixture
def db_session(
    sqlite_session_factory: sessionmaker[Session],
) -> Generator[Session, None, None]:
    with sqlite_session_factory() as session:
        yield session


@pytest.fixture
def client(
    sqlite_session_factory: sessionmaker[Session],
) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_get_db_session() -> Generator[Session, None, None]:
        with sqlite_session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    with TestClient(app) as test_client:
        yield test_client


def issue_token(
    *,
    church_id: UUID,
    user_id: UUID | None = None,
    role: str = "secretary",
    permissions: tuple[str, ...] = ("ebd:*", "financial:*"),
) -> str:
    settings = get_settings()
    claims = {
        "sub": str(user_id or uuid4()),
        "church_id": str(church_id),
        "role": role,
        "permissions": list(permissions),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


@pytest.fixture
def church_id(db_session: Session) -> UUID:
    church = Church(name="Igreja Central", is_active=True)
    db_session.add(church)
    db_session.commit()
    return church.id


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def auth_headers(church_id: UUID, user_id: UUID) -> HeaderFactory:
    def build(
        *permissions: str, role: str = "secretary", as_user: UUID | None = None
    ) -> dict[str, str]:
        token = issue_token(
            church_id=church_id,
            user_id=as_user or user_id,
            role=role,
            permissions=permissions or ("ebd:*", "financial:*"),
        )
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture
def foreign_auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(church_id=uuid4())}"}


class Seeder:
    """Inserts baseline rows for one church."""

    def __init__(self, session: Session, church_id: UUID) -> None:
        self.session = session
        self.church_id = church_id

    def _save(self, instance: ModelT) -> ModelT:
        self.session.add(instance)
        self.session.commit()
        return instance

    def member(self, full_name: str = "Maria Souza") -> Member:
        return self._save(Member(church_id=self.church_id, full_name=full_name))

    def term(self, *, name: str = "1o Trimestre", is_active: bool = True) -> EbdTerm:
        return self._save(
            EbdTerm(
                church_id=self.church_id,
                name=name,
                start_date=date(2026, 1, 1),
                end_date=date(2026, 3, 31),
                is_active=is_active,
            )
        )

    def ebd_class(
        self,
        term_id: UUID,
        *,
        name: str = "Jovens",
        max_capacity: int | None = None,
    ) -> EbdClass:
        return self._save(
            EbdClass(
                church_id=self.church_id,
                term_id=term_id,
                name=name,
                max_capacity=max_capacity,
                is_active=True,
            )
        )

    def lesson(self, class_id: UUID, lesson_date: date) -> EbdLesson:
        return self._save(
            EbdLesson(
                church_id=self.church_id, class_id=class_id, lesson_date=lesson_date
            )
        )

    def account_plan(
        self,
        *,
        code: str = "1.01",
        plan_type: AccountPlanType = AccountPlanType.RECEITA,
    ) -> AccountPlan:
        return self._save(
            AccountPlan(
                church_id=self.church_id,
                code=code,
                name=f"Plano {code}",
                type=plan_type,
                level=1,
                is_active=True,
            )
        )

    def bank_account(self, *, initial_balance: str = "100.00") -> BankAccount:
        return self._save(
            BankAccount(
                church_id=self.church_id,
                name="Conta Principal",
                type=BankAccountType.CONTA_CORRENTE,
                initial_balance=Decimal(initial_balance),
                current_balance=Decimal(initial_balance),
                is_active=True,
            )
        )


@pytest.fixture
def seed(db_session: Session, church_id: UUID) -> Seeder:
    return Seeder(db_session, church_id)
