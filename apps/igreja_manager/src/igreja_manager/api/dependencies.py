"""API dependency providers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from igreja_manager.db.session import get_db_session
from igreja_manager.repositories.account_plan_repository import AccountPlanRepository
from igreja_manager.repositories.attendance_repository import AttendanceRepository
from igreja_manager.repositories.bank_account_repository import BankAccountRepository
from igreja_manager.repositories.class_repository import ClassRepository
from igreja_manager.repositories.ebd_report_repository import EbdReportRepository
from igreja_manager.repositories.financial_entry_repository import (
    FinancialEntryRepository,
)
from igreja_manager.repositories.lesson_repository import LessonRepository
from igreja_manager.repositories.member_repository import MemberRepository
from igreja_manager.repositories.monthly_closing_repository import (
    MonthlyClosingRepository,
)
from igreja_manager.repositories.student_note_repository import (
    StudentNoteRepository,
)
from igreja_manager.repositories.term_repository import TermRepository
from igreja_manager.services.account_plan_service import AccountPlanService
from igreja_manager.services.attendance_service import AttendanceService
from igreja_manager.services.audit_service import AuditTrail, LoggingAuditTrail
from igreja_manager.services.bank_account_service import BankAccountService
from igreja_manager.services.class_service import ClassService
from igreja_manager.services.ebd_report_service import EbdReportService
from igreja_manager.services.financial_entry_service import FinancialEntryService
from igreja_manager.services.lesson_service import LessonService
from igreja_manager.services.monthly_closing_service import MonthlyClosingService
from igreja_manager.services.student_note_service import StudentNoteService
from igreja_manager.services.term_service import TermService

DbSession = Annotated[Session, Depends(get_db_session)]


@dataclass(frozen=True, slots=True)
class PageParams:
    """Validated pagination query parameters."""

    page: int
    per_page: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


def get_page_params(
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PageParams:
    return PageParams(page=page, per_page=per_page)


Page = Annotated[PageParams, Depends(get_page_params)]


def get_audit_trail() -> AuditTrail:
    return LoggingAuditTrail()


def get_term_service(session: DbSession) -> TermService:
    """Build term service with per-request session."""

    return TermService(term_repository=TermRepository(session), session=session)


def get_class_service(session: DbSession) -> ClassService:
    """Build class service with per-request session."""

    return ClassService(
        class_repository=ClassRepository(session),
        term_repository=TermRepository(session),
        member_repository=MemberRepository(session),
        session=session,
    )


def get_lesson_service(session: DbSession) -> LessonService:
    return LessonService(
        lesson_repository=LessonRepository(session),
        class_repository=ClassRepository(session),
        session=session,
    )


def get_attendance_service(session: DbSession) -> AttendanceService:
    return AttendanceService(
        attendance_repository=AttendanceRepository(session),
        lesson_repository=LessonRepository(session),
        class_repository=ClassRepository(session),
        member_repository=MemberRepository(session),
        session=session,
    )


def get_student_note_service(session: DbSession) -> StudentNoteService:
    return StudentNoteService(
        note_repository=StudentNoteRepository(session),
        member_repository=MemberRepository(session),
        term_repository=TermRepository(session),
        session=session,
    )


def get_ebd_report_service(session: DbSession) -> EbdReportService:
    return EbdReportService(
        term_repository=TermRepository(session),
        report_repository=EbdReportRepository(session),
        attendance_repository=AttendanceRepository(session),
    )


def get_bank_account_service(session: DbSession) -> BankAccountService:
    return BankAccountService(
        bank_account_repository=BankAccountRepository(session), session=session
    )


def get_account_plan_service(session: DbSession) -> AccountPlanService:
    return AccountPlanService(
        account_plan_repository=AccountPlanRepository(session), session=session
    )


def get_financial_entry_service(session: DbSession) -> FinancialEntryService:
    """Build ledger service; all repositories share the request session."""

    return FinancialEntryService(
        entry_repository=FinancialEntryRepository(session),
        bank_account_repository=BankAccountRepository(session),
        account_plan_repository=AccountPlanRepository(session),
        closing_repository=MonthlyClosingRepository(session),
        session=session,
    )


def get_monthly_closing_service(session: DbSession) -> MonthlyClosingService:
    return MonthlyClosingService(
        closing_repository=MonthlyClosingRepository(session),
        entry_repository=FinancialEntryRepository(session),
        session=session,
    )
