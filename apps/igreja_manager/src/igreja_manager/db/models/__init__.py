"""ORM models for the igreja_manager domain."""

from igreja_manager.db.models.account_plan import AccountPlan, AccountPlanType
from igreja_manager.db.models.bank_account import BankAccount, BankAccountType
from igreja_manager.db.models.church import Church
from igreja_manager.db.models.ebd_attendance import AttendanceStatus, EbdAttendance
from igreja_manager.db.models.ebd_class import EbdClass
from igreja_manager.db.models.ebd_enrollment import EbdEnrollment
from igreja_manager.db.models.ebd_lesson import EbdLesson
from igreja_manager.db.models.ebd_student_note import EbdStudentNote, NoteType
from igreja_manager.db.models.ebd_term import EbdTerm
from igreja_manager.db.models.financial_entry import (
    EntryStatus,
    EntryType,
    FinancialEntry,
)
from igreja_manager.db.models.member import Member
from igreja_manager.db.models.monthly_closing import MonthlyClosing

__all__ = [
    "AccountPlan",
    "AccountPlanType",
    "AttendanceStatus",
    "BankAccount",
    "BankAccountType",
    "Church",
    "EbdAttendance",
    "EbdClass",
    "EbdEnrollment",
    "EbdLesson",
    "EbdStudentNote",
    "EbdTerm",
    "EntryStatus",
    "EntryType",
    "FinancialEntry",
    "Member",
    "MonthlyClosing",
    "NoteType",
]
