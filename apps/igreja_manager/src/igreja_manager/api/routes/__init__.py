"""API v1 router registration."""

from fastapi import APIRouter

from igreja_manager.api.routes import (
    account_plans,
    bank_accounts,
    classes,
    ebd_reports,
    financial_entries,
    lessons,
    monthly_closings,
    student_notes,
    terms,
)

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(terms.router)
v1_router.include_router(classes.router)
v1_router.include_router(ebd_reports.router)
v1_router.include_router(lessons.router)
v1_router.include_router(student_notes.router)
v1_router.include_router(bank_accounts.router)
v1_router.include_router(account_plans.router)
v1_router.include_router(financial_entries.router)
v1_router.include_router(financial_entries.balance_router)
v1_router.include_router(monthly_closings.router)
