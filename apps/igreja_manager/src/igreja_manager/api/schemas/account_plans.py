"""Schemas for account plan endpoints."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field

from igreja_manager.db.models.account_plan import AccountPlan


class CreateAccountPlanRequest(BaseModel):
    code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=150)
    type: str = Field(min_length=1, max_length=20)
    parent_id: UUID | None = None


class UpdateAccountPlanRequest(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=20)
    name: str | None = Field(default=None, min_length=1, max_length=150)
    is_active: bool | None = None


class AccountPlanResponse(BaseModel):
    id: UUID
    parent_id: UUID | None
    code: str
    name: str
    type: str
    level: int
    is_active: bool

    @classmethod
    def from_model(cls, plan: AccountPlan) -> AccountPlanResponse:
        return cls(
            id=plan.id,
            parent_id=plan.parent_id,
            code=plan.code,
            name=plan.name,
            type=plan.type.value,
            level=plan.level,
            is_active=plan.is_active,
        )
