"""Response envelope shared by every endpoint."""

from __future__ import annotations

from math import ceil
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")

MONEY_PATTERN = r"^[0-9]+\.[0-9]{2}$"
SIGNED_MONEY_PATTERN = r"^-?[0-9]+\.[0-9]{2}$"


class PaginationMeta(BaseModel):
    page: int = Field(ge=1)
    per_page: int = Field(ge=1)
    total: int = Field(ge=0)
    total_pages: int = Field(ge=0)

    @classmethod
    def build(cls, *, page: int, per_page: int, total: int) -> PaginationMeta:
        return cls(
            page=page,
            per_page=per_page,
            total=total,
            total_pages=ceil(total / per_page) if total else 0,
        )


class ApiResponse(BaseModel, Generic[DataT]):
    """Success envelope: {success, data, message?, meta?}."""

    success: bool = True
    data: DataT
    message: str | None = None
    meta: PaginationMeta | None = None


def ok(data: DataT, *, message: str | None = None) -> ApiResponse[DataT]:
    return ApiResponse[DataT](data=data, message=message)


def paginated(
    data: DataT, *, page: int, per_page: int, total: int
) -> ApiResponse[DataT]:
    return ApiResponse[DataT](
        data=data,
        meta=PaginationMeta.build(page=page, per_page=per_page, total=total),
    )
