"""API request and response schemas."""

from igreja_manager.api.schemas.common import ApiResponse, PaginationMeta

__all__ = [
    "ApiResponse",
    "PaginationMeta",
]
