"""Schemas shared across the onboarding API."""

import math
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a listing plus the totals needed to page through it."""
    items: List[T]
    total: int
    page: int
    per_page: int
    pages: int

    @classmethod
    def create(cls, items: List[T], total: int, page: int, per_page: int):
        return cls(items=items, total=total, page=page, per_page=per_page, pages=math.ceil(total / per_page))


class ErrorResponse(BaseModel):
    """Body of every workflow error response."""
    error: str
    detail: str
    action: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
