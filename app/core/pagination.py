import math
from typing import Generic, List, Optional, Tuple, TypeVar

from pydantic import BaseModel

from app.config import settings

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    data: List[T]
    total: int
    page: int
    per_page: int
    total_pages: int


def clamp_per_page(per_page: Optional[int]) -> int:
    if not per_page or per_page < 1:
        return settings.default_page_size
    return min(per_page, settings.max_page_size)


def page_range(page: int, per_page: int) -> Tuple[int, int]:
    """Inclusive row range for PostgREST .range()"""
    start = (max(page, 1) - 1) * per_page
    return start, start + per_page - 1


def search_filter(columns: List[str], term: str) -> str:
    """PostgREST or_() expression matching ``term`` case-insensitively in any of ``columns``."""
    cleaned = "".join(ch for ch in term if ch not in ",()").strip()
    return ",".join(f"{column}.ilike.%{cleaned}%" for column in columns)


def build_page(items: List[T], total: Optional[int], page: int, per_page: int) -> PaginatedResponse:
    total = total or 0
    return PaginatedResponse(
        data=items,
        total=total,
        page=max(page, 1),
        per_page=per_page,
        total_pages=math.ceil(total / per_page) if per_page else 0,
    )


def sort_params(sort_by: Optional[str], sort_order: Optional[str], allowed: List[str], default: str = "created_at") -> Tuple[str, bool]:
    """Column and descending flag for .order(); unknown columns fall back to ``default``"""
    column = sort_by if sort_by in allowed else default
    return column, sort_order != "asc"
