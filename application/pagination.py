"""Pagination shared by list use cases"""
import math
from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel

from domain.enums import SortOrder

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
DEFAULT_SORT_BY = "createdAt"


class PageRequest(BaseModel):
    """Normalized page, limit and ordering of a list query"""
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort_by: str = DEFAULT_SORT_BY
    sort_order: SortOrder = SortOrder.ASC

    class Config:
        frozen = True

    @classmethod
    def from_query(
        cls,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort_by: Optional[Union[Enum, str]] = None,
        sort_order: Optional[SortOrder] = None,
        default_sort_order: SortOrder = SortOrder.ASC
    ) -> "PageRequest":
        """Clamp raw query values into range instead of rejecting them"""
        return cls(
            page=max(DEFAULT_PAGE, page or DEFAULT_PAGE),
            limit=min(MAX_LIMIT, max(1, limit or DEFAULT_LIMIT)),
            sort_by=getattr(sort_by, "value", sort_by) or DEFAULT_SORT_BY,
            sort_order=sort_order or default_sort_order
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def descending(self) -> bool:
        return self.sort_order == SortOrder.DESC


class PageInfo(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, total: int, request: PageRequest) -> "PageInfo":
        total_pages = math.ceil(total / request.limit)
        return cls(
            page=request.page,
            limit=request.limit,
            total=total,
            total_pages=total_pages,
            has_next=request.page < total_pages,
            has_prev=request.page > 1
        )
