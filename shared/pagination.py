# shared/pagination.py
from typing import Generic, List, TypeVar

from fastapi import Query
from pydantic import BaseModel

from shared.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    size: int
    pages: int


class PageParams:
    """Zero-based ``page`` / ``size`` query parameters."""

    def __init__(
        self,
        page: int = Query(0, ge=0),
        size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    ):
        self.page = page
        self.size = size
