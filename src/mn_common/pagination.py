"""Page-number pagination shared by the notes and todos list endpoints."""

import math

from pydantic import BaseModel


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))


def page_offset(page: int, limit: int) -> int:
    """Row offset of a 1-based page."""
    return (page - 1) * limit
