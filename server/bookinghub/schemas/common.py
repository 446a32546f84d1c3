"""Common Pydantic schemas."""

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    """Page-number pagination block."""

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    pages: int = Field(..., ge=0)
