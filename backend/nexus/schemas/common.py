"""
Shared response envelope and base model.
"""
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase in JSON."""

    # Accept both spellings on input
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Pagination(BaseModel):
    """Page metadata returned with list endpoints."""
    page: int = Field(..., description="Current page (1-based)")
    limit: int = Field(..., description="Page size")
    total: int = Field(..., description="Total number of matching records")
    pages: int = Field(..., description="Total number of pages")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=-(-total // limit) if limit else 0)


class ApiResponse(BaseModel, Generic[DataT]):
    """Uniform envelope for every HTTP response."""
    success: bool = Field(True, description="Whether the operation succeeded")
    message: Optional[str] = Field(None, description="Human readable outcome")
    data: Optional[DataT] = Field(None, description="Payload")
    pagination: Optional[Pagination] = Field(None, description="Present on paginated lists")
