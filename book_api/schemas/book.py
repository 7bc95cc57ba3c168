"""Pydantic schemas for book endpoints."""

import uuid
from datetime import datetime

from pydantic import Field

from book_api.schemas.base import CamelModel


class BookCreateRequest(CamelModel):
    """Request body for POST /books."""
    title: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)
    year_published: int
    isbn: str = Field(min_length=1, max_length=32)
    published: bool = False
    rating: float = Field(0, ge=0, le=5)
    content: str = ""


class BookUpdateRequest(CamelModel):
    """Request body for PUT /books/{id}. Omitted fields keep their value."""
    title: str | None = Field(None, min_length=1, max_length=255)
    author: str | None = Field(None, min_length=1, max_length=255)
    year_published: int | None = None
    isbn: str | None = Field(None, min_length=1, max_length=32)
    published: bool | None = None
    rating: float | None = Field(None, ge=0, le=5)
    content: str | None = None


class BookOut(CamelModel):
    id: uuid.UUID
    title: str
    author: str
    published: bool
    rating: float
    year_published: int
    isbn: str
    content: str
    created_at: datetime
    updated_at: datetime


class BookResponse(CamelModel):
    success: bool = True
    message: str | None = None
    data: BookOut


class BookListResponse(CamelModel):
    success: bool = True
    count: int
    data: list[BookOut]
