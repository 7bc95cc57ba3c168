"""
Books router — catalog endpoints.

Endpoints:
  GET    /books                — List all books, newest first
  GET    /books/search/{query} — Search title, author or ISBN
  GET    /books/{book_id}      — Get one book
  POST   /books                — [Admin] Add a book
  PUT    /books/{book_id}      — [Admin] Update a book
  DELETE /books/{book_id}      — [Admin] Delete a book

Reads are public. Each mutation depends on require_role(Role.ADMIN), which
authenticates the bearer token before checking the role, so the book
service is never reached by an anonymous or non-admin caller.
"""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from book_api.database import get_db
from book_api.dependencies import require_role
from book_api.models.user import Role
from book_api.schemas.book import (
    BookCreateRequest,
    BookListResponse,
    BookOut,
    BookResponse,
    BookUpdateRequest,
)
from book_api.services import book_service

router = APIRouter()


@router.get(
    "",
    response_model=BookListResponse,
    summary="List all books",
)
async def list_books(db: AsyncSession = Depends(get_db)):
    books = await book_service.list_books(db)
    return BookListResponse(
        count=len(books),
        data=[BookOut.model_validate(book) for book in books],
    )


# Declared before /{book_id} so "search" is never parsed as an id
@router.get(
    "/search/{query}",
    response_model=BookListResponse,
    summary="Search books by title, author or ISBN",
)
async def search_books(query: str, db: AsyncSession = Depends(get_db)):
    books = await book_service.search_books(db, query)
    return BookListResponse(
        count=len(books),
        data=[BookOut.model_validate(book) for book in books],
    )


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    response_model_exclude_none=True,
    summary="Get one book",
)
async def get_book(book_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    book = await book_service.get_book(db, book_id)
    return BookResponse(data=BookOut.model_validate(book))


@router.post(
    "",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_role(Role.ADMIN, "Only admins can add books"))],
    summary="[Admin] Add a book",
)
async def create_book(
    request: BookCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    book = await book_service.create_book(db, **request.model_dump())
    return BookResponse(
        message="Book created successfully!",
        data=BookOut.model_validate(book),
    )


@router.put(
    "/{book_id}",
    response_model=BookResponse,
    dependencies=[Depends(require_role(Role.ADMIN, "Only admins can update books"))],
    summary="[Admin] Update a book",
)
async def update_book(
    book_id: uuid.UUID,
    request: BookUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Only the fields present in the body are changed."""
    book = await book_service.update_book(
        db, book_id, **request.model_dump(exclude_unset=True, exclude_none=True)
    )
    return BookResponse(
        message="Book updated successfully!",
        data=BookOut.model_validate(book),
    )


@router.delete(
    "/{book_id}",
    response_model=BookResponse,
    dependencies=[Depends(require_role(Role.ADMIN, "Only admins can delete books"))],
    summary="[Admin] Delete a book",
)
async def delete_book(book_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    book = await book_service.delete_book(db, book_id)
    return BookResponse(
        message="Book deleted successfully!",
        data=BookOut.model_validate(book),
    )
