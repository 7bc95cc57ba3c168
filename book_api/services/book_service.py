"""
Book service — catalog persistence operations.

Reads are public; the routes that call the mutating functions are guarded
by require_role(Role.ADMIN) before they get here.
"""

import uuid

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from book_api.exceptions import DuplicateError, NotFoundError
from book_api.models.book import Book

DUPLICATE_ISBN_MESSAGE = "A book with this ISBN already exists"


async def _flush(db: AsyncSession) -> None:
    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        raise DuplicateError(DUPLICATE_ISBN_MESSAGE) from exc


async def list_books(db: AsyncSession) -> list[Book]:
    """All books, newest first."""
    result = await db.execute(select(Book).order_by(Book.created_at.desc()))
    return list(result.scalars().all())


async def get_book(db: AsyncSession, book_id: uuid.UUID) -> Book:
    """
    Raises:
        NotFoundError: If the book doesn't exist.
    """
    result = await db.execute(select(Book).where(Book.id == book_id))
    book = result.scalar_one_or_none()
    if book is None:
        raise NotFoundError("Book not found")
    return book


async def create_book(db: AsyncSession, **fields) -> Book:
    """
    Raises:
        DuplicateError: If the ISBN is already in the catalog.
    """
    book = Book(**fields)
    db.add(book)
    await _flush(db)
    return book


async def update_book(db: AsyncSession, book_id: uuid.UUID, **fields) -> Book:
    """Apply a partial update; only the given fields change."""
    book = await get_book(db, book_id)
    for field, value in fields.items():
        setattr(book, field, value)
    await _flush(db)
    return book


async def delete_book(db: AsyncSession, book_id: uuid.UUID) -> Book:
    book = await get_book(db, book_id)
    await db.delete(book)
    await db.flush()
    return book


async def search_books(db: AsyncSession, query: str) -> list[Book]:
    """
    Case-insensitive substring match on title, author or ISBN.

    ``%`` and ``_`` in the query match themselves, not LIKE wildcards.
    """
    result = await db.execute(
        select(Book)
        .where(
            or_(
                Book.title.icontains(query, autoescape=True),
                Book.author.icontains(query, autoescape=True),
                Book.isbn.icontains(query, autoescape=True),
            )
        )
        .order_by(Book.created_at.desc())
    )
    return list(result.scalars().all())
