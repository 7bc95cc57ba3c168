"""
SQLAlchemy ORM models package.

All models are imported here so that Base.metadata knows every table when
create_all() runs at start-up, and so other modules can import from
book_api.models directly.
"""

from book_api.models.user import User, Role  # noqa: F401
from book_api.models.book import Book  # noqa: F401
