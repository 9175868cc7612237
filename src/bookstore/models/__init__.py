"""
Centralized access to the database models.

Importing this package registers every model with Base.metadata, which is what
`Database.create_all()` and the test fixtures rely on.
"""

from .book import Book

__all__ = [
    "Book",
]
