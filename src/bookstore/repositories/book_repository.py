from bookstore.models.book import Book
from bookstore.repositories.base_repository import BaseRepository
from sqlalchemy.ext.asyncio import AsyncSession
import logging

logger = logging.getLogger(__name__)


class BookRepository(BaseRepository[Book]):
    """
    Book storage keyed by isbn.

    Values reaching this class are expected to have passed the book validator;
    the table's own constraints (primary key, NOT NULL, isbn length) still back
    every write.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Book, db)

    async def list(self) -> list[Book]:
        """Every stored book, ordered by isbn."""
        return await self.get_all()

    async def get_by_isbn(self, isbn: str) -> Book | None:
        return await self.get(isbn)

    async def get_by_isbn_or_raise(self, isbn: str) -> Book:
        return await self.get_or_raise(isbn)

    async def create(self, **fields) -> Book:
        """
        Store a new book. Raises DuplicateError when the isbn is already present.
        """
        book = await super().create(**fields)
        logger.debug(f"Book created: {book!r}")
        return book

    async def update(self, isbn: str, **fields) -> Book | None:
        """
        Replace title, author, year and publisher of the book with this isbn.

        The isbn never changes; a body isbn equal to the path one is ignored.
        Returns None if the book does not exist.
        """
        return await super().update(isbn, **fields)

    async def update_or_raise(self, isbn: str, **fields) -> Book:
        return await super().update_or_raise(isbn, **fields)

    async def remove(self, isbn: str) -> bool:
        """Delete the book; False if there was nothing to delete."""
        return await self.delete(isbn)

    async def remove_or_raise(self, isbn: str) -> None:
        await self.delete_or_raise(isbn)
