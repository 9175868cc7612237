from sqlalchemy import String, Integer, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from bookstore.database.base import Base

ISBN_LENGTH = 13
# Width of the title, author and publisher columns (characters).
TEXT_MAX_LENGTH = 255


class Book(Base):
    """
    SQLAlchemy model for Book.

    The only entity of the service. `isbn` is the natural primary key and never
    changes once the row exists; the other four columns are replaced wholesale
    on update.
    """
    __tablename__ = "books"
    __table_args__ = (
        # Storage-level guard on the key shape; the validator enforces digits-only.
        CheckConstraint(f"length(isbn) = {ISBN_LENGTH}", name="isbn_length"),
    )

    isbn: Mapped[str] = mapped_column(
        String(ISBN_LENGTH),
        primary_key=True
    )

    title: Mapped[str] = mapped_column(
        String(TEXT_MAX_LENGTH),
        nullable=False
    )

    author: Mapped[str] = mapped_column(
        String(TEXT_MAX_LENGTH),
        nullable=False
    )

    year: Mapped[int] = mapped_column(
        Integer,
        nullable=False
    )

    publisher: Mapped[str] = mapped_column(
        String(TEXT_MAX_LENGTH),
        nullable=False
    )

    def __repr__(self) -> str:
        # Helpful for debugging/logging
        return f"<Book(isbn={self.isbn!r}, title={self.title!r})>"
