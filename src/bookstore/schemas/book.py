from pydantic import BaseModel, ConfigDict


class BookRead(BaseModel):
    """Outgoing representation of a stored book."""

    model_config = ConfigDict(from_attributes=True)

    isbn: str
    title: str
    author: str
    year: int
    publisher: str


def serialize_book(book) -> dict:
    """ORM row -> JSON-ready dict."""
    return BookRead.model_validate(book).model_dump()
