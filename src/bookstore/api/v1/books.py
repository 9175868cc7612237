"""
Book resource handlers, mounted at /books.

Each handler is a short sequence: decode the body, validate it (writes only),
call the repository, commit, frame the result. Errors are raised as app-level
exceptions and turned into responses by `error_handlers`; nothing here builds
an error response by hand.

Request bodies are read as raw JSON rather than through a pydantic model so the
book validator alone decides which messages a client sees.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.api.deps import get_book_repository, get_db_session
from bookstore.exceptions.base import BookValidationError
from bookstore.exceptions.mapper import db_error_handler
from bookstore.repositories.book_repository import BookRepository
from bookstore.schemas.book import serialize_book
from bookstore.validators.book_validator import ValidationMode, clean, validate

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_JSON_MESSAGE = "request body must be valid JSON"
BOOK_DELETED_MESSAGE = "Book deleted"


async def read_json_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as exc:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
        logger.info("books.body.invalid_json", extra={"path": request.url.path})
        raise BookValidationError([INVALID_JSON_MESSAGE]) from exc


def ensure_valid(payload: Any, mode: ValidationMode, *, path_isbn: str | None = None) -> None:
    result = validate(payload, mode, path_isbn=path_isbn)
    if not result.valid:
        logger.info(
            f"books.{mode.value}.invalid",
            extra={"validation_errors": result.errors, "isbn": path_isbn},
        )
        raise BookValidationError(result.errors)


async def commit(session: AsyncSession) -> None:
    async with db_error_handler(session, "Book"):
        await session.commit()


@router.get("")
async def list_books(repo: BookRepository = Depends(get_book_repository)) -> dict:
    books = await repo.list()
    return {"books": [serialize_book(book) for book in books]}


@router.get("/{isbn}")
async def get_book(isbn: str, repo: BookRepository = Depends(get_book_repository)) -> dict:
    book = await repo.get_by_isbn_or_raise(isbn)
    return {"book": serialize_book(book)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_book(
    request: Request,
    repo: BookRepository = Depends(get_book_repository),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    payload = await read_json_body(request)
    ensure_valid(payload, ValidationMode.CREATE)

    book = await repo.create(**clean(payload))
    await commit(session)

    logger.info("books.create.success", extra={"isbn": book.isbn})
    return {"book": serialize_book(book)}


@router.put("/{isbn}")
async def update_book(
    isbn: str,
    request: Request,
    repo: BookRepository = Depends(get_book_repository),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    """Full replacement of title, author, year and publisher."""
    payload = await read_json_body(request)
    ensure_valid(payload, ValidationMode.UPDATE, path_isbn=isbn)

    book = await repo.update_or_raise(isbn, **clean(payload, exclude=("isbn",)))
    await commit(session)

    logger.info("books.update.success", extra={"isbn": isbn})
    return {"book": serialize_book(book)}


@router.delete("/{isbn}")
async def delete_book(
    isbn: str,
    repo: BookRepository = Depends(get_book_repository),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    await repo.remove_or_raise(isbn)
    await commit(session)

    logger.info("books.delete.success", extra={"isbn": isbn})
    return {"message": BOOK_DELETED_MESSAGE}
