from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.database.session import Database
from bookstore.repositories.book_repository import BookRepository


def get_database(request: Request) -> Database:
    # Set by the application lifespan (see bookstore.main)
    return request.app.state.database


async def get_db_session(database: Database = Depends(get_database)) -> AsyncGenerator[AsyncSession, None]:
    # One session per request; handlers commit after a successful write.
    async with database.session() as session:
        yield session


def get_book_repository(session: AsyncSession = Depends(get_db_session)) -> BookRepository:
    return BookRepository(session)
