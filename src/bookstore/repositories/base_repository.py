"""
Base repository class providing keyed CRUD over one mapped model.

Repositories work on an AsyncSession handed to them by the caller. They flush
but never commit: the request handler owns the transaction and decides when the
work becomes permanent.

Rows are addressed by the model's single primary key column, discovered from the
mapper, so the same code serves natural keys (books.isbn) and surrogate ids.
"""
from bookstore.exceptions.base import (
    RepositoryError,
    NotFoundError,
    DuplicateError,
    InvalidFieldError
)

from bookstore.exceptions.mapper import db_error_handler
from bookstore.validators.model_validators import (
    find_unknown_model_kwargs,
    get_required_columns,
    get_primary_key_column,
)

import time
from typing import TypeVar, Generic, Type, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func
import logging

from bookstore.database.base import Base

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common CRUD operations.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Args:
            model: The SQLAlchemy model class (the class itself, e.g. Book, not Book())
            db: The async database session, usually injected by a FastAPI dependency
        """
        self.model = model
        self.db = db
        self.pk = get_primary_key_column(model)

    @property
    def model_name(self) -> str:
        return self.model.__name__

    # =================================================================================================================
    # Create
    # =================================================================================================================

    async def create(self, **kwargs) -> ModelType:
        """
        Insert one row and return it refreshed from the database.

        Logging:
        - DEBUG: start event with the provided keys (not values).
        - INFO: expected client errors (unknown fields, missing required).
        - INFO: success event with key and duration_ms.

        Raises:
            InvalidFieldError: unknown keyword fields for the model.
            RepositoryError: a NOT NULL column was not provided.
            DuplicateError: the primary key (or another unique column) is taken.
            StorageError: anything unexpected from the driver.
        """
        logger.debug(
            "repo.create.start",
            extra={"model": self.model_name, "operation": "create", "provided_keys": sorted(kwargs)},
        )

        unknown = find_unknown_model_kwargs(self.model, kwargs)
        if unknown:
            logger.info(
                "repo.create.invalid_fields",
                extra={"model": self.model_name, "operation": "create", "invalid_fields": unknown},
            )
            raise InvalidFieldError(f"Unknown field(s) for {self.model_name}: {', '.join(unknown)}", fields=unknown)

        # consider missing if not provided or explicitly None (since NOT NULL)
        missing = [c for c in get_required_columns(self.model) if kwargs.get(c) is None]
        if missing:
            logger.info(
                "repo.create.missing_required",
                extra={"model": self.model_name, "operation": "create", "missing_fields": missing},
            )
            raise RepositoryError(f"Missing required field(s): {', '.join(missing)} for {self.model_name}", fields=missing)

        # Key pre-check gives a clean DuplicateError (and avoids an identity-map conflict
        # when the row is already loaded in this session). A concurrent insert of the same
        # key still reaches the constraint and is mapped by db_error_handler.
        key = kwargs.get(self.pk.key)
        if key is not None and await self.exists(key):
            logger.info(
                "repo.create.duplicate_precheck",
                extra={"model": self.model_name, "operation": "create", "conflict_fields": [self.pk.key]},
            )
            raise DuplicateError(f"{self.model_name} already exists for field(s): {self.pk.key}", fields=[self.pk.key])

        start = time.perf_counter()
        async with db_error_handler(self.db, self.model_name):
            entity = self.model(**kwargs)
            self.db.add(entity)
            await self.db.flush()
            await self.db.refresh(entity)

        logger.info(
            "repo.create.success",
            extra={
                "model": self.model_name,
                "operation": "create",
                "key": getattr(entity, self.pk.key),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity

    # =================================================================================================================
    # Read
    # =================================================================================================================

    async def get(self, key: Any) -> ModelType | None:
        """
        Get an entity by its primary key, or None.

        Raises:
            StorageError: If the query fails.
        """
        async with db_error_handler(self.db, self.model_name):
            result = await self.db.execute(select(self.model).where(self.pk == key))
            # Primary key filter: zero or one row.
            entity = result.scalar_one_or_none()

        logger.debug("repo.get", extra={"model": self.model_name, "key": key, "found": entity is not None})
        return entity

    async def get_or_raise(self, key: Any) -> ModelType:
        """
        Same as get(), but a missing row raises NotFoundError (-> 404).
        """
        entity = await self.get(key)
        if entity is None:
            raise NotFoundError(f"{self.model_name} with {self.pk.key} {key} not found")
        return entity

    async def get_all(self, offset: int = 0, limit: int | None = None) -> list[ModelType]:
        """
        All entities ordered by primary key, so repeated calls list rows in the same order.

        Args:
            offset: Number of entities to skip.
            limit: Maximum number of entities to return (None = no limit).
        """
        query = select(self.model).order_by(self.pk).offset(offset)
        if limit is not None:
            query = query.limit(limit)

        async with db_error_handler(self.db, self.model_name):
            result = await self.db.execute(query)
            entities = list(result.scalars().all())

        logger.debug("repo.get_all", extra={"model": self.model_name, "count": len(entities)})
        return entities

    # =================================================================================================================
    # Update
    # =================================================================================================================

    async def update(self, key: Any, **kwargs) -> ModelType | None:
        """
        Overwrite the given columns of the row identified by `key`.

        The primary key itself is immutable: passing it with a different value
        raises InvalidFieldError, passing the same value is a no-op.

        Returns:
            The updated entity, or None when no row has that key.

        Raises:
            InvalidFieldError: unknown fields, or an attempt to change the key.
            DuplicateError / RepositoryError: constraint violations.
            StorageError: anything unexpected from the driver.
        """
        unknown = find_unknown_model_kwargs(self.model, kwargs)
        if unknown:
            raise InvalidFieldError(f"Unknown field(s) for {self.model_name}: {', '.join(unknown)}", fields=unknown)

        values = dict(kwargs)
        if self.pk.key in values:
            if values.pop(self.pk.key) != key:
                raise InvalidFieldError(f"{self.model_name} {self.pk.key} cannot be changed", fields=[self.pk.key])

        if not values:
            logger.warning("repo.update.no_values", extra={"model": self.model_name, "key": key})
            return await self.get(key)

        stmt = (
            update(self.model)
            .where(self.pk == key)
            .values(**values)
            # Objects already loaded in this session are updated in Python from the
            # simple key predicate; no RETURNING round trip, so rowcount stays reliable.
            .execution_options(synchronize_session="evaluate")
        )

        async with db_error_handler(self.db, self.model_name):
            result = await self.db.execute(stmt)

        if result.rowcount == 0:
            logger.info("repo.update.not_found", extra={"model": self.model_name, "key": key})
            return None

        logger.info(
            "repo.update.success",
            extra={"model": self.model_name, "key": key, "updated_fields": sorted(values)},
        )
        return await self.get(key)

    async def update_or_raise(self, key: Any, **kwargs) -> ModelType:
        entity = await self.update(key, **kwargs)
        if entity is None:
            raise NotFoundError(f"{self.model_name} with {self.pk.key} {key} not found")
        return entity

    # =================================================================================================================
    # Delete
    # =================================================================================================================

    async def delete(self, key: Any) -> bool:
        """
        Physically delete the row identified by `key`.

        Returns:
            True if a row was deleted, False if none had that key.
        """
        async with db_error_handler(self.db, self.model_name):
            result = await self.db.execute(delete(self.model).where(self.pk == key))

        deleted = result.rowcount > 0
        if deleted:
            logger.info("repo.delete.success", extra={"model": self.model_name, "key": key})
        else:
            logger.info("repo.delete.not_found", extra={"model": self.model_name, "key": key})
        return deleted

    async def delete_or_raise(self, key: Any) -> None:
        if not await self.delete(key):
            raise NotFoundError(f"{self.model_name} with {self.pk.key} {key} not found")

    # =================================================================================================================
    # Existence / Count
    # =================================================================================================================

    async def exists(self, key: Any) -> bool:
        # Select only the key column; no need to load the whole row.
        async with db_error_handler(self.db, self.model_name):
            result = await self.db.execute(select(self.pk).where(self.pk == key))
            return result.scalar() is not None

    async def count(self) -> int:
        async with db_error_handler(self.db, self.model_name):
            result = await self.db.execute(select(func.count()).select_from(self.model))
            return result.scalar() or 0
