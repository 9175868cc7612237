import re
import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .integrity_classifier import (
    classify_integrity_error,
    UniqueConstraintError,
    NotNullConstraintError,
    CheckConstraintError,
)
from .base import DuplicateError, RepositoryError, StorageError

logger = logging.getLogger(__name__)

# -----------------------
# Column extraction helpers
# -----------------------

def _extract_columns_postgres(msg: str) -> list[str] | None:
    """
    Extract involved column names from common Postgres messages:
      - 'null value in column "title" violates not-null constraint'
      - 'DETAIL:  Key (isbn)=(9780000000000) already exists.'
    """
    m = re.search(r'null value in column "(?P<col>[^"]+)"', msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]

    m = re.search(r'key \((?P<cols>[^)]+)\)=', msg, flags=re.IGNORECASE)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]

    return None


def _extract_columns_sqlite(msg: str) -> list[str] | None:
    # SQLite: 'UNIQUE constraint failed: books.isbn' / 'NOT NULL constraint failed: books.title'
    m = re.search(r'(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>.+)$', msg, flags=re.IGNORECASE)
    if m:
        return [c.split('.')[-1].strip() for c in re.split(r',\s*', m.group("cols"))]
    return None


def extract_columns_from_integrity(exc: IntegrityError) -> list[str] | None:
    """
    Best-effort extraction of column names from the DB message (Postgres, SQLite).
    """
    orig = exc.orig
    msg = str(orig) if orig is not None else str(exc)
    if not msg:
        return None

    return _extract_columns_postgres(msg) or _extract_columns_sqlite(msg)


# -----------------------
# Mapper
# -----------------------

def raise_mapped_integrity_error(exc: IntegrityError, model_name: str | None = None) -> None:
    """
    Map a SQLAlchemy IntegrityError to an app-level exception and raise it.

    | classified as            | raised                         | HTTP |
    | ------------------------ | ------------------------------ | ---- |
    | `UniqueConstraintError`  | `DuplicateError`               | 409  |
    | `NotNullConstraintError` | `RepositoryError("Missing..")` | 400  |
    | `CheckConstraintError`   | `RepositoryError("..rule..")`  | 400  |
    | anything else            | `StorageError`                 | 500  |
    """
    exc_cls, constraint_name = classify_integrity_error(exc)
    columns = extract_columns_from_integrity(exc)

    model_part = model_name or "Record"

    if exc_cls is UniqueConstraintError:
        # Duplicates are an expected client-level scenario -> INFO, no stack trace.
        logger.info(
            "mapper.duplicate_detected",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            raise DuplicateError(f"{model_part} already exists for field(s): {', '.join(columns)}",
                                 fields=columns, constraint=constraint_name) from exc
        raise DuplicateError(f"{model_part} already exists", constraint=constraint_name) from exc

    if exc_cls is NotNullConstraintError:
        logger.info(
            "mapper.not_null_violation",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            raise RepositoryError(f"Missing required field(s): {', '.join(columns)} for {model_part}",
                                  fields=columns, constraint=constraint_name) from exc
        raise RepositoryError(f"Missing required field for {model_part}", constraint=constraint_name) from exc

    if exc_cls is CheckConstraintError:
        # Raw DB text stays at DEBUG only.
        logger.debug(
            "mapper.check_constraint_failure",
            extra={"model": model_part, "raw": str(exc.orig), "constraint": constraint_name},
        )
        raise RepositoryError(
            f"{model_part} business rule violated (check constraint).", constraint=constraint_name
        ) from exc

    logger.warning(
        "mapper.unknown_integrity_error",
        extra={"model": model_part, "constraint": constraint_name},
    )
    raise StorageError(f"{model_part} database integrity error.") from exc


# -----------------------
# Async context manager to DRY error handling in repositories
# -----------------------
@asynccontextmanager
async def db_error_handler(db: AsyncSession, model_name: str | None = None):
    """
    Usage:
        async with db_error_handler(self.db, self.model.__name__):
            ... DB ops that may raise IntegrityError ...

    Rolls the session back on any failure. IntegrityErrors are mapped through
    raise_mapped_integrity_error(); app-level RepositoryErrors pass through
    unchanged; everything else becomes a StorageError.
    """
    try:
        yield
    except IntegrityError as exc:
        await _safe_rollback(db, model_name)
        raise_mapped_integrity_error(exc, model_name)
    except RepositoryError:
        await _safe_rollback(db, model_name)
        raise
    except Exception as exc:
        await _safe_rollback(db, model_name)
        logger.exception("Unexpected DB error for %s", model_name, extra={"model": model_name})
        raise StorageError(f"Failed to operate on {model_name or 'database'}") from exc


async def _safe_rollback(db: AsyncSession, model_name: str | None) -> None:
    try:
        await db.rollback()
    except Exception:
        # The original error is what the caller needs; a failed rollback is only logged.
        logger.exception("Failed to rollback session", extra={"model": model_name})
