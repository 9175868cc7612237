import logging
from enum import Enum
from typing import Type
from sqlalchemy.exc import IntegrityError
from .base import RepositoryError

logger = logging.getLogger(__name__)

# =================================================================================================================
# Constraint-specific exceptions
#
# Internal labels only: classify_integrity_error() returns one of these classes and
# mapper.py turns it into an app-level error (DuplicateError, RepositoryError, ...).
# They are never raised to callers.
# =================================================================================================================


class ConstraintViolationError(RepositoryError):
    """Base for integrity/constraint violations (subclass of RepositoryError)."""
    pass


class UniqueConstraintError(ConstraintViolationError):
    """Unique / primary key violation (duplicate isbn)."""
    pass


class NotNullConstraintError(ConstraintViolationError):
    """NOT NULL violation (missing required field)."""
    pass


class CheckConstraintError(ConstraintViolationError):
    """CHECK constraint violated (e.g. isbn length)."""
    pass


class UnknownIntegrityError(ConstraintViolationError):
    """Unrecognized integrity error."""
    pass


# =================================================================================================================
# Postgres error code mapping
# =================================================================================================================

# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    CHECK_VIOLATION = "23514"


PGCODE_EXCEPTION_MAP = {
    PostgresErrorCodes.UNIQUE_VIOLATION.value: UniqueConstraintError,
    PostgresErrorCodes.NOT_NULL_VIOLATION.value: NotNullConstraintError,
    PostgresErrorCodes.CHECK_VIOLATION.value: CheckConstraintError,
}


# =================================================================================================================
# Integrity Error Classifiers
# =================================================================================================================

def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def _get_sqlstate(orig) -> str | None:
    # psycopg 3 exposes `sqlstate`, psycopg2 exposes `pgcode`.
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def _classify_from_postgres_diag(orig) -> tuple[Type[ConstraintViolationError] | None, str | None]:
    """
    Classify a Postgres integrity error from its SQLSTATE and diagnostics.
    Returns (None, None) when the driver error carries no SQLSTATE.
    """
    sqlstate = _get_sqlstate(orig)
    if not sqlstate:
        return None, None

    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None) if diag else None

    exception_class = PGCODE_EXCEPTION_MAP.get(sqlstate)
    if exception_class:
        logger.debug("Postgres integrity diagnostic",
                     extra={"sqlstate": sqlstate, "constraint_name": constraint_name})
        return exception_class, constraint_name

    logger.warning(
        "Unknown Postgres integrity error code encountered",
        extra={"sqlstate": sqlstate, "constraint_name": constraint_name}
    )
    return UnknownIntegrityError, constraint_name


def _classify_from_generic_message(msg: str) -> tuple[Type[ConstraintViolationError], None]:
    """
    Classify integrity error based on message content (fallback for SQLite, MySQL, etc).
    """
    normalized = msg.lower()

    if _match_any(normalized, ["unique constraint", "unique failed", "unique violation", "duplicate"]):
        return UniqueConstraintError, None

    if _match_any(normalized, ["not null constraint", "not null", "null value in column"]):
        return NotNullConstraintError, None

    if _match_any(normalized, ["check constraint", "check failed"]):
        return CheckConstraintError, None

    logger.warning("Unknown integrity error message encountered", extra={"message_snippet": (msg or "")[:200]})
    return UnknownIntegrityError, None


def classify_integrity_error(exc: IntegrityError) -> tuple[Type[ConstraintViolationError], str | None]:
    """
    Heuristically classify a SQLAlchemy IntegrityError into a specific ConstraintViolationError subclass.

    Returns:
        A tuple of (ExceptionClass, constraint_name if available)
    """
    orig = exc.orig

    exception_class, constraint_name = _classify_from_postgres_diag(orig)
    if exception_class is not None:
        return exception_class, constraint_name

    return _classify_from_generic_message(str(orig) if orig is not None else str(exc))
