"""
Custom exceptions for validation and repository operations.

Every app-level error carries its own HTTP mapping (`http_status()`) and a
JSON-safe body (`to_payload()`), so the FastAPI handlers in
`bookstore.api.v1.error_handlers` stay tiny and only add HTTP framing.
"""

from typing import Iterable

# canonical repository-level exception

class RepositoryError(Exception):
    """
    Base exception for repository/service errors.

    - message: human-friendly message (safe to show to clients)
    - fields: optional list of field names related to the error (e.g., ['isbn'])
    - constraint: optional DB constraint name or identifier (for logs only)
    - error_code: canonical short code (e.g., 'duplicate', 'not_found') used by clients
    """

    # Map canonical error_code -> default HTTP status.
    ERROR_CODE_TO_STATUS = {
        "validation": 400,
        "not_found": 404,
        "duplicate": 409,
        "invalid_field": 422,
        "storage_error": 500,
        # fallback: default to 400 for general repository errors
    }

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        base = self.message
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{base} ({'; '.join(parts)})"
        return base

    def to_payload(self) -> dict:
        """
        Return a JSON-serializable dict suitable for HTTP responses.
        Standard shape:
            {
                "detail": "A human-friendly message",
                "code": "duplicate",           # optional canonical code
                "fields": ["isbn"],            # optional list for client usage
            }
        `constraint` is never included: it is a storage detail, kept for logs.
        """
        payload = {"detail": self.message}
        if self.error_code:
            payload["code"] = self.error_code
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload

    def http_status(self) -> int:
        """
        HTTP status for this error: looked up from error_code, 400 when there is none.
        """
        if self.error_code:
            return self.ERROR_CODE_TO_STATUS.get(self.error_code, 400)
        return 400


class NotFoundError(RepositoryError):
    def __init__(self, message: str = "Not found", *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="not_found")


class DuplicateError(RepositoryError):
    """Unique key already taken (e.g. creating a book whose isbn exists). Maps to 409 Conflict."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None, constraint: str | None = None):
        super().__init__(message, fields=fields, constraint=constraint, error_code="duplicate")


class InvalidFieldError(RepositoryError):
    """Raised when the caller passes unexpected/unknown fields to repository methods."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="invalid_field")


class StorageError(RepositoryError):
    """
    Unexpected storage failure (connectivity, driver errors, unclassified constraint
    violations). Not recovered locally; surfaces as 500 with a generic message.
    """

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message, error_code="storage_error")

    def to_payload(self) -> dict:
        # Never echo internals to the client; the full cause is logged where it was raised.
        return {"detail": "Internal server error", "code": self.error_code}


class BookValidationError(RepositoryError):
    """
    A book payload violated one or more field constraints.

    Carries the full ordered list of messages produced by the validator; the
    response body is `{"errors": [...]}` with status 400.
    """

    def __init__(self, errors: Iterable[str]):
        self.errors = list(errors)
        super().__init__("Invalid book payload", error_code="validation")

    def to_payload(self) -> dict:
        return {"errors": list(self.errors)}


__all__ = [
    "RepositoryError",
    "NotFoundError",
    "DuplicateError",
    "InvalidFieldError",
    "StorageError",
    "BookValidationError",
]
