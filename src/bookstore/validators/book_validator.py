"""
Book payload validation.

The accepted shape is declared once, as an ordered table of field rules
(field name, predicate, message). `validate()` walks the table in that order
and collects one message per failing field, so the same payload always yields
the same error list:

    isbn, title, author, year, publisher, then unknown keys (if any)

A rule may carry refinements: further (predicate, message) checks that only run
once the base predicate holds. The first failing check names the problem.

No value is coerced: "2024" is not a year and 9780000000000 is not an isbn.

Usage:
    result = validate(payload, ValidationMode.CREATE)
    if not result.valid:
        raise BookValidationError(result.errors)
"""

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Callable, Mapping

from bookstore.models.book import TEXT_MAX_LENGTH

ISBN_PATTERN = re.compile(r"^[0-9]{13}$")
MIN_YEAR = 0


class ValidationMode(str, Enum):
    # All five fields required.
    CREATE = "create"
    # Full replacement of an existing row: isbn may be omitted (the path carries it).
    UPDATE = "update"


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


Check = tuple[Callable[[Any], bool], str]


@dataclass(frozen=True)
class FieldRule:
    name: str
    predicate: Callable[[Any], bool]
    message: str
    # False only for isbn: on update the path identifies the row.
    required_on_update: bool = True
    refinements: tuple[Check, ...] = ()

    def failure(self, value: Any) -> str | None:
        """Message template of the first failing check, or None."""
        if not self.predicate(value):
            return self.message
        for predicate, message in self.refinements:
            if not predicate(value):
                return message
        return None


def max_year() -> int:
    """Latest accepted publication year (announced titles may carry next year's date)."""
    return date.today().year + 1


def _is_isbn(value: Any) -> bool:
    return isinstance(value, str) and ISBN_PATTERN.fullmatch(value) is not None


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _has_no_nul(value: str) -> bool:
    # Postgres text types cannot store NUL.
    return "\x00" not in value


def _fits_column(value: str) -> bool:
    return len(value) <= TEXT_MAX_LENGTH


def _is_year(value: Any) -> bool:
    # bool is a subclass of int; `true` is not a year.
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return MIN_YEAR <= value <= max_year()


def _text_rule(name: str) -> FieldRule:
    return FieldRule(
        name,
        _is_non_empty_string,
        f"{name} must be a non-empty string",
        refinements=(
            (_has_no_nul, f"{name} must not contain NUL characters"),
            (_fits_column, f"{name} must be at most {{max_length}} characters"),
        ),
    )


BOOK_SCHEMA: tuple[FieldRule, ...] = (
    FieldRule("isbn", _is_isbn, "isbn must be a string of exactly 13 digits", required_on_update=False),
    _text_rule("title"),
    _text_rule("author"),
    FieldRule("year", _is_year, "year must be an integer between {min_year} and {max_year}"),
    _text_rule("publisher"),
)

BOOK_FIELDS: tuple[str, ...] = tuple(rule.name for rule in BOOK_SCHEMA)

ISBN_MISMATCH_MESSAGE = "isbn in body does not match isbn in path"
NOT_AN_OBJECT_MESSAGE = "payload must be a JSON object"


def validate(
    payload: Any,
    mode: ValidationMode | str = ValidationMode.CREATE,
    *,
    path_isbn: str | None = None,
) -> ValidationResult:
    """
    Validate a candidate book payload.

    Args:
        payload: decoded request body; any shape is accepted and checked.
        mode: CREATE requires every field; UPDATE makes the body isbn optional.
            The plain values "create" / "update" are accepted too.
        path_isbn: isbn from the URL on update; a body isbn must equal it.

    Returns:
        ValidationResult with every violation, in schema order.

    Raises:
        ValueError: `mode` is not a ValidationMode value.
    """
    mode = ValidationMode(mode)

    if not isinstance(payload, Mapping):
        return ValidationResult(valid=False, errors=[NOT_AN_OBJECT_MESSAGE])

    errors: list[str] = []
    limits = {"min_year": MIN_YEAR, "max_year": max_year(), "max_length": TEXT_MAX_LENGTH}

    for rule in BOOK_SCHEMA:
        if rule.name not in payload:
            if mode is ValidationMode.CREATE or rule.required_on_update:
                errors.append(f"{rule.name} is required")
            continue

        value = payload[rule.name]
        message = rule.failure(value)
        if message is not None:
            errors.append(message.format(**limits))
            continue

        if rule.name == "isbn" and mode is ValidationMode.UPDATE and path_isbn is not None and value != path_isbn:
            errors.append(ISBN_MISMATCH_MESSAGE)

    unknown = sorted(str(key) for key in payload if key not in BOOK_FIELDS)
    if unknown:
        errors.append(f"unknown field(s): {', '.join(unknown)}")

    return ValidationResult(valid=not errors, errors=errors)


def clean(payload: Mapping[str, Any], *, exclude: tuple[str, ...] = ()) -> dict[str, Any]:
    """Keep only the schema fields (minus `exclude`), in schema order. Call after validate()."""
    return {name: payload[name] for name in BOOK_FIELDS if name in payload and name not in exclude}
