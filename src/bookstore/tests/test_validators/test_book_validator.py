import pytest
from datetime import date

from bookstore.validators.book_validator import (
    BOOK_FIELDS,
    ISBN_MISMATCH_MESSAGE,
    NOT_AN_OBJECT_MESSAGE,
    ValidationMode,
    clean,
    max_year,
    validate,
)
from bookstore.models.book import TEXT_MAX_LENGTH


@pytest.fixture
def valid_payload() -> dict:
    return {
        "isbn": "9876543210123",
        "title": "New Book",
        "author": "John Smith",
        "year": 2024,
        "publisher": "New Publisher",
    }


class TestValidateCreate:

    def test_valid_payload(self, valid_payload):
        result = validate(valid_payload, ValidationMode.CREATE)

        assert result.valid is True
        assert result.errors == []

    def test_default_mode_is_create(self, valid_payload):
        del valid_payload["isbn"]

        assert validate(valid_payload).errors == ["isbn is required"]

    @pytest.mark.parametrize("field", BOOK_FIELDS)
    def test_missing_field_is_reported_by_name(self, valid_payload, field):
        """
        Behavior:
            - Drop one required field at a time.

        Importance:
            - Every error must be attributable to its field, so a client can
              point the user at the right input.
        """
        del valid_payload[field]

        result = validate(valid_payload, ValidationMode.CREATE)

        assert result.valid is False
        assert result.errors == [f"{field} is required"]

    @pytest.mark.parametrize(
        "isbn",
        ["invalid-isbn", "9780000000001\n", "123456789012", "12345678901234", "978000000000X", " 9780000000001", "", 9780000000001, None],
    )
    def test_bad_isbn_fails_regardless_of_other_fields(self, valid_payload, isbn):
        valid_payload["isbn"] = isbn

        result = validate(valid_payload, ValidationMode.CREATE)

        assert result.valid is False
        assert result.errors == ["isbn must be a string of exactly 13 digits"]

    @pytest.mark.parametrize("field", ["title", "author", "publisher"])
    @pytest.mark.parametrize("value", ["", "   ", "\t\n", 42, None, ["x"]])
    def test_text_fields_must_be_non_empty_strings(self, valid_payload, field, value):
        valid_payload[field] = value

        result = validate(valid_payload)

        assert result.errors == [f"{field} must be a non-empty string"]

    @pytest.mark.parametrize("year", ["2024", 2024.0, True, False, None, -1])
    def test_year_must_be_plain_integer_in_range(self, valid_payload, year):
        valid_payload["year"] = year

        result = validate(valid_payload)

        assert result.valid is False
        assert len(result.errors) == 1
        assert result.errors[0].startswith("year must be an integer between 0 and ")

    def test_year_bounds_are_inclusive(self, valid_payload):
        valid_payload["year"] = 0
        assert validate(valid_payload).valid is True

        valid_payload["year"] = date.today().year + 1
        assert validate(valid_payload).valid is True

        valid_payload["year"] = date.today().year + 2
        assert validate(valid_payload).errors == [f"year must be an integer between 0 and {max_year()}"]

    def test_errors_accumulate_in_field_order(self):
        """
        Behavior:
            - Every field is wrong, plus two unknown keys.

        Importance:
            - Validation never stops at the first failure and the order is
              fixed (isbn, title, author, year, publisher, unknown), so output
              is reproducible.
        """
        payload = {
            "zeta": 1,
            "publisher": "",
            "year": "1999",
            "author": None,
            "title": " ",
            "isbn": "abc",
            "alpha": 2,
        }

        result = validate(payload)

        assert result.errors == [
            "isbn must be a string of exactly 13 digits",
            "title must be a non-empty string",
            "author must be a non-empty string",
            f"year must be an integer between 0 and {max_year()}",
            "publisher must be a non-empty string",
            "unknown field(s): alpha, zeta",
        ]

    def test_invalid_create_reports_every_problem(self):
        # bad isbn and no publisher
        payload = {"isbn": "invalid-isbn", "title": "Invalid Book", "author": "John Smith", "year": 2024}

        result = validate(payload)

        assert result.valid is False
        assert result.errors == [
            "isbn must be a string of exactly 13 digits",
            "publisher is required",
        ]

    @pytest.mark.parametrize("field", ["title", "author", "publisher"])
    def test_text_fields_fit_their_column(self, valid_payload, field):
        """
        Behavior:
            - A value exactly as wide as the column passes; one character more fails.

        Importance:
            - Oversized text is a client error (400), never a storage failure
              from the database rejecting the row.
        """
        valid_payload[field] = "x" * TEXT_MAX_LENGTH
        assert validate(valid_payload).valid is True

        valid_payload[field] = "x" * (TEXT_MAX_LENGTH + 1)
        assert validate(valid_payload).errors == [f"{field} must be at most 255 characters"]

    @pytest.mark.parametrize("field", ["title", "author", "publisher"])
    def test_text_fields_reject_nul(self, valid_payload, field):
        valid_payload[field] = "a\x00b"

        result = validate(valid_payload)

        assert result.valid is False
        assert result.errors == [f"{field} must not contain NUL characters"]

    def test_one_message_per_text_field(self, valid_payload):
        # NUL and oversize together: only the first check is reported
        valid_payload["title"] = "\x00" * (TEXT_MAX_LENGTH + 1)

        assert validate(valid_payload).errors == ["title must not contain NUL characters"]

    def test_unknown_field_rejected(self, valid_payload):
        valid_payload["price"] = 10

        result = validate(valid_payload)

        assert result.valid is False
        assert result.errors == ["unknown field(s): price"]

    @pytest.mark.parametrize("payload", [[], ["isbn"], "book", 7, None])
    def test_non_mapping_payload(self, payload):
        result = validate(payload)

        assert result.valid is False
        assert result.errors == [NOT_AN_OBJECT_MESSAGE]

    def test_validate_does_not_mutate_input(self, valid_payload):
        snapshot = dict(valid_payload)
        validate(valid_payload)
        assert valid_payload == snapshot

    def test_same_input_same_output(self):
        payload = {"isbn": "x", "year": "y"}
        assert validate(payload) == validate(payload)


class TestValidationModeValues:

    def test_plain_create_string_requires_isbn(self, valid_payload):
        del valid_payload["isbn"]

        assert validate(valid_payload, "create").errors == ["isbn is required"]

    def test_plain_update_string_makes_isbn_optional(self, valid_payload):
        del valid_payload["isbn"]

        assert validate(valid_payload, "update", path_isbn="9876543210123").valid is True

    def test_unknown_mode_rejected(self, valid_payload):
        with pytest.raises(ValueError):
            validate(valid_payload, "patch")


class TestValidateUpdate:

    def test_isbn_optional_on_update(self, valid_payload):
        del valid_payload["isbn"]

        result = validate(valid_payload, ValidationMode.UPDATE, path_isbn="9876543210123")

        assert result.valid is True

    def test_matching_body_isbn_accepted(self, valid_payload):
        result = validate(valid_payload, ValidationMode.UPDATE, path_isbn=valid_payload["isbn"])

        assert result.valid is True

    def test_mismatched_body_isbn_rejected(self, valid_payload):
        result = validate(valid_payload, ValidationMode.UPDATE, path_isbn="1234567890123")

        assert result.valid is False
        assert result.errors == [ISBN_MISMATCH_MESSAGE]

    def test_malformed_body_isbn_reports_format_not_mismatch(self, valid_payload):
        valid_payload["isbn"] = "123"

        result = validate(valid_payload, ValidationMode.UPDATE, path_isbn="1234567890123")

        assert result.errors == ["isbn must be a string of exactly 13 digits"]

    @pytest.mark.parametrize("field", ["title", "author", "year", "publisher"])
    def test_update_is_full_replacement(self, valid_payload, field):
        del valid_payload[field]

        result = validate(valid_payload, ValidationMode.UPDATE, path_isbn=valid_payload["isbn"])

        assert result.errors == [f"{field} is required"]

    def test_mismatch_sits_in_isbn_slot(self, valid_payload):
        valid_payload["title"] = ""

        result = validate(valid_payload, ValidationMode.UPDATE, path_isbn="1234567890123")

        assert result.errors == [ISBN_MISMATCH_MESSAGE, "title must be a non-empty string"]


class TestClean:

    def test_keeps_only_known_fields_in_order(self, valid_payload):
        valid_payload["extra"] = "dropped"

        cleaned = clean(valid_payload)

        assert list(cleaned) == list(BOOK_FIELDS)
        assert "extra" not in cleaned

    def test_exclude(self, valid_payload):
        cleaned = clean(valid_payload, exclude=("isbn",))

        assert "isbn" not in cleaned
        assert cleaned["title"] == "New Book"

    def test_values_are_not_altered(self, valid_payload):
        valid_payload["title"] = "  Padded  "

        assert clean(valid_payload)["title"] == "  Padded  "
