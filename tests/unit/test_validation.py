"""
Unit tests for form validation.

Tests cover:
- Trimming and markup escaping of accepted values
- Every violation message, collected rather than fail-fast
- Drafts and raw submitted values kept for rejected input
- Defaults for omitted BookInstance fields
"""

from datetime import datetime

import pytest
from bson import ObjectId

from catalog.src.models import (
    AuthorForm,
    BookForm,
    BookInstanceForm,
    BookInstanceStatus,
    GenreForm,
)
from catalog.src.services.validation import FieldError, validate_form


def messages(result):
    return [error.message for error in result.errors]


# ============================================================================
# GENRE
# ============================================================================


class TestGenreForm:
    """Test genre name rules."""

    def test_name_is_trimmed(self):
        result = validate_form(GenreForm, {"name": "  Fantasy  "})
        assert result.is_valid
        assert result.entity.name == "Fantasy"

    def test_name_is_escaped(self):
        result = validate_form(GenreForm, {"name": "<b>Sci-Fi</b>"})
        assert result.entity.name == "&lt;b&gt;Sci-Fi&lt;/b&gt;"

    @pytest.mark.parametrize("data", [{}, {"name": ""}, {"name": "   "}])
    def test_name_required(self, data):
        result = validate_form(GenreForm, data)
        assert result.errors == [FieldError("name", "Genre name required")]

    def test_name_too_long(self):
        result = validate_form(GenreForm, {"name": "x" * 101})
        assert messages(result) == ["Genre name must not exceed 100 characters."]

    def test_name_at_limit(self):
        assert validate_form(GenreForm, {"name": "x" * 100}).is_valid

    def test_draft_keeps_submitted_value(self):
        result = validate_form(GenreForm, {"name": "x" * 101}, entity_id="65a1b2c3d4e5f6a7b8c9d0e1")
        assert result.entity.name == "x" * 101
        assert result.entity.id == "65a1b2c3d4e5f6a7b8c9d0e1"


# ============================================================================
# AUTHOR
# ============================================================================


class TestAuthorForm:
    """Test author name and date rules."""

    def test_valid_author(self):
        result = validate_form(AuthorForm, {
            "first_name": " Isaac ",
            "family_name": "Asimov",
            "date_of_birth": "1920-01-02",
            "date_of_death": "1992-04-06",
        })
        assert result.is_valid
        assert result.entity.first_name == "Isaac"
        assert result.entity.date_of_birth == datetime(1920, 1, 2)
        assert result.entity.date_of_death == datetime(1992, 4, 6)

    def test_dates_are_optional(self):
        result = validate_form(AuthorForm, {
            "first_name": "Ann",
            "family_name": "Leckie",
            "date_of_birth": "",
        })
        assert result.is_valid
        assert result.entity.date_of_birth is None
        assert result.entity.date_of_death is None

    def test_all_violations_are_collected(self):
        result = validate_form(AuthorForm, {
            "first_name": "",
            "family_name": "y" * 101,
            "date_of_birth": "yesterday",
            "date_of_death": "31/31/2020",
        })
        assert result.errors == [
            FieldError("first_name", "First name must be specified."),
            FieldError("family_name", "Family name must not exceed 100 characters."),
            FieldError("date_of_birth", "Invalid date of birth"),
            FieldError("date_of_death", "Invalid date of death"),
        ]

    def test_missing_names(self):
        result = validate_form(AuthorForm, {})
        assert messages(result) == [
            "First name must be specified.",
            "Family name must be specified.",
        ]

    def test_first_name_too_long(self):
        result = validate_form(AuthorForm, {"first_name": "x" * 101, "family_name": "Doe"})
        assert messages(result) == ["First name must not exceed 100 characters."]

    def test_death_before_birth(self):
        result = validate_form(AuthorForm, {
            "first_name": "Jane",
            "family_name": "Doe",
            "date_of_birth": "2000-01-01",
            "date_of_death": "1999-12-31",
        })
        assert messages(result) == ["Date of death cannot be earlier than date of birth."]

    def test_draft_keeps_parseable_dates(self):
        result = validate_form(AuthorForm, {
            "first_name": "",
            "family_name": "<i>Doe</i>",
            "date_of_birth": "1980-05-05",
            "date_of_death": "garbage",
        })
        draft = result.entity
        assert draft.family_name == "&lt;i&gt;Doe&lt;/i&gt;"
        assert draft.birth == "1980-05-05"
        assert draft.date_of_death is None
        assert result.submitted["date_of_death"] == "garbage"


# ============================================================================
# BOOK
# ============================================================================


class TestBookForm:
    """Test book rules and genre list handling."""

    def test_valid_book(self):
        author_id, genre_a, genre_b = (str(ObjectId()) for _ in range(3))
        result = validate_form(BookForm, {
            "title": " Dune ",
            "author": author_id,
            "summary": "Spice & sand",
            "isbn": "9780441013593",
            "genre": [genre_a, genre_b],
        })
        assert result.is_valid
        book = result.entity
        assert book.title == "Dune"
        assert book.summary == "Spice &amp; sand"
        assert book.author_id == author_id
        assert book.genre_ids == [genre_a, genre_b]

    def test_genre_may_be_single_value_or_missing(self):
        author_id, genre_id = str(ObjectId()), str(ObjectId())
        base = {"title": "T", "author": author_id, "summary": "S", "isbn": "I"}
        assert validate_form(BookForm, {**base, "genre": genre_id}).entity.genre_ids == [genre_id]
        assert validate_form(BookForm, base).entity.genre_ids == []

    def test_empty_book(self):
        result = validate_form(BookForm, {})
        assert messages(result) == [
            "Title must not be empty.",
            "Author must not be empty.",
            "Summary must not be empty.",
            "ISBN must not be empty",
        ]

    def test_invalid_references(self):
        result = validate_form(BookForm, {
            "title": "T",
            "author": "nobody",
            "summary": "S",
            "isbn": "I",
            "genre": ["not-a-genre"],
        })
        assert result.errors == [
            FieldError("author", "Invalid author."),
            FieldError("genre", "Invalid genre."),
        ]

    def test_fields_too_long(self):
        result = validate_form(BookForm, {
            "title": "T" * 201,
            "author": str(ObjectId()),
            "summary": "S" * 5001,
            "isbn": "9" * 21,
        })
        assert result.errors == [
            FieldError("title", "Title must not exceed 200 characters."),
            FieldError("summary", "Summary must not exceed 5000 characters."),
            FieldError("isbn", "ISBN must not exceed 20 characters."),
        ]

    def test_fields_at_limit(self):
        result = validate_form(BookForm, {
            "title": "T" * 200,
            "author": str(ObjectId()),
            "summary": "S" * 5000,
            "isbn": "9" * 20,
        })
        assert result.is_valid

    def test_draft_keeps_checked_genres(self):
        genre_id = str(ObjectId())
        result = validate_form(BookForm, {"title": "", "genre": [genre_id]})
        assert not result.is_valid
        assert result.entity.has_genre(genre_id)


# ============================================================================
# BOOK INSTANCE
# ============================================================================


class TestBookInstanceForm:
    """Test copy rules and defaults."""

    def test_defaults_for_omitted_fields(self):
        result = validate_form(BookInstanceForm, {"book": str(ObjectId()), "imprint": "Ace, 1990"})
        assert result.is_valid
        instance = result.entity
        assert instance.status == BookInstanceStatus.MAINTENANCE
        assert instance.due_back_formatted

    def test_explicit_values(self):
        book_id = str(ObjectId())
        result = validate_form(BookInstanceForm, {
            "book": book_id,
            "imprint": "Ace",
            "status": "Loaned",
            "due_back": "2026-11-01",
        })
        assert result.entity.status == BookInstanceStatus.LOANED
        assert result.entity.due_back == datetime(2026, 11, 1)

    def test_empty_copy(self):
        result = validate_form(BookInstanceForm, {})
        assert messages(result) == ["Book must be specified", "Imprint must be specified"]

    def test_imprint_too_long(self):
        result = validate_form(BookInstanceForm, {"book": str(ObjectId()), "imprint": "A" * 201})
        assert result.errors == [FieldError("imprint", "Imprint must not exceed 200 characters.")]

    def test_invalid_values(self):
        result = validate_form(BookInstanceForm, {
            "book": "123",
            "imprint": "Ace",
            "status": "Lost",
            "due_back": "soon",
        })
        assert result.errors == [
            FieldError("book", "Invalid book."),
            FieldError("status", "Invalid status"),
            FieldError("due_back", "Invalid date"),
        ]

    def test_draft_falls_back_to_defaults(self):
        result = validate_form(BookInstanceForm, {"book": "", "imprint": "Ace", "status": "Lost"})
        assert result.entity.status == BookInstanceStatus.MAINTENANCE
        assert result.entity.imprint == "Ace"
