"""
Form models for catalog mutations.

Each form declares ordered per-field rules as pydantic validators:
whitespace is trimmed first, then required/length/format checks run,
and finally text is HTML-escaped. Every rule raises PydanticCustomError
so the message shown to the user is exactly the one declared here.

Forms also know how to turn themselves into entities: to_entity() for
validated input and draft() for rejected input, which is re-rendered
in the form without ever being persisted.
"""

from datetime import date, datetime
from typing import Annotated, Any, Callable, ClassVar, List, Mapping, Optional, Tuple

from markupsafe import escape
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from .author import Author
from .book import Book
from .book_instance import BookInstance, BookInstanceStatus, utcnow
from .common import as_datetime, parse_object_id
from .genre import Genre

NAME_MAX_LENGTH = 100
TITLE_MAX_LENGTH = 200
SUMMARY_MAX_LENGTH = 5000
ISBN_MAX_LENGTH = 20
IMPRINT_MAX_LENGTH = 200


# ============================================================================
# Rules
# ============================================================================


def trim(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def escape_markup(value: str) -> str:
    return str(escape(value))


def sanitize(value: Any) -> str:
    """Trim and escape a raw submitted value."""
    return escape_markup(trim(value))


def required(message: str) -> AfterValidator:
    def check(value: str) -> str:
        if not value:
            raise PydanticCustomError("required", message)
        return value

    return AfterValidator(check)


def max_length(limit: int, message: str) -> AfterValidator:
    def check(value: str) -> str:
        if len(value) > limit:
            raise PydanticCustomError("max_length", message)
        return value

    return AfterValidator(check)


def object_id(message: str) -> AfterValidator:
    def check(value: str) -> str:
        if parse_object_id(value) is None:
            raise PydanticCustomError("object_id", message)
        return value

    return AfterValidator(check)


def parse_date(value: Any) -> Optional[date]:
    """Parse an ISO 8601 date or datetime; empty input means no date."""
    if isinstance(value, date):
        return value
    text = trim(value)
    if not text:
        return None
    return datetime.fromisoformat(text).date()


def optional_date(message: str) -> BeforeValidator:
    def check(value: Any) -> Optional[date]:
        try:
            return parse_date(value)
        except ValueError:
            raise PydanticCustomError("date", message)

    return BeforeValidator(check)


def lenient_date(value: Any) -> Optional[datetime]:
    """Best-effort date for re-rendering a rejected form."""
    try:
        return as_datetime(parse_date(value))
    except ValueError:
        return None


def as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [trim(item) for item in value if trim(item)]
    text = trim(value)
    return [text] if text else []


Escaped = AfterValidator(escape_markup)
Trimmed = BeforeValidator(trim)


# ============================================================================
# Forms
# ============================================================================


class CatalogForm(BaseModel):
    """Base form: validates defaults so missing keys hit the same rules."""

    model_config = ConfigDict(validate_default=True, extra="ignore")

    list_fields: ClassVar[Tuple[str, ...]] = ()

    def to_entity(self, entity_id: Optional[str] = None):
        raise NotImplementedError

    @classmethod
    def draft(cls, data: Mapping[str, Any], entity_id: Optional[str] = None):
        raise NotImplementedError


class GenreForm(CatalogForm):
    name: Annotated[
        str,
        Trimmed,
        required("Genre name required"),
        max_length(NAME_MAX_LENGTH, "Genre name must not exceed 100 characters."),
        Escaped,
    ] = ""

    def to_entity(self, entity_id: Optional[str] = None) -> Genre:
        return Genre(id=entity_id, name=self.name)

    @classmethod
    def draft(cls, data: Mapping[str, Any], entity_id: Optional[str] = None) -> Genre:
        return Genre.model_construct(id=entity_id, name=sanitize(data.get("name")))


class AuthorForm(CatalogForm):
    first_name: Annotated[
        str,
        Trimmed,
        required("First name must be specified."),
        max_length(NAME_MAX_LENGTH, "First name must not exceed 100 characters."),
        Escaped,
    ] = ""
    family_name: Annotated[
        str,
        Trimmed,
        required("Family name must be specified."),
        max_length(NAME_MAX_LENGTH, "Family name must not exceed 100 characters."),
        Escaped,
    ] = ""
    date_of_birth: Annotated[Optional[date], optional_date("Invalid date of birth")] = None
    date_of_death: Annotated[Optional[date], optional_date("Invalid date of death")] = None

    @field_validator("date_of_death")
    @classmethod
    def death_after_birth(cls, value: Optional[date], info: ValidationInfo) -> Optional[date]:
        born = info.data.get("date_of_birth")
        if value is not None and born is not None and value < born:
            raise PydanticCustomError(
                "date_order", "Date of death cannot be earlier than date of birth."
            )
        return value

    def to_entity(self, entity_id: Optional[str] = None) -> Author:
        return Author(
            id=entity_id,
            first_name=self.first_name,
            family_name=self.family_name,
            date_of_birth=as_datetime(self.date_of_birth),
            date_of_death=as_datetime(self.date_of_death),
        )

    @classmethod
    def draft(cls, data: Mapping[str, Any], entity_id: Optional[str] = None) -> Author:
        return Author.model_construct(
            id=entity_id,
            first_name=sanitize(data.get("first_name")),
            family_name=sanitize(data.get("family_name")),
            date_of_birth=lenient_date(data.get("date_of_birth")),
            date_of_death=lenient_date(data.get("date_of_death")),
        )


def _genre_ids(values: List[str]) -> List[str]:
    for value in values:
        if parse_object_id(value) is None:
            raise PydanticCustomError("object_id", "Invalid genre.")
    return values


class BookForm(CatalogForm):
    list_fields: ClassVar[Tuple[str, ...]] = ("genre",)

    title: Annotated[
        str,
        Trimmed,
        required("Title must not be empty."),
        max_length(TITLE_MAX_LENGTH, "Title must not exceed 200 characters."),
        Escaped,
    ] = ""
    author: Annotated[
        str, Trimmed, required("Author must not be empty."), object_id("Invalid author.")
    ] = ""
    summary: Annotated[
        str,
        Trimmed,
        required("Summary must not be empty."),
        max_length(SUMMARY_MAX_LENGTH, "Summary must not exceed 5000 characters."),
        Escaped,
    ] = ""
    isbn: Annotated[
        str,
        Trimmed,
        required("ISBN must not be empty"),
        max_length(ISBN_MAX_LENGTH, "ISBN must not exceed 20 characters."),
        Escaped,
    ] = ""
    genre: Annotated[List[str], BeforeValidator(as_list), AfterValidator(_genre_ids)] = []

    def to_entity(self, entity_id: Optional[str] = None) -> Book:
        return Book(
            id=entity_id,
            title=self.title,
            author_id=self.author,
            summary=self.summary,
            isbn=self.isbn,
            genre_ids=self.genre,
        )

    @classmethod
    def draft(cls, data: Mapping[str, Any], entity_id: Optional[str] = None) -> Book:
        return Book.model_construct(
            id=entity_id,
            title=sanitize(data.get("title")),
            author_id=trim(data.get("author")) or None,
            summary=sanitize(data.get("summary")),
            isbn=sanitize(data.get("isbn")),
            genre_ids=[sanitize(item) for item in as_list(data.get("genre"))],
            author=None,
            genres=[],
        )


def _status(value: Any) -> BookInstanceStatus:
    if isinstance(value, BookInstanceStatus):
        return value
    text = trim(value)
    if not text:
        return BookInstanceStatus.MAINTENANCE
    try:
        return BookInstanceStatus(text)
    except ValueError:
        raise PydanticCustomError("status", "Invalid status")


class BookInstanceForm(CatalogForm):
    book: Annotated[
        str, Trimmed, required("Book must be specified"), object_id("Invalid book.")
    ] = ""
    imprint: Annotated[
        str,
        Trimmed,
        required("Imprint must be specified"),
        max_length(IMPRINT_MAX_LENGTH, "Imprint must not exceed 200 characters."),
        Escaped,
    ] = ""
    status: Annotated[BookInstanceStatus, BeforeValidator(_status)] = BookInstanceStatus.MAINTENANCE
    due_back: Annotated[Optional[date], optional_date("Invalid date")] = None

    def to_entity(self, entity_id: Optional[str] = None) -> BookInstance:
        fields = {
            "id": entity_id,
            "book_id": self.book,
            "imprint": self.imprint,
            "status": self.status,
        }
        if self.due_back is not None:
            fields["due_back"] = as_datetime(self.due_back)
        return BookInstance(**fields)

    @classmethod
    def draft(cls, data: Mapping[str, Any], entity_id: Optional[str] = None) -> BookInstance:
        status = trim(data.get("status"))
        known = {member.value for member in BookInstanceStatus}
        return BookInstance.model_construct(
            id=entity_id,
            book_id=trim(data.get("book")) or None,
            imprint=sanitize(data.get("imprint")),
            status=BookInstanceStatus(status) if status in known else BookInstanceStatus.MAINTENANCE,
            due_back=lenient_date(data.get("due_back")) or utcnow(),
            book=None,
        )
