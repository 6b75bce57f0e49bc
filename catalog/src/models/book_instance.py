"""BookInstance entity: a physical copy of a Book."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

from pydantic import Field

from .book import Book
from .common import (
    CatalogDocument,
    document_id,
    format_full_date,
    format_iso_date,
    parse_object_id,
    reference_id,
)


class BookInstanceStatus(str, Enum):
    """Lending status of a copy."""

    AVAILABLE = "Available"
    MAINTENANCE = "Maintenance"
    LOANED = "Loaned"
    RESERVED = "Reserved"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookInstance(CatalogDocument):
    """
    A copy of a book.

    `due_back` defaults to the creation time. `book` is filled in only
    when a repository populates the reference.
    """

    url_segment: ClassVar[str] = "bookinstance"

    book_id: Optional[str] = None
    imprint: str = ""
    status: BookInstanceStatus = BookInstanceStatus.MAINTENANCE
    due_back: datetime = Field(default_factory=utcnow)

    book: Optional[Book] = None

    @property
    def due(self) -> str:
        return format_iso_date(self.due_back)

    @property
    def due_back_formatted(self) -> str:
        return format_full_date(self.due_back)

    def to_document(self) -> Dict[str, Any]:
        return {
            "book": parse_object_id(self.book_id),
            "imprint": self.imprint,
            "status": BookInstanceStatus(self.status).value,
            "due_back": self.due_back,
        }

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "BookInstance":
        return cls(
            id=document_id(document),
            book_id=reference_id(document.get("book")),
            imprint=document.get("imprint", ""),
            status=document.get("status") or BookInstanceStatus.MAINTENANCE,
            due_back=document.get("due_back") or utcnow(),
        )
