"""
Shared building blocks for catalog entities.

Provides the document base class, ObjectId parsing and the date
formatting used by derived display fields.
"""

from datetime import date, datetime
from typing import Any, ClassVar, Dict, Optional, Union

from bson import ObjectId
from pydantic import BaseModel


def parse_object_id(value: Union[str, ObjectId, None]) -> Optional[ObjectId]:
    """
    Convert a hex string to an ObjectId.

    Args:
        value: 24-character hex string, ObjectId or None

    Returns:
        ObjectId, or None when the value is missing or malformed
    """
    if isinstance(value, ObjectId):
        return value
    if not value or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def as_datetime(value: Optional[date]) -> Optional[datetime]:
    """Promote a calendar date to midnight; BSON has no date-only type."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def format_iso_date(value: Optional[datetime]) -> str:
    """Format as YYYY-MM-DD, or empty string when missing."""
    if value is None:
        return ""
    return value.date().isoformat()


def format_full_date(value: Optional[datetime]) -> str:
    """Format as e.g. "October 19, 2026", or empty string when missing."""
    if value is None:
        return ""
    return f"{value:%B} {value.day}, {value.year}"


class CatalogDocument(BaseModel):
    """
    Base class for documents stored in a catalog collection.

    Subclasses declare their persisted fields and implement
    to_document()/from_document(). Derived display values are plain
    properties so they are recomputed on every read and never written.
    """

    url_segment: ClassVar[str] = ""

    id: Optional[str] = None

    @property
    def url(self) -> str:
        """Canonical URL of this entity."""
        return f"/catalog/{self.url_segment}/{self.id}"

    def to_document(self) -> Dict[str, Any]:
        """Return persisted fields only, references as ObjectId."""
        raise NotImplementedError

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "CatalogDocument":
        """Build an entity from a stored document."""
        raise NotImplementedError


def document_id(document: Dict[str, Any]) -> Optional[str]:
    """Hex id of a stored document."""
    value = document.get("_id")
    return str(value) if value is not None else None


def reference_id(value: Any) -> Optional[str]:
    """Hex id of a stored reference field."""
    return str(value) if value is not None else None
