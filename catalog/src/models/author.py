"""Author entity and its derived display fields."""

from datetime import datetime
from typing import Any, ClassVar, Dict, Optional

from .common import CatalogDocument, document_id, format_full_date, format_iso_date


class Author(CatalogDocument):
    """
    A book author.

    Derived fields:
        name: "family_name, first_name"
        birth / death: ISO short dates, empty when unknown
        lifespan: "<birth> - <death>" in full dates, "Present" while alive
    """

    url_segment: ClassVar[str] = "author"

    first_name: str = ""
    family_name: str = ""
    date_of_birth: Optional[datetime] = None
    date_of_death: Optional[datetime] = None

    @property
    def name(self) -> str:
        return f"{self.family_name}, {self.first_name}"

    @property
    def birth(self) -> str:
        return format_iso_date(self.date_of_birth)

    @property
    def death(self) -> str:
        return format_iso_date(self.date_of_death)

    @property
    def lifespan(self) -> str:
        end = format_full_date(self.date_of_death) if self.date_of_death else "Present"
        return f"{format_full_date(self.date_of_birth)} - {end}"

    def to_document(self) -> Dict[str, Any]:
        return {
            "first_name": self.first_name,
            "family_name": self.family_name,
            "date_of_birth": self.date_of_birth,
            "date_of_death": self.date_of_death,
        }

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Author":
        return cls(
            id=document_id(document),
            first_name=document.get("first_name", ""),
            family_name=document.get("family_name", ""),
            date_of_birth=document.get("date_of_birth"),
            date_of_death=document.get("date_of_death"),
        )
