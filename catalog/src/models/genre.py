"""Genre entity."""

from typing import Any, ClassVar, Dict

from .common import CatalogDocument, document_id


class Genre(CatalogDocument):
    """A book genre; `name` is the natural key."""

    url_segment: ClassVar[str] = "genre"

    name: str = ""

    def to_document(self) -> Dict[str, Any]:
        return {"name": self.name}

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Genre":
        return cls(id=document_id(document), name=document.get("name", ""))
