"""Book entity."""

from typing import Any, ClassVar, Dict, List, Optional

from pydantic import Field

from .author import Author
from .common import CatalogDocument, document_id, parse_object_id, reference_id
from .genre import Genre


class Book(CatalogDocument):
    """
    A catalog title.

    `author_id` and `genre_ids` are the stored references. `author` and
    `genres` are only filled in when a repository populates them.
    """

    url_segment: ClassVar[str] = "book"

    title: str = ""
    author_id: Optional[str] = None
    summary: str = ""
    isbn: str = ""
    genre_ids: List[str] = Field(default_factory=list)

    author: Optional[Author] = None
    genres: List[Genre] = Field(default_factory=list)

    def has_genre(self, genre_id: Optional[str]) -> bool:
        return genre_id in self.genre_ids

    def to_document(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "author": parse_object_id(self.author_id),
            "summary": self.summary,
            "isbn": self.isbn,
            "genre": [oid for oid in map(parse_object_id, self.genre_ids) if oid is not None],
        }

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Book":
        return cls(
            id=document_id(document),
            title=document.get("title", ""),
            author_id=reference_id(document.get("author")),
            summary=document.get("summary", ""),
            isbn=document.get("isbn", ""),
            genre_ids=[str(oid) for oid in document.get("genre") or []],
        )
