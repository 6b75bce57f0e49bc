"""Data models for the catalog service.

This package contains the persisted entities (with their derived
display fields) and the form models that validate submitted input.
"""

from .author import Author
from .book import Book
from .book_instance import BookInstance, BookInstanceStatus
from .common import parse_object_id
from .forms import AuthorForm, BookForm, BookInstanceForm, GenreForm
from .genre import Genre

__all__ = [
    "Author",
    "AuthorForm",
    "Book",
    "BookForm",
    "BookInstance",
    "BookInstanceForm",
    "BookInstanceStatus",
    "Genre",
    "GenreForm",
    "parse_object_id",
]
