"""Repositories for the catalog collections.

Each repository wraps one MongoDB collection and is constructed with
the async database handle owned by the application lifespan.
"""

from .author_repo import AuthorRepository
from .base_repo import CatalogRepository
from .book_instance_repo import BookInstanceRepository
from .book_repo import BookRepository
from .genre_repo import GenreRepository

__all__ = [
    "AuthorRepository",
    "BookInstanceRepository",
    "BookRepository",
    "CatalogRepository",
    "GenreRepository",
]
