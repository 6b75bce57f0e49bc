"""HTML routers for the catalog views."""

from . import authors, book_instances, books, catalog, genres

__all__ = ["authors", "book_instances", "books", "catalog", "genres"]
