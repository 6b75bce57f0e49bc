"""
Book repository.

Books reference one author and any number of genres. Population
resolves those references into Author and Genre entities.
"""

from typing import List, Optional

from catalog.src.models.book import Book
from catalog.src.repositories.author_repo import AuthorRepository
from catalog.src.repositories.base_repo import CatalogRepository
from catalog.src.repositories.genre_repo import GenreRepository
from catalog.src.services.fanout import fetch_all


class BookRepository(CatalogRepository[Book]):
    """Repository for the books collection, ordered by title."""

    collection_name = "books"
    model = Book
    entity = "book"
    default_sort = (("title", 1),)

    @property
    def authors(self) -> AuthorRepository:
        return AuthorRepository(self.database)

    @property
    def genres(self) -> GenreRepository:
        return GenreRepository(self.database)

    async def list_populated(self) -> List[Book]:
        """List all books with their author populated."""
        books = await self.list()
        authors = await self.authors.get_many({book.author_id for book in books})
        by_id = {author.id: author for author in authors}
        return [book.model_copy(update={"author": by_id.get(book.author_id)}) for book in books]

    async def get_populated(self, book_id: Optional[str]) -> Optional[Book]:
        """Get a book with its author and genres populated."""
        book = await self.get_by_id(book_id)
        if book is None:
            return None

        refs = await fetch_all(
            author=self.authors.get_by_id(book.author_id),
            genres=self.genres.get_many(book.genre_ids),
        )
        return book.model_copy(update=refs)

    async def list_by_author(self, author_id: Optional[str]) -> List[Book]:
        """Books written by an author."""
        filter = self.by_reference("author", author_id)
        return await self.list(filter) if filter is not None else []

    async def list_by_genre(self, genre_id: Optional[str]) -> List[Book]:
        """Books filed under a genre."""
        filter = self.by_reference("genre", genre_id)
        return await self.list(filter) if filter is not None else []
