"""
BookInstance repository.

Instances reference the book they are a copy of; population resolves
that reference into a Book entity.
"""

from typing import List, Optional

from catalog.src.models.book_instance import BookInstance, BookInstanceStatus
from catalog.src.repositories.base_repo import CatalogRepository
from catalog.src.repositories.book_repo import BookRepository


class BookInstanceRepository(CatalogRepository[BookInstance]):
    """Repository for the bookinstances collection."""

    collection_name = "bookinstances"
    model = BookInstance
    entity = "bookinstance"

    @property
    def books(self) -> BookRepository:
        return BookRepository(self.database)

    async def list_populated(self) -> List[BookInstance]:
        """List all copies with their book populated."""
        instances = await self.list()
        books = await self.books.get_many({instance.book_id for instance in instances})
        by_id = {book.id: book for book in books}
        return [
            instance.model_copy(update={"book": by_id.get(instance.book_id)})
            for instance in instances
        ]

    async def get_populated(self, instance_id: Optional[str]) -> Optional[BookInstance]:
        """Get a copy with its book populated."""
        instance = await self.get_by_id(instance_id)
        if instance is None:
            return None
        book = await self.books.get_by_id(instance.book_id)
        return instance.model_copy(update={"book": book})

    async def list_by_book(self, book_id: Optional[str]) -> List[BookInstance]:
        """Copies of a book."""
        filter = self.by_reference("book", book_id)
        return await self.list(filter) if filter is not None else []

    async def count_available(self) -> int:
        """Count copies currently available for loan."""
        return await self.count({"status": BookInstanceStatus.AVAILABLE.value})
