"""
Genre repository.

Genre names are unique: the collection carries a unique index on
`name`, and a duplicate-key error on write is reported as
DuplicateEntityError.
"""

from typing import Optional

from catalog.src.models.genre import Genre
from catalog.src.repositories.base_repo import CatalogRepository


class GenreRepository(CatalogRepository[Genre]):
    """Repository for the genres collection."""

    collection_name = "genres"
    model = Genre
    entity = "genre"
    default_sort = (("name", 1),)
    unique_field = "name"

    async def get_by_name(self, name: str) -> Optional[Genre]:
        """Get the genre whose name matches exactly."""
        return await self.find_one(name=name)
