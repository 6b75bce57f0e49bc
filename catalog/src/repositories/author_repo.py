"""Author repository."""

from catalog.src.models.author import Author
from catalog.src.repositories.base_repo import CatalogRepository


class AuthorRepository(CatalogRepository[Author]):
    """Repository for the authors collection, ordered by family then first name."""

    collection_name = "authors"
    model = Author
    entity = "author"
    default_sort = (("family_name", 1), ("first_name", 1))
