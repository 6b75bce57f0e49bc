"""
Catalog error types.

NotFound and duplicate natural keys are raised as exceptions; validation
failures and blocked deletes are handled inside the routers and never
raised. Storage failures surface as pymongo.errors.PyMongoError.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for catalog errors."""


class EntityNotFoundError(CatalogError):
    """The requested id does not resolve to a stored document."""

    def __init__(self, entity: str, entity_id: Optional[str]):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class DuplicateEntityError(CatalogError):
    """A write collided with an existing natural key."""

    def __init__(self, entity: str, field: str, value: str):
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} with {field} '{value}' already exists")
