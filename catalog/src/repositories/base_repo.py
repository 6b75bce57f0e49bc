"""
Base repository for catalog collections.

Provides async CRUD operations over one MongoDB collection using
pymongo's asyncio API. Every query and write logs its failure and
re-raises it unchanged.
"""

import structlog
from typing import Any, ClassVar, Dict, Generic, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from catalog.src.errors import DuplicateEntityError
from catalog.src.models.common import CatalogDocument, parse_object_id

logger = structlog.get_logger(__name__)

T = TypeVar("T", bound=CatalogDocument)

SortSpec = Sequence[Tuple[str, int]]


class CatalogRepository(Generic[T]):
    """
    Repository for one catalog collection.

    Subclasses set the collection name, the entity model, the default
    sort order and the field guarded by a unique index (if any).
    """

    collection_name: ClassVar[str]
    model: ClassVar[Type[CatalogDocument]]
    entity: ClassVar[str]
    default_sort: ClassVar[SortSpec] = ()
    unique_field: ClassVar[Optional[str]] = None

    def __init__(self, database: AsyncDatabase):
        """
        Initialize repository.

        Args:
            database: Async MongoDB database handle
        """
        self.database = database
        self.collection = database[self.collection_name]

    async def ensure_indexes(self) -> None:
        """Create the unique index backing the natural key."""
        if self.unique_field is None:
            return
        try:
            await self.collection.create_index(
                [(self.unique_field, 1)],
                unique=True,
                name=f"{self.unique_field}_unique",
            )
            logger.info(
                "index_ensured",
                collection=self.collection_name,
                field=self.unique_field,
            )
        except Exception as e:
            logger.error("index_create_failed", error=str(e), collection=self.collection_name)
            raise

    async def get_by_id(self, entity_id: Optional[str]) -> Optional[T]:
        """
        Get entity by id.

        Args:
            entity_id: Hex ObjectId string

        Returns:
            Entity, or None if the id is malformed or not found
        """
        oid = parse_object_id(entity_id)
        if oid is None:
            logger.debug(f"{self.entity}_invalid_id", entity_id=entity_id)
            return None

        try:
            document = await self.collection.find_one({"_id": oid})
        except Exception as e:
            logger.error(f"{self.entity}_get_by_id_failed", error=str(e), entity_id=entity_id)
            raise

        if document is None:
            logger.debug(f"{self.entity}_not_found", entity_id=entity_id)
            return None
        return self.model.from_document(document)

    async def get_many(self, entity_ids: Sequence[Optional[str]]) -> List[T]:
        """
        Get the entities whose ids are listed, in collection sort order.

        Malformed or unknown ids are skipped.
        """
        oids = [oid for oid in map(parse_object_id, entity_ids) if oid is not None]
        if not oids:
            return []
        return await self.list({"_id": {"$in": oids}})

    async def list(
        self,
        filter: Optional[Mapping[str, Any]] = None,
        sort: Optional[SortSpec] = None,
    ) -> List[T]:
        """
        List entities matching a filter.

        Args:
            filter: MongoDB query document (all documents when None)
            sort: Sort keys; the repository default when None

        Returns:
            Matching entities in sort order
        """
        sort = list(sort if sort is not None else self.default_sort)
        try:
            cursor = self.collection.find(dict(filter or {}), sort=sort or None)
            documents = await cursor.to_list(None)
        except Exception as e:
            logger.error(f"{self.entity}_list_failed", error=str(e))
            raise

        return [self.model.from_document(document) for document in documents]

    async def find_one(self, **fields: Any) -> Optional[T]:
        """Get the first entity whose fields equal the given values."""
        try:
            document = await self.collection.find_one(fields)
        except Exception as e:
            logger.error(f"{self.entity}_find_one_failed", error=str(e), **fields)
            raise

        return self.model.from_document(document) if document is not None else None

    async def count(self, filter: Optional[Mapping[str, Any]] = None) -> int:
        """Count entities matching a filter."""
        try:
            return await self.collection.count_documents(dict(filter or {}))
        except Exception as e:
            logger.error(f"{self.entity}_count_failed", error=str(e))
            raise

    async def create(self, entity: T) -> T:
        """
        Insert a new entity.

        Args:
            entity: Unsaved entity

        Returns:
            The entity with its generated id

        Raises:
            DuplicateEntityError: If the natural key is already taken
            PyMongoError: On database error
        """
        try:
            result = await self.collection.insert_one(entity.to_document())
        except DuplicateKeyError:
            raise self._duplicate(entity)
        except Exception as e:
            logger.error(f"{self.entity}_create_failed", error=str(e))
            raise

        created = entity.model_copy(update={"id": str(result.inserted_id)})
        logger.info(f"{self.entity}_created", entity_id=created.id)
        return created

    async def update(self, entity_id: str, entity: T) -> bool:
        """
        Overwrite the persisted fields of an entity.

        Args:
            entity_id: Hex ObjectId string
            entity: Entity carrying the new field values

        Returns:
            True if the entity exists, False otherwise

        Raises:
            DuplicateEntityError: If the natural key is already taken
            PyMongoError: On database error
        """
        oid = parse_object_id(entity_id)
        if oid is None:
            return False

        try:
            result = await self.collection.update_one(
                {"_id": oid}, {"$set": entity.to_document()}
            )
        except DuplicateKeyError:
            raise self._duplicate(entity)
        except Exception as e:
            logger.error(f"{self.entity}_update_failed", error=str(e), entity_id=entity_id)
            raise

        if result.matched_count == 0:
            logger.debug(f"{self.entity}_not_found", entity_id=entity_id)
            return False

        logger.info(f"{self.entity}_updated", entity_id=entity_id)
        return True

    async def delete(self, entity_id: str) -> bool:
        """
        Delete entity by id.

        Returns:
            True if a document was removed, False otherwise
        """
        oid = parse_object_id(entity_id)
        if oid is None:
            return False

        try:
            result = await self.collection.delete_one({"_id": oid})
        except Exception as e:
            logger.error(f"{self.entity}_delete_failed", error=str(e), entity_id=entity_id)
            raise

        if result.deleted_count:
            logger.info(f"{self.entity}_deleted", entity_id=entity_id)
        return result.deleted_count > 0

    def _duplicate(self, entity: T) -> DuplicateEntityError:
        field = self.unique_field or "_id"
        value = str(getattr(entity, field, ""))
        logger.warning(f"{self.entity}_already_exists", field=field, value=value)
        return DuplicateEntityError(self.entity, field, value)

    @staticmethod
    def by_reference(field: str, entity_id: Optional[str]) -> Optional[Dict[str, Any]]:
        """Filter matching documents whose reference field points at entity_id."""
        oid = parse_object_id(entity_id)
        if oid is None:
            return None
        return {field: oid}
