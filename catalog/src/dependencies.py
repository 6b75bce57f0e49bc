"""
FastAPI dependency injection for the storage handle and repositories.

Provides injectable dependencies for:
- The MongoDB client (one per process, owned by the application lifespan)
- The catalog database handle
- Repository instances
- Settings

All dependencies use FastAPI's dependency injection system so tests can
swap the database through app.dependency_overrides.
"""

import structlog
from typing import Optional
from fastapi import Depends
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from catalog.src.config import get_settings, Settings
from catalog.src.repositories import (
    AuthorRepository,
    BookInstanceRepository,
    BookRepository,
    GenreRepository,
)

logger = structlog.get_logger(__name__)


# ============================================================================
# MONGODB CLIENT
# ============================================================================

_client: Optional[AsyncMongoClient] = None


async def init_mongo_client(settings: Optional[Settings] = None) -> AsyncMongoClient:
    """
    Initialize the MongoDB client and verify connectivity.

    Should be called during application startup.

    Returns:
        Connected AsyncMongoClient
    """
    global _client

    if _client is not None:
        return _client

    settings = settings or get_settings()

    try:
        client = AsyncMongoClient(
            settings.mongodb_url,
            serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        )
        await client.admin.command("ping")
    except Exception as e:
        logger.error("mongo_client_init_failed", error=str(e))
        raise

    _client = client
    logger.info(
        "mongo_client_initialized",
        database=settings.mongodb_database,
        host=settings.mongodb_url.split("@")[-1],
    )
    return _client


async def close_mongo_client():
    """
    Close the MongoDB client.

    Should be called during application shutdown.
    """
    global _client

    if _client is not None:
        await _client.close()
        logger.info("mongo_client_closed")
        _client = None


def get_mongo_client() -> AsyncMongoClient:
    """
    Get the MongoDB client.

    Raises:
        RuntimeError: If the client is not initialized
    """
    if _client is None:
        logger.error("mongo_client_not_initialized")
        raise RuntimeError(
            "MongoDB client not initialized. Call init_mongo_client() during startup."
        )
    return _client


async def ensure_indexes(database: AsyncDatabase) -> None:
    """Create the indexes the catalog relies on (genre name uniqueness)."""
    await GenreRepository(database).ensure_indexes()


# ============================================================================
# UTILITY DEPENDENCIES
# ============================================================================


def get_settings_dependency() -> Settings:
    """Get application settings."""
    return get_settings()


def get_database(settings: Settings = Depends(get_settings_dependency)) -> AsyncDatabase:
    """
    Get the catalog database handle.

    Example:
        @router.get("/genres")
        async def genre_list(db: AsyncDatabase = Depends(get_database)):
            ...
    """
    return get_mongo_client()[settings.mongodb_database]


# ============================================================================
# REPOSITORY DEPENDENCIES
# ============================================================================


def get_genre_repository(database: AsyncDatabase = Depends(get_database)) -> GenreRepository:
    return GenreRepository(database)


def get_author_repository(database: AsyncDatabase = Depends(get_database)) -> AuthorRepository:
    return AuthorRepository(database)


def get_book_repository(database: AsyncDatabase = Depends(get_database)) -> BookRepository:
    return BookRepository(database)


def get_book_instance_repository(
    database: AsyncDatabase = Depends(get_database)
) -> BookInstanceRepository:
    return BookInstanceRepository(database)
