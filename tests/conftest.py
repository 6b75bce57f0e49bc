"""
Shared fixtures for the catalog test suite.

Provides an in-memory stand-in for the async MongoDB database so unit
and contract tests run without a server. It implements only the
collection calls the repositories make.
"""

import copy
from types import SimpleNamespace
from typing import Any, Dict, List, Mapping, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import DuplicateKeyError


# ============================================================================
# IN-MEMORY DATABASE (Test Double)
# ============================================================================


def _matches(document: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:
    """Equality, $in and array-contains matching."""
    for key, condition in filter.items():
        value = document.get(key)
        if isinstance(condition, dict) and "$in" in condition:
            candidates = condition["$in"]
            if isinstance(value, list):
                matched = any(item in candidates for item in value)
            else:
                matched = value in candidates
        elif isinstance(value, list) and not isinstance(condition, list):
            matched = condition in value
        else:
            matched = value == condition
        if not matched:
            return False
    return True


class InMemoryCursor:
    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        if length is None:
            return list(self._documents)
        return self._documents[:length]


class InMemoryCollection:
    """Dict-backed collection with optional unique indexes."""

    def __init__(self, name: str, database: "InMemoryDatabase"):
        self.name = name
        self.database = database
        self.documents: Dict[ObjectId, Dict[str, Any]] = {}
        self.unique_fields: List[str] = []
        self.fail_with: Optional[Exception] = None

    def _check_failure(self) -> None:
        error = self.fail_with or self.database.fail_with
        if error is not None:
            raise error

    def _check_unique(self, document: Mapping[str, Any], exclude: Optional[ObjectId] = None) -> None:
        for field in self.unique_fields:
            for oid, existing in self.documents.items():
                if oid != exclude and existing.get(field) == document.get(field):
                    raise DuplicateKeyError(
                        f"E11000 duplicate key error collection: {self.name} index: {field}_unique",
                        code=11000,
                    )

    async def create_index(self, keys, unique: bool = False, name: Optional[str] = None) -> str:
        self._check_failure()
        if unique:
            self.unique_fields.extend(field for field, _ in keys)
        return name or "_".join(f"{field}_{direction}" for field, direction in keys)

    async def find_one(self, filter: Optional[Mapping[str, Any]] = None) -> Optional[Dict[str, Any]]:
        self._check_failure()
        for document in self.documents.values():
            if _matches(document, filter or {}):
                return copy.deepcopy(document)
        return None

    def find(self, filter: Optional[Mapping[str, Any]] = None, sort=None) -> InMemoryCursor:
        self._check_failure()
        documents = [
            copy.deepcopy(document)
            for document in self.documents.values()
            if _matches(document, filter or {})
        ]
        for field, direction in reversed(list(sort or [])):
            documents.sort(
                key=lambda document: (document.get(field) is not None, document.get(field)),
                reverse=direction < 0,
            )
        return InMemoryCursor(documents)

    async def count_documents(self, filter: Mapping[str, Any]) -> int:
        self._check_failure()
        return sum(1 for document in self.documents.values() if _matches(document, filter))

    async def insert_one(self, document: Mapping[str, Any]) -> SimpleNamespace:
        self._check_failure()
        stored = copy.deepcopy(dict(document))
        stored.setdefault("_id", ObjectId())
        self._check_unique(stored)
        self.documents[stored["_id"]] = stored
        return SimpleNamespace(inserted_id=stored["_id"], acknowledged=True)

    async def update_one(self, filter: Mapping[str, Any], update: Mapping[str, Any]) -> SimpleNamespace:
        self._check_failure()
        for oid, document in self.documents.items():
            if _matches(document, filter):
                updated = {**document, **copy.deepcopy(update.get("$set", {}))}
                self._check_unique(updated, exclude=oid)
                self.documents[oid] = updated
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, filter: Mapping[str, Any]) -> SimpleNamespace:
        self._check_failure()
        for oid, document in list(self.documents.items()):
            if _matches(document, filter):
                del self.documents[oid]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class InMemoryDatabase:
    """Database double: collections are created on first access."""

    def __init__(self):
        self.collections: Dict[str, InMemoryCollection] = {}
        self.fail_with: Optional[Exception] = None

    def __getitem__(self, name: str) -> InMemoryCollection:
        if name not in self.collections:
            self.collections[name] = InMemoryCollection(name, self)
        return self.collections[name]

    async def command(self, name: str) -> Dict[str, Any]:
        if self.fail_with is not None:
            raise self.fail_with
        return {"ok": 1.0}

    def seed(self, collection: str, **fields: Any) -> str:
        """Store a document directly and return its hex id."""
        oid = ObjectId()
        self[collection].documents[oid] = {"_id": oid, **fields}
        return str(oid)

    def stored(self, collection: str) -> List[Dict[str, Any]]:
        return list(self[collection].documents.values())


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def database() -> InMemoryDatabase:
    """Empty in-memory database with the genre name index in place."""
    db = InMemoryDatabase()
    db["genres"].unique_fields.append("name")
    return db


@pytest.fixture
def app(database):
    """Application wired to the in-memory database."""
    from catalog.src.dependencies import get_database
    from catalog.src.main import app

    app.dependency_overrides[get_database] = lambda: database
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Test client that reports redirects instead of following them."""
    return TestClient(app, raise_server_exceptions=False, follow_redirects=False)


@pytest.fixture
def library(database):
    """A small seeded catalog: one author with one book in one genre, one copy."""
    from datetime import datetime

    genre_id = database.seed("genres", name="Fantasy")
    author_id = database.seed(
        "authors",
        first_name="Patrick",
        family_name="Rothfuss",
        date_of_birth=datetime(1973, 6, 6),
        date_of_death=None,
    )
    book_id = database.seed(
        "books",
        title="The Name of the Wind",
        author=ObjectId(author_id),
        summary="A young man grows to be the most notorious wizard his world has ever seen.",
        isbn="9781473211896",
        genre=[ObjectId(genre_id)],
    )
    instance_id = database.seed(
        "bookinstances",
        book=ObjectId(book_id),
        imprint="Gollancz, 2011.",
        status="Available",
        due_back=datetime(2026, 10, 1),
    )
    return SimpleNamespace(
        genre_id=genre_id,
        author_id=author_id,
        book_id=book_id,
        instance_id=instance_id,
    )
