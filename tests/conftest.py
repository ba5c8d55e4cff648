"""Shared pytest fixtures."""

import copy
from typing import Any

import pytest
from fastapi.testclient import TestClient

from dashgate.app import App
from dashgate.config import Config
from dashgate.core.core import Core
from dashgate.web.server import create_fastapi_app

TEST_SECRET = "test-session-secret"


class FakeUpdateResult:
    def __init__(self, upserted_id: Any = None) -> None:
        self.upserted_id = upserted_id


class FakeCollection:
    """In-memory stand-in for the subset of AsyncCollection the services use."""

    def __init__(self) -> None:
        self.documents: dict[Any, dict[str, Any]] = {}

    async def find_one(self, filter: dict[str, Any], projection: dict[str, Any] | None = None) -> dict[str, Any] | None:
        doc = self.documents.get(filter["_id"])
        return copy.deepcopy(doc) if doc is not None else None

    async def update_one(self, filter: dict[str, Any], update: dict[str, Any], upsert: bool = False) -> FakeUpdateResult:
        key = filter["_id"]
        upserted_id = None
        doc = self.documents.get(key)
        if doc is None:
            if not upsert:
                return FakeUpdateResult()
            doc = {"_id": key, **copy.deepcopy(update.get("$setOnInsert", {}))}
            self.documents[key] = doc
            upserted_id = key
        doc.update(copy.deepcopy(update.get("$set", {})))
        return FakeUpdateResult(upserted_id)


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


@pytest.fixture
def config():
    """Debug config so cookies are not Secure-flagged over the test client's plain HTTP."""
    return Config(
        database_url="mongodb://localhost:27017/dashgate_test",
        session_secret=TEST_SECRET,
        debug=True,
    )


@pytest.fixture
def database():
    return FakeDatabase()


@pytest.fixture
def users_collection(database):
    return database.get_collection("dashboard_users")


@pytest.fixture
def core(config, database):
    return Core(config, database)


@pytest.fixture
def app(config, database):
    return App(config, database)


@pytest.fixture
def client(app, config):
    with TestClient(create_fastapi_app(app, config)) as test_client:
        yield test_client
