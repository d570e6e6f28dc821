"""
Shared fixtures: an in-memory stand-in for the async MongoDB driver.

The fakes yield to the event loop on every call so concurrent copies really
interleave, and they raise the driver's own exception types.
"""

import asyncio
import os
import tempfile
from unittest.mock import AsyncMock

import pytest
from pymongo.errors import DuplicateKeyError

# Keep log files out of the working tree; read before utils is imported
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="mongo-clone-logs-"))

from connector import DatabaseHandle  # noqa: E402


class FakeCursor:
    def __init__(self, docs):
        self._docs = [dict(doc) for doc in docs]

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._docs:
            await asyncio.sleep(0)
            yield doc


class FakeCollection:
    def __init__(self, name, unique_fields=("_id",)):
        self.name = name
        self.unique_fields = unique_fields
        self.docs = []
        self.explicit = False
        self.find_calls = []

    @property
    def exists(self):
        return self.explicit or bool(self.docs)

    async def count_documents(self, filter):
        await asyncio.sleep(0)
        return len(self.docs)

    def find(self, filter=None, batch_size=0):
        self.find_calls.append(batch_size)
        return FakeCursor(self.docs)

    async def insert_one(self, doc):
        await asyncio.sleep(0)
        for field in self.unique_fields:
            if field in doc and any(d.get(field) == doc[field] for d in self.docs):
                raise DuplicateKeyError(
                    f"E11000 duplicate key error collection: {self.name} index: {field}_1",
                    11000,
                )
        self.docs.append(dict(doc))


class FakeDatabase:
    def __init__(self, name):
        self.name = name
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    def seed(self, name, docs, unique_fields=("_id",)):
        collection = self[name]
        collection.unique_fields = unique_fields
        collection.explicit = True
        collection.docs.extend(dict(doc) for doc in docs)
        return collection

    async def list_collection_names(self):
        await asyncio.sleep(0)
        return [name for name, c in self.collections.items() if c.exists]


class FakeClient:
    def __init__(self):
        self.databases = {}
        self.dropped = []
        self.closed = False
        self.admin = AsyncMock()
        self.admin.command = AsyncMock(return_value={"ok": 1.0})

    def __getitem__(self, name):
        if name not in self.databases:
            self.databases[name] = FakeDatabase(name)
        return self.databases[name]

    async def drop_database(self, name):
        await asyncio.sleep(0)
        self.dropped.append(name)
        self.databases.pop(name, None)

    async def close(self):
        self.closed = True


def make_docs(prefix, count):
    return [{"_id": f"{prefix}-{i}", "n": i} for i in range(count)]


@pytest.fixture
def source_client():
    return FakeClient()


@pytest.fixture
def target_client():
    return FakeClient()


@pytest.fixture
def source(source_client):
    return DatabaseHandle(name="shop", client=source_client)


@pytest.fixture
def target(target_client):
    return DatabaseHandle(name="shop_copy", client=target_client)


@pytest.fixture
def seeded_source(source):
    """Source holding users (3 docs) and orders (2 docs)."""
    source.db.seed("users", make_docs("user", 3))
    source.db.seed("orders", make_docs("order", 2))
    return source
