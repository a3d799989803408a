"""
Pytest configuration and fixtures for testing
"""
import asyncio

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from talkit.database import init_db, make_session_maker
from talkit.main import create_app
from talkit.models.document import Document
from talkit.services.identity import SharedSecretVerifier, get_verifier
from talkit.services.store import SqlDocumentStore, get_store

TEST_SECRET = "test-secret"


def make_token(subject: str = "u1", secret: str = TEST_SECRET) -> str:
    return jwt.encode({"sub": subject}, secret, algorithm="HS256")


def auth_headers(subject: str = "u1") -> dict:
    return {"Authorization": f"Bearer {make_token(subject)}"}


@pytest.fixture
def test_engine(tmp_path):
    """
    File-backed SQLite engine, one database per test.

    NullPool keeps connections from being shared between the event loops used by
    the fixtures and by TestClient.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'documents.db'}",
        poolclass=NullPool,
    )
    asyncio.run(init_db(engine))
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture
async def store(tmp_path):
    """SqlDocumentStore on a fresh database, for async gateway tests."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}", poolclass=NullPool)
    await init_db(engine)
    session = make_session_maker(engine)()
    try:
        yield SqlDocumentStore(session)
    finally:
        await session.close()
        await engine.dispose()


@pytest.fixture
def documents(test_engine):
    """Read back what the API persisted: documents(collection) -> {doc_id: data}."""
    session_maker = make_session_maker(test_engine)

    async def load(collection):
        async with session_maker() as session:
            result = await session.execute(select(Document).where(Document.collection == collection))
            return {document.doc_id: document.data for document in result.scalars()}

    def read(collection):
        return asyncio.run(load(collection))

    return read


@pytest.fixture
def app(test_engine):
    application = create_app()
    session_maker = make_session_maker(test_engine)

    async def override_get_store():
        async with session_maker() as session:
            yield SqlDocumentStore(session)

    application.dependency_overrides[get_store] = override_get_store
    application.dependency_overrides[get_verifier] = lambda: SharedSecretVerifier(TEST_SECRET)
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """FastAPI TestClient fixture with test database override"""
    return TestClient(app)
