"""
Tests for the SQL-backed document store gateway
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from talkit.services.store import StoreError


@pytest.mark.asyncio
async def test_create_and_query(store):
    await store.create("Users", "u1", {"uid": "u1", "displayName": "Ana"})
    await store.create("Users", "u2", {"uid": "u2", "displayName": "Bruno"})

    assert await store.query("Users", "uid", "u1") == [{"uid": "u1", "displayName": "Ana"}]
    assert await store.query("Users", "displayName", "Bruno") == [{"uid": "u2", "displayName": "Bruno"}]
    assert await store.query("Users", "uid", "missing") == []


@pytest.mark.asyncio
async def test_collections_are_isolated(store):
    await store.create("Users", "u1", {"uid": "u1"})

    assert await store.query("Suscriptions", "uid", "u1") == []


@pytest.mark.asyncio
async def test_create_refuses_existing_document(store):
    await store.create("Users", "u1", {"uid": "u1", "displayName": "Ana"})

    with pytest.raises(StoreError):
        await store.create("Users", "u1", {"uid": "u1", "displayName": "Other"})

    assert await store.query("Users", "uid", "u1") == [{"uid": "u1", "displayName": "Ana"}]


@pytest.mark.asyncio
async def test_set_overwrites_whole_document(store):
    await store.create("Users", "u1", {"uid": "u1", "displayName": "Ana", "slug": "ana"})

    await store.set("Users", "u1", {"uid": "u1", "displayName": "Ana María"})

    assert await store.query("Users", "uid", "u1") == [{"uid": "u1", "displayName": "Ana María"}]


@pytest.mark.asyncio
async def test_set_creates_missing_document(store):
    await store.set("Users", "u9", {"uid": "u9"})

    assert await store.query("Users", "uid", "u9") == [{"uid": "u9"}]


@pytest.mark.asyncio
async def test_delete(store):
    await store.create("Users", "u1", {"uid": "u1"})

    await store.delete("Users", "u1")
    await store.delete("Users", "never-existed")

    assert await store.query("Users", "uid", "u1") == []


@pytest.mark.asyncio
async def test_datetimes_are_stored_as_iso_strings(store):
    moment = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    await store.create("Suscriptions", "u1", {"uid": "u1", "createdAt": moment})

    [document] = await store.query("Suscriptions", "uid", "u1")
    assert datetime.fromisoformat(document["createdAt"]) == moment


@pytest.mark.asyncio
async def test_ping(store):
    await store.ping()


@pytest.mark.asyncio
async def test_database_errors_become_store_errors(store, monkeypatch):
    async def broken_execute(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(store.session, "execute", broken_execute)

    with pytest.raises(StoreError):
        await store.query("Users", "uid", "u1")
    with pytest.raises(StoreError):
        await store.ping()
