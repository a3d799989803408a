"""
Document store gateway.

Two backends implement the same narrow interface:

- ``FirestoreDocumentStore`` talks to Cloud Firestore through the async client.
- ``SqlDocumentStore`` keeps documents as JSON rows in a single SQL table, used for
  local development and tests.

Every failure of the underlying client is raised as ``StoreError``.
"""
from __future__ import annotations

import inspect
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from google.api_core import exceptions as gcp_exceptions
from google.auth.exceptions import GoogleAuthError
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from sqlalchemy import delete, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from talkit.config import Settings, get_settings
from talkit.database import get_session_maker
from talkit.models.document import Document

logger = logging.getLogger(__name__)

_FIRESTORE_ERRORS = (gcp_exceptions.GoogleAPICallError, gcp_exceptions.RetryError, GoogleAuthError)


class StoreError(Exception):
    """Raised when the document store cannot complete an operation."""


class DocumentStore(ABC):
    @abstractmethod
    async def create(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """Create a document. Fails if the key already exists."""

    @abstractmethod
    async def set(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """Create or fully overwrite a document."""

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing document is not an error."""

    @abstractmethod
    async def query(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        """Return every document of ``collection`` whose ``field`` equals ``value``."""

    @abstractmethod
    async def ping(self) -> None:
        ...

    async def aclose(self) -> None:
        return None


class FirestoreDocumentStore(DocumentStore):
    def __init__(self, client: firestore.AsyncClient):
        self.client = client

    async def create(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        try:
            await self.client.collection(collection).document(doc_id).create(fields)
        except _FIRESTORE_ERRORS as e:
            raise StoreError(f"create {collection}/{doc_id} failed: {e}") from e

    async def set(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        try:
            await self.client.collection(collection).document(doc_id).set(fields)
        except _FIRESTORE_ERRORS as e:
            raise StoreError(f"set {collection}/{doc_id} failed: {e}") from e

    async def delete(self, collection: str, doc_id: str) -> None:
        try:
            await self.client.collection(collection).document(doc_id).delete()
        except _FIRESTORE_ERRORS as e:
            raise StoreError(f"delete {collection}/{doc_id} failed: {e}") from e

    async def query(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        query = self.client.collection(collection).where(filter=FieldFilter(field, "==", value))
        documents = []
        try:
            async for snapshot in query.stream():
                documents.append(snapshot.to_dict() or {})
        except _FIRESTORE_ERRORS as e:
            raise StoreError(f"query {collection} where {field} == {value!r} failed: {e}") from e
        return documents

    async def ping(self) -> None:
        try:
            async for _ in self.client.collections():
                break
        except _FIRESTORE_ERRORS as e:
            raise StoreError(f"firestore unreachable: {e}") from e

    async def aclose(self) -> None:
        # grpc.aio transports hand back a coroutine, the sync transport does not
        result = self.client.close()
        if inspect.isawaitable(result):
            await result


class SqlDocumentStore(DocumentStore):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _commit(self, action: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError(f"{action} failed: {e}") from e

    async def create(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        try:
            existing = await self.session.get(Document, (collection, doc_id))
        except SQLAlchemyError as e:
            raise StoreError(f"create {collection}/{doc_id} failed: {e}") from e
        if existing is not None:
            raise StoreError(f"create {collection}/{doc_id} failed: document already exists")

        self.session.add(Document(collection=collection, doc_id=doc_id, data=jsonable_encoder(fields)))
        await self._commit(f"create {collection}/{doc_id}")

    async def set(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        data = jsonable_encoder(fields)
        try:
            document = await self.session.get(Document, (collection, doc_id))
        except SQLAlchemyError as e:
            raise StoreError(f"set {collection}/{doc_id} failed: {e}") from e

        if document is None:
            self.session.add(Document(collection=collection, doc_id=doc_id, data=data))
        else:
            document.data = data
        await self._commit(f"set {collection}/{doc_id}")

    async def delete(self, collection: str, doc_id: str) -> None:
        try:
            await self.session.execute(
                delete(Document).where(Document.collection == collection, Document.doc_id == doc_id)
            )
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreError(f"delete {collection}/{doc_id} failed: {e}") from e
        await self._commit(f"delete {collection}/{doc_id}")

    async def query(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        try:
            result = await self.session.execute(
                select(Document.data)
                .where(Document.collection == collection)
                .order_by(Document.doc_id)
            )
        except SQLAlchemyError as e:
            raise StoreError(f"query {collection} where {field} == {value!r} failed: {e}") from e
        return [data for data in result.scalars() if data.get(field) == value]

    async def ping(self) -> None:
        try:
            await self.session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StoreError(f"database unreachable: {e}") from e

    async def aclose(self) -> None:
        await self.session.close()


@asynccontextmanager
async def open_store(settings: Optional[Settings] = None) -> AsyncIterator[DocumentStore]:
    """Acquire a store handle for one request and release it on every exit path."""
    settings = settings or get_settings()

    if settings.store_backend == "sql":
        store: DocumentStore = SqlDocumentStore(get_session_maker()())
    else:
        try:
            store = FirestoreDocumentStore(firestore.AsyncClient(project=settings.project_id))
        except _FIRESTORE_ERRORS as e:
            logger.error("Firestore init: %s", e)
            raise StoreError(f"firestore init failed: {e}") from e

    try:
        yield store
    finally:
        await store.aclose()


async def get_store() -> AsyncIterator[DocumentStore]:
    async with open_store() as store:
        yield store
