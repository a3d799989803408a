"""
Generic document resource: one endpoint per collection, dispatched by HTTP method.

    OPTIONS  CORS preflight, headers only
    GET      read the first document whose ``uid`` matches ``?uid=``
    POST     create the document keyed by the record id      (token required)
    PUT      overwrite the document keyed by the record id   (token required)
    DELETE   delete the document named by ``{"id": ...}``    (token required)

Any other method gets a plain ``404 UNSUPPORTED METHOD``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Type, TypeVar

from fastapi import APIRouter, Depends, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from talkit.models.records import DeleteRequest, Record
from talkit.responses import (
    bad_request_response,
    forbidden_response,
    internal_error_response,
    not_found_response,
    unsupported_method_response,
)
from talkit.services.identity import (
    IdentityServiceError,
    IdentityVerifier,
    VerificationError,
    clean_token,
    get_verifier,
)
from talkit.services.store import DocumentStore, StoreError, get_store

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DISPATCHED_METHODS = ["GET", "HEAD", "POST", "PUT", "DELETE", "OPTIONS", "PATCH", "TRACE"]

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Max-Age": "3600",
}

QUERY_FIELD = "uid"


@dataclass(frozen=True)
class Resource:
    path: str
    collection: str
    schema: Type[Record]
    # runs after a successful create; a StoreError turns the response into a 500
    after_create: Optional[Callable[[DocumentStore, Record], Awaitable[object]]] = None


async def _decode(request: Request, schema: Type[ModelT]) -> Optional[ModelT]:
    body = await request.body()
    try:
        return schema.model_validate_json(body)
    except ValidationError as e:
        logger.warning("Unmarshalling json failed on %s %s: %s",
                       request.method, request.url.path, e.errors(include_url=False))
        return None


async def authorize_request(request: Request, verifier: IdentityVerifier) -> Optional[Response]:
    """Return the response that ends the request, or None when the caller may proceed."""
    token = clean_token(request.headers.get("Authorization"))
    try:
        claims = await verifier.verify(token)
    except VerificationError as e:
        logger.warning("Rejected token on %s %s: %s", request.method, request.url.path, e)
        return forbidden_response()
    except IdentityServiceError as e:
        logger.error("Identity verification unavailable: %s", e)
        return internal_error_response("Identity verification unavailable")

    logger.info("Verified ID token for %s", claims.get("sub"))
    return None


async def read_document(resource: Resource, store: DocumentStore, request: Request) -> Response:
    uid = request.query_params.get(QUERY_FIELD, "")
    try:
        documents = await store.query(resource.collection, QUERY_FIELD, uid)
    except StoreError as e:
        logger.error("Iteration over documents failed: %s", e)
        return internal_error_response()

    if not documents:
        return not_found_response()
    return JSONResponse(content=jsonable_encoder(documents[0]))


async def create_document(resource: Resource, store: DocumentStore, request: Request) -> Response:
    record = await _decode(request, resource.schema)
    if record is None:
        return bad_request_response()

    try:
        await store.create(resource.collection, record.id, record.to_document())
    except StoreError as e:
        logger.error("Collection update failed: %s", e)
        return internal_error_response()

    if resource.after_create is not None:
        try:
            await resource.after_create(store, record)
        except StoreError as e:
            # the created document stays; the two writes are independent
            logger.error("Post-create step for %s/%s failed: %s", resource.collection, record.id, e)
            return internal_error_response()

    return Response(status_code=201)


async def update_document(resource: Resource, store: DocumentStore, request: Request) -> Response:
    record = await _decode(request, resource.schema)
    if record is None:
        return bad_request_response()

    try:
        await store.set(resource.collection, record.id, record.to_document())
    except StoreError as e:
        logger.error("Document update failed: %s", e)
        return internal_error_response()

    return Response(status_code=200)


async def delete_document(resource: Resource, store: DocumentStore, request: Request) -> Response:
    body = await _decode(request, DeleteRequest)
    if body is None:
        return bad_request_response()

    try:
        await store.delete(resource.collection, body.id)
    except StoreError as e:
        logger.error("Document deletion failed: %s", e)
        return internal_error_response()

    return Response(status_code=200)


MUTATIONS = {
    "POST": create_document,
    "PUT": update_document,
    "DELETE": delete_document,
}


def build_resource_router(resource: Resource) -> APIRouter:
    router = APIRouter(tags=[resource.collection.lower()])

    @router.api_route(resource.path, methods=DISPATCHED_METHODS, name=f"{resource.collection.lower()}_api")
    async def dispatch(
        request: Request,
        store: DocumentStore = Depends(get_store),
        verifier: IdentityVerifier = Depends(get_verifier),
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=PREFLIGHT_HEADERS)

        if request.method == "GET":
            response = await read_document(resource, store, request)
        elif request.method in MUTATIONS:
            response = await authorize_request(request, verifier)
            if response is None:
                response = await MUTATIONS[request.method](resource, store, request)
        else:
            response = unsupported_method_response()

        response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    return router
