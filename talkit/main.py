from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from talkit import __version__
from talkit.config import get_settings
from talkit.database import init_db
from talkit.responses import internal_error_response, unsupported_method_response
from talkit.routers import health_router, users_router, suscriptions_router
from talkit.services.store import StoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if settings.store_backend == "sql":
        await init_db()
        logger.info("Document tables ready at %s", settings.database_url)
    logger.info("Talkit API started (store=%s, auth=%s)", settings.store_backend, settings.auth_backend)
    yield


async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store unavailable for %s %s: %s", request.method, request.url.path, exc)
    response = internal_error_response()
    response.headers["Access-Control-Allow-Origin"] = "*"
    return response


async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    # verbs the resource routes do not list still get the dispatcher's answer
    if exc.status_code != 405:
        return await http_exception_handler(request, exc)
    response = unsupported_method_response()
    response.headers["Access-Control-Allow-Origin"] = "*"
    return response


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Talkit API",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(StarletteHTTPException, method_not_allowed_handler)

    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(suscriptions_router)

    @app.get("/")
    async def root():
        return {
            "message": "Talkit API",
            "version": __version__,
            "environment": settings.environment,
            "endpoints": {
                "GET /users?uid=": "Read a profile",
                "POST /users": "Create a profile and its free-trial subscription",
                "PUT /users": "Overwrite a profile",
                "DELETE /users": "Delete a profile",
                "GET /suscriptions?uid=": "Read a subscription",
                "POST /suscriptions": "Create a subscription",
                "PUT /suscriptions": "Overwrite a subscription",
                "DELETE /suscriptions": "Delete a subscription",
            },
        }

    return app


app = create_app()


def run():
    settings = get_settings()
    uvicorn.run(
        "talkit.main:app",
        host=settings.host,
        port=settings.port,
        timeout_keep_alive=settings.request_timeout,
        reload=not settings.is_production,
    )


if __name__ == "__main__":
    run()
