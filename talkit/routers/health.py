from fastapi import APIRouter, Depends

from talkit import __version__
from talkit.config import get_settings
from talkit.services.store import DocumentStore, StoreError, get_store

router = APIRouter(tags=["core"])


@router.get("/health")
async def health_check(store: DocumentStore = Depends(get_store)):
    try:
        await store.ping()
        store_status = "ok"
    except StoreError:
        store_status = "error"

    return {"status": "ok", "store": store_status}


@router.get("/version")
async def version():
    settings = get_settings()
    return {
        "version": __version__,
        "environment": settings.environment,
        "app_name": "Talkit API",
        "store_backend": settings.store_backend,
        "auth_backend": settings.auth_backend,
    }
