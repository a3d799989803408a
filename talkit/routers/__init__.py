from talkit.routers.health import router as health_router
from talkit.routers.users import router as users_router
from talkit.routers.suscriptions import router as suscriptions_router

__all__ = ["health_router", "users_router", "suscriptions_router"]
