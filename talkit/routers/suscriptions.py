from talkit.models.records import COLLECTION_SUSCRIPTIONS, Subscription
from talkit.routers.resources import Resource, build_resource_router

suscriptions = Resource(
    path="/suscriptions",
    collection=COLLECTION_SUSCRIPTIONS,
    schema=Subscription,
)

router = build_resource_router(suscriptions)
