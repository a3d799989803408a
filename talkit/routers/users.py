from talkit.models.records import COLLECTION_USERS, Profile, Record
from talkit.routers.resources import Resource, build_resource_router
from talkit.services.provisioning import provision_subscription
from talkit.services.store import DocumentStore


async def provision_trial(store: DocumentStore, profile: Record) -> None:
    await provision_subscription(store, profile.id)


users = Resource(
    path="/users",
    collection=COLLECTION_USERS,
    schema=Profile,
    after_create=provision_trial,
)

router = build_resource_router(users)
