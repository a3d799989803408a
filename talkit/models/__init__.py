from talkit.models.document import Document
from talkit.models.records import (
    COLLECTION_SUSCRIPTIONS,
    COLLECTION_USERS,
    DeleteRequest,
    Profile,
    Record,
    Subscription,
)

__all__ = [
    "COLLECTION_SUSCRIPTIONS",
    "COLLECTION_USERS",
    "Document",
    "DeleteRequest",
    "Profile",
    "Record",
    "Subscription",
]
