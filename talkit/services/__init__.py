from talkit.services.identity import IdentityVerifier, FirebaseTokenVerifier, SharedSecretVerifier
from talkit.services.store import DocumentStore, FirestoreDocumentStore, SqlDocumentStore

__all__ = [
    "IdentityVerifier",
    "FirebaseTokenVerifier",
    "SharedSecretVerifier",
    "DocumentStore",
    "FirestoreDocumentStore",
    "SqlDocumentStore",
]
