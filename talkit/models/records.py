"""
Record schemas stored in the document collections.

Field names on the wire and in the store follow the documents the mobile client
already writes (``uid``, ``displayName``, ``suscriptionType``...). Inputs also accept
the plain attribute names.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

COLLECTION_USERS = "Users"
COLLECTION_SUSCRIPTIONS = "Suscriptions"


def _key_field() -> Any:
    return Field(
        min_length=1,
        validation_alias=AliasChoices("uid", "id"),
        serialization_alias="uid",
    )


class Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = _key_field()

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Profile(Record):
    name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("displayName", "name"),
        serialization_alias="displayName",
    )
    price: Optional[float] = None
    type: Optional[str] = None
    year: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None
    slug: Optional[str] = None


class Subscription(Record):
    expired: bool = False
    suscription_type: str = Field(
        default="free-trial",
        validation_alias=AliasChoices("suscriptionType", "suscription_type"),
        serialization_alias="suscriptionType",
    )
    cost: float = 0
    expire_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("expireAt", "expire_at"),
        serialization_alias="expireAt",
    )
    created_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("createdAt", "created_at"),
        serialization_alias="createdAt",
    )


class DeleteRequest(BaseModel):
    """Body of a DELETE call."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1, validation_alias=AliasChoices("id", "uid"))
