"""
Unit tests for the record schemas
"""
import pytest
from pydantic import ValidationError

from talkit.models.records import DeleteRequest, Profile, Subscription


def test_profile_accepts_wire_names():
    profile = Profile.model_validate_json(
        '{"uid":"u1","displayName":"Ana","price":0,"type":"t","year":"2024",'
        '"image":"","description":"","slug":"ana"}'
    )

    assert profile.id == "u1"
    assert profile.name == "Ana"
    assert profile.price == 0
    assert profile.slug == "ana"


def test_profile_accepts_attribute_names():
    profile = Profile.model_validate({"id": "u2", "name": "Bruno"})

    assert profile.id == "u2"
    assert profile.name == "Bruno"


def test_profile_document_uses_wire_names_and_skips_missing_fields():
    profile = Profile.model_validate({"id": "u1", "name": "Ana", "image": ""})

    assert profile.to_document() == {"uid": "u1", "displayName": "Ana", "image": ""}


@pytest.mark.parametrize("body", [
    "{",
    "",
    "[]",
    '{"displayName":"Ana"}',
    '{"uid":""}',
    '{"uid":"u1","price":"cheap"}',
])
def test_profile_rejects_malformed_bodies(body):
    with pytest.raises(ValidationError):
        Profile.model_validate_json(body)


def test_subscription_defaults():
    subscription = Subscription.model_validate({"uid": "u1"})

    assert subscription.to_document() == {
        "uid": "u1",
        "expired": False,
        "suscriptionType": "free-trial",
        "cost": 0,
    }


def test_subscription_parses_timestamps():
    subscription = Subscription.model_validate_json(
        '{"uid":"u1","expired":true,"suscriptionType":"premium","cost":9.99,'
        '"createdAt":"2024-01-01T10:00:00-03:00","expireAt":"2024-03-25T10:00:00-03:00"}'
    )

    assert subscription.expired is True
    assert subscription.suscription_type == "premium"
    assert (subscription.expire_at - subscription.created_at).days == 84


def test_delete_request_takes_id_or_uid():
    assert DeleteRequest.model_validate_json('{"id":"u1"}').id == "u1"
    assert DeleteRequest.model_validate_json('{"uid":"u1"}').id == "u1"
    with pytest.raises(ValidationError):
        DeleteRequest.model_validate_json('{"id":""}')
