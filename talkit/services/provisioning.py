from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from talkit.config import Settings, get_settings
from talkit.models.records import COLLECTION_SUSCRIPTIONS, Subscription
from talkit.services.store import DocumentStore

logger = logging.getLogger(__name__)

TRIAL_SUSCRIPTION_TYPE = "free-trial"


def build_trial_subscription(
    profile_id: str,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> Subscription:
    """
    Free-trial subscription for a freshly created profile.

    ``createdAt`` is the current instant in the configured trial time zone and
    ``expireAt`` is exactly ``trial_days`` later.
    """
    settings = settings or get_settings()
    if now is None:
        now = datetime.now(ZoneInfo(settings.trial_timezone))

    return Subscription(
        id=profile_id,
        expired=False,
        suscription_type=TRIAL_SUSCRIPTION_TYPE,
        cost=0,
        created_at=now,
        expire_at=now + timedelta(days=settings.trial_days),
    )


async def provision_subscription(
    store: DocumentStore,
    profile_id: str,
    settings: Optional[Settings] = None,
) -> Subscription:
    """Persist the trial subscription keyed by the profile id. Raises ``StoreError``."""
    subscription = build_trial_subscription(profile_id, settings=settings)
    await store.create(COLLECTION_SUSCRIPTIONS, profile_id, subscription.to_document())
    logger.info("Provisioned %s subscription for %s until %s",
                TRIAL_SUSCRIPTION_TYPE, profile_id, subscription.expire_at.isoformat())
    return subscription
