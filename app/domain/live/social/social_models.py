"""Subscription graph domain models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class SubscriptionResponse(BaseModel):
    """Directed edge: ``subscriber_id`` follows ``subscribe_to_id``."""

    model_config = ConfigDict(from_attributes=True)

    subscriber_id: str
    subscribe_to_id: str
    created_at: datetime
