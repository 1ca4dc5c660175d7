"""
petstore_orders.domain

Order domain types shared by the API, services and storage adapters.

Responsibilities:
- Define `OrderStatus` (four named states, no transition rules).
- Define the `Order` value exchanged with repositories and serialized as JSON.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Columns are signed BIGINT.
MAX_ID = 2**63 - 1


class OrderStatus(enum.StrEnum):
    # Names equal values: the DB enum stores names, the JSON carries values.
    awaiting = "awaiting"
    approved = "approved"
    delivered = "delivered"
    cancelled = "cancelled"


class Order(BaseModel):
    """
    A pet-store order. Every field except `id` may be overwritten by an update.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int = Field(ge=0, le=MAX_ID)
    user_id: int = Field(ge=0, le=MAX_ID)
    pet_id: int = Field(ge=0, le=MAX_ID)
    quantity: int = Field(ge=0, le=MAX_ID)
    ship_date: datetime | None = None
    status: OrderStatus

    @field_validator("ship_date")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
