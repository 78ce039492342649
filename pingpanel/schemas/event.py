# Pydantic schemas

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from uuid import UUID
from typing import Any

from pingpanel.models.event import DeliveryStatus
from pingpanel.schemas.category import CATEGORY_NAME_PATTERN

FieldValue = str | int | float | bool


class EventCreate(BaseModel):
    """Schema for an event sent with an API key"""

    category: str = Field(..., min_length=1, max_length=64, pattern=CATEGORY_NAME_PATTERN)
    fields: dict[str, FieldValue] = Field(default_factory=dict)
    description: str | None = Field(default=None, max_length=2000)

    @field_validator("fields")
    @classmethod
    def validate_field_names(cls, v: dict[str, FieldValue]) -> dict[str, FieldValue]:
        for key in v:
            if not key or not key.strip():
                raise ValueError("Field names cannot be empty or whitespace")
        return v


class EventResponse(BaseModel):
    """Response schema for a stored event"""

    id: UUID
    name: str
    formatted_message: str
    # stored payloads are any JSON value, not only flat objects
    fields: Any
    delivery_status: DeliveryStatus
    event_category_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class IngestResponse(BaseModel):
    """Response for event ingestion"""

    message: str
    event_id: UUID
    delivery_status: DeliveryStatus
