from pydantic import BaseModel, HttpUrl
from datetime import date

from pingpanel.models.user import Plan


class UsageResponse(BaseModel):
    plan: Plan
    categories_used: int
    categories_limit: int
    events_used: int
    events_limit: int
    reset_date: date


class WebhookUpdate(BaseModel):
    webhook_url: HttpUrl | None = None


class WebhookResponse(BaseModel):
    webhook_url: str | None


class ApiKeyResponse(BaseModel):
    api_key: str


class SyncStatusResponse(BaseModel):
    is_synced: bool
