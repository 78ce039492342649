from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pingpanel.api.deps import get_current_user
from pingpanel.core.database import get_db
from pingpanel.models.user import User
from pingpanel.schemas.account import ApiKeyResponse, UsageResponse, WebhookResponse, WebhookUpdate
from pingpanel.services.quota import QuotaService
from pingpanel.services.users import UserService

router = APIRouter(prefix="/account", tags=["account"])


@router.get("/usage", response_model=UsageResponse)
async def get_usage(
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Categories and this month's events against the plan limits"""
    return await QuotaService(db).get_usage(user)


@router.put("/webhook", response_model=WebhookResponse)
async def update_webhook(
        data: WebhookUpdate,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Set the URL events are delivered to; `null` disables delivery"""
    webhook_url = str(data.webhook_url) if data.webhook_url else None
    user = await UserService(db).update_webhook(user, webhook_url)
    return WebhookResponse(webhook_url=user.webhook_url)


@router.get("/api-key", response_model=ApiKeyResponse)
async def get_api_key(user: User = Depends(get_current_user)):
    return ApiKeyResponse(api_key=user.api_key)


@router.post("/api-key/rotate", response_model=ApiKeyResponse)
async def rotate_api_key(
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Issue a new API key; the old one stops working immediately"""
    api_key = await UserService(db).rotate_api_key(user)
    return ApiKeyResponse(api_key=api_key)
