from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pingpanel.api.deps import get_external_identity
from pingpanel.core.config import settings
from pingpanel.core.database import get_db
from pingpanel.schemas.account import SyncStatusResponse
from pingpanel.services.users import UserService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/sync", response_model=SyncStatusResponse)
async def get_database_sync_status(request: Request, db: AsyncSession = Depends(get_db)):
    """
    Mirror the signed-in identity into the local user table.

    Returns `is_synced: false` when the identity provider asserted nobody.
    """
    external_id = get_external_identity(request)
    if external_id is None:
        return SyncStatusResponse(is_synced=False)

    email = request.headers.get(settings.identity_email_header)
    await UserService(db).sync_user(external_id, email)
    return SyncStatusResponse(is_synced=True)
