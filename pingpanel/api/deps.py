# Authentication dependencies

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from pingpanel.core.config import settings
from pingpanel.core.database import get_db
from pingpanel.models.user import User
from pingpanel.services.users import UserService

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)


def get_external_identity(request: Request) -> str | None:
    """Subject asserted by the upstream identity provider, if any"""
    external_id = request.headers.get(settings.identity_header)
    if external_id and external_id.strip():
        return external_id.strip()
    return None


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"}
    )


async def get_api_key_user(
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
        db: AsyncSession = Depends(get_db)
) -> User:
    """User owning the Bearer API key; used by the ingestion endpoint"""
    if credentials is None or not credentials.credentials:
        raise _unauthorized()

    user = await UserService(db).get_by_api_key(credentials.credentials)
    if user is None:
        logger.warning("invalid_api_key")
        raise _unauthorized()
    return user


async def get_current_user(
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
        db: AsyncSession = Depends(get_db)
) -> User:
    """
    Resolve the caller: a Bearer API key first, then the identity
    provider's subject header.
    """
    service = UserService(db)

    if credentials is not None and credentials.credentials:
        user = await service.get_by_api_key(credentials.credentials)
        if user is not None:
            return user

    external_id = get_external_identity(request)
    if external_id is None:
        raise _unauthorized()

    user = await service.get_by_external_id(external_id)
    if user is None:
        raise _unauthorized()
    return user
