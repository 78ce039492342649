from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from pingpanel.core.config import settings
from pingpanel.models.user import User, generate_api_key

logger = structlog.get_logger()


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_api_key(self, api_key: str) -> User | None:
        result = await self.db.execute(select(User).where(User.api_key == api_key))
        return result.scalar_one_or_none()

    async def get_by_external_id(self, external_id: str) -> User | None:
        result = await self.db.execute(select(User).where(User.external_id == external_id))
        return result.scalar_one_or_none()

    async def sync_user(self, external_id: str, email: str | None) -> User:
        """Make sure a user asserted by the identity provider exists locally"""
        user = await self.get_by_external_id(external_id)
        if user is not None:
            return user

        user = User(
            external_id=external_id,
            email=email or f"{external_id}@users.pingpanel.local",
            quota_limit=settings.default_quota_limit
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        logger.info("user_synced", user_id=str(user.id), external_id=external_id)
        return user

    async def update_webhook(self, user: User, webhook_url: str | None) -> User:
        user.webhook_url = webhook_url
        await self.db.commit()
        logger.info("webhook_updated", user_id=str(user.id), configured=webhook_url is not None)
        return user

    async def rotate_api_key(self, user: User) -> str:
        user.api_key = generate_api_key()
        await self.db.commit()
        logger.info("api_key_rotated", user_id=str(user.id))
        return user.api_key
