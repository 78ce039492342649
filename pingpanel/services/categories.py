from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from pingpanel.core.errors import CategoryAlreadyExists, CategoryLimitReached, CategoryNotFound
from pingpanel.models.category import EventCategory
from pingpanel.models.user import User
from pingpanel.schemas.category import CategoryCreate, parse_color
from pingpanel.services.quota import categories_limit

logger = structlog.get_logger()

QUICKSTART_CATEGORIES = [
    {"name": "bug", "emoji": "\U0001f41b", "color": 0xff6b6b},
    {"name": "sale", "emoji": "\U0001f4b0", "color": 0xffeb3b},
    {"name": "question", "emoji": "\U0001f914", "color": 0x6c5ce7},
]


class CategoryService:
    """Create and delete a user's event categories"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, user: User) -> int:
        result = await self.db.execute(
            select(func.count(EventCategory.id)).where(EventCategory.user_id == user.id)
        )
        return result.scalar() or 0

    async def create_event_category(self, user: User, data: CategoryCreate) -> EventCategory:
        name = data.name.lower()

        limit = categories_limit(user)
        if await self._count(user) >= limit:
            raise CategoryLimitReached(limit)

        category = EventCategory(
            name=name,
            color=parse_color(data.color),
            emoji=data.emoji,
            user_id=user.id
        )
        self.db.add(category)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise CategoryAlreadyExists(name)

        await self.db.refresh(category)
        logger.info("category_created", user_id=str(user.id), name=name, color=data.color)
        return category

    async def delete_category(self, user: User, name: str) -> None:
        name = name.lower()
        result = await self.db.execute(
            delete(EventCategory).where(
                EventCategory.user_id == user.id,
                EventCategory.name == name
            )
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise CategoryNotFound(name)

        await self.db.commit()
        logger.info("category_deleted", user_id=str(user.id), name=name)

    async def insert_quickstart_categories(self, user: User) -> int:
        """Create the starter categories the user does not have yet"""
        result = await self.db.execute(
            select(EventCategory.name).where(EventCategory.user_id == user.id)
        )
        existing = {row[0] for row in result}

        created = 0
        for data in QUICKSTART_CATEGORIES:
            if data["name"] in existing:
                continue
            self.db.add(EventCategory(user_id=user.id, **data))
            created += 1

        await self.db.commit()
        logger.info("quickstart_categories_created", user_id=str(user.id), count=created)
        return created
