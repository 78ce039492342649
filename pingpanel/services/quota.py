from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from pingpanel.models.category import EventCategory
from pingpanel.models.quota import Quota
from pingpanel.models.user import Plan, User
from pingpanel.services.windows import start_of_next_month

logger = structlog.get_logger()

FREE_QUOTA = {"max_events_per_month": 100, "max_event_categories": 3}
PRO_QUOTA = {"max_events_per_month": 1000, "max_event_categories": 10}


def quota_upsert(dialect_name: str, user_id, year: int, month: int, count: int, now: datetime):
    """INSERT ... ON CONFLICT DO UPDATE adding `count` to the month's quota row"""
    insert = postgresql.insert if dialect_name == "postgresql" else sqlite.insert
    stmt = insert(Quota).values(
        user_id=user_id,
        year=year,
        month=month,
        count=count,
        updated_at=now
    )
    return stmt.on_conflict_do_update(
        index_elements=["user_id", "year", "month"],
        set_={"count": Quota.count + count, "updated_at": now}
    )


def events_limit(user: User) -> int:
    if user.plan == Plan.PRO:
        return PRO_QUOTA["max_events_per_month"]
    return user.quota_limit or FREE_QUOTA["max_events_per_month"]


def categories_limit(user: User) -> int:
    if user.plan == Plan.PRO:
        return PRO_QUOTA["max_event_categories"]
    return FREE_QUOTA["max_event_categories"]


class QuotaService:
    """Monthly event quota bookkeeping"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_monthly_count(self, user: User, now: datetime | None = None) -> int:
        now = now or datetime.now(timezone.utc)
        result = await self.db.execute(
            select(Quota.count).where(
                Quota.user_id == user.id,
                Quota.year == now.year,
                Quota.month == now.month
            )
        )
        return result.scalar() or 0

    async def has_capacity(self, user: User, now: datetime | None = None) -> bool:
        return await self.get_monthly_count(user, now) < events_limit(user)

    async def increment(self, user: User, now: datetime | None = None) -> None:
        """Count one more event for the month, creating the row on first use"""
        now = now or datetime.now(timezone.utc)
        await self.db.execute(
            quota_upsert(self.db.bind.dialect.name, user.id, now.year, now.month, 1, now)
        )
        await self.db.flush()

    async def get_usage(self, user: User, now: datetime | None = None) -> dict[str, Any]:
        now = now or datetime.now(timezone.utc)

        categories_result = await self.db.execute(
            select(func.count(EventCategory.id)).where(EventCategory.user_id == user.id)
        )

        return {
            "plan": user.plan,
            "categories_used": categories_result.scalar() or 0,
            "categories_limit": categories_limit(user),
            "events_used": await self.get_monthly_count(user, now),
            "events_limit": events_limit(user),
            "reset_date": start_of_next_month(now).date(),
        }
