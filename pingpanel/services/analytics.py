from collections.abc import Iterable
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from pingpanel.core.errors import CategoryNotFound
from pingpanel.models.category import EventCategory
from pingpanel.models.event import Event
from pingpanel.models.user import User
from pingpanel.services.windows import (
    TimeRange,
    as_utc,
    end_of_day,
    local_now,
    start_of_day,
    start_of_month,
    start_of_week,
    window_start,
)

logger = structlog.get_logger()


def is_numeric(value: Any) -> bool:
    # bool is an int subclass but is not a measurement
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def count_unique_fields(payloads: Iterable[Any]) -> int:
    """Number of distinct top-level keys across JSON payloads"""
    field_names: set[str] = set()
    for payload in payloads:
        if isinstance(payload, dict):
            field_names.update(payload.keys())
    return len(field_names)


def rollup_numeric_fields(
        rows: Iterable[tuple[datetime, Any]],
        now: datetime
) -> dict[str, dict[str, float]]:
    """
    Sum every numeric field of (created_at, fields) rows into
    total / this_week / this_month / today buckets relative to `now`.
    """
    day_start = as_utc(start_of_day(now))
    day_end = as_utc(end_of_day(now))
    week_start = as_utc(start_of_week(now))
    month_start = as_utc(start_of_month(now))

    sums: dict[str, dict[str, float]] = {}

    for created_at, fields in rows:
        if not isinstance(fields, dict):
            continue
        created_at = as_utc(created_at)

        for field, value in fields.items():
            if not is_numeric(value):
                continue
            value = float(value)

            bucket = sums.setdefault(
                field,
                {"total": 0.0, "this_week": 0.0, "this_month": 0.0, "today": 0.0}
            )
            bucket["total"] += value
            if created_at >= week_start:
                bucket["this_week"] += value
            if created_at >= month_start:
                bucket["this_month"] += value
            if day_start <= created_at < day_end:
                bucket["today"] += value

    return sums


class CategoryAnalyticsService:
    """Windowed aggregation over a user's event categories"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @property
    def _use_postgres(self) -> bool:
        bind = self.db.bind
        return bind is not None and bind.dialect.name == "postgresql"

    async def get_category(self, user: User, name: str) -> EventCategory:
        name = name.lower()
        result = await self.db.execute(
            select(EventCategory).where(
                EventCategory.user_id == user.id,
                EventCategory.name == name
            )
        )
        category = result.scalar_one_or_none()
        if category is None:
            raise CategoryNotFound(name)
        return category

    async def list_categories_with_stats(
            self,
            user: User,
            now: datetime | None = None
    ) -> list[dict[str, Any]]:
        """All categories of a user with this month's counts and the last ping"""
        now = now or local_now()
        month_start = as_utc(start_of_month(now))

        result = await self.db.execute(
            select(EventCategory)
            .where(EventCategory.user_id == user.id)
            .order_by(EventCategory.updated_at.desc())
        )
        categories = list(result.scalars().all())
        if not categories:
            return []

        category_ids = [category.id for category in categories]

        count_result = await self.db.execute(
            select(Event.event_category_id, func.count(Event.id))
            .where(
                Event.event_category_id.in_(category_ids),
                Event.created_at >= month_start
            )
            .group_by(Event.event_category_id)
        )
        events_counts = {row[0]: row[1] for row in count_result}

        ping_result = await self.db.execute(
            select(Event.event_category_id, func.max(Event.created_at))
            .where(Event.event_category_id.in_(category_ids))
            .group_by(Event.event_category_id)
        )
        last_pings = {row[0]: row[1] for row in ping_result}

        payload_result = await self.db.execute(
            select(Event.event_category_id, Event.fields)
            .where(
                Event.event_category_id.in_(category_ids),
                Event.created_at >= month_start
            )
        )
        payloads: dict[UUID, list[Any]] = {}
        for category_id, fields in payload_result:
            payloads.setdefault(category_id, []).append(fields)

        logger.info("categories_with_stats_query", user_id=str(user.id), categories=len(categories))

        return [
            {
                "id": category.id,
                "name": category.name,
                "color": category.color,
                "emoji": category.emoji,
                "created_at": category.created_at,
                "updated_at": category.updated_at,
                "unique_field_count": count_unique_fields(payloads.get(category.id, [])),
                "events_count": events_counts.get(category.id, 0),
                "last_ping": as_utc(last_pings[category.id]) if last_pings.get(category.id) else None,
            }
            for category in categories
        ]

    async def get_events_by_category_name(
            self,
            user: User,
            name: str,
            page: int = 1,
            limit: int = 30,
            time_range: TimeRange = TimeRange.TODAY,
            now: datetime | None = None
    ) -> dict[str, Any]:
        """One page of events in the window plus window-wide aggregates"""
        now = now or local_now()
        category = await self.get_category(user, name)
        since = as_utc(window_start(time_range, now))

        in_window = (
            Event.event_category_id == category.id,
            Event.created_at >= since,
        )

        events_result = await self.db.execute(
            select(Event)
            .where(*in_window)
            .order_by(Event.created_at.desc(), Event.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        events = list(events_result.scalars().all())

        count_result = await self.db.execute(
            select(func.count(Event.id)).where(*in_window)
        )
        events_count = count_result.scalar() or 0

        if self._use_postgres:
            unique_field_count = await self._unique_field_count_postgres(category.id, since)
            numeric_field_sums = await self._numeric_field_sums_postgres(category.id, since, now)
        else:
            rows_result = await self.db.execute(
                select(Event.created_at, Event.fields).where(*in_window)
            )
            rows = [(row[0], row[1]) for row in rows_result]
            unique_field_count = count_unique_fields(fields for _, fields in rows)
            numeric_field_sums = rollup_numeric_fields(rows, now)

        logger.info(
            "category_events_query",
            category=name,
            time_range=time_range.value,
            page=page,
            limit=limit,
            events_count=events_count
        )

        return {
            "events": events,
            "events_count": events_count,
            "unique_field_count": unique_field_count,
            "numeric_field_sums": numeric_field_sums,
        }

    async def _unique_field_count_postgres(self, category_id: UUID, since: datetime) -> int:
        """Count distinct JSONB keys in the database"""
        query = text("""
            SELECT COUNT(DISTINCT keys.field)
            FROM (
                SELECT fields
                FROM events
                WHERE event_category_id = :category_id
                AND created_at >= :since
                AND jsonb_typeof(fields) = 'object'
            ) AS e
            CROSS JOIN LATERAL jsonb_object_keys(e.fields) AS keys(field)
        """)
        result = await self.db.execute(query, {"category_id": category_id, "since": since})
        return result.scalar() or 0

    async def _numeric_field_sums_postgres(
            self,
            category_id: UUID,
            since: datetime,
            now: datetime
    ) -> dict[str, dict[str, float]]:
        """Roll numeric JSONB values up per bucket in the database"""
        day_start = as_utc(start_of_day(now))
        query = text("""
            SELECT
                kv.key AS field,
                SUM(kv.num) AS total,
                COALESCE(SUM(kv.num) FILTER (WHERE e.created_at >= :week_start), 0) AS this_week,
                COALESCE(SUM(kv.num) FILTER (WHERE e.created_at >= :month_start), 0) AS this_month,
                COALESCE(SUM(kv.num) FILTER (
                    WHERE e.created_at >= :day_start AND e.created_at < :day_end
                ), 0) AS today
            FROM (
                SELECT created_at, fields
                FROM events
                WHERE event_category_id = :category_id
                AND created_at >= :since
                AND jsonb_typeof(fields) = 'object'
            ) AS e
            CROSS JOIN LATERAL (
                SELECT key, (value #>> '{}')::double precision AS num
                FROM jsonb_each(e.fields)
                WHERE jsonb_typeof(value) = 'number'
            ) AS kv
            GROUP BY kv.key
        """)
        result = await self.db.execute(
            query,
            {
                "category_id": category_id,
                "since": since,
                "week_start": as_utc(start_of_week(now)),
                "month_start": as_utc(start_of_month(now)),
                "day_start": day_start,
                "day_end": as_utc(end_of_day(now)),
            }
        )
        return {
            row.field: {
                "total": row.total,
                "this_week": row.this_week,
                "this_month": row.this_month,
                "today": row.today,
            }
            for row in result
        }

    async def poll_category(self, user: User, name: str) -> bool:
        """Whether the category has received any event yet"""
        category = await self.get_category(user, name)
        result = await self.db.execute(
            select(func.count(Event.id)).where(Event.event_category_id == category.id)
        )
        return (result.scalar() or 0) > 0
