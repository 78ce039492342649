from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import httpx
import structlog

from pingpanel.core.errors import CategoryNotFound, DeliveryFailed, QuotaExceeded
from pingpanel.models.category import EventCategory
from pingpanel.models.event import DeliveryStatus, Event
from pingpanel.models.user import User
from pingpanel.schemas.event import EventCreate
from pingpanel.services.delivery import WebhookDelivery
from pingpanel.services.quota import QuotaService, events_limit

logger = structlog.get_logger()

DEFAULT_EMOJI = "\U0001f514"


def format_event_message(category: EventCategory, description: str | None, fields: dict) -> str:
    """Human readable notification text for an event"""
    title = f"{category.emoji or DEFAULT_EMOJI} {category.name.capitalize()}"
    lines = [title, "", description or f"A new {category.name} event has occurred!"]
    if fields:
        lines.append("")
        lines.extend(f"{key}: {value}" for key, value in fields.items())
    return "\n".join(lines)


class IngestionService:
    """Service for storing API-key events and notifying their owner"""

    def __init__(self, db: AsyncSession, delivery: WebhookDelivery):
        self.db = db
        self.delivery = delivery
        self.quotas = QuotaService(db)

    async def ingest_event(self, user: User, data: EventCreate) -> Event:
        """
        Store one event and deliver it to the user's webhook.

        Raises:
            QuotaExceeded: the monthly quota is used up
            CategoryNotFound: no category with that name for the user
            DeliveryFailed: the webhook did not accept the event
        """
        now = datetime.now(timezone.utc)

        if not await self.quotas.has_capacity(user, now):
            logger.warning("quota_exceeded", user_id=str(user.id), limit=events_limit(user))
            raise QuotaExceeded(events_limit(user))

        name = data.category.lower()
        result = await self.db.execute(
            select(EventCategory).where(
                EventCategory.user_id == user.id,
                EventCategory.name == name
            )
        )
        category = result.scalar_one_or_none()
        if category is None:
            raise CategoryNotFound(name)

        event = Event(
            name=category.name,
            formatted_message=format_event_message(category, data.description, data.fields),
            fields=data.fields,
            delivery_status=DeliveryStatus.PENDING,
            user_id=user.id,
            event_category_id=category.id,
            created_at=now,
            updated_at=now
        )
        self.db.add(event)
        await self.quotas.increment(user, now)
        await self.db.commit()

        logger.info("event_ingested", user_id=str(user.id), category=category.name, event_id=str(event.id))

        if not user.webhook_url:
            return event

        try:
            await self.delivery.send(
                user.webhook_url,
                event.formatted_message,
                {"category": category.name, "fields": data.fields, "created_at": now.isoformat()}
            )
        except httpx.HTTPError as e:
            event.delivery_status = DeliveryStatus.FAILED
            await self.db.commit()
            logger.error("event_delivery_failed", event_id=str(event.id), error=str(e))
            raise DeliveryFailed(event.id, str(e)) from e

        event.delivery_status = DeliveryStatus.DELIVERED
        await self.db.commit()
        return event
