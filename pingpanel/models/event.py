# SQLAlchemy models

import enum
import uuid

from sqlalchemy import Column, String, DateTime, JSON, Index, Enum, ForeignKey, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from pingpanel.models.base import Base, utcnow


class DeliveryStatus(str, enum.Enum):
    PENDING = "PENDING"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"


class Event(Base):
    __tablename__ = "events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    formatted_message = Column(String, nullable=False)
    name = Column(String, nullable=False)
    # JSONB on Postgres so keys and numeric values can be aggregated in SQL
    fields = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict)
    delivery_status = Column(
        Enum(DeliveryStatus, name="delivery_status"),
        nullable=False,
        default=DeliveryStatus.PENDING
    )
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    event_category_id = Column(
        Uuid,
        ForeignKey("event_categories.id", ondelete="CASCADE"),
        nullable=False
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    category = relationship("EventCategory", back_populates="events")

    __table_args__ = (
        # Composite indexes for the windowed category queries
        Index("idx_events_category_created", "event_category_id", "created_at"),
        Index("idx_events_user_created", "user_id", "created_at"),
    )
