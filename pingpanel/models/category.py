import uuid

from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from pingpanel.models.base import Base, utcnow


class EventCategory(Base):
    __tablename__ = "event_categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    color = Column(Integer, nullable=False)
    emoji = Column(String, nullable=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="categories")
    events = relationship(
        "Event",
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __table_args__ = (
        UniqueConstraint("name", "user_id", name="uq_event_categories_name_user"),
    )
