# SQLAlchemy models

import enum
import secrets
import uuid

from sqlalchemy import Column, String, DateTime, Integer, Enum, Uuid
from sqlalchemy.orm import relationship

from pingpanel.models.base import Base, utcnow


class Plan(str, enum.Enum):
    FREE = "FREE"
    PRO = "PRO"


def generate_api_key() -> str:
    return secrets.token_urlsafe(24)


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    external_id = Column(String, unique=True, nullable=True)
    email = Column(String, unique=True, nullable=False)
    api_key = Column(String, unique=True, nullable=False, default=generate_api_key)
    webhook_url = Column(String, nullable=True)
    quota_limit = Column(Integer, nullable=False, default=100)
    plan = Column(Enum(Plan, name="plan"), nullable=False, default=Plan.FREE)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    categories = relationship(
        "EventCategory",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True
    )
