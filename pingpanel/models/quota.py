import uuid

from sqlalchemy import Column, DateTime, Integer, ForeignKey, UniqueConstraint, Uuid

from pingpanel.models.base import Base, utcnow


class Quota(Base):
    """Events ingested by a user in one calendar month"""
    __tablename__ = "quotas"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    count = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "year", "month", name="uq_quotas_user_month"),
    )
