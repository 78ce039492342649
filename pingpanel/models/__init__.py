# Import every model so Base.metadata sees all tables

from pingpanel.models.base import Base
from pingpanel.models.user import User, Plan
from pingpanel.models.category import EventCategory
from pingpanel.models.event import Event, DeliveryStatus
from pingpanel.models.quota import Quota

__all__ = ["Base", "User", "Plan", "EventCategory", "Event", "DeliveryStatus", "Quota"]
