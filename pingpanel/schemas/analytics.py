from pydantic import BaseModel

from pingpanel.schemas.event import EventResponse


class NumericFieldSums(BaseModel):
    """Rollup of one numeric field"""
    total: float = 0
    this_week: float = 0
    this_month: float = 0
    today: float = 0


class EventsPageResponse(BaseModel):
    """One page of a category's events plus window-wide aggregates"""
    events: list[EventResponse]
    events_count: int
    unique_field_count: int
    numeric_field_sums: dict[str, NumericFieldSums]

