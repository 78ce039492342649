from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from uuid import UUID
import re
import unicodedata

CATEGORY_NAME_PATTERN = r"^[a-zA-Z0-9-]+$"
COLOR_PATTERN = re.compile(r"^#[0-9A-F]{6}$", re.IGNORECASE)

# ZWJ, variation selectors and the keycap combiner
_EMOJI_JOINERS = {"\u200d", "\ufe0f", "\ufe0e", "\u20e3"}


def is_emoji(value: str) -> bool:
    """True if the value is made only of emoji symbols and their joiners"""
    if not value:
        return False
    has_symbol = False
    for char in value:
        code = ord(char)
        if char in _EMOJI_JOINERS:
            continue
        if 0x1F3FB <= code <= 0x1F3FF or 0xE0020 <= code <= 0xE007F:
            # skin tone modifiers and tag sequences
            continue
        if unicodedata.category(char) == "So":
            has_symbol = True
        else:
            return False
    return has_symbol


def parse_color(color: str) -> int:
    """'#ff6b6b' -> 0xff6b6b"""
    return int(color.lstrip("#"), 16)


class CategoryCreate(BaseModel):
    """Schema for creating an event category"""

    name: str = Field(..., min_length=1, max_length=64, pattern=CATEGORY_NAME_PATTERN)
    color: str = Field(..., min_length=1)
    emoji: str | None = None

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if not COLOR_PATTERN.match(v):
            raise ValueError("Invalid color format.")
        return v

    @field_validator("emoji")
    @classmethod
    def validate_emoji(cls, v: str | None) -> str | None:
        if v is not None and not is_emoji(v):
            raise ValueError("Invalid emoji")
        return v


class CategoryResponse(BaseModel):
    id: UUID
    name: str
    color: int
    emoji: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CategoryWithStats(CategoryResponse):
    """Category as shown on the dashboard grid"""
    unique_field_count: int
    events_count: int
    last_ping: datetime | None


class CategoryListResponse(BaseModel):
    categories: list[CategoryWithStats]


class CategoryCreatedResponse(BaseModel):
    event_category: CategoryResponse


class DeleteCategoryResponse(BaseModel):
    success: bool


class QuickstartResponse(BaseModel):
    success: bool
    count: int


class PollCategoryResponse(BaseModel):
    has_events: bool
