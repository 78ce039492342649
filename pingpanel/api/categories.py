# /categories/*

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from pingpanel.api.deps import get_current_user
from pingpanel.core.database import get_db
from pingpanel.core.errors import CategoryAlreadyExists, CategoryLimitReached, CategoryNotFound
from pingpanel.models.user import User
from pingpanel.schemas.analytics import EventsPageResponse
from pingpanel.schemas.category import (
    CATEGORY_NAME_PATTERN,
    CategoryCreate,
    CategoryCreatedResponse,
    CategoryListResponse,
    DeleteCategoryResponse,
    PollCategoryResponse,
    QuickstartResponse,
)
from pingpanel.services.analytics import CategoryAnalyticsService
from pingpanel.services.categories import CategoryService
from pingpanel.services.windows import TimeRange

logger = structlog.get_logger()
router = APIRouter(prefix="/categories", tags=["categories"])


def _not_found(e: CategoryNotFound) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("", response_model=CategoryListResponse)
async def get_event_categories(
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """
    List the user's categories, most recently updated first.

    Each category carries this month's event count, this month's distinct
    field count and the time of its latest event.
    """
    try:
        categories = await CategoryAnalyticsService(db).list_categories_with_stats(user)
        return {"categories": categories}

    except Exception as e:
        logger.error("categories_query_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch categories")


@router.post("", response_model=CategoryCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_event_category(
        data: CategoryCreate,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """
    Create a category.

    - **name**: letters, numbers and hyphens; stored lower-cased
    - **color**: hex color such as `#ff6b6b`
    - **emoji**: optional emoji shown next to the category
    """
    try:
        category = await CategoryService(db).create_event_category(user, data)
        return {"event_category": category}

    except CategoryAlreadyExists as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except CategoryLimitReached as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.post("/quickstart", response_model=QuickstartResponse)
async def insert_quickstart_categories(
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Create the `bug`, `sale` and `question` starter categories"""
    count = await CategoryService(db).insert_quickstart_categories(user)
    return QuickstartResponse(success=True, count=count)


@router.delete("/{name}", response_model=DeleteCategoryResponse)
async def delete_category(
        name: str,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Delete a category together with all of its events"""
    try:
        await CategoryService(db).delete_category(user, name)
        return DeleteCategoryResponse(success=True)

    except CategoryNotFound as e:
        raise _not_found(e)


@router.get("/{name}/poll", response_model=PollCategoryResponse)
async def poll_category(
        name: str = Path(..., min_length=1, max_length=64, pattern=CATEGORY_NAME_PATTERN),
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """Whether the category has received its first event"""
    try:
        has_events = await CategoryAnalyticsService(db).poll_category(user, name)
        return PollCategoryResponse(has_events=has_events)

    except CategoryNotFound as e:
        raise _not_found(e)


@router.get("/{name}/events", response_model=EventsPageResponse)
async def get_events_by_category_name(
        name: str = Path(..., min_length=1, max_length=64, pattern=CATEGORY_NAME_PATTERN),
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=30, ge=1, le=50, description="Events per page"),
        time_range: TimeRange = Query(default=TimeRange.TODAY, description="today, week or month"),
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db)
):
    """
    Page through a category's events inside a time window.

    - **page**: 1-based page number
    - **limit**: page size (max 50)
    - **time_range**: `today`, `week` or `month`

    `events_count`, `unique_field_count` and `numeric_field_sums` cover the
    whole window, not just the returned page.
    """
    try:
        return await CategoryAnalyticsService(db).get_events_by_category_name(
            user,
            name,
            page=page,
            limit=limit,
            time_range=time_range
        )

    except CategoryNotFound as e:
        raise _not_found(e)
    except Exception as e:
        logger.error("category_events_query_failed", category=name, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch events")
