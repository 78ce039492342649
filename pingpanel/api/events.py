from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from pingpanel.api.deps import get_api_key_user
from pingpanel.core.database import get_db
from pingpanel.core.errors import CategoryNotFound, DeliveryFailed, QuotaExceeded
from pingpanel.models.event import DeliveryStatus
from pingpanel.models.user import User
from pingpanel.schemas.event import EventCreate, IngestResponse
from pingpanel.services.delivery import WebhookDelivery, get_webhook_delivery
from pingpanel.services.ingestion import IngestionService

logger = structlog.get_logger()
router = APIRouter(prefix="/api/v1/events", tags=["events"])


@router.post("", response_model=IngestResponse)
async def ingest_event(
        data: EventCreate,
        user: User = Depends(get_api_key_user),
        db: AsyncSession = Depends(get_db),
        delivery: WebhookDelivery = Depends(get_webhook_delivery)
):
    """
    Ingest one event into a category, authenticated with `Authorization: Bearer <api key>`.

    - **category**: name of an existing category
    - **fields**: flat object of string, number or boolean values
    - **description**: optional text for the notification

    The event is delivered to the account's webhook when one is configured.
    """
    try:
        event = await IngestionService(db, delivery).ingest_event(user, data)

    except QuotaExceeded as e:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(e))
    except CategoryNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DeliveryFailed as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": "Error processing event", "event_id": str(e.event_id)}
        )

    if event.delivery_status == DeliveryStatus.PENDING:
        message = "Event stored. Configure a webhook to receive notifications"
    else:
        message = "Event processed successfully"

    return IngestResponse(
        message=message,
        event_id=event.id,
        delivery_status=event.delivery_status
    )
