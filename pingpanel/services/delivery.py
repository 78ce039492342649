import httpx
import structlog

from pingpanel.core.config import settings

logger = structlog.get_logger()


class WebhookDelivery:
    """Posts formatted event messages to a user's webhook"""

    def __init__(self, client: httpx.AsyncClient | None = None):
        self.client = client

    async def send(self, webhook_url: str, message: str, event: dict) -> None:
        """
        POST the message once. Raises httpx.HTTPError on transport
        failures and non-2xx responses.
        """
        payload = {"content": message, "event": event}

        if self.client is not None:
            response = await self.client.post(webhook_url, json=payload)
        else:
            async with httpx.AsyncClient(timeout=settings.webhook_timeout) as client:
                response = await client.post(webhook_url, json=payload)

        response.raise_for_status()
        logger.info("webhook_delivered", url=webhook_url, status_code=response.status_code)


webhook_delivery = WebhookDelivery()


def get_webhook_delivery() -> WebhookDelivery:
    """Dependency for the webhook sender"""
    return webhook_delivery
