"""Best-effort event forwarding to the CRM webhook."""

from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from ..core.config import Settings
from ..core.observability import get_logger, metrics_collector

logger = get_logger(__name__)

EVENT_SOURCE = "property-booking-system"
USER_AGENT = "Property-Booking-System/1.0"


class CrmNotifier:
    """
    Posts business events to the CRM.

    Delivery is fire-and-forget: a failed or timed-out post is logged and
    counted, never raised. Booking-request events may go to their own URL.
    """

    def __init__(
        self,
        webhook_url: Optional[str],
        booking_request_webhook_url: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.webhook_url = webhook_url
        self.booking_request_webhook_url = booking_request_webhook_url or webhook_url
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CrmNotifier":
        return cls(
            webhook_url=settings.crm_webhook_url,
            booking_request_webhook_url=settings.crm_booking_request_webhook_url,
            timeout=settings.outbound_timeout_seconds,
        )

    async def notify(self, event_type: str, data: dict[str, Any], url: Optional[str] = None) -> bool:
        """
        Send one event.

        Returns:
            bool: True if the CRM accepted the event
        """
        target = url or self.webhook_url
        if not target:
            logger.debug("CRM webhook not configured, skipping event", event_type=event_type)
            return False

        payload = {
            "event_type": event_type,
            "data": data,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": EVENT_SOURCE,
        }

        try:
            response = await self._client.post(target, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            metrics_collector.record_notification_failed(event_type)
            logger.warning("CRM notification failed", event_type=event_type, url=target, error=str(e))
            return False

        logger.info("CRM notification sent", event_type=event_type, status_code=response.status_code)
        return True

    async def notify_booking_request_date(self, data: dict[str, Any]) -> bool:
        return await self.notify("booking_request_date_created", data, url=self.booking_request_webhook_url)

    async def aclose(self) -> None:
        await self._client.aclose()
