"""
Reservation notification dispatch.

Notifications are delivered by an external function; this module only posts
``{reservationId, event}`` to it. Dispatch is attempted once and failures are
reported as a SideEffectResult, never raised.
"""

import logging
from typing import Literal, Optional

import httpx

from ..config import BACKEND_ANON_KEY, NOTIFICATION_FUNCTION_URL, NOTIFICATION_TIMEOUT_SECONDS
from ..shared.outcomes import SideEffectResult

logger = logging.getLogger(__name__)

NotificationEvent = Literal[
    "reservation_pending",
    "reservation_confirmed",
    "reservation_cancelled_by_salon",
    "reservation_cancelled_by_student",
]

SIDE_EFFECT_NAME = "notification"


class ReservationNotifier:
    """Posts reservation lifecycle events to the notification function"""

    def __init__(
        self,
        function_url: Optional[str] = NOTIFICATION_FUNCTION_URL,
        api_key: Optional[str] = BACKEND_ANON_KEY,
        timeout: float = NOTIFICATION_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.function_url = function_url
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
            headers["apikey"] = self.api_key
        return headers

    async def notify(self, reservation_id: str, event: NotificationEvent) -> SideEffectResult:
        if not self.function_url:
            logger.debug(f"ℹ️ Notification {event} skipped: NOTIFICATION_FUNCTION_URL not configured")
            return SideEffectResult.skip(SIDE_EFFECT_NAME, "Notification function not configured")

        try:
            logger.info(f"📧 Dispatching {event} notification for reservation {reservation_id}")
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.function_url,
                    json={"reservationId": reservation_id, "event": event},
                    headers=self._headers(),
                )
            if response.status_code >= 400:
                error = f"Notification function returned {response.status_code}"
                logger.error(f"❌ {error} for {event} ({reservation_id})")
                return SideEffectResult.failed(SIDE_EFFECT_NAME, error)
        except httpx.HTTPError as e:
            logger.error(f"❌ Failed to send {event} notification for {reservation_id}: {e}")
            return SideEffectResult.failed(SIDE_EFFECT_NAME, str(e))

        logger.info(f"✅ {event} notification dispatched for reservation {reservation_id}")
        return SideEffectResult.succeeded(SIDE_EFFECT_NAME)


def get_notifier() -> ReservationNotifier:
    """Dependency injection for ReservationNotifier"""
    return ReservationNotifier()
