"""
Notification gateway.

Delivers run lifecycle events to the notification service and operational
log records to the monitoring service. Delivery is best-effort: each call
is attempted once under a fixed timeout and failures are logged, never
raised to the caller.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import aiohttp

from ..core.config import Config
from ..core.exceptions import DeliveryError
from ..core.logging_config import log_delivery


SOURCE_NAME = "TestAutomationService"
DEFAULT_TIMEOUT_MS = 5000


class NotificationGateway:
    """Fire-and-forget delivery of run events and operational logs."""

    def __init__(
        self,
        notification_service_url: str = "",
        monitoring_service_url: str = "",
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        logger: Optional[logging.Logger] = None,
    ):
        self.notification_service_url = notification_service_url.rstrip("/")
        self.monitoring_service_url = monitoring_service_url.rstrip("/")
        self.timeout_ms = timeout_ms
        self.logger = logger or logging.getLogger(__name__)
        self.delivery_failures = 0

    @classmethod
    def from_config(cls, config: Config) -> "NotificationGateway":
        return cls(
            notification_service_url=config.notification_service_url,
            monitoring_service_url=config.monitoring_service_url,
            timeout_ms=config.notification_timeout_ms,
        )

    async def notify_event(self, event_type: str, payload: Dict[str, Any]) -> bool:
        """
        Notify the notification service about a run event.

        Args:
            event_type: Event name such as ``suite_passed``
            payload: Event parameters

        Returns:
            True if the event was delivered
        """
        if not self.notification_service_url:
            return False

        body = {
            "type": "email",
            "recipients": [],
            "templateId": f"test-{event_type}",
            "parameters": payload,
        }
        return await self._deliver(
            "notification", f"{self.notification_service_url}/notifications", body
        )

    async def send_log(
        self,
        level: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Send an operational log record to the monitoring service.

        Args:
            level: Log level name; upper-cased, INFO when empty
            message: Log message
            context: Additional structured context

        Returns:
            True if the record was delivered
        """
        if not self.monitoring_service_url:
            return False

        body = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": (level or "INFO").upper(),
            "message": message,
            "source": SOURCE_NAME,
            "context": context or {},
        }
        return await self._deliver(
            "monitoring", f"{self.monitoring_service_url}/logs", body
        )

    async def _deliver(self, channel: str, url: str, body: Dict[str, Any]) -> bool:
        start_time = time.time()
        try:
            await self._post(url, body)
        except Exception as e:
            self.delivery_failures += 1
            log_delivery(
                self.logger,
                channel,
                url,
                time.time() - start_time,
                False,
                error=str(e) or e.__class__.__name__,
                error_type=e.__class__.__name__,
            )
            return False

        log_delivery(self.logger, channel, url, time.time() - start_time, True)
        return True

    async def _post(self, url: str, body: Dict[str, Any]) -> None:
        timeout = aiohttp.ClientTimeout(total=self.timeout_ms / 1000)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(
                url,
                json=body,
                headers={"Content-Type": "application/json"},
            ) as response:
                if not 200 <= response.status < 300:
                    raise DeliveryError(
                        f"Delivery failed with status {response.status}",
                        url=url,
                        status=response.status,
                    )
