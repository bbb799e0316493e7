"""HTTP push-notification notifier used by the send_notification action."""

from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

import requests

from app.adapters.base import BaseNotifier, NotifyResult
from app.config import get_settings
from app.infra.logging_config import get_logger

logger = get_logger("notification")


class HttpNotifier(BaseNotifier):
    """POSTs notifications as JSON to a configured endpoint."""

    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self.url = url if url is not None else settings.notification_url
        self.token = token if token is not None else settings.notification_token
        self.timeout_seconds = timeout_seconds or settings.notification_timeout_seconds

    def notify(
        self,
        tenant_id: UUID,
        title: str,
        body: str,
        data: Optional[dict[str, Any]] = None,
    ) -> NotifyResult:
        if not self.url:
            logger.info("Notification endpoint not configured; skipping '%s'", title)
            return NotifyResult(skipped=True)

        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        payload = {
            "tenant_id": str(tenant_id),
            "title": title,
            "body": body,
            "data": data or {},
        }

        try:
            resp = requests.post(
                self.url, json=payload, headers=headers, timeout=self.timeout_seconds
            )
        except requests.RequestException as e:
            logger.warning("Notification request failed: %s", e)
            return NotifyResult(error=str(e))

        if resp.status_code >= 400:
            error = f"HTTP {resp.status_code}: {resp.text[:500] if resp.text else 'no body'}"
            logger.warning("Notification rejected: %s", error)
            return NotifyResult(error=error)

        return NotifyResult(delivered=True)
