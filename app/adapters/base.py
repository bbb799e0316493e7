"""
Notifier interface.

The bot engine's `send_notification` action talks to push delivery only
through this contract; delivery itself lives outside the engine.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID


@dataclass
class NotifyResult:
    """Result of a notification dispatch."""

    delivered: bool = False
    skipped: bool = False
    error: Optional[str] = None


class BaseNotifier(ABC):
    """Contract for notification collaborators."""

    @abstractmethod
    def notify(
        self,
        tenant_id: UUID,
        title: str,
        body: str,
        data: Optional[dict[str, Any]] = None,
    ) -> NotifyResult:
        """Dispatch a notification to the tenant's operators. Should not raise."""
        ...
