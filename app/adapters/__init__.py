"""Outbound collaborators used by the bot engine."""

from app.adapters.base import BaseNotifier, NotifyResult
from app.adapters.notification import HttpNotifier

__all__ = ["BaseNotifier", "HttpNotifier", "NotifyResult"]
