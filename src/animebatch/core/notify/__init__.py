"""Notify - completion messages for finished batches."""

from .webhook import NotificationPayload, WebhookNotifier

__all__ = [
    "NotificationPayload",
    "WebhookNotifier",
]
