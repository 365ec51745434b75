"""Notification service package."""

from .backend import EmailBackend, InMemoryEmailBackend, SMTPEmailBackend
from .dispatcher import (
    CeleryNotificationDispatcher,
    DisabledNotificationDispatcher,
    DispatchResult,
    NotificationDispatcher,
    build_notification_dispatcher,
)
from .service import NotificationEvent, NotificationService

__all__ = [
    "CeleryNotificationDispatcher",
    "DisabledNotificationDispatcher",
    "DispatchResult",
    "EmailBackend",
    "InMemoryEmailBackend",
    "NotificationDispatcher",
    "NotificationEvent",
    "NotificationService",
    "SMTPEmailBackend",
    "build_notification_dispatcher",
]
