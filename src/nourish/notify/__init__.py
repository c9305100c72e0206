"""Notification scheduler boundary and its adapters."""
from nourish.notify.base import NotificationScheduler, PermissionGate
from nourish.notify.memory import InMemoryNotificationScheduler
from nourish.notify.permissions import NotifySendPermissionGate, StaticPermissionGate
from nourish.notify.sqlite import SqliteNotificationScheduler

__all__ = [
    "NotificationScheduler",
    "PermissionGate",
    "InMemoryNotificationScheduler",
    "SqliteNotificationScheduler",
    "StaticPermissionGate",
    "NotifySendPermissionGate",
]
