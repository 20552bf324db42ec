"""Domain – notification records and the in-memory store."""
from notification_sync.domain.notification import Notification, NotificationFilter
from notification_sync.domain.store import NotificationSnapshot, NotificationStore

__all__ = ["Notification", "NotificationFilter", "NotificationSnapshot", "NotificationStore"]
