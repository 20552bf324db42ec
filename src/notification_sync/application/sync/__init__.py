"""Application sync – coordinator and the ports it is wired through."""
from notification_sync.application.sync.coordinator import (
    NotificationSyncCoordinator,
    SnapshotListener,
)
from notification_sync.application.sync.ports import (
    ConnectionState,
    MessageHandler,
    NotificationApi,
    RealtimeTransport,
    SyncState,
)

__all__ = [
    "ConnectionState",
    "MessageHandler",
    "NotificationApi",
    "NotificationSyncCoordinator",
    "RealtimeTransport",
    "SnapshotListener",
    "SyncState",
]
