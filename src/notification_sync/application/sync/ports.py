"""Application sync – ports the coordinator depends on."""
from __future__ import annotations

import enum
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from notification_sync.domain import Notification

__all__ = [
    "ConnectionState",
    "MessageHandler",
    "NotificationApi",
    "RealtimeTransport",
    "SyncState",
]

MessageHandler = Callable[[Notification], None]


class ConnectionState(str, enum.Enum):
    """Lifecycle of the push channel."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECT_SCHEDULED = "reconnect_scheduled"
    FAILED = "failed"


class SyncState(str, enum.Enum):
    """Lifecycle of a coordinator's tenant session."""

    INACTIVE = "inactive"
    SYNCING = "syncing"
    LIVE = "live"


@runtime_checkable
class NotificationApi(Protocol):
    """Port: request/response access to the notification service."""

    async def fetch_snapshot(self, tenant_id: str) -> list[Notification]:
        """Return the tenant's notifications, newest first."""
        ...

    async def mark_read(self, notification_id: str) -> None: ...

    async def delete(self, notification_id: str) -> None: ...


@runtime_checkable
class RealtimeTransport(Protocol):
    """Port: one push subscription per tenant."""

    @property
    def state(self) -> ConnectionState: ...

    async def connect(self, tenant_id: str, on_message: MessageHandler) -> None: ...

    async def disconnect(self) -> None: ...

    def is_connected(self) -> bool: ...
