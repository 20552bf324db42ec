"""Application dispatch – toasts and system notifications for new pushes."""
from notification_sync.application.dispatch.dispatcher import SideEffectDispatcher
from notification_sync.application.dispatch.system import (
    InMemorySystemNotifier,
    NotifySendNotifier,
    PermissionState,
    SystemNotification,
    SystemNotifier,
)
from notification_sync.application.dispatch.toast import (
    InMemoryToastSink,
    LoggingToastSink,
    Toast,
    ToastSink,
)

__all__ = [
    "InMemorySystemNotifier",
    "InMemoryToastSink",
    "LoggingToastSink",
    "NotifySendNotifier",
    "PermissionState",
    "SideEffectDispatcher",
    "SystemNotification",
    "SystemNotifier",
    "Toast",
    "ToastSink",
]
