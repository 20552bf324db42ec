"""
notification_sync – real-time notification synchronisation for tenant sessions.

Import path convention::

    from notification_sync.domain import Notification, NotificationStore
    from notification_sync.application.sync import NotificationSyncCoordinator
    from notification_sync.adapters.stomp import StompRealtimeClient
    from notification_sync.bootstrap import build_coordinator
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
