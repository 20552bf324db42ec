"""Testing fakes – in-memory doubles for the sync ports."""
from notification_sync.application.dispatch import InMemorySystemNotifier, InMemoryToastSink
from notification_sync.testing.fakes.api import InMemoryNotificationApi
from notification_sync.testing.fakes.connection import FakeConnection, ScriptedConnector, wait_until
from notification_sync.testing.fakes.transport import FakeRealtimeTransport

__all__ = [
    "FakeConnection",
    "FakeRealtimeTransport",
    "InMemoryNotificationApi",
    "InMemorySystemNotifier",
    "InMemoryToastSink",
    "ScriptedConnector",
    "wait_until",
]
