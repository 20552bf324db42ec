"""Testing support – fakes for the api, transport and websocket seams.

Usage::

    from notification_sync.testing import FakeRealtimeTransport, InMemoryNotificationApi
"""

from notification_sync.testing.fakes import (
    FakeConnection,
    FakeRealtimeTransport,
    InMemoryNotificationApi,
    InMemorySystemNotifier,
    InMemoryToastSink,
    ScriptedConnector,
    wait_until,
)

__all__ = [
    "FakeConnection",
    "FakeRealtimeTransport",
    "InMemoryNotificationApi",
    "InMemorySystemNotifier",
    "InMemoryToastSink",
    "ScriptedConnector",
    "wait_until",
]
