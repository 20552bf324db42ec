"""STOMP adapter – push channel over WebSocket."""
from notification_sync.adapters.stomp.frames import Frame, FrameDecoder, negotiate_heartbeat
from notification_sync.adapters.stomp.transport import (
    Connector,
    StompRealtimeClient,
    TransportConnection,
    websocket_connector,
)

__all__ = [
    "Connector",
    "Frame",
    "FrameDecoder",
    "StompRealtimeClient",
    "TransportConnection",
    "negotiate_heartbeat",
    "websocket_connector",
]
