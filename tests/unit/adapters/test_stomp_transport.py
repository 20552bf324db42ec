"""Unit tests for StompRealtimeClient against scripted in-memory connections."""
from __future__ import annotations

import asyncio
import json

import pytest

from notification_sync.adapters.stomp import StompRealtimeClient
from notification_sync.adapters.stomp.frames import Frame
from notification_sync.application.sync import ConnectionState
from notification_sync.domain import Notification
from notification_sync.kernel.errors import ConnectionError
from notification_sync.resilience.retry import ConstantBackoff
from notification_sync.testing import FakeConnection, ScriptedConnector, wait_until

URL = "ws://broker.local/ws/websocket"


def _client(connector: ScriptedConnector, **kwargs: object) -> StompRealtimeClient:
    kwargs.setdefault("max_attempts", 5)
    kwargs.setdefault("backoff", ConstantBackoff(0))
    kwargs.setdefault("heartbeat", (0, 0))
    kwargs.setdefault("connect_timeout", 1.0)
    return StompRealtimeClient(URL, connector=connector, **kwargs)  # type: ignore[arg-type]


def _payload(id: str, **extra: object) -> dict[str, object]:
    return {"id": id, "subject": f"S{id}", "message": f"M{id}", "read": False, **extra}


# ---------------------------------------------------------------------------
# Connecting and subscribing
# ---------------------------------------------------------------------------


class TestConnect:
    def test_subscribes_to_tenant_topic(self) -> None:
        async def _run() -> None:
            conn = FakeConnection()
            client = _client(ScriptedConnector([conn]))
            await client.connect("acme", lambda n: None)
            await wait_until(client.is_connected)
            assert conn.commands() == ["CONNECT", "SUBSCRIBE"]
            assert conn.subscribed_to() == "/topic/notifications/acme"
            assert conn.sent[0].headers["host"] == "broker.local"
            assert client.state is ConnectionState.CONNECTED
            assert client.tenant_id == "acme"
            await client.disconnect()
        asyncio.run(_run())

    def test_connect_same_tenant_is_idempotent(self) -> None:
        async def _run() -> None:
            connector = ScriptedConnector([FakeConnection()])
            client = _client(connector)
            received: list[Notification] = []
            await client.connect("acme", lambda n: None)
            await wait_until(client.is_connected)
            await client.connect("acme", received.append)
            assert len(connector.calls) == 1
            await client.disconnect()
        asyncio.run(_run())

    def test_switching_tenant_tears_down_first(self) -> None:
        async def _run() -> None:
            first, second = FakeConnection(), FakeConnection()
            client = _client(ScriptedConnector([first, second]))
            await client.connect("acme", lambda n: None)
            await wait_until(client.is_connected)
            await client.connect("globex", lambda n: None)
            await wait_until(client.is_connected)
            assert first.closed
            assert first.commands()[-2:] == ["UNSUBSCRIBE", "DISCONNECT"]
            assert second.subscribed_to() == "/topic/notifications/globex"
            await client.disconnect()
        asyncio.run(_run())

    def test_disconnect_resets_state(self) -> None:
        async def _run() -> None:
            conn = FakeConnection()
            client = _client(ScriptedConnector([conn]))
            await client.connect("acme", lambda n: None)
            await wait_until(client.is_connected)
            await client.disconnect()
            await client.disconnect()
            assert client.state is ConnectionState.DISCONNECTED
            assert client.tenant_id is None
            assert conn.closed
        asyncio.run(_run())

    def test_max_attempts_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            StompRealtimeClient(URL, max_attempts=0)


# ---------------------------------------------------------------------------
# Inbound messages
# ---------------------------------------------------------------------------


class TestDelivery:
    def test_message_reaches_handler(self) -> None:
        async def _run() -> None:
            conn = FakeConnection()
            client = _client(ScriptedConnector([conn]))
            received: list[Notification] = []
            await client.connect("acme", received.append)
            await wait_until(client.is_connected)
            conn.push(_payload("n1", createdAt="2024-05-01T10:00:00Z"))
            await wait_until(lambda: len(received) == 1)
            assert received[0].id == "n1"
            assert received[0].subject == "Sn1"
            await client.disconnect()
        asyncio.run(_run())

    def test_malformed_payload_dropped_and_link_survives(self) -> None:
        async def _run() -> None:
            conn = FakeConnection()
            client = _client(ScriptedConnector([conn]))
            received: list[Notification] = []
            await client.connect("acme", received.append)
            await wait_until(client.is_connected)
            conn.push("{not json")
            conn.push({"subject": "no id"})
            conn.push(_payload("ok"))
            await wait_until(lambda: len(received) == 1)
            assert received[0].id == "ok"
            assert client.is_connected()
            await client.disconnect()
        asyncio.run(_run())

    def test_out_of_range_timestamp_dropped_and_link_survives(self) -> None:
        async def _run() -> None:
            conn = FakeConnection()
            client = _client(ScriptedConnector([conn]), max_attempts=1)
            received: list[Notification] = []
            await client.connect("acme", received.append)
            await wait_until(client.is_connected)
            conn.push(_payload("x", createdAt=1e20))
            conn.push('{"id": "y", "subject": "s", "message": "m", "createdAt": NaN}')
            conn.push(_payload("ok"))
            await wait_until(lambda: len(received) == 1)
            assert received[0].id == "ok"
            assert client.is_connected()
            assert client.attempts == 0
            await client.disconnect()
        asyncio.run(_run())

    def test_non_utf8_body_dropped_and_link_survives(self) -> None:
        async def _run() -> None:
            conn = FakeConnection()
            client = _client(ScriptedConnector([conn]), max_attempts=1)
            received: list[Notification] = []
            await client.connect("acme", received.append)
            await wait_until(client.is_connected)
            conn.queue(b"MESSAGE\nsubscription:sub-0\nmessage-id:m1\n\n\xff\xfe\x00")
            conn.push(_payload("ok"))
            await wait_until(lambda: len(received) == 1)
            assert received[0].id == "ok"
            assert client.is_connected()
            await client.disconnect()
        asyncio.run(_run())

    def test_replayed_message_id_dropped(self) -> None:
        async def _run() -> None:
            conn = FakeConnection()
            client = _client(ScriptedConnector([conn]))
            received: list[Notification] = []
            await client.connect("acme", received.append)
            await wait_until(client.is_connected)
            conn.push(_payload("n1"), message_id="m-1")
            conn.push(_payload("n1"), message_id="m-1")
            conn.push(_payload("n2"), message_id="m-2")
            await wait_until(lambda: len(received) == 2)
            assert [n.id for n in received] == ["n1", "n2"]
            await client.disconnect()
        asyncio.run(_run())

    def test_other_subscription_ignored(self) -> None:
        async def _run() -> None:
            conn = FakeConnection()
            client = _client(ScriptedConnector([conn]))
            received: list[Notification] = []
            await client.connect("acme", received.append)
            await wait_until(client.is_connected)
            conn.queue(Frame("MESSAGE", {"subscription": "sub-9", "message-id": "x"}, json.dumps(_payload("z"))).encode())
            conn.push(_payload("n1"))
            await wait_until(lambda: len(received) == 1)
            assert received[0].id == "n1"
            await client.disconnect()
        asyncio.run(_run())

    def test_handler_error_does_not_drop_link(self) -> None:
        async def _run() -> None:
            conn = FakeConnection()
            client = _client(ScriptedConnector([conn]))
            received: list[str] = []

            def handler(n: Notification) -> None:
                received.append(n.id)
                if n.id == "boom":
                    raise RuntimeError("handler failed")

            await client.connect("acme", handler)
            await wait_until(client.is_connected)
            conn.push(_payload("boom"))
            conn.push(_payload("n2"))
            await wait_until(lambda: received == ["boom", "n2"])
            assert client.is_connected()
            await client.disconnect()
        asyncio.run(_run())


# ---------------------------------------------------------------------------
# Reconnect loop
# ---------------------------------------------------------------------------


class TestReconnect:
    def test_gives_up_after_max_attempts(self) -> None:
        async def _run() -> None:
            connector = ScriptedConnector([ConnectionError(URL) for _ in range(3)])
            client = _client(connector, max_attempts=3)
            await client.connect("acme", lambda n: None)
            await wait_until(lambda: client.state is ConnectionState.FAILED)
            assert len(connector.calls) == 3
            await asyncio.sleep(0.01)
            assert len(connector.calls) == 3
            assert client.attempts == 3
        asyncio.run(_run())

    def test_reconnects_after_drop(self) -> None:
        async def _run() -> None:
            first, second = FakeConnection(), FakeConnection()
            connector = ScriptedConnector([first, second])
            client = _client(connector)
            received: list[Notification] = []
            await client.connect("acme", received.append)
            await wait_until(client.is_connected)
            first.drop()
            await wait_until(lambda: second.subscribed_to() is not None)
            await wait_until(client.is_connected)
            assert client.attempts == 0
            second.push(_payload("after"))
            await wait_until(lambda: len(received) == 1)
            await client.disconnect()
        asyncio.run(_run())

    def test_success_resets_attempt_counter(self) -> None:
        async def _run() -> None:
            conn = FakeConnection()
            connector = ScriptedConnector([ConnectionError(URL), ConnectionError(URL), conn])
            client = _client(connector, max_attempts=3)
            await client.connect("acme", lambda n: None)
            await wait_until(client.is_connected)
            assert client.attempts == 0
            assert len(connector.calls) == 3
            await client.disconnect()
        asyncio.run(_run())

    def test_error_frame_counts_as_failure(self) -> None:
        async def _run() -> None:
            conn = FakeConnection()
            connector = ScriptedConnector([conn])
            client = _client(connector, max_attempts=2)
            await client.connect("acme", lambda n: None)
            await wait_until(client.is_connected)
            conn.queue(Frame("ERROR", {"message": "access denied"}).encode())
            await wait_until(lambda: client.state is ConnectionState.FAILED)
            assert conn.closed
        asyncio.run(_run())

    def test_disconnect_cancels_pending_reconnect(self) -> None:
        async def _run() -> None:
            connector = ScriptedConnector([ConnectionError(URL)])
            client = _client(connector, backoff=ConstantBackoff(60))
            await client.connect("acme", lambda n: None)
            await wait_until(lambda: client.state is ConnectionState.RECONNECT_SCHEDULED)
            await client.disconnect()
            assert client.state is ConnectionState.DISCONNECTED
            await asyncio.sleep(0.01)
            assert len(connector.calls) == 1
        asyncio.run(_run())

    def test_silent_broker_times_out(self) -> None:
        async def _run() -> None:
            conn = FakeConnection(auto_ack=False)
            client = _client(ScriptedConnector([conn]), max_attempts=1, connect_timeout=0.05)
            await client.connect("acme", lambda n: None)
            await wait_until(lambda: client.state is ConnectionState.FAILED)
            assert conn.closed
        asyncio.run(_run())


# ---------------------------------------------------------------------------
# Heart-beats
# ---------------------------------------------------------------------------


class TestHeartbeat:
    def test_sends_heartbeats_when_negotiated(self) -> None:
        async def _run() -> None:
            conn = FakeConnection(server_heartbeat="0,10")
            client = _client(ScriptedConnector([conn]), heartbeat=(10, 0))
            await client.connect("acme", lambda n: None)
            await wait_until(client.is_connected)
            await wait_until(lambda: conn.raw_sent.count("\n") >= 2)
            await client.disconnect()
        asyncio.run(_run())

    def test_missing_server_heartbeats_drop_link(self) -> None:
        async def _run() -> None:
            conn = FakeConnection(server_heartbeat="10,0")
            client = _client(ScriptedConnector([conn]), heartbeat=(0, 10), max_attempts=1)
            await client.connect("acme", lambda n: None)
            await wait_until(lambda: client.state is ConnectionState.FAILED)
            assert conn.closed
        asyncio.run(_run())
