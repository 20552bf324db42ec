"""STOMP adapter – StompRealtimeClient.

Subscribes to ``/topic/notifications/{tenant_id}`` over a WebSocket and
hands every decoded notification to a single handler. Lost or refused
connections are retried on a timer until ``max_attempts`` consecutive
failures, after which the client parks in ``FAILED``.
"""
from __future__ import annotations

import asyncio
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from typing import Protocol
from urllib.parse import urlsplit

import websockets

from notification_sync.adapters.stomp.frames import (
    HEARTBEAT,
    Frame,
    FrameDecoder,
    connect_frame,
    disconnect_frame,
    negotiate_heartbeat,
    subscribe_frame,
    unsubscribe_frame,
)
from notification_sync.application.sync.ports import ConnectionState, MessageHandler
from notification_sync.domain import Notification
from notification_sync.kernel.errors import ConnectionError, FrameError, PayloadError
from notification_sync.observability.logging import get_logger
from notification_sync.resilience.retry import BackoffStrategy, ConstantBackoff

__all__ = ["Connector", "StompRealtimeClient", "TransportConnection", "websocket_connector"]

logger = get_logger(__name__)

_ACTIVE_STATES = frozenset(
    {ConnectionState.CONNECTING, ConnectionState.CONNECTED, ConnectionState.RECONNECT_SCHEDULED}
)
_SUBSCRIPTION_ID = "sub-0"
_REMEMBERED_MESSAGE_IDS = 1024


class TransportConnection(Protocol):
    """The slice of a websocket connection the client uses."""

    async def send(self, message: str) -> None: ...

    async def recv(self) -> str | bytes: ...

    async def close(self) -> None: ...


Connector = Callable[[str], Awaitable[TransportConnection]]


async def websocket_connector(url: str) -> TransportConnection:
    """Open a STOMP-capable websocket with the ``websockets`` library."""
    return await websockets.connect(
        url,
        subprotocols=["v12.stomp", "v11.stomp", "v10.stomp"],  # type: ignore[list-item]
        open_timeout=None,
    )


class StompRealtimeClient:
    """Push channel client with a bounded reconnect loop.

    Parameters
    ----------
    url:
        WebSocket endpoint of the STOMP broker, e.g. ``ws://host/ws/websocket``.
    connector:
        Coroutine that opens the socket; defaults to :func:`websocket_connector`.
    max_attempts:
        Consecutive failed or dropped connections tolerated before ``FAILED``.
    backoff:
        Delay before each reconnect; a fixed 3 s by default.
    heartbeat:
        ``(send_ms, expect_ms)`` offered in CONNECT. Zero disables a direction.
    connect_timeout:
        Seconds allowed to open the socket and receive CONNECTED.
    topic_template:
        Destination subscribed for a tenant.
    """

    def __init__(
        self,
        url: str,
        *,
        connector: Connector | None = None,
        max_attempts: int = 5,
        backoff: BackoffStrategy | None = None,
        heartbeat: tuple[int, int] = (4000, 4000),
        connect_timeout: float = 10.0,
        topic_template: str = "/topic/notifications/{tenant_id}",
        host: str | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._url = url
        self._connector: Connector = connector or websocket_connector
        self._max_attempts = max_attempts
        self._backoff = backoff or ConstantBackoff(3.0)
        self._heartbeat = heartbeat
        self._connect_timeout = connect_timeout
        self._topic_template = topic_template
        self._host = host or urlsplit(url).hostname or "localhost"

        self._state = ConnectionState.DISCONNECTED
        self._tenant_id: str | None = None
        self._on_message: MessageHandler | None = None
        self._attempts = 0
        self._session_task: asyncio.Task[None] | None = None
        self._reconnect_handle: asyncio.TimerHandle | None = None
        self._connection: TransportConnection | None = None
        self._delivered: OrderedDict[str, None] = OrderedDict()

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def tenant_id(self) -> str | None:
        return self._tenant_id

    @property
    def attempts(self) -> int:
        """Consecutive connection failures since the last CONNECTED."""
        return self._attempts

    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    async def connect(self, tenant_id: str, on_message: MessageHandler) -> None:
        """Start (or keep) the subscription for *tenant_id*.

        Returns once the first connection attempt is scheduled; it does not
        wait for the broker to answer.
        """
        if self._tenant_id == tenant_id and self._state in _ACTIVE_STATES:
            logger.debug("transport_already_active", tenant_id=tenant_id, state=self._state.value)
            self._on_message = on_message
            return
        if self._tenant_id is not None:
            await self.disconnect()

        self._tenant_id = tenant_id
        self._on_message = on_message
        self._attempts = 0
        self._start_session()

    async def disconnect(self) -> None:
        """Tear down the socket and any pending reconnect. Idempotent."""
        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

        task, self._session_task = self._session_task, None
        if task is not None and not task.done():
            if self._state is ConnectionState.CONNECTED and self._connection is not None:
                await self._say_goodbye(self._connection)
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

        if self._tenant_id is not None:
            logger.info("transport_disconnected", tenant_id=self._tenant_id)
        self._connection = None
        self._tenant_id = None
        self._on_message = None
        self._attempts = 0
        self._delivered.clear()
        self._set_state(ConnectionState.DISCONNECTED)

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def _set_state(self, state: ConnectionState) -> None:
        if state is not self._state:
            logger.debug("transport_state", old=self._state.value, new=state.value)
            self._state = state

    def _start_session(self) -> None:
        self._set_state(ConnectionState.CONNECTING)
        task = asyncio.get_running_loop().create_task(self._session())
        task.add_done_callback(self._on_session_done)
        self._session_task = task

    def _on_session_done(self, task: asyncio.Task[None]) -> None:
        if task is not self._session_task or task.cancelled():
            return
        self._session_task = None
        exc = task.exception()
        self._attempts += 1
        if self._attempts >= self._max_attempts:
            logger.error(
                "transport_failed",
                tenant_id=self._tenant_id,
                attempts=self._attempts,
                error=repr(exc) if exc else "closed by server",
            )
            self._set_state(ConnectionState.FAILED)
            return

        delay = self._backoff.compute(self._attempts)
        logger.warning(
            "transport_reconnect_scheduled",
            tenant_id=self._tenant_id,
            attempt=self._attempts,
            max_attempts=self._max_attempts,
            delay=delay,
            error=repr(exc) if exc else "closed by server",
        )
        self._set_state(ConnectionState.RECONNECT_SCHEDULED)
        self._reconnect_handle = asyncio.get_running_loop().call_later(delay, self._reconnect)

    def _reconnect(self) -> None:
        self._reconnect_handle = None
        if self._state is ConnectionState.RECONNECT_SCHEDULED:
            self._start_session()

    async def _session(self) -> None:
        connection = await asyncio.wait_for(self._connector(self._url), self._connect_timeout)
        self._connection = connection
        heartbeat_task: asyncio.Task[None] | None = None
        try:
            await connection.send(connect_frame(self._host, self._heartbeat).encode())
            decoder = FrameDecoder()
            timeout: float | None = self._connect_timeout
            while True:
                try:
                    data = await asyncio.wait_for(connection.recv(), timeout)
                except asyncio.TimeoutError as exc:
                    raise ConnectionError(self._url, "No frames from broker within deadline") from exc
                for frame in decoder.feed(data):
                    if frame.command == "CONNECTED":
                        send_ms, expect_ms = negotiate_heartbeat(
                            self._heartbeat, frame.headers.get("heart-beat")
                        )
                        # allow one missed beat before calling the link dead
                        timeout = expect_ms * 2 / 1000 if expect_ms else None
                        if send_ms:
                            heartbeat_task = asyncio.get_running_loop().create_task(
                                self._send_heartbeats(connection, send_ms / 1000)
                            )
                        await self._on_connected(connection)
                    elif frame.command == "MESSAGE":
                        self._deliver(frame)
                    elif frame.command == "ERROR":
                        raise FrameError(
                            frame.headers.get("message", frame.text or "broker error"),
                            command="ERROR",
                        )
        finally:
            if heartbeat_task is not None:
                heartbeat_task.cancel()
                await asyncio.gather(heartbeat_task, return_exceptions=True)
            if self._connection is connection:
                self._connection = None
            await self._close_quietly(connection)

    async def _on_connected(self, connection: TransportConnection) -> None:
        assert self._tenant_id is not None
        destination = self._topic_template.format(tenant_id=self._tenant_id)
        await connection.send(subscribe_frame(_SUBSCRIPTION_ID, destination).encode())
        self._attempts = 0
        self._set_state(ConnectionState.CONNECTED)
        logger.info("transport_connected", tenant_id=self._tenant_id, destination=destination)

    async def _send_heartbeats(self, connection: TransportConnection, every: float) -> None:
        while True:
            await asyncio.sleep(every)
            await connection.send(HEARTBEAT)

    async def _say_goodbye(self, connection: TransportConnection) -> None:
        try:
            await connection.send(unsubscribe_frame(_SUBSCRIPTION_ID).encode())
            await connection.send(disconnect_frame().encode())
        except Exception as exc:  # noqa: BLE001
            logger.debug("transport_goodbye_failed", error=repr(exc))

    async def _close_quietly(self, connection: TransportConnection) -> None:
        try:
            await connection.close()
        except Exception as exc:  # noqa: BLE001
            logger.debug("transport_close_failed", error=repr(exc))

    # ------------------------------------------------------------------
    # Inbound messages
    # ------------------------------------------------------------------

    def _deliver(self, frame: Frame) -> None:
        subscription = frame.headers.get("subscription")
        if subscription is not None and subscription != _SUBSCRIPTION_ID:
            return
        message_id = frame.headers.get("message-id")
        if message_id is not None and message_id in self._delivered:
            logger.debug("push_replay_dropped", message_id=message_id)
            return

        try:
            record = Notification.from_payload(frame.body)
        except PayloadError as exc:
            logger.warning("push_payload_dropped", message_id=message_id, error=exc.message)
            return

        if message_id is not None:
            self._remember(message_id)
        handler = self._on_message
        if handler is None:
            return
        try:
            handler(record)
        except Exception:  # noqa: BLE001
            logger.exception("push_handler_failed", notification_id=record.id)

    def _remember(self, message_id: str) -> None:
        self._delivered[message_id] = None
        if len(self._delivered) > _REMEMBERED_MESSAGE_IDS:
            self._delivered.popitem(last=False)

    def __repr__(self) -> str:
        return f"StompRealtimeClient(url={self._url!r}, state={self._state.value!r}, tenant_id={self._tenant_id!r})"
