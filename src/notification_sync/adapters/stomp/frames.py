"""STOMP adapter – frame model and incremental decoder (STOMP 1.2).

Only the subset a subscribing client needs: CONNECT, SUBSCRIBE,
UNSUBSCRIBE and DISCONNECT going out; CONNECTED, MESSAGE, RECEIPT and
ERROR coming in. Heart-beats are bare EOLs between frames.
"""
from __future__ import annotations

import dataclasses

from notification_sync.kernel.errors import FrameError

__all__ = [
    "Frame",
    "FrameDecoder",
    "HEARTBEAT",
    "connect_frame",
    "disconnect_frame",
    "negotiate_heartbeat",
    "subscribe_frame",
    "unsubscribe_frame",
]

HEARTBEAT = "\n"

# CONNECT and CONNECTED headers are never escaped (STOMP 1.2 §"Value Encoding").
_RAW_HEADER_COMMANDS = frozenset({"CONNECT", "CONNECTED", "STOMP"})
_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r", ":": "\\c"}
_UNESCAPES = {"\\": "\\", "n": "\n", "r": "\r", "c": ":"}


@dataclasses.dataclass(frozen=True)
class Frame:
    command: str
    headers: dict[str, str] = dataclasses.field(default_factory=dict)
    # bytes only for an inbound body that is not valid UTF-8
    body: str | bytes = ""

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8", errors="replace")
        return self.body

    def encode(self) -> str:
        raw = self.command in _RAW_HEADER_COMMANDS
        lines = [self.command]
        for key, value in self.headers.items():
            if raw:
                lines.append(f"{key}:{value}")
            else:
                lines.append(f"{_escape(key)}:{_escape(value)}")
        return "\n".join(lines) + "\n\n" + self.text + "\0"


def _escape(value: str) -> str:
    return "".join(_ESCAPES.get(ch, ch) for ch in value)


def _unescape(value: str) -> str:
    out: list[str] = []
    chars = iter(value)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, None)
        if nxt is None or nxt not in _UNESCAPES:
            raise FrameError(f"Invalid header escape in {value!r}")
        out.append(_UNESCAPES[nxt])
    return "".join(out)


class FrameDecoder:
    """Turn a stream of websocket messages into frames.

    A frame may be split across messages and one message may carry several
    frames; incomplete input stays buffered until the next :meth:`feed`.
    """

    def __init__(self) -> None:
        self._buffer = b""

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def feed(self, data: str | bytes) -> list[Frame]:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._buffer += data
        frames: list[Frame] = []
        while True:
            self._buffer = self._buffer.lstrip(b"\r\n")
            if not self._buffer:
                break
            frame = self._next_frame()
            if frame is None:
                break
            frames.append(frame)
        return frames

    def _next_frame(self) -> Frame | None:
        buf = self._buffer
        lf = buf.find(b"\n\n")
        crlf = buf.find(b"\r\n\r\n")
        if lf < 0 and crlf < 0:
            return None
        if crlf >= 0 and (lf < 0 or crlf < lf):
            head_end, body_start = crlf, crlf + 4
        else:
            head_end, body_start = lf, lf + 2

        try:
            head = buf[:head_end].decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FrameError("Frame headers are not UTF-8") from exc
        lines = head.replace("\r\n", "\n").split("\n")
        command = lines[0].strip()
        if not command:
            raise FrameError("Frame without a command")
        raw = command in _RAW_HEADER_COMMANDS
        headers: dict[str, str] = {}
        for line in lines[1:]:
            key, sep, value = line.partition(":")
            if not sep:
                raise FrameError(f"Malformed header line {line!r}", command=command)
            if not raw:
                key, value = _unescape(key), _unescape(value)
            # repeated headers: the first one counts
            headers.setdefault(key, value)

        length = headers.get("content-length")
        if length is not None:
            try:
                size = int(length)
            except ValueError as exc:
                raise FrameError(f"Bad content-length {length!r}", command=command) from exc
            end = body_start + size
            if len(buf) < end + 1:
                return None
            if buf[end:end + 1] != b"\0":
                raise FrameError("Frame body longer than content-length", command=command)
        else:
            end = buf.find(b"\0", body_start)
            if end < 0:
                return None

        raw_body = buf[body_start:end]
        try:
            body: str | bytes = raw_body.decode("utf-8")
        except UnicodeDecodeError:
            body = raw_body
        self._buffer = buf[end + 1:]
        return Frame(command=command, headers=headers, body=body)


def negotiate_heartbeat(client: tuple[int, int], server_header: str | None) -> tuple[int, int]:
    """Return ``(send_every_ms, expect_every_ms)`` for the client side.

    ``client`` is the ``(cx, cy)`` pair the client offered in CONNECT and
    ``server_header`` the ``heart-beat`` value of CONNECTED. Zero disables.
    """
    cx, cy = client
    sx, sy = 0, 0
    if server_header:
        try:
            sx, sy = (int(part) for part in server_header.split(","))
        except ValueError as exc:
            raise FrameError(f"Bad heart-beat header {server_header!r}", command="CONNECTED") from exc
    send = 0 if cx == 0 or sy == 0 else max(cx, sy)
    expect = 0 if cy == 0 or sx == 0 else max(cy, sx)
    return send, expect


def connect_frame(host: str, heartbeat: tuple[int, int] = (4000, 4000), **headers: str) -> Frame:
    return Frame(
        "CONNECT",
        {
            "accept-version": "1.2,1.1,1.0",
            "host": host,
            "heart-beat": f"{heartbeat[0]},{heartbeat[1]}",
            **headers,
        },
    )


def subscribe_frame(subscription_id: str, destination: str) -> Frame:
    return Frame("SUBSCRIBE", {"id": subscription_id, "destination": destination, "ack": "auto"})


def unsubscribe_frame(subscription_id: str) -> Frame:
    return Frame("UNSUBSCRIBE", {"id": subscription_id})


def disconnect_frame(receipt: str | None = None) -> Frame:
    return Frame("DISCONNECT", {"receipt": receipt} if receipt else {})
