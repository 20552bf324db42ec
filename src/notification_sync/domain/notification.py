"""Domain – the Notification record and its wire decoding."""
from __future__ import annotations

import dataclasses
import enum
import json
from datetime import UTC, datetime
from typing import Any

from notification_sync.kernel.errors import PayloadError

__all__ = ["Notification", "NotificationFilter"]


@dataclasses.dataclass(frozen=True)
class Notification:
    """One notification as seen by the client.

    Identity is ``id``: two records with the same id are the same logical
    notification whatever their other fields say.
    """

    id: str
    subject: str
    message: str
    created_at: datetime | None = None
    read: bool = False
    tenant_id: str | None = None
    sender_name: str | None = None

    def as_read(self) -> Notification:
        return self if self.read else dataclasses.replace(self, read=True)

    @classmethod
    def from_payload(cls, payload: Any) -> Notification:
        """Decode a JSON body (``str``/``bytes``) or an already-parsed dict.

        Accepts the camelCase keys the notification service emits
        (``createdAt``, ``tenantId``, ``senderName``) plus the backend
        aliases ``title`` and ``companyId``.

        Raises:
            PayloadError: the payload is not a JSON object or lacks an id.
        """
        if isinstance(payload, (bytes, bytearray)):
            try:
                payload = payload.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise PayloadError("Notification payload is not UTF-8", cause=exc) from exc
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as exc:
                raise PayloadError("Notification payload is not valid JSON", payload=payload, cause=exc) from exc
        if not isinstance(payload, dict):
            raise PayloadError("Notification payload must be a JSON object", payload=payload)

        raw_id = payload.get("id")
        if raw_id is None or isinstance(raw_id, bool) or str(raw_id) == "":
            raise PayloadError("Notification payload has no id", payload=payload)

        subject = payload.get("subject", payload.get("title")) or ""
        message = payload.get("message") or ""
        if not isinstance(subject, str) or not isinstance(message, str):
            raise PayloadError("subject and message must be strings", payload=payload)

        read = payload.get("read", False)
        if not isinstance(read, bool):
            raise PayloadError("read must be a boolean", payload=payload)

        tenant_id = payload.get("tenantId", payload.get("companyId"))
        sender_name = payload.get("senderName")

        return cls(
            id=str(raw_id),
            subject=subject,
            message=message,
            created_at=_parse_timestamp(payload.get("createdAt"), payload),
            read=read,
            tenant_id=None if tenant_id is None else str(tenant_id),
            sender_name=None if sender_name is None else str(sender_name),
        )


def _parse_timestamp(value: Any, payload: dict[str, Any]) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise PayloadError("createdAt must be a timestamp", payload=payload)
    if isinstance(value, (int, float)):
        # Jackson writes Instant as epoch seconds with a fractional part
        try:
            return datetime.fromtimestamp(value, tz=UTC)
        except (OverflowError, OSError, ValueError) as exc:
            raise PayloadError(f"createdAt {value!r} is out of range", payload=payload, cause=exc) from exc
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as exc:
            raise PayloadError(f"Unparseable createdAt {value!r}", payload=payload, cause=exc) from exc
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    raise PayloadError("createdAt must be a timestamp", payload=payload)


class NotificationFilter(str, enum.Enum):
    """Which slice of the list a view wants."""

    ALL = "all"
    UNREAD = "unread"
    READ = "read"

    def matches(self, notification: Notification) -> bool:
        if self is NotificationFilter.UNREAD:
            return not notification.read
        if self is NotificationFilter.READ:
            return notification.read
        return True
