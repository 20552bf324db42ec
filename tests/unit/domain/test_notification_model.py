"""Unit tests for Notification decoding."""
from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from notification_sync.domain import Notification, NotificationFilter
from notification_sync.kernel.errors import PayloadError


class TestFromPayload:
    def test_camel_case_payload(self) -> None:
        n = Notification.from_payload(
            {
                "id": "n1",
                "subject": "New applicant",
                "message": "Jane matched your search",
                "createdAt": "2024-05-01T10:00:00Z",
                "read": False,
                "tenantId": "acme",
                "senderName": "matcher",
            }
        )
        assert n.id == "n1"
        assert n.subject == "New applicant"
        assert n.created_at == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)
        assert n.tenant_id == "acme"
        assert n.sender_name == "matcher"
        assert n.read is False

    def test_json_string(self) -> None:
        n = Notification.from_payload(json.dumps({"id": 7, "subject": "s", "message": "m"}))
        assert n.id == "7"
        assert n.read is False
        assert n.created_at is None

    def test_bytes(self) -> None:
        n = Notification.from_payload(b'{"id": "x", "message": "m"}')
        assert n.id == "x"
        assert n.subject == ""

    def test_backend_aliases(self) -> None:
        n = Notification.from_payload({"id": "1", "title": "T", "message": "M", "companyId": 42})
        assert n.subject == "T"
        assert n.tenant_id == "42"

    def test_epoch_seconds(self) -> None:
        n = Notification.from_payload({"id": "1", "createdAt": 1714557600.5})
        assert n.created_at == datetime.fromtimestamp(1714557600.5, tz=UTC)

    def test_naive_timestamp_assumed_utc(self) -> None:
        n = Notification.from_payload({"id": "1", "createdAt": "2024-05-01T10:00:00"})
        assert n.created_at is not None
        assert n.created_at.tzinfo is UTC

    @pytest.mark.parametrize(
        "payload",
        [
            "not json",
            "[1, 2]",
            {"subject": "no id"},
            {"id": ""},
            {"id": "1", "read": "yes"},
            {"id": "1", "subject": 5},
            {"id": "1", "createdAt": "yesterday"},
            {"id": "1", "createdAt": [2024]},
            b"\xff\xfe",
            {"id": "1", "createdAt": 1e20},
            {"id": "1", "createdAt": float("nan")},
            {"id": "1", "createdAt": float("inf")},
            '{"id": "1", "createdAt": NaN}',
        ],
    )
    def test_malformed(self, payload: object) -> None:
        with pytest.raises(PayloadError):
            Notification.from_payload(payload)

    def test_payload_error_code(self) -> None:
        with pytest.raises(PayloadError) as info:
            Notification.from_payload("{")
        assert info.value.code == "payload_error"


class TestNotification:
    def test_as_read_returns_copy(self) -> None:
        n = Notification(id="1", subject="s", message="m")
        r = n.as_read()
        assert r.read is True
        assert n.read is False
        assert r.id == n.id

    def test_as_read_on_read_is_same(self) -> None:
        n = Notification(id="1", subject="s", message="m", read=True)
        assert n.as_read() is n

    def test_frozen(self) -> None:
        n = Notification(id="1", subject="s", message="m")
        with pytest.raises(Exception):
            n.read = True  # type: ignore[misc]

    def test_filter_matches(self) -> None:
        unread = Notification(id="1", subject="s", message="m")
        read = unread.as_read()
        assert NotificationFilter.ALL.matches(unread) and NotificationFilter.ALL.matches(read)
        assert NotificationFilter.UNREAD.matches(unread) and not NotificationFilter.UNREAD.matches(read)
        assert NotificationFilter.READ.matches(read) and not NotificationFilter.READ.matches(unread)
