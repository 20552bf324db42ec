"""Domain – NotificationStore, the single in-memory view of a tenant's list."""
from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator

from notification_sync.domain.notification import Notification, NotificationFilter
from notification_sync.observability.logging import get_logger

__all__ = ["NotificationSnapshot", "NotificationStore"]

logger = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class NotificationSnapshot:
    """Immutable read model handed to UI consumers."""

    items: tuple[Notification, ...] = ()
    unread_count: int = 0

    def filter(self, which: NotificationFilter) -> tuple[Notification, ...]:
        return tuple(n for n in self.items if which.matches(n))


class NotificationStore:
    """Ordered notifications plus the derived unread counter.

    Newest arrivals sit at the front. Every mutating method keeps
    ``unread_count == sum(not n.read for n in items)`` on return and never
    holds an id twice. Nothing in here awaits.
    """

    def __init__(self) -> None:
        self._items: list[Notification] = []
        self._unread = 0

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def items(self) -> tuple[Notification, ...]:
        return tuple(self._items)

    @property
    def unread_count(self) -> int:
        return self._unread

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Notification]:
        return iter(tuple(self._items))

    def __contains__(self, notification_id: object) -> bool:
        return self._index_of(notification_id) is not None

    def get(self, notification_id: str) -> Notification | None:
        idx = self._index_of(notification_id)
        return None if idx is None else self._items[idx]

    def filter(self, which: NotificationFilter = NotificationFilter.ALL) -> tuple[Notification, ...]:
        return tuple(n for n in self._items if which.matches(n))

    def snapshot(self) -> NotificationSnapshot:
        return NotificationSnapshot(items=tuple(self._items), unread_count=self._unread)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def replace_snapshot(self, records: Iterable[Notification]) -> None:
        """Swap in a server snapshot; first occurrence wins on repeated ids."""
        seen: set[str] = set()
        items: list[Notification] = []
        for record in records:
            if record.id in seen:
                logger.warning("snapshot_duplicate_dropped", notification_id=record.id)
                continue
            seen.add(record.id)
            items.append(record)
        self._items = items
        self._unread = sum(1 for n in items if not n.read)

    def ingest(self, record: Notification) -> bool:
        """Prepend a pushed record. Returns ``False`` for a known id."""
        if record.id in self:
            return False
        self._items.insert(0, record)
        if not record.read:
            self._unread += 1
        return True

    def mark_read(self, notification_id: str) -> bool:
        idx = self._index_of(notification_id)
        if idx is None or self._items[idx].read:
            return False
        self._items[idx] = self._items[idx].as_read()
        self._unread = max(0, self._unread - 1)
        return True

    def delete(self, notification_id: str) -> bool:
        idx = self._index_of(notification_id)
        if idx is None:
            return False
        removed = self._items.pop(idx)
        if not removed.read:
            self._unread = max(0, self._unread - 1)
        return True

    def mark_all_read(self) -> list[str]:
        """Mark everything read; returns the ids that were unread."""
        changed = [n.id for n in self._items if not n.read]
        if changed:
            self._items = [n.as_read() for n in self._items]
        self._unread = 0
        return changed

    def reset(self) -> None:
        self._items = []
        self._unread = 0

    def _index_of(self, notification_id: object) -> int | None:
        for idx, item in enumerate(self._items):
            if item.id == notification_id:
                return idx
        return None
