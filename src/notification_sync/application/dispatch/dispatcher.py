"""Application dispatch – SideEffectDispatcher.

Raises a toast and, where the host allows it, a system notification for
each freshly ingested push. Everything here is best-effort: a failing sink
is logged and forgotten, never reported to the caller.
"""
from __future__ import annotations

import asyncio
from collections import OrderedDict
from collections.abc import Iterable

from notification_sync.application.dispatch.system import (
    PermissionState,
    SystemNotification,
    SystemNotifier,
)
from notification_sync.application.dispatch.toast import Toast, ToastSink
from notification_sync.domain import Notification
from notification_sync.observability.logging import get_logger

__all__ = ["SideEffectDispatcher"]

logger = get_logger(__name__)

_REMEMBERED_IDS = 10_000


class SideEffectDispatcher:
    """Fire-and-forget user alerts, at most once per notification id.

    The most recent ``max_remembered`` ids are kept; an id evicted from that
    window would alert again if it were pushed again.
    """

    def __init__(
        self,
        toasts: ToastSink,
        system: SystemNotifier | None = None,
        toast_duration: float = 5.0,
        max_remembered: int = _REMEMBERED_IDS,
    ) -> None:
        if max_remembered < 1:
            raise ValueError("max_remembered must be >= 1")
        self._toasts = toasts
        self._system = system
        self._toast_duration = toast_duration
        self._max_remembered = max_remembered
        self._seen: OrderedDict[str, None] = OrderedDict()
        self._tasks: set[asyncio.Task[None]] = set()

    def mark_seen(self, notification_ids: Iterable[str]) -> None:
        """Record ids that must never alert (e.g. those already in a snapshot)."""
        for notification_id in notification_ids:
            self._remember(notification_id)

    def has_seen(self, notification_id: str) -> bool:
        return notification_id in self._seen

    def reset(self) -> None:
        self._seen.clear()

    async def request_permission(self) -> PermissionState | None:
        """Ask the host for system notification permission once.

        Only a ``default`` permission triggers a request; ``denied`` is left
        alone.
        """
        if self._system is None:
            return None
        try:
            if self._system.permission is not PermissionState.DEFAULT:
                return self._system.permission
            state = await self._system.request_permission()
        except Exception as exc:  # noqa: BLE001
            logger.warning("notification_permission_request_failed", error=repr(exc))
            return None
        logger.info("notification_permission", state=state.value)
        return state

    def dispatch(self, notification: Notification) -> bool:
        """Alert for *notification* unless its id already alerted.

        Returns ``True`` when alerts were attempted.
        """
        if notification.id in self._seen:
            return False
        self._remember(notification.id)

        try:
            self._toasts.show(
                Toast(
                    title=notification.subject,
                    message=notification.message,
                    duration=self._toast_duration,
                    tag=notification.id,
                )
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("toast_failed", notification_id=notification.id, error=repr(exc))

        if self._system is not None and self._system.permission is PermissionState.GRANTED:
            self._spawn(
                SystemNotification(
                    title=notification.subject,
                    body=notification.message,
                    tag=notification.id,
                )
            )
        return True

    def _remember(self, notification_id: str) -> None:
        self._seen[notification_id] = None
        self._seen.move_to_end(notification_id)
        while len(self._seen) > self._max_remembered:
            self._seen.popitem(last=False)

    async def flush(self) -> None:
        """Wait for in-flight system notifications (tests, shutdown)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _spawn(self, notification: SystemNotification) -> None:
        try:
            task = asyncio.get_running_loop().create_task(self._notify(notification))
        except RuntimeError:
            logger.warning("system_notification_skipped", reason="no running event loop")
            return
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _notify(self, notification: SystemNotification) -> None:
        assert self._system is not None
        try:
            await self._system.notify(notification)
        except Exception as exc:  # noqa: BLE001
            logger.warning("system_notification_failed", tag=notification.tag, error=repr(exc))
