"""Application dispatch – OS-level notification port and implementations."""
from __future__ import annotations

import asyncio
import enum
import shutil
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from notification_sync.observability.logging import get_logger

__all__ = [
    "InMemorySystemNotifier",
    "NotifySendNotifier",
    "PermissionState",
    "SystemNotification",
    "SystemNotifier",
]

logger = get_logger(__name__)


class PermissionState(str, enum.Enum):
    """Host permission to raise system notifications."""

    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True)
class SystemNotification:
    title: str
    body: str
    tag: str | None = None


@runtime_checkable
class SystemNotifier(Protocol):
    """Port: raise notifications through the host operating system."""

    @property
    def permission(self) -> PermissionState: ...

    async def request_permission(self) -> PermissionState: ...

    async def notify(self, notification: SystemNotification) -> None: ...


class NotifySendNotifier:
    """SystemNotifier backed by the freedesktop ``notify-send`` command.

    Permission is granted when the binary is on ``PATH`` and denied
    otherwise; there is no prompt to show.
    """

    def __init__(self, binary: str = "notify-send", app_name: str = "notifications") -> None:
        self._binary = binary
        self._app_name = app_name
        self._permission = PermissionState.DEFAULT

    @property
    def permission(self) -> PermissionState:
        return self._permission

    async def request_permission(self) -> PermissionState:
        if self._permission is PermissionState.DEFAULT:
            found = shutil.which(self._binary) is not None
            self._permission = PermissionState.GRANTED if found else PermissionState.DENIED
        return self._permission

    async def notify(self, notification: SystemNotification) -> None:
        proc = await asyncio.create_subprocess_exec(
            self._binary,
            "--app-name",
            self._app_name,
            notification.title,
            notification.body,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await proc.communicate()
        if proc.returncode != 0:
            raise RuntimeError(
                f"{self._binary} exited with {proc.returncode}: {stderr.decode(errors='replace').strip()}"
            )


class InMemorySystemNotifier:
    """Fake SystemNotifier with a scripted permission answer."""

    def __init__(
        self,
        permission: PermissionState = PermissionState.DEFAULT,
        answer: PermissionState = PermissionState.GRANTED,
    ) -> None:
        self._permission = permission
        self._answer = answer
        self.requests = 0
        self.sent: list[SystemNotification] = []

    @property
    def permission(self) -> PermissionState:
        return self._permission

    async def request_permission(self) -> PermissionState:
        self.requests += 1
        self._permission = self._answer
        return self._permission

    async def notify(self, notification: SystemNotification) -> None:
        self.sent.append(notification)

    @property
    def count(self) -> int:
        return len(self.sent)
