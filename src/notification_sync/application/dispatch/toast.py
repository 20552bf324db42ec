"""Application dispatch – in-app toast models and protocol."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from notification_sync.observability.logging import get_logger

__all__ = ["InMemoryToastSink", "LoggingToastSink", "Toast", "ToastSink"]

logger = get_logger(__name__)


@dataclass(frozen=True)
class Toast:
    """A transient in-app message."""

    title: str
    message: str
    duration: float = 5.0  # seconds on screen
    tag: str | None = None  # notification id the toast was raised for


@runtime_checkable
class ToastSink(Protocol):
    """Port: show a toast in the host UI."""

    def show(self, toast: Toast) -> None: ...


class LoggingToastSink:
    """ToastSink for headless hosts: toasts become structured log lines."""

    def show(self, toast: Toast) -> None:
        logger.info("toast", title=toast.title, message=toast.message, tag=toast.tag)


class InMemoryToastSink:
    """Fake ToastSink that captures shown toasts."""

    def __init__(self) -> None:
        self.shown: list[Toast] = []

    def show(self, toast: Toast) -> None:
        self.shown.append(toast)

    def reset(self) -> None:
        self.shown.clear()

    @property
    def count(self) -> int:
        return len(self.shown)

    def last(self) -> Toast | None:
        return self.shown[-1] if self.shown else None
