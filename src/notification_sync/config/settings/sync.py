"""Config settings – NotificationSyncSettings."""
from __future__ import annotations

import dataclasses
import logging
from typing import ClassVar

from notification_sync.config.settings.base import Settings

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_BACKOFF_KINDS = frozenset({"constant", "exponential"})


@dataclasses.dataclass
class NotificationSyncSettings(Settings):
    """Everything needed to wire a coordinator for one process.

    Environment variables are prefixed with ``NOTIFY_``, e.g.
    ``NOTIFY_BASE_URL`` or ``NOTIFY_MAX_RECONNECT_ATTEMPTS``.

    ``reconnect_backoff`` is ``constant`` (every wait is
    ``reconnect_delay``) or ``exponential`` (doubling from
    ``reconnect_delay`` up to ``reconnect_max_delay``).
    """

    _prefix: ClassVar[str] = "NOTIFY"

    base_url: str
    ws_url: str
    request_timeout: float = 10.0
    max_reconnect_attempts: int = 5
    reconnect_delay: float = 3.0
    reconnect_backoff: str = "constant"
    reconnect_max_delay: float = 30.0
    heartbeat_outgoing_ms: int = 4000
    heartbeat_incoming_ms: int = 4000
    toast_duration: float = 5.0
    log_level: str = "INFO"
    log_json: bool = True

    def _validate(self) -> None:
        if not self.base_url.startswith(("http://", "https://")):
            self._reject("base_url", "must be an http(s) URL")
        if not self.ws_url.startswith(("ws://", "wss://")):
            self._reject("ws_url", "must be a ws(s) URL")
        if self.max_reconnect_attempts < 1:
            self._reject("max_reconnect_attempts", "must be >= 1")
        if self.reconnect_delay < 0:
            self._reject("reconnect_delay", "must be >= 0")
        self.reconnect_backoff = self.reconnect_backoff.lower()
        if self.reconnect_backoff not in _BACKOFF_KINDS:
            self._reject("reconnect_backoff", "must be 'constant' or 'exponential'")
        if self.reconnect_backoff == "exponential" and self.reconnect_max_delay < self.reconnect_delay:
            self._reject("reconnect_max_delay", "must be >= reconnect_delay")
        if self.request_timeout <= 0:
            self._reject("request_timeout", "must be > 0")
        for name in ("heartbeat_outgoing_ms", "heartbeat_incoming_ms"):
            if getattr(self, name) < 0:
                self._reject(name, "must be >= 0")
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            self._reject("log_level", "unknown level")

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


__all__ = ["NotificationSyncSettings"]
