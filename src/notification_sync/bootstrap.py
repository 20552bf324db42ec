"""Wire a production coordinator from :class:`NotificationSyncSettings`."""
from __future__ import annotations

from typing import Any

from notification_sync.adapters.http import HttpNotificationApi
from notification_sync.adapters.stomp import Connector, StompRealtimeClient
from notification_sync.application.dispatch import (
    LoggingToastSink,
    NotifySendNotifier,
    SideEffectDispatcher,
    SystemNotifier,
    ToastSink,
)
from notification_sync.application.sync import NotificationSyncCoordinator
from notification_sync.config import EnvSettingsLoader, NotificationSyncSettings
from notification_sync.observability.logging import LoggerFactory, get_logger
from notification_sync.resilience.retry import BackoffStrategy, ConstantBackoff, ExponentialBackoff

__all__ = [
    "build_backoff",
    "build_coordinator",
    "configure_logging",
    "coordinator_from_env",
    "load_settings",
]

logger = get_logger(__name__)


def load_settings() -> NotificationSyncSettings:
    """Read ``NOTIFY_*`` environment variables."""
    return EnvSettingsLoader().load(NotificationSyncSettings)


def configure_logging(settings: NotificationSyncSettings) -> None:
    LoggerFactory.configure(level=settings.log_level_number, json=settings.log_json)


def build_backoff(settings: NotificationSyncSettings) -> BackoffStrategy:
    if settings.reconnect_backoff == "exponential":
        return ExponentialBackoff(
            base_delay=settings.reconnect_delay,
            max_delay=settings.reconnect_max_delay,
        )
    return ConstantBackoff(settings.reconnect_delay)


def build_coordinator(
    settings: NotificationSyncSettings,
    *,
    toasts: ToastSink | None = None,
    system: SystemNotifier | None = None,
    connector: Connector | None = None,
    http_options: dict[str, Any] | None = None,
) -> NotificationSyncCoordinator:
    """Assemble api, transport and dispatcher for one process.

    ``http_options`` is forwarded to :class:`httpx.AsyncClient` (auth
    headers, transport, proxies...).
    """
    api = HttpNotificationApi.from_url(
        settings.base_url,
        timeout=settings.request_timeout,
        **(http_options or {}),
    )
    transport = StompRealtimeClient(
        settings.ws_url,
        connector=connector,
        max_attempts=settings.max_reconnect_attempts,
        backoff=build_backoff(settings),
        heartbeat=(settings.heartbeat_outgoing_ms, settings.heartbeat_incoming_ms),
        connect_timeout=settings.request_timeout,
    )
    dispatcher = SideEffectDispatcher(
        toasts or LoggingToastSink(),
        system if system is not None else NotifySendNotifier(),
        toast_duration=settings.toast_duration,
    )
    return NotificationSyncCoordinator(api, transport, dispatcher)


def coordinator_from_env(**overrides: Any) -> NotificationSyncCoordinator:
    """Process entry point: read ``NOTIFY_*``, configure logging, wire.

    ``overrides`` go to :func:`build_coordinator` (sinks, connector...).
    """
    settings = load_settings()
    configure_logging(settings)
    logger.info("notification_sync_configured", **settings.as_dict())
    return build_coordinator(settings, **overrides)
