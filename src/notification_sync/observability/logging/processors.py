"""Observability – tenant context, structlog processor and get_logger helper."""
from __future__ import annotations

import contextvars
from typing import Any

import structlog

_current_tenant: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "notification_sync_tenant", default=None
)


class TenantContext:
    """Holds the tenant id of the active synchronisation session.

    The coordinator sets it on activation and clears it on deactivation so
    every log line emitted meanwhile carries ``tenant_id``.
    """

    @staticmethod
    def set(tenant_id: str | None) -> None:
        _current_tenant.set(tenant_id)

    @staticmethod
    def get() -> str | None:
        return _current_tenant.get()

    @staticmethod
    def clear() -> None:
        _current_tenant.set(None)


class TenantProcessor:
    """structlog processor that injects ``tenant_id`` from :class:`TenantContext`.

    An explicit ``tenant_id`` passed to the log call wins.

    Usage::

        structlog.configure(processors=[TenantProcessor(), ...])
    """

    def __call__(
        self,
        logger: Any,           # noqa: ARG002
        method_name: str,      # noqa: ARG002
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        tenant_id = TenantContext.get()
        if tenant_id is not None:
            event_dict.setdefault("tenant_id", tenant_id)
        return event_dict


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Return a bound structlog logger.

    Parameters
    ----------
    name:
        Logger name (typically ``__name__`` of the calling module).
    **initial_values:
        Key-value pairs to bind on the returned logger.
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


__all__ = ["TenantContext", "TenantProcessor", "get_logger"]
