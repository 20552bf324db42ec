"""Application-layer errors – failures of a synchronisation use case."""

from __future__ import annotations

from typing import Any

from notification_sync.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """A use case could not complete."""

    default_code = "application_error"


class SnapshotFetchError(ApplicationError):
    """The bulk notification read for a tenant failed.

    Surfaced to consumers through the coordinator's ``error`` attribute; the
    store keeps its last known-good state.
    """

    default_code = "snapshot_fetch_failed"

    def __init__(
        self,
        tenant_id: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or "Failed to load notifications", **kwargs)
        self.tenant_id = tenant_id


class MutationError(ApplicationError):
    """A mark-read or delete call was rejected by the server."""

    default_code = "mutation_failed"

    def __init__(
        self,
        action: str,
        notification_id: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message or f"Failed to {action} notification '{notification_id}'",
            **kwargs,
        )
        self.action = action
        self.notification_id = notification_id


class InactiveSessionError(ApplicationError):
    """An operation needs a bound tenant but the coordinator is inactive."""

    default_code = "inactive_session"

    def __init__(self, operation: str, **kwargs: Any) -> None:
        super().__init__(f"Cannot {operation}: no active tenant session", **kwargs)
        self.operation = operation


__all__ = [
    "ApplicationError",
    "InactiveSessionError",
    "MutationError",
    "SnapshotFetchError",
]
