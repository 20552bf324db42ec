"""Infrastructure errors – I/O failures, wire format problems."""

from __future__ import annotations

from typing import Any

from notification_sync.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class ConnectionError(InfrastructureError):  # noqa: A001
    """Failed to open or keep the push channel."""

    default_code = "connection_error"

    def __init__(
        self,
        resource: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"Could not connect to '{resource}'", **kwargs)
        self.resource = resource


class TimeoutError(InfrastructureError):  # noqa: A001
    """An I/O operation exceeded its deadline."""

    default_code = "infrastructure_timeout"


class PayloadError(InfrastructureError):
    """A notification payload could not be decoded."""

    default_code = "payload_error"

    def __init__(
        self,
        message: str,
        *,
        payload: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.payload = payload


class FrameError(InfrastructureError):
    """A STOMP frame was malformed or the broker answered with ERROR."""

    default_code = "frame_error"

    def __init__(
        self,
        message: str,
        *,
        command: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.command = command


class ExternalServiceError(InfrastructureError):
    """The notification REST service returned an unexpected response."""

    default_code = "external_service_error"

    def __init__(
        self,
        service: str,
        message: str | None = None,
        *,
        status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message or f"External service '{service}' error", **kwargs)
        self.service = service
        self.status_code = status_code


__all__ = [
    "ConnectionError",
    "ExternalServiceError",
    "FrameError",
    "InfrastructureError",
    "PayloadError",
    "TimeoutError",
]
