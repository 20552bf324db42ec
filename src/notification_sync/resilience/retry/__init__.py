"""Resilience – reconnect backoff strategies."""
from notification_sync.resilience.retry.backoff import (
    BackoffStrategy,
    ConstantBackoff,
    ExponentialBackoff,
)

__all__ = ["BackoffStrategy", "ConstantBackoff", "ExponentialBackoff"]
