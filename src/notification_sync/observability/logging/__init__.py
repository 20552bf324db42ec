"""Observability – structured logging helpers."""
from notification_sync.observability.logging.factory import LoggerFactory
from notification_sync.observability.logging.processors import (
    TenantContext,
    TenantProcessor,
    get_logger,
)

__all__ = ["LoggerFactory", "TenantContext", "TenantProcessor", "get_logger"]
