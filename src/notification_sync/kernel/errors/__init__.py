"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── ApplicationError     (application.py)
    │   ├── SnapshotFetchError
    │   ├── MutationError
    │   ├── InactiveSessionError
    │   └── ConfigError      (config.validation)
    └── InfrastructureError  (infrastructure.py)
        ├── ConnectionError
        ├── TimeoutError
        ├── PayloadError
        ├── FrameError
        └── ExternalServiceError
"""

from notification_sync.kernel.errors.application import (
    ApplicationError,
    InactiveSessionError,
    MutationError,
    SnapshotFetchError,
)
from notification_sync.kernel.errors.base import BaseError
from notification_sync.kernel.errors.infrastructure import (
    ConnectionError,
    ExternalServiceError,
    FrameError,
    InfrastructureError,
    PayloadError,
    TimeoutError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "ConnectionError",
    "ExternalServiceError",
    "FrameError",
    "InactiveSessionError",
    "InfrastructureError",
    "MutationError",
    "PayloadError",
    "SnapshotFetchError",
    "TimeoutError",
]
