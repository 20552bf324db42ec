"""HTTP adapter – HttpNotificationApi, the REST side of synchronisation."""
from __future__ import annotations

from typing import Any

from notification_sync.adapters.http.client import HttpxHttpClient
from notification_sync.domain import Notification
from notification_sync.kernel.errors import (
    InfrastructureError,
    MutationError,
    PayloadError,
    SnapshotFetchError,
)
from notification_sync.observability.logging import get_logger

__all__ = ["HttpNotificationApi"]

logger = get_logger(__name__)


class HttpNotificationApi:
    """NotificationApi over the notification service's REST endpoints.

    ==========================  =======================================
    Operation                   Request
    ==========================  =======================================
    snapshot                    ``GET /notifications/{tenant_id}``
    mark read                   ``PATCH /notifications/{id}/read``
    delete                      ``DELETE /notifications/{id}``
    ==========================  =======================================
    """

    def __init__(self, client: HttpxHttpClient) -> None:
        self._client = client

    @classmethod
    def from_url(cls, base_url: str, timeout: float = 10.0, **kwargs: Any) -> HttpNotificationApi:
        return cls(HttpxHttpClient(base_url=base_url, timeout=timeout, **kwargs))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_snapshot(self, tenant_id: str) -> list[Notification]:
        """Fetch the tenant's list, newest first.

        Items that fail to decode are skipped with a warning; a body that is
        not a JSON array fails the whole fetch.

        Raises:
            SnapshotFetchError: transport failure, non-2xx status or bad body.
        """
        try:
            response = await self._client.get(f"/notifications/{tenant_id}")
            body = response.json() if response.content else []
        except (InfrastructureError, ValueError) as exc:
            raise SnapshotFetchError(tenant_id, cause=exc) from exc

        if body is None:
            body = []
        if not isinstance(body, list):
            raise SnapshotFetchError(
                tenant_id,
                "Notification snapshot is not a list",
                detail={"type": type(body).__name__},
            )

        records: list[Notification] = []
        for item in body:
            try:
                records.append(Notification.from_payload(item))
            except PayloadError as exc:
                logger.warning("snapshot_item_dropped", tenant_id=tenant_id, error=exc.message)
        return records

    async def unread_count(self, tenant_id: str) -> int:
        """Unread notifications for *tenant_id*, computed from a fresh snapshot."""
        return sum(1 for n in await self.fetch_snapshot(tenant_id) if not n.read)

    async def mark_read(self, notification_id: str) -> None:
        try:
            await self._client.patch(f"/notifications/{notification_id}/read")
        except InfrastructureError as exc:
            raise MutationError("mark read", notification_id, cause=exc) from exc

    async def delete(self, notification_id: str) -> None:
        try:
            await self._client.delete(f"/notifications/{notification_id}")
        except InfrastructureError as exc:
            raise MutationError("delete", notification_id, cause=exc) from exc
