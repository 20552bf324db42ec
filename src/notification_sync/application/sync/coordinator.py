"""Application sync – NotificationSyncCoordinator.

Owns the store and the push subscription for one tenant session and is
the only object UI consumers talk to.

Activation runs ``fetch snapshot -> replace store -> subscribe``. Those
steps are not atomic with respect to the server, so a push can land while
a snapshot request is in flight and then be overwritten when the snapshot
resolves without it. The window is accepted: the next refresh converges,
and a replayed push is absorbed by the idempotent ``ingest``. Closing it
for real would need a "fetch since cursor" contract from the server.
"""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any

from notification_sync.application.dispatch import SideEffectDispatcher
from notification_sync.application.sync.ports import (
    ConnectionState,
    NotificationApi,
    RealtimeTransport,
    SyncState,
)
from notification_sync.domain import (
    Notification,
    NotificationFilter,
    NotificationSnapshot,
    NotificationStore,
)
from notification_sync.kernel.errors import BaseError, InactiveSessionError, SnapshotFetchError
from notification_sync.observability.logging import TenantContext, get_logger

__all__ = ["NotificationSyncCoordinator", "SnapshotListener"]

logger = get_logger(__name__)

SnapshotListener = Callable[[NotificationSnapshot], None]


class NotificationSyncCoordinator:
    """Keeps a tenant's notification view in step with the server.

    Parameters
    ----------
    api:
        Request/response side: snapshot fetch and mutations.
    transport:
        Push channel; the coordinator is its only user.
    dispatcher:
        Toast / system notification side effects for new pushes.
    store:
        Optional pre-built store (tests); a fresh one otherwise.
    """

    def __init__(
        self,
        api: NotificationApi,
        transport: RealtimeTransport,
        dispatcher: SideEffectDispatcher,
        store: NotificationStore | None = None,
    ) -> None:
        self._api = api
        self._transport = transport
        self._dispatcher = dispatcher
        self._store = store or NotificationStore()
        self._state = SyncState.INACTIVE
        self._tenant_id: str | None = None
        self._generation = 0
        self._loading = False
        self._error: BaseError | None = None
        self._listeners: list[SnapshotListener] = []
        self._tasks: set[asyncio.Task[Any]] = set()

    async def __aenter__(self) -> NotificationSyncCoordinator:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.deactivate()

    # ------------------------------------------------------------------
    # Read side for consumers
    # ------------------------------------------------------------------

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def tenant_id(self) -> str | None:
        return self._tenant_id

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> BaseError | None:
        """Last snapshot failure, cleared by the next successful fetch."""
        return self._error

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return self._store.items

    @property
    def unread_count(self) -> int:
        return self._store.unread_count

    @property
    def connection_state(self) -> ConnectionState:
        return self._transport.state

    def filter(self, which: NotificationFilter = NotificationFilter.ALL) -> tuple[Notification, ...]:
        return self._store.filter(which)

    def snapshot(self) -> NotificationSnapshot:
        return self._store.snapshot()

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Call *listener* with a fresh snapshot after every change.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def bind_tenant(self, tenant_id: str | None) -> None:
        """Follow the host's current tenant: activate on a value, deactivate on ``None``."""
        if tenant_id is None:
            await self.deactivate()
        else:
            await self.activate(tenant_id)

    async def activate(self, tenant_id: str) -> None:
        if not tenant_id:
            raise ValueError("tenant_id must be a non-empty identifier")
        if tenant_id == self._tenant_id and self._state is not SyncState.INACTIVE:
            logger.debug("sync_already_active", tenant_id=tenant_id, state=self._state.value)
            return
        if self._state is not SyncState.INACTIVE:
            await self.deactivate()

        self._generation += 1
        generation = self._generation
        self._tenant_id = tenant_id
        TenantContext.set(tenant_id)
        self._set_state(SyncState.SYNCING)
        logger.info("sync_activating", tenant_id=tenant_id)

        self._spawn(self._dispatcher.request_permission())
        await self._load_snapshot(generation)
        if generation != self._generation:
            return

        await self._transport.connect(tenant_id, self._handle_push)
        if generation != self._generation:
            if self._state is SyncState.INACTIVE:
                await self._transport.disconnect()
            return
        self._set_state(SyncState.LIVE)

    async def refresh(self) -> None:
        """Re-run the snapshot fetch; the push subscription is left alone."""
        if self._state is SyncState.INACTIVE:
            raise InactiveSessionError("refresh notifications")
        await self._load_snapshot(self._generation)

    async def deactivate(self) -> None:
        """Drop the tenant: unsubscribe, empty the store, forget alerts."""
        if self._state is SyncState.INACTIVE and self._tenant_id is None:
            return
        tenant_id = self._tenant_id
        self._generation += 1
        await self._transport.disconnect()
        self._store.reset()
        self._dispatcher.reset()
        self._tenant_id = None
        self._loading = False
        self._error = None
        self._set_state(SyncState.INACTIVE)
        logger.info("sync_deactivated", tenant_id=tenant_id)
        TenantContext.clear()
        self._publish()

    async def flush(self) -> None:
        """Wait for outstanding fire-and-forget work."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        await self._dispatcher.flush()

    # ------------------------------------------------------------------
    # Mutations: local first, then best-effort REST, never rolled back
    # ------------------------------------------------------------------

    def mark_as_read(self, notification_id: str) -> bool:
        if not self._store.mark_read(notification_id):
            return False
        self._publish()
        self._spawn(self._mutate("mark_read", self._api.mark_read, notification_id))
        return True

    def delete_notification(self, notification_id: str) -> bool:
        if not self._store.delete(notification_id):
            return False
        self._publish()
        self._spawn(self._mutate("delete", self._api.delete, notification_id))
        return True

    def mark_all_as_read(self) -> list[str]:
        changed = self._store.mark_all_read()
        if changed:
            self._publish()
        for notification_id in changed:
            self._spawn(self._mutate("mark_read", self._api.mark_read, notification_id))
        return changed

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _handle_push(self, record: Notification) -> None:
        if self._state is SyncState.INACTIVE:
            return
        if record.tenant_id is not None and record.tenant_id != self._tenant_id:
            logger.warning(
                "push_foreign_tenant_dropped",
                notification_id=record.id,
                record_tenant_id=record.tenant_id,
            )
            return
        inserted = self._store.ingest(record)
        if inserted:
            logger.debug("push_ingested", notification_id=record.id, unread=self._store.unread_count)
            self._publish()
        # dedup for alerts lives in the dispatcher, keyed on the same id
        self._dispatcher.dispatch(record)

    async def _load_snapshot(self, generation: int) -> None:
        tenant_id = self._tenant_id
        assert tenant_id is not None
        self._loading = True
        self._error = None
        self._publish()
        try:
            records = await self._api.fetch_snapshot(tenant_id)
        except Exception as exc:  # noqa: BLE001
            if generation != self._generation:
                return
            error = exc if isinstance(exc, SnapshotFetchError) else SnapshotFetchError(tenant_id, cause=exc)
            self._error = error
            logger.warning("snapshot_fetch_failed", tenant_id=tenant_id, error=error.to_dict())
        else:
            if generation != self._generation:
                logger.debug("snapshot_discarded", tenant_id=tenant_id)
                return
            self._store.replace_snapshot(records)
            self._dispatcher.mark_seen(n.id for n in self._store.items)
            logger.info(
                "snapshot_loaded",
                tenant_id=tenant_id,
                count=len(self._store),
                unread=self._store.unread_count,
            )
        finally:
            if generation == self._generation:
                self._loading = False
                self._publish()

    async def _mutate(
        self,
        action: str,
        call: Callable[[str], Awaitable[None]],
        notification_id: str,
    ) -> None:
        try:
            await call(notification_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "notification_mutation_failed",
                action=action,
                notification_id=notification_id,
                error=repr(exc),
            )

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _set_state(self, state: SyncState) -> None:
        if state is not self._state:
            logger.debug("sync_state", old=self._state.value, new=state.value)
            self._state = state

    def _publish(self) -> None:
        snapshot = self._store.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:  # noqa: BLE001
                logger.exception("snapshot_listener_failed")
