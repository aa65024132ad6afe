"""Peer pool subscription lifecycle.

A PeerPool owns the store, the reflector worker task and the dispatcher for a
single subscription:

    UNINITIALIZED -> SYNCING -> RUNNING -> CLOSED

`start()` blocks until the initial listing is in the store or the sync timeout
elapses. `close()` cancels the worker, which terminates the outstanding watch,
and no update callback starts afterwards. A pool is single use.
"""

import asyncio
from enum import StrEnum

from .client import ControlPlane, KubernetesControlPlane
from .config import PoolConfig
from .dispatcher import EventDispatcher
from .exceptions import SyncTimeout
from .peers import PeerListBuilder
from .reflector import Reflector
from .store import InMemoryStore

__all__ = [
    "PoolState",
    "PeerPool",
    "new_pool",
]


class PoolState(StrEnum):
    """Lifecycle state of a PeerPool."""

    UNINITIALIZED = "Uninitialized"
    SYNCING = "Syncing"
    RUNNING = "Running"
    CLOSED = "Closed"


class PeerPool:
    """Keeps a peer list in sync with the members of a workload group."""

    def __init__(self, config: PoolConfig, client: ControlPlane) -> None:
        """Initialize the PeerPool.

        Args:
            config: The pool configuration
            client: The control plane to list and watch objects from
        """
        self._config = config
        self._log = config.logger
        self._store = InMemoryStore(config.logger)
        self._builder = PeerListBuilder(config)
        self._dispatcher = EventDispatcher(self._store, self._builder, config)
        self._reflector = Reflector(client, self._store, config)
        self._worker: asyncio.Task[None] | None = None
        self._state = PoolState.UNINITIALIZED
        self._closed = asyncio.Event()

    @property
    def state(self) -> PoolState:
        """Return the lifecycle state of the pool."""
        return self._state

    @property
    def config(self) -> PoolConfig:
        """Return the pool configuration."""
        return self._config

    def peers(self) -> list[str]:
        """Return the peer list for the current contents of the store."""
        return self._builder.build(self._store.list_objects())

    async def start(self) -> None:
        """Start the subscription and wait for the initial sync.

        Raises:
            SyncTimeout: If the initial sync did not complete in time. The
                pool is closed in that case.
            RuntimeError: If the pool was already started, or was closed
                before the initial sync completed.
        """
        if self._state != PoolState.UNINITIALIZED:
            raise RuntimeError(f"Peer pool cannot be started when {self._state}")
        self._state = PoolState.SYNCING
        self._log.debug(
            "Starting %s watch in namespace '%s' with selector '%s'",
            self._config.watch_mechanism,
            self._config.namespace,
            self._config.selector,
        )
        self._dispatcher.register()
        self._worker = asyncio.create_task(
            self._reflector.run(), name=f"peer-pool-{self._config.watch_mechanism}"
        )
        self._worker.add_done_callback(self._worker_done)
        synced = asyncio.create_task(self._reflector.wait_for_sync())
        closed = asyncio.create_task(self._closed.wait())
        try:
            async with asyncio.timeout(self._config.sync_timeout):
                await asyncio.wait(
                    [synced, closed, self._worker],
                    return_when=asyncio.FIRST_COMPLETED,
                )
        except TimeoutError as err:
            await self._shutdown()
            raise SyncTimeout(
                "timed out waiting for caches to sync after "
                f"{self._config.sync_timeout}s"
            ) from err
        except asyncio.CancelledError:
            await self._shutdown()
            raise
        finally:
            synced.cancel()
            closed.cancel()
        if self._state == PoolState.CLOSED:
            raise RuntimeError("Peer pool closed before caches synced")
        if not self._reflector.has_synced:
            # The worker exited without syncing
            await self._shutdown()
            self._worker.result()
            raise RuntimeError("Peer pool worker exited before caches synced")
        self._state = PoolState.RUNNING
        self._log.debug("Peer pool synced with %d objects", len(self._store))

    async def close(self) -> None:
        """Stop the subscription.

        Raises:
            RuntimeError: If the pool was already closed.
        """
        if self._state == PoolState.CLOSED:
            raise RuntimeError("Peer pool already closed")
        await self._shutdown()

    async def _shutdown(self) -> None:
        self._state = PoolState.CLOSED
        self._closed.set()
        self._dispatcher.close()
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._store.clear()
        self._log.debug("Peer pool closed")

    def _worker_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        if (err := task.exception()) is not None:
            self._log.error("Peer pool worker failed: %s", err)


async def new_pool(
    config: PoolConfig, client: ControlPlane | None = None
) -> PeerPool:
    """Create and start a PeerPool.

    When no client is given one is created from the in-cluster or local
    kubernetes configuration.

    Raises:
        ClientException: If the kubernetes client could not be created.
        SyncTimeout: If the initial sync did not complete in time.
    """
    if client is None:
        client = KubernetesControlPlane.from_environment()
    pool = PeerPool(config, client)
    await pool.start()
    config.logger.debug("Started peer pool %s", pool.state)
    return pool
