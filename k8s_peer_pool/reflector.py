"""Keep the local store in sync with the control plane.

The reflector lists all objects matching the selector, replaces the contents of
the store with them and then applies the deltas of a watch started from the
resource version of the listing. A watch closed by the server is resumed from
the last seen resource version; an expired resource version or a failing
connection falls back to a fresh listing.
"""

import asyncio
from contextlib import aclosing

from .client import ControlPlane, EventType, WatchEvent
from .config import PoolConfig
from .exceptions import ClientException, InvalidObjectError, WatchExpiredError
from .model import ClusterObject, ObjectKey, parse_object
from .store import Store

__all__ = ["Reflector"]


class Reflector:
    """List then watch the configured objects into a store."""

    def __init__(self, client: ControlPlane, store: Store, config: PoolConfig) -> None:
        """Initialize the Reflector."""
        self._client = client
        self._store = store
        self._config = config
        self._log = config.logger
        self._mechanism = config.watch_mechanism
        self._synced = asyncio.Event()
        self._resource_version: str | None = None

    @property
    def has_synced(self) -> bool:
        """Return True once the initial listing is in the store."""
        return self._synced.is_set()

    @property
    def resource_version(self) -> str | None:
        """Return the resource version the next watch resumes from."""
        return self._resource_version

    async def wait_for_sync(self) -> None:
        """Wait until the initial listing has been applied to the store."""
        await self._synced.wait()

    async def run(self) -> None:
        """Run the list and watch loop until cancelled."""
        backoff = self._config.relist_backoff
        while True:
            try:
                await self._list()
                backoff = self._config.relist_backoff
                await self._watch()
            except WatchExpiredError as err:
                self._log.debug("Re-listing %s: %s", self._mechanism, err)
            except ClientException as err:
                self._log.error(
                    "Failed to sync %s, retrying in %ss: %s",
                    self._mechanism,
                    backoff,
                    err,
                )
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, self._config.max_relist_backoff)

    async def _list(self) -> None:
        result = await self._client.list_objects(
            self._mechanism,
            self._config.namespace,
            self._config.selector,
            self._config.list_timeout,
        )
        objects: list[tuple[ObjectKey, ClusterObject]] = []
        for item in result.items:
            try:
                obj = parse_object(self._mechanism, item)
                objects.append((ObjectKey.from_meta(obj.metadata), obj))
            except InvalidObjectError as err:
                self._log.error("while computing object key: %s", err)
        self._log.debug(
            "Listed %d %s at resource version %s",
            len(objects),
            self._mechanism,
            result.resource_version,
        )
        self._resource_version = result.resource_version
        self._store.replace(objects)
        self._synced.set()

    async def _watch(self) -> None:
        """Apply watch events, resuming the watch whenever the server closes it."""
        while True:
            self._log.debug(
                "Watching %s from resource version %s",
                self._mechanism,
                self._resource_version,
            )
            events = self._client.watch_objects(
                self._mechanism,
                self._config.namespace,
                self._config.selector,
                self._resource_version,
                self._config.watch_timeout_seconds,
            )
            async with aclosing(events):
                async for event in events:
                    self._handle(event)

    def _handle(self, event: WatchEvent) -> None:
        if event.type == EventType.ERROR:
            code = event.object.get("code")
            message = event.object.get("message")
            if code == 410:
                raise WatchExpiredError(self._resource_version, message)
            raise ClientException(f"watch error ({code}): {message}")
        if event.type == EventType.BOOKMARK:
            if event.resource_version:
                self._resource_version = event.resource_version
            return
        try:
            obj = parse_object(self._mechanism, event.object)
            key = ObjectKey.from_meta(obj.metadata)
        except InvalidObjectError as err:
            self._log.error("while computing object key: %s", err)
            return
        if obj.metadata.resource_version:
            self._resource_version = obj.metadata.resource_version
        if event.type == EventType.ADDED:
            self._store.add_object(key, obj)
        elif event.type == EventType.MODIFIED:
            self._store.update_object(key, obj)
        elif event.type == EventType.DELETED:
            self._store.delete_object(key)
