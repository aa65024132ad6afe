"""Rebuild and publish the peer list on every store notification."""

from collections.abc import Callable

from .config import PoolConfig
from .model import ClusterObject, ObjectKey
from .peers import PeerListBuilder
from .store import Store, StoreEvent

__all__ = ["EventDispatcher"]


class EventDispatcher:
    """Calls the update callback with a full rebuild for every store event.

    There is no filtering or debouncing: one notification is one rebuild and
    one callback invocation.
    """

    def __init__(
        self, store: Store, builder: PeerListBuilder, config: PoolConfig
    ) -> None:
        """Initialize the EventDispatcher."""
        self._store = store
        self._builder = builder
        self._on_update = config.on_update
        self._log = config.logger
        self._closed = False
        self._dispatch_count = 0

    @property
    def dispatch_count(self) -> int:
        """Return the number of update callback invocations so far."""
        return self._dispatch_count

    def register(self) -> Callable[[], None]:
        """Subscribe to all store events.

        Returns a callable that removes the listeners.
        """
        removers = [
            self._store.add_listener(event, self._listener(event))
            for event in StoreEvent
        ]

        def remove() -> None:
            for remover in removers:
                remover()

        return remove

    def _listener(
        self, event: StoreEvent
    ) -> Callable[[ObjectKey, ClusterObject | None], None]:
        def on_event(key: ObjectKey, obj: ClusterObject | None) -> None:
            self._log.debug("Queue (%s) '%s'", event, key)
            self.dispatch()

        return on_event

    def dispatch(self) -> None:
        """Rebuild the peer list from the store and publish it."""
        if self._closed:
            self._log.debug("Dispatcher closed, not publishing peer list")
            return
        peers = self._builder.build(self._store.list_objects())
        self._dispatch_count += 1
        try:
            self._on_update(list(peers))
        except Exception as err:
            self._log.error("Peer update callback failed: %s", err)

    def close(self) -> None:
        """Stop publishing peer lists."""
        self._closed = True
