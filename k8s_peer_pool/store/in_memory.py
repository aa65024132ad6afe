"""Module for in memory object store."""

from collections import defaultdict
from collections.abc import Callable, Iterable
from typing import DefaultDict

import logging

from k8s_peer_pool.config import PoolLogger
from k8s_peer_pool.model import ClusterObject, ObjectKey

from .store import Listener, Store, StoreEvent


class InMemoryStore(Store):
    """In-memory implementation of the Store interface.

    Stores cluster objects keyed by ObjectKey and notifies listeners on every
    change.
    """

    def __init__(self, logger: PoolLogger | None = None) -> None:
        """Initialize the InMemoryStore."""
        self._log = logger or logging.getLogger(__name__)
        self._objects: dict[ObjectKey, ClusterObject] = {}
        self._listeners: DefaultDict[StoreEvent, list[Listener]] = defaultdict(list)

    def __len__(self) -> int:
        return len(self._objects)

    def add_object(self, key: ObjectKey, obj: ClusterObject) -> None:
        """Insert or replace an object and fire OBJECT_ADDED."""
        self._log.debug("Adding object %s to store", key)
        self._objects[key] = obj
        self._fire_event(StoreEvent.OBJECT_ADDED, key, obj)

    def update_object(self, key: ObjectKey, obj: ClusterObject) -> None:
        """Replace an object and fire OBJECT_UPDATED."""
        if key not in self._objects:
            self._log.debug("Updated object %s was not in store, inserting", key)
        self._objects[key] = obj
        self._fire_event(StoreEvent.OBJECT_UPDATED, key, obj)

    def delete_object(self, key: ObjectKey) -> None:
        """Remove an object and fire OBJECT_DELETED."""
        obj = self._objects.pop(key, None)
        if obj is None:
            self._log.debug("Deleted object %s was not in store", key)
        self._fire_event(StoreEvent.OBJECT_DELETED, key, obj)

    def replace(self, objects: Iterable[tuple[ObjectKey, ClusterObject]]) -> None:
        """Replace the full contents of the store."""
        new_objects = dict(objects)
        removed = [key for key in self._objects if key not in new_objects]
        self._log.debug(
            "Replacing store contents with %d objects (%d removed)",
            len(new_objects),
            len(removed),
        )
        for key, obj in new_objects.items():
            if key in self._objects:
                self.update_object(key, obj)
            else:
                self.add_object(key, obj)
        for key in removed:
            self.delete_object(key)

    def get_object(self, key: ObjectKey) -> ClusterObject | None:
        """Retrieve an object by key."""
        return self._objects.get(key)

    def list_objects(self) -> list[ClusterObject]:
        """Return a snapshot of all objects in the store."""
        return list(self._objects.values())

    def list_keys(self) -> list[ObjectKey]:
        """Return a snapshot of all keys in the store."""
        return list(self._objects)

    def clear(self) -> None:
        """Discard all objects without firing events."""
        self._objects.clear()

    def add_listener(
        self, event: StoreEvent, callback: Listener
    ) -> Callable[[], None]:
        """Register a callback for a store event."""

        def remove() -> None:
            if callback in self._listeners[event]:
                self._listeners[event].remove(callback)

        self._listeners[event].append(callback)
        return remove

    def _fire_event(
        self, event: StoreEvent, key: ObjectKey, obj: ClusterObject | None
    ) -> None:
        for cb in list(self._listeners[event]):  # Iterate over a copy for safe removal
            try:
                cb(key, obj)
            except Exception as err:
                self._log.error(
                    "Store listener callback failed for event %s: %s", event, err
                )
