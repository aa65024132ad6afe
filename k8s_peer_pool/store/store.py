"""Store module holding the local snapshot of watched cluster objects."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from enum import StrEnum

from k8s_peer_pool.model import ClusterObject, ObjectKey

Listener = Callable[[ObjectKey, ClusterObject | None], None]


class StoreEvent(StrEnum):
    """Enum for store events."""

    OBJECT_ADDED = "Add"
    OBJECT_UPDATED = "Update"
    OBJECT_DELETED = "Delete"


class Store(ABC):
    """Abstract base class for a keyed object store with listener support.

    The store is only mutated by the reflector. Readers get snapshot copies.
    """

    @abstractmethod
    def add_object(self, key: ObjectKey, obj: ClusterObject) -> None:
        """Insert or replace an object and fire OBJECT_ADDED."""

    @abstractmethod
    def update_object(self, key: ObjectKey, obj: ClusterObject) -> None:
        """Replace an object and fire OBJECT_UPDATED."""

    @abstractmethod
    def delete_object(self, key: ObjectKey) -> None:
        """Remove an object and fire OBJECT_DELETED."""

    @abstractmethod
    def replace(self, objects: Iterable[tuple[ObjectKey, ClusterObject]]) -> None:
        """Replace the full contents of the store.

        Fires the add, update and delete events needed to go from the old
        contents to the new contents.
        """

    @abstractmethod
    def get_object(self, key: ObjectKey) -> ClusterObject | None:
        """Retrieve an object by key."""

    @abstractmethod
    def list_objects(self) -> list[ClusterObject]:
        """Return a snapshot of all objects in the store."""

    @abstractmethod
    def list_keys(self) -> list[ObjectKey]:
        """Return a snapshot of all keys in the store."""

    @abstractmethod
    def clear(self) -> None:
        """Discard all objects without firing events."""

    @abstractmethod
    def add_listener(
        self, event: StoreEvent, callback: Listener
    ) -> Callable[[], None]:
        """Register a callback for a store event.

        Returns a callable that can be called to remove the listener.
        """
