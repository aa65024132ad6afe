"""
The store module holds the local snapshot of the cluster objects watched by a
peer pool.

- Uses ObjectKey (namespace/name) as the key for all objects.
- Stores values as the typed dataclasses from model.py.
- Notifies listeners on every add, update and delete.
"""

from .store import Store, StoreEvent
from .in_memory import InMemoryStore

__all__ = [
    "Store",
    "StoreEvent",
    "InMemoryStore",
]
