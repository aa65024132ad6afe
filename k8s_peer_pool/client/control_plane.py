"""Interface to the cluster control plane used by the reflector."""

from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from k8s_peer_pool.config import WatchMechanism


class EventType(StrEnum):
    """Type of a watch event."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    BOOKMARK = "BOOKMARK"
    ERROR = "ERROR"


@dataclass
class ObjectList:
    """Result of a list call: a consistent snapshot plus its resume token."""

    items: list[dict[str, Any]] = field(default_factory=list)
    resource_version: str | None = None


@dataclass
class WatchEvent:
    """A single delta streamed by a watch call."""

    type: EventType
    object: dict[str, Any]

    @property
    def resource_version(self) -> str | None:
        """Return the resource version of the object carried by the event."""
        metadata = self.object.get("metadata")
        if isinstance(metadata, dict):
            return metadata.get("resourceVersion")
        return None


class ControlPlane(ABC):
    """List and watch access to the objects of a watch mechanism."""

    @abstractmethod
    async def list_objects(
        self,
        mechanism: WatchMechanism,
        namespace: str,
        label_selector: str,
        timeout: float | None = None,
    ) -> ObjectList:
        """List all objects matching the label selector.

        An empty namespace lists across all namespaces. The request is
        abandoned after `timeout` seconds.

        Raises:
            ClientException: If the control plane could not be reached.
        """

    @abstractmethod
    def watch_objects(
        self,
        mechanism: WatchMechanism,
        namespace: str,
        label_selector: str,
        resource_version: str | None,
        timeout_seconds: int | None = None,
    ) -> AsyncGenerator[WatchEvent, None]:
        """Stream the changes made after the resource version.

        The generator ends when the server closes the watch, e.g. after
        `timeout_seconds`. Closing the generator stops the watch.

        Raises:
            WatchExpiredError: If the resource version is too old.
            ClientException: If the watch connection failed.
        """
