"""Shared helpers for k8s-peer-pool tests."""

import asyncio
from collections.abc import AsyncGenerator, Callable
import copy
from typing import Any

from k8s_peer_pool.client import ControlPlane, EventType, ObjectList, WatchEvent
from k8s_peer_pool.config import WatchMechanism


NAMESPACE = "cache"
SELECTOR = "app=groupcache"

# Ends the current watch call
END_WATCH = object()


def make_pod(
    name: str,
    ip: str | None,
    statuses: list[tuple[bool, bool]] | None = None,
    namespace: str = NAMESPACE,
    resource_version: str = "1",
) -> dict[str, Any]:
    """Return a pod in the JSON shape served by the API server.

    Each status is a (ready, running) pair for one container.
    """
    container_statuses = []
    for i, (ready, running) in enumerate(statuses or []):
        state: dict[str, Any] = (
            {"running": {"startedAt": "2026-10-19T00:00:00Z"}}
            if running
            else {"waiting": {"reason": "ContainerCreating"}}
        )
        container_statuses.append(
            {"name": f"container-{i}", "ready": ready, "state": state}
        )
    status: dict[str, Any] = {"phase": "Running"}
    if ip is not None:
        status["podIP"] = ip
    if statuses is not None:
        status["containerStatuses"] = container_statuses
    return {
        "kind": "Pod",
        "apiVersion": "v1",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "resourceVersion": resource_version,
            "labels": {"app": "groupcache"},
        },
        "status": status,
    }


def make_endpoints(
    name: str,
    subsets: list[list[str]],
    namespace: str = NAMESPACE,
    resource_version: str = "1",
) -> dict[str, Any]:
    """Return an endpoints object with one subset per list of addresses."""
    return {
        "kind": "Endpoints",
        "apiVersion": "v1",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "resourceVersion": resource_version,
        },
        "subsets": [
            {
                "addresses": [{"ip": ip} for ip in addresses],
                "ports": [{"port": 8080, "protocol": "TCP"}],
            }
            for addresses in subsets
        ],
    }


class FakeControlPlane(ControlPlane):
    """In memory control plane serving list and watch calls from tests."""

    def __init__(self, items: list[dict[str, Any]] | None = None) -> None:
        self.items = list(items or [])
        self.resource_version = "10"
        self.list_calls: list[tuple[WatchMechanism, str, str]] = []
        self.list_timeouts: list[float | None] = []
        self.watch_calls: list[str | None] = []
        self.list_errors: list[Exception] = []
        self.block_list = False
        self.events: asyncio.Queue[Any] = asyncio.Queue()
        self.watching = asyncio.Event()

    async def list_objects(
        self,
        mechanism: WatchMechanism,
        namespace: str,
        label_selector: str,
        timeout: float | None = None,
    ) -> ObjectList:
        self.list_calls.append((mechanism, namespace, label_selector))
        self.list_timeouts.append(timeout)
        if self.list_errors:
            raise self.list_errors.pop(0)
        if self.block_list:
            await asyncio.Event().wait()
        return ObjectList(
            items=copy.deepcopy(self.items), resource_version=self.resource_version
        )

    async def watch_objects(
        self,
        mechanism: WatchMechanism,
        namespace: str,
        label_selector: str,
        resource_version: str | None,
        timeout_seconds: int | None = None,
    ) -> AsyncGenerator[WatchEvent, None]:
        self.watch_calls.append(resource_version)
        self.watching.set()
        try:
            while (item := await self.events.get()) is not END_WATCH:
                if isinstance(item, Exception):
                    raise item
                yield item
        finally:
            self.watching.clear()

    def emit(self, event_type: EventType, obj: dict[str, Any]) -> None:
        """Stream a watch event."""
        self.events.put_nowait(WatchEvent(type=event_type, object=obj))

    def end_watch(self) -> None:
        """Close the current watch as the server does on timeout."""
        self.events.put_nowait(END_WATCH)

    def fail_watch(self, err: Exception) -> None:
        """Fail the current watch."""
        self.events.put_nowait(err)


class Updates:
    """Records the peer lists published to the update callback."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    def __call__(self, peers: list[str]) -> None:
        self.calls.append(peers)

    @property
    def last(self) -> list[str] | None:
        return self.calls[-1] if self.calls else None


async def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Wait until the predicate is true."""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.001)


