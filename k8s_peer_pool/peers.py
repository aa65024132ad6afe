"""Build the peer list from a snapshot of the store.

The peer list is always rebuilt from scratch from the full contents of the
store, which makes a rebuild idempotent regardless of which notification
triggered it.
"""

from collections.abc import Iterable

from .config import PoolConfig, WatchMechanism
from .model import Endpoints, Pod

__all__ = [
    "format_peer",
    "is_live_pod",
    "PeerListBuilder",
]


def format_peer(scheme: str, address: str, port: int) -> str:
    """Format a peer address as a URI."""
    if ":" in address and not address.startswith("["):
        address = f"[{address}]"
    return f"{scheme}://{address}:{port}"


def is_live_pod(pod: Pod) -> bool:
    """Return True if every container of the pod is ready and running.

    A pod without any container status is considered live.
    """
    for status in pod.status.container_statuses or ():
        if not status.ready or not status.running:
            return False
    return True


class PeerListBuilder:
    """Produces the ordered peer list for the configured watch mechanism."""

    def __init__(self, config: PoolConfig) -> None:
        """Initialize the PeerListBuilder."""
        self._config = config
        self._log = config.logger

    def build(self, objects: Iterable[object]) -> list[str]:
        """Return the sorted peer list for a snapshot of cluster objects."""
        if self._config.watch_mechanism == WatchMechanism.PODS:
            peers = self._peers_from_pods(objects)
        else:
            peers = self._peers_from_endpoints(objects)
        return sorted(peers)

    def _format(self, address: str) -> str:
        return format_peer(
            str(self._config.peer_scheme), address, int(self._config.peer_port or 0)
        )

    def _peers_from_pods(self, objects: Iterable[object]) -> list[str]:
        self._log.debug("Fetching peer list from pods API")
        peers: list[str] = []
        for obj in objects:
            if not isinstance(obj, Pod):
                self._log.error(
                    "expected type Pod got '%s' instead", type(obj).__name__
                )
                continue
            if not obj.status.pod_ip:
                self._log.debug(
                    "Skipping pod '%s' without an assigned address", obj.metadata.name
                )
                continue
            peer = self._format(obj.status.pod_ip)
            if not is_live_pod(obj):
                self._log.debug(
                    "Skipping peer because it's not ready or not running: %s", peer
                )
                continue
            self._log.debug("Peer: %s", peer)
            peers.append(peer)
        return peers

    def _peers_from_endpoints(self, objects: Iterable[object]) -> list[str]:
        self._log.debug("Fetching peer list from endpoints API")
        peers: list[str] = []
        for obj in objects:
            if not isinstance(obj, Endpoints):
                self._log.error(
                    "expected type Endpoints got '%s' instead", type(obj).__name__
                )
                continue
            for subset in obj.subsets or ():
                for addr in subset.addresses or ():
                    peer = self._format(addr.ip)
                    self._log.debug("Peer: %s", peer)
                    peers.append(peer)
        return peers
