"""Configuration objects for k8s-peer-pool."""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
import logging
from typing import Any, Protocol

from .exceptions import ConfigException

__all__ = [
    "WatchMechanism",
    "UpdateFunc",
    "PoolLogger",
    "PoolConfig",
]

DEFAULT_PEER_SCHEME = "http"
DEFAULT_PEER_PORT = 8080
DEFAULT_SYNC_TIMEOUT = 60.0
DEFAULT_WATCH_TIMEOUT_SECONDS = 300
DEFAULT_RELIST_BACKOFF = 1.0
DEFAULT_MAX_RELIST_BACKOFF = 30.0

UpdateFunc = Callable[[list[str]], None]


class WatchMechanism(StrEnum):
    """The kind of cluster object watched to discover peers."""

    ENDPOINTS = "endpoints"
    PODS = "pods"


class PoolLogger(Protocol):
    """Leveled logging sink used by the pool components.

    A `logging.Logger` satisfies this protocol.
    """

    def debug(self, msg: str, *args: Any) -> None:
        """Log a debug message."""

    def error(self, msg: str, *args: Any) -> None:
        """Log an error message."""


def _default_logger() -> PoolLogger:
    return logging.getLogger("k8s_peer_pool")


@dataclass(frozen=True)
class PoolConfig:
    """Configuration for a PeerPool.

    Unset values are normalized to their defaults on construction and the
    configuration is immutable afterwards.
    """

    on_update: UpdateFunc
    """Called with the complete peer list every time it is rebuilt."""

    mechanism: WatchMechanism | str | None = None
    """Watch pods or endpoints, defaults to endpoints."""

    namespace: str = ""
    """Namespace to watch, empty for all namespaces."""

    selector: str = ""
    """Label selector restricting the watched objects."""

    peer_scheme: str | None = DEFAULT_PEER_SCHEME
    """Scheme of the peer addresses."""

    peer_port: int | None = DEFAULT_PEER_PORT
    """Port of the peer addresses."""

    logger: PoolLogger = field(
        default_factory=_default_logger, repr=False, compare=False
    )

    sync_timeout: float = DEFAULT_SYNC_TIMEOUT
    """Seconds to wait for the initial synchronization."""

    list_timeout: float | None = None
    """Seconds before a list request is abandoned, defaults to the sync timeout.

    Closing the pool waits for an outstanding list request to finish.
    """

    watch_timeout_seconds: int = DEFAULT_WATCH_TIMEOUT_SECONDS
    """Server side timeout of a single watch call before it is resumed."""

    relist_backoff: float = DEFAULT_RELIST_BACKOFF
    max_relist_backoff: float = DEFAULT_MAX_RELIST_BACKOFF

    def __post_init__(self) -> None:
        if not callable(self.on_update):
            raise ConfigException("on_update must be a callable")
        if not self.mechanism:
            mechanism = WatchMechanism.ENDPOINTS
        else:
            try:
                mechanism = WatchMechanism(self.mechanism)
            except ValueError as err:
                raise ConfigException(
                    f"unknown value for watch mechanism: {self.mechanism}"
                ) from err
        object.__setattr__(self, "mechanism", mechanism)
        if not self.peer_scheme:
            object.__setattr__(self, "peer_scheme", DEFAULT_PEER_SCHEME)
        if not self.peer_port:
            object.__setattr__(self, "peer_port", DEFAULT_PEER_PORT)
        try:
            port = int(self.peer_port)  # type: ignore[arg-type]
        except (TypeError, ValueError) as err:
            raise ConfigException(f"invalid peer port: {self.peer_port!r}") from err
        if not 0 < port < 65536:
            raise ConfigException(f"invalid peer port: {self.peer_port}")
        object.__setattr__(self, "peer_port", port)
        if self.sync_timeout <= 0:
            raise ConfigException(
                f"sync timeout must be positive, got {self.sync_timeout}"
            )
        if self.list_timeout is None:
            object.__setattr__(self, "list_timeout", self.sync_timeout)
        elif self.list_timeout <= 0:
            raise ConfigException(
                f"list timeout must be positive, got {self.list_timeout}"
            )

    @property
    def watch_mechanism(self) -> WatchMechanism:
        """Return the normalized watch mechanism."""
        return WatchMechanism(self.mechanism)
