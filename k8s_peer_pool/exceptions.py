"""Exceptions related to k8s-peer-pool."""

__all__ = [
    "PeerPoolException",
    "ConfigException",
    "ClientException",
    "WatchExpiredError",
    "SyncTimeout",
    "InvalidObjectError",
]


class PeerPoolException(Exception):
    """Generic base exception used for this library."""


class ConfigException(PeerPoolException):
    """Raised when the pool configuration is not valid."""


class ClientException(PeerPoolException):
    """Raised when there is a failure talking to the cluster control plane."""


class WatchExpiredError(ClientException):
    """Raised when a watch resume token is too old and a re-list is required."""

    def __init__(self, resource_version: str | None, message: str | None) -> None:
        super().__init__(
            f"Watch from resource version {resource_version} expired: "
            f"{message or 'Gone'}"
        )
        self.resource_version = resource_version
        self.message = message


class SyncTimeout(PeerPoolException):
    """Raised when the initial synchronization does not finish in time."""


class InvalidObjectError(PeerPoolException):
    """Raised for a cluster object without a stable key or with an unexpected shape."""
