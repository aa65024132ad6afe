"""Representation of the cluster objects observed by the pool.

Objects are decoded from the JSON shape returned by the Kubernetes API server
into read-only dataclasses. Only the fields needed to compute peers are
modelled; everything else in the payload is ignored.
"""

from dataclasses import dataclass, field
from typing import Any

from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig

from .config import WatchMechanism
from .exceptions import InvalidObjectError

__all__ = [
    "ObjectKey",
    "ObjectMeta",
    "ContainerState",
    "ContainerStatus",
    "PodStatus",
    "Pod",
    "EndpointAddress",
    "EndpointPort",
    "EndpointSubset",
    "Endpoints",
    "ClusterObject",
    "parse_object",
]


@dataclass
class BaseObject(DataClassDictMixin):
    """Base class for all cluster objects."""

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True


@dataclass(frozen=True, order=True)
class ObjectKey:
    """Stable identifier of a cluster object within the store."""

    namespace: str | None
    name: str

    @classmethod
    def from_meta(cls, meta: "ObjectMeta | None") -> "ObjectKey":
        """Compute the key from object metadata."""
        if meta is None or not meta.name:
            raise InvalidObjectError(f"object has no name in metadata: {meta}")
        return cls(namespace=meta.namespace or None, name=meta.name)

    def __str__(self) -> str:
        """Return the namespaced name."""
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name


@dataclass
class ObjectMeta(BaseObject):
    """Metadata common to all cluster objects."""

    name: str | None = None
    namespace: str | None = None
    uid: str | None = None
    resource_version: str | None = field(
        default=None, metadata=field_options(alias="resourceVersion")
    )
    labels: dict[str, str] | None = None


@dataclass
class ContainerState(BaseObject):
    """Details about the current state of a container.

    At most one of the fields is set by the control plane.
    """

    running: dict[str, Any] | None = None
    waiting: dict[str, Any] | None = None
    terminated: dict[str, Any] | None = None


@dataclass
class ContainerStatus(BaseObject):
    """Readiness signals reported for a single container."""

    name: str = ""
    ready: bool = False
    state: ContainerState | None = None

    @property
    def running(self) -> bool:
        """Return True if the container is currently running."""
        return self.state is not None and self.state.running is not None


@dataclass
class PodStatus(BaseObject):
    """Observed status of a pod."""

    phase: str | None = None
    pod_ip: str | None = field(default=None, metadata=field_options(alias="podIP"))
    container_statuses: list[ContainerStatus] | None = field(
        default=None, metadata=field_options(alias="containerStatuses")
    )


@dataclass
class Pod(BaseObject):
    """A workload unit."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    status: PodStatus = field(default_factory=PodStatus)

    kind = "Pod"


@dataclass
class EndpointAddress(BaseObject):
    """A single network address of an endpoint subset."""

    ip: str
    hostname: str | None = None
    node_name: str | None = field(
        default=None, metadata=field_options(alias="nodeName")
    )


@dataclass
class EndpointPort(BaseObject):
    """A port published by an endpoint subset."""

    port: int
    name: str | None = None
    protocol: str | None = None


@dataclass
class EndpointSubset(BaseObject):
    """A group of addresses sharing the same ports."""

    addresses: list[EndpointAddress] | None = None
    not_ready_addresses: list[EndpointAddress] | None = field(
        default=None, metadata=field_options(alias="notReadyAddresses")
    )
    ports: list[EndpointPort] | None = None


@dataclass
class Endpoints(BaseObject):
    """A published endpoint set of a service."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    subsets: list[EndpointSubset] | None = None

    kind = "Endpoints"


ClusterObject = Pod | Endpoints

_OBJECT_TYPES: dict[WatchMechanism, type[Pod] | type[Endpoints]] = {
    WatchMechanism.PODS: Pod,
    WatchMechanism.ENDPOINTS: Endpoints,
}


def parse_object(mechanism: WatchMechanism, data: Any) -> ClusterObject:
    """Decode a raw API object for the watch mechanism."""
    cls = _OBJECT_TYPES[mechanism]
    if not isinstance(data, dict):
        raise InvalidObjectError(
            f"expected {cls.kind} object, got '{type(data).__name__}' instead"
        )
    if (kind := data.get("kind")) and kind != cls.kind:
        raise InvalidObjectError(f"expected {cls.kind} object, got '{kind}' instead")
    try:
        return cls.from_dict(data)
    except (LookupError, ValueError, TypeError) as err:
        raise InvalidObjectError(f"invalid {cls.kind} object: {err}") from err
