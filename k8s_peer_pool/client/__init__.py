"""Access to the cluster control plane.

`ControlPlane` is the list and watch boundary used by the reflector and
`KubernetesControlPlane` implements it with the official kubernetes client.
"""

from .control_plane import ControlPlane, EventType, ObjectList, WatchEvent
from .kube import KubernetesControlPlane

__all__ = [
    "ControlPlane",
    "EventType",
    "ObjectList",
    "WatchEvent",
    "KubernetesControlPlane",
]
