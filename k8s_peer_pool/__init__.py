"""
k8s-peer-pool keeps the peer list of a distributed cache in sync with the
members of a workload group running in a Kubernetes cluster.

```python
from k8s_peer_pool import PoolConfig, new_pool

pool = await new_pool(
    PoolConfig(
        on_update=ring.set_peers,
        mechanism="pods",
        namespace="cache",
        selector="app=cache",
        peer_port=8080,
    )
)
...
await pool.close()
```
"""

from .config import PoolConfig, PoolLogger, UpdateFunc, WatchMechanism
from .exceptions import (
    ClientException,
    ConfigException,
    PeerPoolException,
    SyncTimeout,
)
from .pool import PeerPool, PoolState, new_pool

__all__ = [
    "PoolConfig",
    "PoolLogger",
    "UpdateFunc",
    "WatchMechanism",
    "PeerPool",
    "PoolState",
    "new_pool",
    "PeerPoolException",
    "ConfigException",
    "ClientException",
    "SyncTimeout",
]
