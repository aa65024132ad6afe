"""Test fixtures for k8s-peer-pool."""

from collections.abc import Callable
from typing import Any

import pytest

from k8s_peer_pool.config import PoolConfig

from .common import NAMESPACE, SELECTOR, FakeControlPlane, Updates


@pytest.fixture(name="updates")
def updates_fixture() -> Updates:
    """Fixture recording update callback invocations."""
    return Updates()


@pytest.fixture(name="fake_client")
def fake_client_fixture() -> FakeControlPlane:
    """Fixture for an empty fake control plane."""
    return FakeControlPlane()


@pytest.fixture(name="make_config")
def make_config_fixture(updates: Updates) -> Callable[..., PoolConfig]:
    """Fixture returning a factory for a test PoolConfig."""

    def _make_config(**kwargs: Any) -> PoolConfig:
        values: dict[str, Any] = {
            "on_update": updates,
            "namespace": NAMESPACE,
            "selector": SELECTOR,
            "sync_timeout": 1.0,
            "relist_backoff": 0.001,
            "max_relist_backoff": 0.01,
        }
        values.update(kwargs)
        return PoolConfig(**values)

    return _make_config
