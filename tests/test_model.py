"""Tests for decoding cluster objects."""

import pytest

from k8s_peer_pool.config import WatchMechanism
from k8s_peer_pool.exceptions import InvalidObjectError
from k8s_peer_pool.model import Endpoints, ObjectKey, ObjectMeta, Pod, parse_object

from .common import make_endpoints, make_pod


def test_parse_pod() -> None:
    """Test decoding a pod."""
    pod = parse_object(
        WatchMechanism.PODS,
        make_pod("cache-0", "10.0.0.2", [(True, True), (True, False)]),
    )
    assert isinstance(pod, Pod)
    assert pod.metadata.name == "cache-0"
    assert pod.metadata.namespace == "cache"
    assert pod.metadata.resource_version == "1"
    assert pod.metadata.labels == {"app": "groupcache"}
    assert pod.status.pod_ip == "10.0.0.2"
    statuses = pod.status.container_statuses
    assert statuses is not None
    assert [(s.ready, s.running) for s in statuses] == [(True, True), (True, False)]


def test_parse_pod_without_status() -> None:
    """Test a pending pod without status details."""
    pod = parse_object(WatchMechanism.PODS, {"metadata": {"name": "cache-0"}})
    assert isinstance(pod, Pod)
    assert pod.status.pod_ip is None
    assert pod.status.container_statuses is None


def test_parse_endpoints() -> None:
    """Test decoding an endpoints object."""
    data = make_endpoints("cache", [["10.0.0.1", "10.0.0.2"], ["10.0.1.1"]])
    data["subsets"][0]["notReadyAddresses"] = [{"ip": "10.0.0.9"}]
    endpoints = parse_object(WatchMechanism.ENDPOINTS, data)
    assert isinstance(endpoints, Endpoints)
    assert endpoints.subsets is not None
    assert [
        [addr.ip for addr in subset.addresses or ()] for subset in endpoints.subsets
    ] == [["10.0.0.1", "10.0.0.2"], ["10.0.1.1"]]
    not_ready = endpoints.subsets[0].not_ready_addresses
    assert not_ready is not None
    assert [addr.ip for addr in not_ready] == ["10.0.0.9"]
    ports = endpoints.subsets[0].ports
    assert ports is not None
    assert ports[0].port == 8080


def test_parse_endpoints_without_subsets() -> None:
    """Test an endpoints object for a service without ready backends."""
    endpoints = parse_object(WatchMechanism.ENDPOINTS, make_endpoints("cache", []))
    assert isinstance(endpoints, Endpoints)
    assert endpoints.subsets == []


def test_parse_wrong_kind() -> None:
    """Test an object of another kind is rejected."""
    with pytest.raises(InvalidObjectError, match="expected Pod object, got 'Endpoints'"):
        parse_object(WatchMechanism.PODS, make_endpoints("cache", [["10.0.0.1"]]))


def test_parse_not_an_object() -> None:
    """Test a payload that is not an object is rejected."""
    with pytest.raises(InvalidObjectError, match="got 'str' instead"):
        parse_object(WatchMechanism.ENDPOINTS, "cache")


def test_parse_invalid_shape() -> None:
    """Test a payload with an unexpected shape is rejected."""
    data = make_endpoints("cache", [])
    data["subsets"] = [{"addresses": [{"hostname": "no-ip"}]}]
    with pytest.raises(InvalidObjectError, match="invalid Endpoints object"):
        parse_object(WatchMechanism.ENDPOINTS, data)


def test_object_key() -> None:
    """Test computing the key of an object."""
    key = ObjectKey.from_meta(ObjectMeta(name="cache-0", namespace="cache"))
    assert key == ObjectKey("cache", "cache-0")
    assert str(key) == "cache/cache-0"


def test_object_key_cluster_scoped() -> None:
    """Test the key of an object without namespace."""
    key = ObjectKey.from_meta(ObjectMeta(name="cache-0"))
    assert key.namespace is None
    assert str(key) == "cache-0"


def test_object_key_without_name() -> None:
    """Test an object without a name has no stable key."""
    with pytest.raises(InvalidObjectError, match="object has no name"):
        ObjectKey.from_meta(ObjectMeta(namespace="cache"))
