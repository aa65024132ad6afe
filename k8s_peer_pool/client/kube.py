"""Control plane implementation backed by the official kubernetes client.

The kubernetes client is blocking. List calls run in a worker thread and each
watch stream is consumed by a dedicated daemon thread that hands events back to
the event loop through a queue.
"""

import asyncio
from collections.abc import AsyncGenerator, Callable
import functools
import logging
import threading
from typing import Any

from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes import watch as k8s_watch
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException as KubeConfigException
from urllib3.exceptions import HTTPError

from k8s_peer_pool.config import WatchMechanism
from k8s_peer_pool.exceptions import ClientException, WatchExpiredError

from .control_plane import ControlPlane, EventType, ObjectList, WatchEvent

_LOGGER = logging.getLogger(__name__)

HTTP_STATUS_GONE = 410

# Sentinel marking the end of a watch stream
_END = object()


def _api_error(action: str, err: Exception) -> ClientException:
    if isinstance(err, ApiException):
        return ClientException(f"Failed to {action}: ({err.status}) {err.reason}")
    return ClientException(f"Failed to {action}: {err}")


def _put_threadsafe(
    loop: asyncio.AbstractEventLoop, queue: asyncio.Queue[Any], item: Any
) -> None:
    """Hand an item from a watch thread to the event loop."""
    try:
        loop.call_soon_threadsafe(queue.put_nowait, item)
    except RuntimeError:
        _LOGGER.debug("Event loop closed, dropping watch item")


class KubernetesControlPlane(ControlPlane):
    """List and watch pods or endpoints through the CoreV1 API."""

    def __init__(
        self,
        api_client: k8s_client.ApiClient,
        core_api: k8s_client.CoreV1Api | None = None,
    ) -> None:
        """Initialize the KubernetesControlPlane."""
        self._api_client = api_client
        self._core_api = core_api or k8s_client.CoreV1Api(api_client)

    @classmethod
    def from_environment(cls) -> "KubernetesControlPlane":
        """Create a control plane client from the ambient credentials.

        The in-cluster service account is used when running inside a pod,
        otherwise the local kubeconfig.
        """
        try:
            k8s_config.load_incluster_config()
            _LOGGER.debug("Loaded in-cluster kubernetes configuration")
        except KubeConfigException as incluster_err:
            _LOGGER.debug("Not running in cluster: %s", incluster_err)
            try:
                k8s_config.load_kube_config()
            except (KubeConfigException, OSError) as err:
                raise ClientException(
                    f"Failed to get k8s rest config: {err}"
                ) from err
        try:
            api_client = k8s_client.ApiClient()
        except (ValueError, OSError) as err:
            raise ClientException(f"Failed to create k8s client: {err}") from err
        return cls(api_client)

    def _call(
        self, mechanism: WatchMechanism, namespace: str
    ) -> Callable[..., Any]:
        if mechanism == WatchMechanism.PODS:
            if not namespace:
                return self._core_api.list_pod_for_all_namespaces
            return functools.partial(self._core_api.list_namespaced_pod, namespace)
        if not namespace:
            return self._core_api.list_endpoints_for_all_namespaces
        return functools.partial(self._core_api.list_namespaced_endpoints, namespace)

    async def list_objects(
        self,
        mechanism: WatchMechanism,
        namespace: str,
        label_selector: str,
        timeout: float | None = None,
    ) -> ObjectList:
        """List all objects matching the label selector.

        The blocking request can't be interrupted, so a cancelled call waits
        for the request thread to give up before it returns.
        """
        func = self._call(mechanism, namespace)
        kwargs: dict[str, Any] = {"label_selector": label_selector}
        if timeout:
            kwargs["_request_timeout"] = timeout
        request = asyncio.ensure_future(asyncio.to_thread(func, **kwargs))
        try:
            result = await asyncio.shield(request)
        except asyncio.CancelledError:
            await asyncio.wait([request])
            if not request.cancelled() and (err := request.exception()):
                _LOGGER.debug("Abandoned list of %s failed: %s", mechanism, err)
            raise
        except (ApiException, HTTPError) as err:
            raise _api_error(f"list {mechanism}", err) from err
        data = self._api_client.sanitize_for_serialization(result)
        metadata = data.get("metadata") or {}
        return ObjectList(
            items=data.get("items") or [],
            resource_version=metadata.get("resourceVersion"),
        )

    async def watch_objects(
        self,
        mechanism: WatchMechanism,
        namespace: str,
        label_selector: str,
        resource_version: str | None,
        timeout_seconds: int | None = None,
    ) -> AsyncGenerator[WatchEvent, None]:
        """Stream the changes made after the resource version.

        Closing the generator stops the watch, which shuts down the open
        connection so the watch thread exits.
        """
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[Any] = asyncio.Queue()
        stream = k8s_watch.Watch()
        kwargs: dict[str, Any] = {
            "label_selector": label_selector,
            "allow_watch_bookmarks": True,
        }
        if resource_version:
            kwargs["resource_version"] = resource_version
        if timeout_seconds:
            kwargs["timeout_seconds"] = timeout_seconds

        def put(item: Any) -> None:
            _put_threadsafe(loop, queue, item)

        def run() -> None:
            func = self._call(mechanism, namespace)
            try:
                for event in stream.stream(func, **kwargs):
                    put(
                        WatchEvent(
                            type=EventType(event["type"]), object=event["raw_object"]
                        )
                    )
            except ApiException as err:
                if err.status == HTTP_STATUS_GONE:
                    put(WatchExpiredError(resource_version, err.reason))
                else:
                    put(_api_error(f"watch {mechanism}", err))
            except (HTTPError, OSError, ValueError) as err:
                put(_api_error(f"watch {mechanism}", err))
            finally:
                put(_END)

        thread = threading.Thread(
            target=run, name=f"watch-{mechanism}-{namespace or 'all'}", daemon=True
        )
        thread.start()
        try:
            while (item := await queue.get()) is not _END:
                if isinstance(item, Exception):
                    raise item
                yield item
        finally:
            stream.stop()
