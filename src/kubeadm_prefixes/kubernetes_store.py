"""Record store backed by ConfigMaps in a Kubernetes cluster."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, Optional, Tuple

from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes import watch as k8s_watch
from kubernetes.client.exceptions import ApiException

from .config import DEFAULT_WATCH_TIMEOUT
from .events import ConfigRecord, EventType, WatchEvent
from .exceptions import RecordNotFoundError, RecordStoreError
from .store import RecordStore, WatchSubscription

LOG = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404
HTTP_GONE = 410


def build_core_api(kubeconfig: Optional[str] = None) -> k8s_client.CoreV1Api:
    """Return a ``CoreV1Api`` using the best available credentials.

    The in-cluster service account is tried first; when the process is not
    running inside a pod the kubeconfig at ``kubeconfig`` (or the client's
    default lookup when ``None``) is used instead.
    """

    try:
        k8s_config.load_incluster_config()
        LOG.debug("using in-cluster service account")
    except k8s_config.ConfigException:
        try:
            k8s_config.load_kube_config(config_file=kubeconfig)
            LOG.debug("using kubeconfig %s", kubeconfig or "(default)")
        except Exception as exc:
            raise RecordStoreError(
                f"could not load cluster credentials: no in-cluster service "
                f"account and no usable kubeconfig: {exc}"
            ) from exc
    return k8s_client.CoreV1Api()


def _to_record(config_map: Any) -> Optional[ConfigRecord]:
    metadata = getattr(config_map, "metadata", None)
    if metadata is None or not getattr(metadata, "name", None):
        return None
    return ConfigRecord(
        namespace=metadata.namespace or "",
        name=metadata.name,
        data=dict(getattr(config_map, "data", None) or {}),
    )


def _close_stream(stream: Any) -> None:
    close = getattr(stream, "close", None)
    if close is not None:
        close()


class _KubernetesSubscription(WatchSubscription):
    """Chain bounded watch windows until :meth:`close` is called.

    Each window is opened with ``timeout_seconds`` so a blocked read ends
    within that bound and a pending close is noticed. The last observed
    ``resourceVersion`` is carried into the next window; an expired one
    (HTTP 410) restarts from the current state.
    """

    def __init__(
        self,
        open_stream: Callable[[str, Optional[str]], Tuple[Any, Iterator[dict]]],
        namespace: str,
    ) -> None:
        self._open_stream = open_stream
        self._namespace = namespace
        self._resource_version: Optional[str] = None
        self._closed = False
        self._watcher, self._stream = self._open()

    def _open(self) -> Tuple[Any, Iterator[dict]]:
        try:
            return self._open_stream(self._namespace, self._resource_version)
        except Exception as exc:
            raise RecordStoreError(
                f"failed to open ConfigMap watch in '{self._namespace}': {exc}"
            ) from exc

    def __iter__(self) -> Iterator[WatchEvent]:
        while not self._closed:
            stream = self._stream
            try:
                for raw in stream:
                    self._track_resource_version(raw)
                    event = self._convert(raw)
                    if event is not None:
                        yield event
            except ApiException as exc:
                if self._closed:
                    return
                if exc.status != HTTP_GONE:
                    raise RecordStoreError(
                        f"ConfigMap watch in '{self._namespace}' failed "
                        f"({exc.status}): {exc.reason}"
                    ) from exc
                LOG.info(
                    "ConfigMap watch resource version %s expired, restarting",
                    self._resource_version,
                )
                self._resource_version = None
            except Exception as exc:
                if self._closed:
                    return
                raise RecordStoreError(
                    f"ConfigMap watch in '{self._namespace}' failed: {exc}"
                ) from exc
            finally:
                _close_stream(stream)

            if self._closed:
                return
            LOG.debug(
                "re-opening ConfigMap watch in %s from resource version %s",
                self._namespace,
                self._resource_version,
            )
            self._watcher, self._stream = self._open()

    def _track_resource_version(self, raw: dict) -> None:
        metadata = getattr(raw.get("object"), "metadata", None)
        resource_version = getattr(metadata, "resource_version", None)
        if resource_version:
            self._resource_version = resource_version

    @staticmethod
    def _convert(raw: dict) -> Optional[WatchEvent]:
        raw_type = str(raw.get("type", ""))
        try:
            event_type = EventType(raw_type)
        except ValueError:
            LOG.debug("skipping watch event of type %r", raw_type)
            return None
        if event_type is EventType.ERROR:
            return WatchEvent(EventType.ERROR)
        return WatchEvent(event_type, _to_record(raw.get("object")))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._watcher.stop()


class KubernetesRecordStore(RecordStore):
    """Read and watch ConfigMaps through the official Kubernetes client.

    Parameters
    ----------
    core_api:
        A ``CoreV1Api`` instance; see :func:`build_core_api`.
    watch_factory:
        Callable returning a new ``kubernetes.watch.Watch``. Overridable so
        tests can feed canned event streams.
    timeout_seconds:
        Server-side length of one watch window. A subscription notices
        :meth:`WatchSubscription.close` within this bound even when no
        event arrives.
    """

    def __init__(
        self,
        core_api: Any,
        watch_factory: Callable[[], Any] = k8s_watch.Watch,
        timeout_seconds: int = DEFAULT_WATCH_TIMEOUT,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._core_api = core_api
        self._watch_factory = watch_factory
        self._timeout_seconds = timeout_seconds

    @property
    def timeout_seconds(self) -> int:
        return self._timeout_seconds

    def get(self, namespace: str, name: str) -> ConfigRecord:
        try:
            config_map = self._core_api.read_namespaced_config_map(
                name=name, namespace=namespace
            )
        except ApiException as exc:
            if exc.status == HTTP_NOT_FOUND:
                raise RecordNotFoundError(
                    f"ConfigMap {namespace}/{name} not found"
                ) from exc
            raise RecordStoreError(
                f"Kubernetes API error {exc.status} reading "
                f"{namespace}/{name}: {exc.reason}"
            ) from exc
        except Exception as exc:
            raise RecordStoreError(
                f"failed to read ConfigMap {namespace}/{name}: {exc}"
            ) from exc

        record = _to_record(config_map)
        if record is None:
            raise RecordStoreError(
                f"ConfigMap {namespace}/{name} returned without metadata"
            )
        return record

    def watch(self, namespace: str) -> WatchSubscription:
        subscription = _KubernetesSubscription(self._open_stream, namespace)
        LOG.debug("opened ConfigMap watch in namespace %s", namespace)
        return subscription

    def _open_stream(
        self, namespace: str, resource_version: Optional[str]
    ) -> Tuple[Any, Iterator[dict]]:
        kwargs = {
            "namespace": namespace,
            "timeout_seconds": self._timeout_seconds,
        }
        if resource_version:
            kwargs["resource_version"] = resource_version
        watcher = self._watch_factory()
        stream = watcher.stream(self._core_api.list_namespaced_config_map, **kwargs)
        return watcher, iter(stream)
