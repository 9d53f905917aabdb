"""kubeadm ConfigMap prefix source.

:class:`KubeAdmPrefixSource` owns a background thread that keeps the pod and
service subnets recorded by kubeadm in ``kube-system/kubeadm-config`` up to
date. Two strategies are available:

* ``SourceMode.WATCH`` reads the ConfigMap once, then follows a watch
  subscription on the namespace. A failure to open the subscription, or the
  subscription closing, terminates the source unless ``reconnect_attempts``
  allows it to re-subscribe.
* ``SourceMode.POLL`` re-reads the ConfigMap every ``interval`` seconds and
  never terminates on its own.

Consumers read :meth:`KubeAdmPrefixSource.prefixes` at any time and may block
on :attr:`KubeAdmPrefixSource.notifier` to learn about updates. The snapshot
is always written before the notification is posted.
"""

from __future__ import annotations

import logging
import random
from threading import Event, Thread
from typing import List, Optional

from .config import (
    CLUSTER_CONFIGURATION_KEY,
    DEFAULT_POLL_INTERVAL,
    KUBE_NAME,
    KUBE_NAMESPACE,
    EngineState,
    SourceMode,
)
from .container import SynchronizedPrefixesContainer
from .decoder import decode_cluster_configuration
from .events import ConfigRecord, EventType, WatchEvent
from .exceptions import DecodeError, RecordNotFoundError, RecordStoreError
from .notifier import ChangeNotifier
from .store import RecordStore, WatchSubscription

LOG = logging.getLogger(__name__)

MAX_RECONNECT_BACKOFF = 30.0


def _reconnect_delay(attempt: int) -> float:
    base = min(2.0 ** attempt, MAX_RECONNECT_BACKOFF)
    return base * (0.5 + random.random())  # noqa: S311


class KubeAdmPrefixSource(Thread):
    """Publish the kubeadm pod/service subnets as they change."""

    def __init__(
        self,
        store: RecordStore,
        notifier: ChangeNotifier,
        stop_event: Event,
        *,
        mode: SourceMode | str = SourceMode.WATCH,
        interval: float = DEFAULT_POLL_INTERVAL,
        reconnect_attempts: int = 0,
        namespace: str = KUBE_NAMESPACE,
        name: str = KUBE_NAME,
    ) -> None:
        super().__init__(daemon=True, name="kubeadm-prefix-source")
        if interval <= 0:
            raise ValueError("poll interval must be positive")
        if reconnect_attempts < 0:
            raise ValueError("reconnect_attempts cannot be negative")
        self._store = store
        self._notifier = notifier
        self._stop_event = stop_event
        self._mode = SourceMode.parse(mode)
        self._interval = interval
        self._reconnect_attempts = reconnect_attempts
        self._record_namespace = namespace
        self._record_name = name
        self._prefixes = SynchronizedPrefixesContainer()
        self._engine_state = EngineState.INITIALIZING
        self._subscription: Optional[WatchSubscription] = None

    # ------------------------------------------------------------------
    # Consumer API
    # ------------------------------------------------------------------
    def prefixes(self) -> List[str]:
        """Return ``[podSubnet, serviceSubnet]``, or ``[]`` if unknown."""

        return self._prefixes.load()

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    @property
    def mode(self) -> SourceMode:
        return self._mode

    @property
    def state(self) -> EngineState:
        return self._engine_state

    def stop(self) -> None:
        """Cancel the source and release any open watch subscription."""

        self._stop_event.set()
        subscription = self._subscription
        if subscription is not None:
            subscription.close()

    # ------------------------------------------------------------------
    # Thread body
    # ------------------------------------------------------------------
    def run(self) -> None:
        LOG.info(
            "Starting kubeadm prefix source (mode=%s, configmap=%s/%s)",
            self._mode.value,
            self._record_namespace,
            self._record_name,
        )
        try:
            if self._mode is SourceMode.POLL:
                self._run_poll()
            else:
                self._run_watch()
        except Exception:
            LOG.exception("kubeadm prefix source failed")
        finally:
            self._engine_state = EngineState.TERMINATED
            LOG.info("Stopped kubeadm prefix source")

    def _run_poll(self) -> None:
        while not self._stop_event.is_set():
            self._engine_state = EngineState.WATCHING
            self.poll()
            self._engine_state = EngineState.RETRYING
            if self._stop_event.wait(self._interval):
                return

    def _run_watch(self) -> None:
        self.poll()

        attempt = 0
        while not self._stop_event.is_set():
            if self._watch_once():
                attempt = 0
            if self._stop_event.is_set():
                return
            if attempt >= self._reconnect_attempts:
                LOG.error(
                    "ConfigMap watch ended; kubeadm prefixes will no longer be updated"
                )
                return

            delay = _reconnect_delay(attempt)
            attempt += 1
            self._engine_state = EngineState.RETRYING
            LOG.warning(
                "Re-opening ConfigMap watch in %.1fs (attempt %d/%d)",
                delay,
                attempt,
                self._reconnect_attempts,
            )
            if self._stop_event.wait(delay):
                return

    def _watch_once(self) -> bool:
        """Consume one subscription; return whether it delivered any event."""

        try:
            subscription = self._store.watch(self._record_namespace)
        except RecordStoreError as exc:
            LOG.error("Error creating config map watch: %s", exc)
            return False

        delivered = False
        self._subscription = subscription
        try:
            with subscription:
                if self._stop_event.is_set():
                    return delivered
                self._engine_state = EngineState.WATCHING
                LOG.info("Watching ConfigMaps in namespace %s", self._record_namespace)
                for event in subscription:
                    if self._stop_event.is_set():
                        return delivered
                    delivered = True
                    self.handle_event(event)
                if not self._stop_event.is_set():
                    LOG.warning("ConfigMap watch stream closed")
        except RecordStoreError as exc:
            if not self._stop_event.is_set():
                LOG.error("ConfigMap watch failed: %s", exc)
        finally:
            self._subscription = None
        return delivered

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------
    def poll(self) -> bool:
        """Read the ConfigMap once and publish its prefixes.

        Returns ``True`` when a new snapshot was published.
        """

        try:
            record = self._store.get(self._record_namespace, self._record_name)
        except RecordNotFoundError as exc:
            LOG.warning("Error getting kubeadm config map: %s", exc)
            return False
        except RecordStoreError as exc:
            LOG.error("Error getting kubeadm config map: %s", exc)
            return False
        return self._set_prefixes_from_record(record)

    def handle_event(self, event: WatchEvent) -> None:
        if event.type is EventType.ERROR:
            LOG.debug("ignoring watch error event")
            return

        record = event.record
        if record is None or record.name != self._record_name:
            return

        if event.type is EventType.DELETED:
            LOG.warning(
                "kubeadm config map %s/%s deleted, clearing prefixes",
                record.namespace,
                record.name,
            )
            self._prefixes.store(None)
            self._notify()
            return

        self._set_prefixes_from_record(record)

    def _set_prefixes_from_record(self, record: ConfigRecord) -> bool:
        try:
            pod_subnet, service_subnet = decode_cluster_configuration(
                record.data.get(CLUSTER_CONFIGURATION_KEY)
            )
        except DecodeError as exc:
            LOG.error(
                "Failed to decode %s from %s/%s: %s",
                CLUSTER_CONFIGURATION_KEY,
                record.namespace,
                record.name,
                exc,
            )
            return False

        if not pod_subnet:
            LOG.warning("ClusterConfiguration.Networking.PodSubnet is empty")
        if not service_subnet:
            LOG.warning("ClusterConfiguration.Networking.ServiceSubnet is empty")

        prefixes = [pod_subnet, service_subnet]
        self._prefixes.store(prefixes)
        self._notify()
        LOG.info("Prefixes sent from kubeadm source: %s", prefixes)
        return True

    def _notify(self) -> None:
        if not self._notifier.notify(self._stop_event):
            LOG.debug("change notification dropped, source is stopping")


def create_prefix_source(
    store: RecordStore,
    stop_event: Event,
    *,
    mode: SourceMode | str = SourceMode.WATCH,
    interval: float = DEFAULT_POLL_INTERVAL,
    coalesce: bool = False,
    reconnect_attempts: int = 0,
) -> KubeAdmPrefixSource:
    """Build a not-yet-started prefix source with its own notifier."""

    return KubeAdmPrefixSource(
        store,
        ChangeNotifier(coalesce=coalesce),
        stop_event,
        mode=mode,
        interval=interval,
        reconnect_attempts=reconnect_attempts,
    )
