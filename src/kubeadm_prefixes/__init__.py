"""Track the pod and service subnets recorded by kubeadm.

kubeadm stores the cluster's ``ClusterConfiguration`` as YAML inside the
``kube-system/kubeadm-config`` ConfigMap. This package follows that record
and republishes ``networking.podSubnet`` and ``networking.serviceSubnet``
whenever it changes:

* :class:`~kubeadm_prefixes.source.KubeAdmPrefixSource` runs the watch (or
  poll) loop on a background thread;
* :class:`~kubeadm_prefixes.container.SynchronizedPrefixesContainer` holds the
  latest pair so any number of readers can fetch it without locking;
* :class:`~kubeadm_prefixes.notifier.ChangeNotifier` tells consumers that a
  new pair is available; and
* :class:`~kubeadm_prefixes.store.RecordStore` abstracts the cluster API so
  the engine can be exercised without a live cluster.

The Kubernetes-backed store lives in :mod:`kubeadm_prefixes.kubernetes_store`
and is imported explicitly by callers that need it.
"""

from .config import KUBE_NAME, KUBE_NAMESPACE, EngineState, SourceMode  # noqa: F401
from .container import SynchronizedPrefixesContainer  # noqa: F401
from .decoder import decode_cluster_configuration  # noqa: F401
from .events import ConfigRecord, EventType, WatchEvent  # noqa: F401
from .exceptions import DecodeError, RecordNotFoundError, RecordStoreError  # noqa: F401
from .notifier import ChangeNotifier  # noqa: F401
from .source import KubeAdmPrefixSource, create_prefix_source  # noqa: F401
from .store import RecordStore, WatchSubscription  # noqa: F401

__all__ = [
    "KUBE_NAME",
    "KUBE_NAMESPACE",
    "ChangeNotifier",
    "ConfigRecord",
    "DecodeError",
    "EngineState",
    "EventType",
    "KubeAdmPrefixSource",
    "RecordNotFoundError",
    "RecordStore",
    "RecordStoreError",
    "SourceMode",
    "SynchronizedPrefixesContainer",
    "WatchEvent",
    "WatchSubscription",
    "create_prefix_source",
    "decode_cluster_configuration",
]
