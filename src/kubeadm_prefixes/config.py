"""Identity of the kubeadm record and the data types derived from it."""

from __future__ import annotations

from enum import Enum
from typing import Tuple

# kubeadm ConfigMap namespace
KUBE_NAMESPACE = "kube-system"
# kubeadm ConfigMap name
KUBE_NAME = "kubeadm-config"
# Data key holding the serialized ClusterConfiguration document
CLUSTER_CONFIGURATION_KEY = "ClusterConfiguration"

DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_WATCH_TIMEOUT = 10

SubnetPair = Tuple[str, str]


class SourceMode(Enum):
    """How the prefix source learns about changes to the record."""

    WATCH = "watch"
    POLL = "poll"

    @classmethod
    def parse(cls, value: str | SourceMode) -> SourceMode:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unsupported source mode '{value}'") from None


class EngineState(Enum):
    """Lifecycle states of :class:`~kubeadm_prefixes.source.KubeAdmPrefixSource`."""

    INITIALIZING = "initializing"
    WATCHING = "watching"
    RETRYING = "retrying"
    TERMINATED = "terminated"
