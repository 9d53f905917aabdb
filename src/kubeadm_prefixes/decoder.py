"""Decode the pod/service subnets from a kubeadm ``ClusterConfiguration``."""

from __future__ import annotations

import json
from typing import Any, Optional

import yaml

from .config import SubnetPair
from .exceptions import DecodeError

NETWORKING_KEY = "networking"
POD_SUBNET_KEY = "podSubnet"
SERVICE_SUBNET_KEY = "serviceSubnet"


def _subnet_field(networking: dict, key: str) -> str:
    value = networking.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(
            f"ClusterConfiguration.networking.{key} must be a string, "
            f"got {type(value).__name__}"
        )
    return value


def _load_document(payload: str) -> Any:
    # Payloads opening with "{" are JSON.
    if payload.lstrip().startswith("{"):
        try:
            return json.loads(payload)
        except json.JSONDecodeError as exc:
            raise DecodeError(f"failed to parse ClusterConfiguration: {exc}") from exc

    # Only the first document of a multi-document stream is read.
    try:
        return next(yaml.safe_load_all(payload), None)
    except yaml.YAMLError as exc:
        raise DecodeError(f"failed to parse ClusterConfiguration: {exc}") from exc


def decode_cluster_configuration(payload: Optional[str]) -> SubnetPair:
    """Return ``(podSubnet, serviceSubnet)`` read from ``payload``.

    ``payload`` is a JSON or YAML document; only the first document of a
    YAML stream is read. Missing subnet fields decode as empty strings;
    deciding whether that is worth reporting is left to the caller. Raises
    :class:`DecodeError` when the payload is empty or does not have the
    expected shape.
    """

    if not payload or not payload.strip():
        raise DecodeError("ClusterConfiguration payload is empty")

    document = _load_document(payload)

    if not isinstance(document, dict):
        raise DecodeError("ClusterConfiguration must be a mapping")

    networking = document.get(NETWORKING_KEY)
    if networking is None:
        networking = {}
    elif not isinstance(networking, dict):
        raise DecodeError("ClusterConfiguration.networking must be a mapping")

    return (
        _subnet_field(networking, POD_SUBNET_KEY),
        _subnet_field(networking, SERVICE_SUBNET_KEY),
    )
