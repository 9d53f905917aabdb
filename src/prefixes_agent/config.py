"""YAML configuration loader for the kubeadm prefixes agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from kubeadm_prefixes.config import DEFAULT_POLL_INTERVAL, DEFAULT_WATCH_TIMEOUT, SourceMode


@dataclass
class SourceConfig:
    mode: SourceMode = SourceMode.WATCH
    interval: float = DEFAULT_POLL_INTERVAL
    reconnect_attempts: int = 0
    coalesce: bool = False


@dataclass
class KubernetesConfig:
    kubeconfig: Optional[str] = None
    watch_timeout: int = DEFAULT_WATCH_TIMEOUT


@dataclass
class OutputConfig:
    path: Optional[Path] = None


@dataclass
class AgentConfig:
    source: SourceConfig = field(default_factory=SourceConfig)
    kubernetes: KubernetesConfig = field(default_factory=KubernetesConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def _section(data: dict, key: str) -> dict:
    section = data.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"'{key}' section must be a mapping")
    return section


def _parse_source(section: dict) -> SourceConfig:
    interval = float(section.get("interval", section.get("poll_interval", DEFAULT_POLL_INTERVAL)))
    if interval <= 0:
        raise ValueError("source 'interval' must be positive")

    reconnect_attempts = int(section.get("reconnect_attempts", 0))
    if reconnect_attempts < 0:
        raise ValueError("source 'reconnect_attempts' cannot be negative")

    return SourceConfig(
        mode=SourceMode.parse(section.get("mode", SourceMode.WATCH.value)),
        interval=interval,
        reconnect_attempts=reconnect_attempts,
        coalesce=bool(section.get("coalesce", False)),
    )


def _parse_kubernetes(section: dict) -> KubernetesConfig:
    kubeconfig = section.get("kubeconfig")
    watch_timeout = int(section.get("watch_timeout", DEFAULT_WATCH_TIMEOUT))
    if watch_timeout <= 0:
        raise ValueError("kubernetes 'watch_timeout' must be positive")
    return KubernetesConfig(
        kubeconfig=str(kubeconfig) if kubeconfig else None,
        watch_timeout=watch_timeout,
    )


def _parse_output(section: dict) -> OutputConfig:
    path = section.get("path")
    return OutputConfig(path=Path(path) if path else None)


def load_config(path: Optional[Path]) -> AgentConfig:
    if path is None:
        return AgentConfig()

    data = yaml.safe_load(Path(path).read_text())
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Agent configuration must be a mapping")

    return AgentConfig(
        source=_parse_source(_section(data, "source")),
        kubernetes=_parse_kubernetes(_section(data, "kubernetes")),
        output=_parse_output(_section(data, "output")),
    )
