"""kubeadm prefixes agent runtime helpers."""

from .config import AgentConfig, load_config  # noqa: F401
from .writer import PrefixFileWriter  # noqa: F401

__all__ = [
    "AgentConfig",
    "PrefixFileWriter",
    "load_config",
]
