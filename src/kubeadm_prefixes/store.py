"""Abstract record store consumed by the prefix source."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator

from .events import ConfigRecord, WatchEvent


class WatchSubscription(ABC):
    """A long-lived stream of :class:`WatchEvent` for one namespace.

    Iteration ends when the underlying stream closes. Implementations may
    raise :class:`~kubeadm_prefixes.exceptions.RecordStoreError` from
    iteration when the stream fails.
    """

    @abstractmethod
    def __iter__(self) -> Iterator[WatchEvent]:
        """Yield events until the stream closes."""

    @abstractmethod
    def close(self) -> None:
        """Release the stream; safe to call more than once and from any thread."""

    def __enter__(self) -> "WatchSubscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class RecordStore(ABC):
    """Capability to read and watch namespaced records."""

    @abstractmethod
    def get(self, namespace: str, name: str) -> ConfigRecord:
        """Return the record ``namespace/name``.

        Raises ``RecordNotFoundError`` when it does not exist and
        ``RecordStoreError`` for any other failure.
        """

    @abstractmethod
    def watch(self, namespace: str) -> WatchSubscription:
        """Open a subscription to every record change in ``namespace``.

        Raises ``RecordStoreError`` when the subscription cannot be opened.
        """
