"""Record and watch event primitives shared by stores and the prefix source."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional


class EventType(Enum):
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"


@dataclass(frozen=True)
class ConfigRecord:
    """Snapshot of a namespaced key-value record (a ConfigMap).

    Only the identity and the ``data`` map are kept; everything else the
    store returns is irrelevant to prefix extraction.
    """

    namespace: str
    name: str
    data: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class WatchEvent:
    """A single change notification delivered by a watch subscription.

    ``record`` is ``None`` for :attr:`EventType.ERROR` events and for events
    whose object could not be interpreted as a record.
    """

    type: EventType
    record: Optional[ConfigRecord] = None
