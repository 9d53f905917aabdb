"""Single-slot change notification channel.

The notifier carries no payload: a consumer that receives a token re-reads
the prefix source to obtain the current value.
"""

from __future__ import annotations

import queue
from threading import Event
from typing import Optional

# How often a blocked send re-checks the cancellation token.
_SEND_POLL_INTERVAL = 0.1


class ChangeNotifier:
    """Signal consumers that a new prefix snapshot is available.

    Parameters
    ----------
    coalesce:
        When ``False`` (the default) :meth:`notify` blocks while a previous
        token is still pending, so every publish produces its own token.
        When ``True`` a pending token absorbs further notifications and the
        consumer is only guaranteed one token after the last update of a
        burst.
    """

    def __init__(self, *, coalesce: bool = False) -> None:
        self._slot: "queue.Queue[None]" = queue.Queue(maxsize=1)
        self._coalesce = coalesce

    @property
    def coalesce(self) -> bool:
        return self._coalesce

    def notify(self, stop_event: Optional[Event] = None) -> bool:
        """Post a token; return ``False`` if ``stop_event`` aborted the send."""

        if self._coalesce:
            try:
                self._slot.put_nowait(None)
            except queue.Full:
                pass
            return True

        while True:
            if stop_event is None:
                self._slot.put(None)
                return True
            try:
                self._slot.put(None, timeout=_SEND_POLL_INTERVAL)
                return True
            except queue.Full:
                if stop_event.is_set():
                    return False

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Consume a token, waiting up to ``timeout`` seconds for one."""

        try:
            self._slot.get(timeout=timeout)
        except queue.Empty:
            return False
        return True
