"""Lock-free holder for the most recently published prefixes."""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple


class SynchronizedPrefixesContainer:
    """Hold the current prefix list behind an atomic reference swap.

    :meth:`store` replaces the whole value with a new immutable tuple, so a
    concurrent :meth:`load` observes either the previous or the new list and
    never a mix of both. Only one thread is expected to write.
    """

    def __init__(self) -> None:
        self._prefixes: Optional[Tuple[str, ...]] = None

    def store(self, prefixes: Optional[Sequence[str]]) -> None:
        """Replace the current prefixes; ``None`` clears them."""

        self._prefixes = None if prefixes is None else tuple(prefixes)

    def load(self) -> List[str]:
        """Return a copy of the current prefixes, empty if none are set."""

        current = self._prefixes
        if current is None:
            return []
        return list(current)
