"""Exception types raised by the record store and the payload decoder."""

from __future__ import annotations


class RecordStoreError(Exception):
    """Raised when the record store cannot be reached or rejects a request.

    Covers transport failures, authentication/RBAC errors and failures to
    open a watch subscription.
    """


class RecordNotFoundError(RecordStoreError):
    """Raised by :meth:`RecordStore.get` when the record does not exist."""


class DecodeError(ValueError):
    """Raised when a ``ClusterConfiguration`` payload cannot be decoded."""
