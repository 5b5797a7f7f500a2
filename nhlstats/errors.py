"""Exception types raised by the library."""

from __future__ import annotations


class NhlError(RuntimeError):
    pass


class StoreError(NhlError):
    """A read or write against the persistent store failed."""


class CacheInsertError(NhlError):
    """An identity cache could not take a new entry."""


class ReleaseError(NhlError):
    """An object was released more times than it was acquired."""


class InvalidRequestError(NhlError):
    """Ingestion was asked to handle a content type it does not support."""
