from __future__ import annotations


class HotdeskError(Exception):
    """Base class for every error the core reports to callers."""


class ValidationError(HotdeskError):
    """Raise to map to HTTP 400 (malformed input, empty window)."""


class NotFoundError(HotdeskError):
    """Raise to map to HTTP 404."""


class EmptyError(NotFoundError):
    """A query expected a single row and found none. Maps to HTTP 404."""


class InvalidOperationError(HotdeskError):
    """Raise to map to HTTP 403 (e.g. removing a floor that still has workspaces)."""


class ConflictError(HotdeskError):
    """Raise to map to HTTP 409 (availability or assignment rule violated)."""


class StorageFault(HotdeskError):
    """The storage engine failed. Maps to HTTP 500."""


class UpstreamFault(HotdeskError):
    """The image sink failed. Maps to HTTP 500."""


class DeadlineExceeded(HotdeskError):
    """The request's deadline passed before its write committed. Maps to HTTP 504."""
