"""Archive error taxonomy."""

from __future__ import annotations

from typing import Optional


class ArchiveError(RuntimeError):
    """Base class for note archive failures."""


class ValidationError(ArchiveError, ValueError):
    """Note content was rejected before reaching storage."""


class TransportError(ArchiveError):
    """The remote archive was unreachable or answered with a non-2xx status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StorageError(ArchiveError):
    """The server-side note store could not read or write."""


__all__ = ["ArchiveError", "ValidationError", "TransportError", "StorageError"]
