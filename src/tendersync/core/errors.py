"""
Error taxonomy for the sync pipeline.

Every stage raises one of these; the orchestrator is the only place
that catches them and turns them into a SyncResult.
"""

from __future__ import annotations


class SyncError(Exception):
    """Base exception for sync pipeline errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.cause = cause


class ConfigurationError(SyncError):
    """Sync settings or application configuration could not be used."""

    def __init__(
        self,
        message: str,
        path: object | None = None,
        details: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.path = path
        self.details = details


class FetchError(SyncError):
    """External source request failed (transport, timeout, status, decode)."""
    pass


class MalformedResponseError(FetchError):
    """Response decoded but carried no record array."""
    pass


class IndexingError(SyncError):
    """Bulk request to the search index failed as a whole."""
    pass


class LogPersistenceError(SyncError):
    """Sync log row could not be written. Never fatal."""
    pass
