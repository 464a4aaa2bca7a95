"""
Exceptions raised by the todo sync client.
"""

from typing import Optional


class TodoSyncError(Exception):
    """Base class for todo sync client errors."""


class ConfigurationError(TodoSyncError):
    """Required client configuration is missing or invalid."""


class RemoteStoreError(TodoSyncError):
    """A call to the remote todo store failed (network error or non-2xx)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self):
        if self.status_code is not None:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


class AuthenticationError(RemoteStoreError):
    """The remote store rejected the request as unauthenticated."""
