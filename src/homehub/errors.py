"""Exception hierarchy shared across the household modules."""

from __future__ import annotations


class HomeHubError(Exception):
    """Base class for all Home Management Hub errors."""


class StorageError(HomeHubError):
    """The household document could not be read from or written to storage."""


class StorageQuotaExceededError(StorageError):
    """The serialized document is larger than the configured storage quota."""

    def __init__(self, size: int, quota: int) -> None:
        super().__init__(f"Document of {size} bytes exceeds storage quota of {quota} bytes")
        self.size = size
        self.quota = quota


class ImportFormatError(HomeHubError):
    """An imported backup is not a usable household document."""


class GitHubNotConfiguredError(HomeHubError):
    """No GitHub credential is configured for publishing meals."""


class GitHubUpstreamError(HomeHubError):
    """GitHub answered a meal commit with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


__all__ = [
    "HomeHubError",
    "StorageError",
    "StorageQuotaExceededError",
    "ImportFormatError",
    "GitHubNotConfiguredError",
    "GitHubUpstreamError",
]
