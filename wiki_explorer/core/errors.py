"""
Exception taxonomy for the explorer.

- FetchError: network failure or non-2xx response from Wikipedia or the LLM API
- ProcessingError: HTML parsing or section summarization failure
- NotFoundError: no related-article candidate could be discovered
"""

from __future__ import annotations


class ExplorerError(Exception):
    """Base class for all explorer errors."""


class FetchError(ExplorerError):
    """Raised when an HTTP request fails or returns a non-success status.

    Attributes:
        url: The URL that was requested
        status_code: HTTP status code, or None for network-level failures
    """

    def __init__(self, url: str, status_code: int | None = None, message: str | None = None):
        self.url = url
        self.status_code = status_code
        detail = message or (f"HTTP {status_code}" if status_code is not None else "request failed")
        super().__init__(f"{detail}: {url}")


class ProcessingError(ExplorerError):
    """Raised when article markup cannot be parsed or a section cannot be summarized."""


class NotFoundError(ExplorerError):
    """Raised when link and category traversal yield no related candidate."""
