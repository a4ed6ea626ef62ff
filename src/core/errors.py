from __future__ import annotations

from typing import Optional


class BitkubMCPError(Exception):
    """Base error for the Bitkub market-data server."""


class ValidationError(BitkubMCPError):
    """Raised when user input is invalid."""


class RateLimitExceeded(BitkubMCPError):
    """Raised when a call would exceed the local request quota.

    `wait_seconds` is the minimum delay before a slot frees up.
    """

    def __init__(self, wait_seconds: int) -> None:
        self.wait_seconds = int(wait_seconds)
        super().__init__(f"Rate limit exceeded, retry after {self.wait_seconds}s")

    @property
    def retry_after(self) -> int:
        return self.wait_seconds


class ExternalServiceError(BitkubMCPError):
    """Raised when the Bitkub API fails (HTTP error, timeout, bad payload)."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "UNKNOWN_ERROR",
        status_code: Optional[int] = None,
        retry_after: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.retry_after = retry_after
