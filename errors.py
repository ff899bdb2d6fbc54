"""Error types surfaced by the client.

Every failure that leaves the client is a ``ClientError`` carrying a
human-readable ``message``, an optional HTTP ``status_code`` and the
underlying ``cause`` (also chained as ``__cause__``).
"""

from __future__ import annotations

from typing import Optional


class ClientError(Exception):
    """Normalized client error."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.cause = cause

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"status_code={self.status_code!r})"
        )


class ValidationError(ClientError):
    """Raised before any request is sent when local input is rejected."""


class RequestTimeoutError(ClientError):
    """Raised when a request exceeds its deadline."""

    def __init__(
        self,
        timeout: Optional[float],
        *,
        cause: Optional[BaseException] = None,
    ) -> None:
        message = (
            f"Request timed out after {timeout:g}s" if timeout is not None else "Request timed out"
        )
        super().__init__(message, cause=cause)
        self.timeout = timeout


class HttpError(ClientError):
    """Raised for non-2xx responses."""

    def __init__(
        self,
        message: str,
        status_code: int,
        *,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, status_code=status_code, cause=cause)


class NetworkError(ClientError):
    """Raised for connection-level failures (refused, DNS, reset)."""


class ParseError(ClientError):
    """Raised when a successful response body cannot be parsed."""
