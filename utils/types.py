"""Shared typing helpers."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

import httpx


class HTTPClientLike(Protocol):
    """Protocol for the HTTP clients the transport can drive."""

    async def request(
        self,
        method: str,
        url: str,
        *,
        content: Optional[bytes] = None,
        files: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        """Perform a generic request."""

    async def aclose(self) -> None:
        """Release pooled connections."""
