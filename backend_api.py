"""Retrying facade over the backend endpoints.

``ResilientClient`` is what views and the CLI talk to. Every operation except
``health_check`` goes through ``retry_with_backoff``; ``health_check`` is a
fast liveness check and fails on the first error.
"""

from __future__ import annotations

import asyncio
import inspect
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Awaitable, Callable, Optional, TypeVar, Union

import httpx

from client import DocumentClient, default_client_factory
from config import Settings, load_settings
from constants import MAX_FILE_SIZE
from logging_config import logger, operation_ctx
from metrics import operation_count, retry_count
from models import (
    ChatResponse,
    DocumentFile,
    DocumentsListResponse,
    HealthResponse,
    StatsResponse,
    UploadResponse,
)
from utils.retry import DEFAULT_RETRY_POLICY, RetryPolicy, retry_with_backoff
from utils.uploads import validate_upload

T = TypeVar("T")

ClientFactory = Callable[[], Union[httpx.AsyncClient, Awaitable[httpx.AsyncClient]]]


class ResilientClient:
    """Facade exposing the DocumentClient operations with retry semantics."""

    def __init__(
        self,
        client: DocumentClient,
        policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        *,
        max_upload_bytes: int = MAX_FILE_SIZE,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.client = client
        self.policy = policy
        self.max_upload_bytes = max_upload_bytes
        self._sleep = sleep

    def _policy_for(self, operation: str) -> RetryPolicy:
        user_observer = self.policy.on_retry

        def _on_retry(attempt: int, exc: Exception) -> None:
            retry_count.labels(operation=operation).inc()
            logger.warning(
                "%s failed (attempt %d/%d): %s",
                operation,
                attempt,
                self.policy.max_retries + 1,
                exc,
            )
            if user_observer is not None:
                user_observer(attempt, exc)

        return self.policy.with_observer(_on_retry)

    async def _run(self, operation: str, fn: Callable[[], Awaitable[T]]) -> T:
        token = operation_ctx.set(operation)
        try:
            result = await retry_with_backoff(fn, self._policy_for(operation), sleep=self._sleep)
        except Exception:
            operation_count.labels(operation=operation, outcome="failure").inc()
            raise
        finally:
            operation_ctx.reset(token)
        operation_count.labels(operation=operation, outcome="success").inc()
        return result

    async def chat(self, message: str, conversation_id: Optional[str] = None) -> ChatResponse:
        """Send a chat message."""
        return await self._run("chat", lambda: self.client.chat(message, conversation_id))

    async def upload_document(self, file: DocumentFile) -> UploadResponse:
        """Validate locally, then upload with retries.

        Validation failures are raised before any request is attempted.
        """
        validate_upload(file, max_bytes=self.max_upload_bytes)
        return await self._run("upload_document", lambda: self.client.upload_document(file))

    async def upload_path(self, path: Union[str, Path]) -> UploadResponse:
        """Read a file from disk and upload it."""
        return await self.upload_document(DocumentFile.from_path(path))

    async def list_documents(self) -> DocumentsListResponse:
        """List stored documents."""
        return await self._run("list_documents", self.client.list_documents)

    async def get_stats(self) -> StatsResponse:
        """Fetch collection statistics."""
        return await self._run("get_stats", self.client.get_stats)

    async def delete_document(self, doc_id: str) -> None:
        """Delete a stored document."""
        await self._run("delete_document", lambda: self.client.delete_document(doc_id))

    async def health_check(self) -> HealthResponse:
        """Check backend liveness once, without retries."""
        token = operation_ctx.set("health_check")
        try:
            result = await self.client.health_check()
        except Exception:
            operation_count.labels(operation="health_check", outcome="failure").inc()
            raise
        finally:
            operation_ctx.reset(token)
        operation_count.labels(operation="health_check", outcome="success").inc()
        return result


def create_client(
    settings: Settings,
    http_client: httpx.AsyncClient,
    *,
    policy: Optional[RetryPolicy] = None,
) -> ResilientClient:
    """Build a facade around an existing HTTP client owned by the caller."""
    return ResilientClient(
        DocumentClient.from_settings(http_client, settings),
        policy or settings.retry_policy(),
        max_upload_bytes=settings.max_upload_bytes,
    )


async def _init_http_client(
    settings: Settings,
    client_factory: Optional[ClientFactory],
) -> httpx.AsyncClient:
    if client_factory is None:
        return default_client_factory(settings)
    result = client_factory()
    if inspect.isawaitable(result):
        result = await result
    if not isinstance(result, httpx.AsyncClient):
        logger.error("client_factory returned unexpected type %s", type(result).__name__)
        raise TypeError("client_factory must return httpx.AsyncClient")
    return result


async def _close_http_client(client: httpx.AsyncClient, timeout: Optional[float]) -> None:
    try:
        await asyncio.wait_for(client.aclose(), timeout=timeout or 5.0)
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("Error closing HTTP client")


@asynccontextmanager
async def client_session(
    settings: Optional[Settings] = None,
    client_factory: Optional[ClientFactory] = None,
    *,
    policy: Optional[RetryPolicy] = None,
) -> AsyncGenerator[ResilientClient, None]:
    """Open an HTTP client, yield the facade and close the client on exit."""
    resolved = settings or load_settings()
    http_client = await _init_http_client(resolved, client_factory)
    logger.debug("Backend base URL: %s", resolved.api_url)
    try:
        yield create_client(resolved, http_client, policy=policy)
    finally:
        await _close_http_client(http_client, resolved.request_timeout)
