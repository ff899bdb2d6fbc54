"""HTTP client factory and typed endpoint client."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
import orjson
import pydantic

from config import Settings
from constants import BACKEND_UNAVAILABLE, CLIENT_VERSION, DEFAULT_TIMEOUT_SECONDS, UNKNOWN_ERROR
from endpoints import (
    CHAT,
    DELETE_DOCUMENT,
    GET_STATS,
    HEALTH,
    LIST_DOCUMENTS,
    UPLOAD_DOCUMENT,
    Endpoint,
)
from errors import HttpError, NetworkError, ParseError
from logging_config import operation_ctx
from models import (
    ApiModel,
    ChatRequest,
    ChatResponse,
    DocumentFile,
    DocumentsListResponse,
    HealthResponse,
    StatsResponse,
    UploadResponse,
)
from utils.http import fetch_with_timeout
from utils.types import HTTPClientLike

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=ApiModel)


def default_client_factory(settings: Settings) -> httpx.AsyncClient:
    """Create the HTTP client used to talk to the backend."""
    timeout = httpx.Timeout(settings.request_timeout) if settings.request_timeout is not None else None
    limits = httpx.Limits(max_connections=settings.max_connections or None)
    return httpx.AsyncClient(
        timeout=timeout,
        limits=limits,
        verify=settings.verify_ssl,
        headers={"User-Agent": f"docqa-client/{CLIENT_VERSION}"},
    )


def error_message(response: httpx.Response) -> str:
    """Extract a readable error message from a failed response.

    Prefers the backend's ``detail`` field, then the raw body text.
    """
    try:
        payload = orjson.loads(response.content)
    except orjson.JSONDecodeError:
        text = response.text.strip()
        return text or UNKNOWN_ERROR
    detail = payload.get("detail") if isinstance(payload, dict) else None
    if isinstance(detail, str) and detail:
        return detail
    if detail:
        return orjson.dumps(detail).decode()
    return f"HTTP error! status: {response.status_code}"


class DocumentClient:
    """One method per backend operation, without retries.

    Non-2xx responses raise ``HttpError``; connection failures raise
    ``NetworkError``; unreadable success bodies raise ``ParseError``.
    """

    def __init__(
        self,
        client: HTTPClientLike,
        base_url: str,
        *,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, client: HTTPClientLike, settings: Settings) -> "DocumentClient":
        """Build a client for the configured backend."""
        return cls(client, settings.api_url, timeout=settings.request_timeout)

    def url(self, endpoint: Endpoint, **params: str) -> str:
        """Build the absolute URL for an endpoint."""
        return f"{self.base_url}{endpoint.format(**params)}"

    def _request_kwargs(
        self,
        endpoint: Endpoint,
        body: Optional[ApiModel] = None,
        file: Optional[DocumentFile] = None,
    ) -> Dict[str, Any]:
        """Encode the request body the way ``endpoint`` expects it."""
        if endpoint.body_encoding == "json":
            if body is None or file is not None:
                raise TypeError(f"{endpoint.name} takes a JSON body")
            return {
                "content": orjson.dumps(body.model_dump(exclude_none=True)),
                "headers": {"Content-Type": "application/json"},
            }
        if endpoint.body_encoding == "multipart":
            if file is None or body is not None:
                raise TypeError(f"{endpoint.name} takes a file upload")
            return {
                "files": {
                    "file": (file.filename, file.content, file.content_type or "application/octet-stream")
                }
            }
        if body is not None or file is not None:
            raise TypeError(f"{endpoint.name} takes no request body")
        return {}

    async def _send(
        self,
        endpoint: Endpoint,
        *,
        params: Optional[Dict[str, str]] = None,
        body: Optional[ApiModel] = None,
        file: Optional[DocumentFile] = None,
    ) -> httpx.Response:
        url = self.url(endpoint, **(params or {}))
        request_kwargs = self._request_kwargs(endpoint, body, file)
        token = operation_ctx.set(endpoint.name)
        try:
            response = await fetch_with_timeout(
                self.client,
                endpoint.method,
                url,
                timeout=self.timeout,
                **request_kwargs,
            )
        except httpx.RequestError as exc:
            logger.error("Backend request failed", extra={"url": url}, exc_info=True)
            raise NetworkError(f"Network error: {exc}", cause=exc) from exc
        finally:
            operation_ctx.reset(token)

        if response.is_error:
            logger.error(
                "Backend request error",
                extra={"url": url, "status": response.status_code, "body": response.text},
            )
        return response

    async def _call(self, endpoint: Endpoint, **send_kwargs: Any) -> Optional[ApiModel]:
        response = await self._send(endpoint, **send_kwargs)
        self._raise_for_status(response)
        if endpoint.response_model is None:
            return None
        return self._parse(response, endpoint.response_model)

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        raise HttpError(error_message(response), response.status_code)

    @staticmethod
    def _parse(response: httpx.Response, model: Type[M]) -> M:
        """Decode a 2xx body into ``model``.

        Only a body that is not JSON fails. Missing fields take their
        defaults and mistyped values are kept as sent.
        """
        try:
            payload = orjson.loads(response.content)
        except orjson.JSONDecodeError as exc:
            raise ParseError("Backend returned invalid JSON", status_code=response.status_code, cause=exc) from exc
        if not isinstance(payload, dict):
            logger.warning("Expected a JSON object for %s, got %s", model.__name__, type(payload).__name__)
            return model()
        try:
            return model.model_validate(payload)
        except pydantic.ValidationError as exc:
            logger.warning("Unexpected %s payload: %s", model.__name__, exc.errors(include_url=False))
            return model.model_construct(**payload)

    async def chat(self, message: str, conversation_id: Optional[str] = None) -> ChatResponse:
        """Ask a question, optionally continuing a conversation."""
        body = ChatRequest(message=message, conversation_id=conversation_id)
        return await self._call(CHAT, body=body)

    async def upload_document(self, file: DocumentFile) -> UploadResponse:
        """Upload a document as multipart field ``file``."""
        return await self._call(UPLOAD_DOCUMENT, file=file)

    async def list_documents(self) -> DocumentsListResponse:
        """List stored documents."""
        return await self._call(LIST_DOCUMENTS)

    async def get_stats(self) -> StatsResponse:
        """Return collection statistics."""
        return await self._call(GET_STATS)

    async def delete_document(self, doc_id: str) -> None:
        """Delete a document; the response body is ignored."""
        await self._call(DELETE_DOCUMENT, params={"doc_id": doc_id})

    async def health_check(self) -> HealthResponse:
        """Check backend liveness."""
        response = await self._send(HEALTH)
        if not response.is_success:
            raise HttpError(BACKEND_UNAVAILABLE, response.status_code)
        return self._parse(response, HEALTH.response_model)
