"""Static descriptors for the backend endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Type
from urllib.parse import quote

from models import (
    ApiModel,
    ChatResponse,
    DocumentsListResponse,
    HealthResponse,
    StatsResponse,
    UploadResponse,
)

BodyEncoding = Literal["json", "multipart", "none"]


@dataclass(frozen=True)
class Endpoint:
    """HTTP method, path template and body encoding of one operation."""

    name: str
    method: str
    path: str
    body_encoding: BodyEncoding = "none"
    response_model: Optional[Type[ApiModel]] = None

    def format(self, **params: str) -> str:
        """Render the path, URL-quoting each parameter."""
        return self.path.format(**{key: quote(str(value), safe="") for key, value in params.items()})


CHAT = Endpoint("chat", "POST", "/api/chat/message", "json", ChatResponse)
UPLOAD_DOCUMENT = Endpoint("upload_document", "POST", "/api/upload/document", "multipart", UploadResponse)
LIST_DOCUMENTS = Endpoint("list_documents", "GET", "/api/documents/list", "none", DocumentsListResponse)
GET_STATS = Endpoint("get_stats", "GET", "/api/documents/stats", "none", StatsResponse)
DELETE_DOCUMENT = Endpoint("delete_document", "DELETE", "/api/documents/{doc_id}")
HEALTH = Endpoint("health_check", "GET", "/health", "none", HealthResponse)
