"""Typed request and response payloads for the document Q&A backend."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ApiModel(BaseModel):
    """Base model that tolerates extra and missing fields from the backend.

    Response fields all carry defaults: a 2xx body is never rejected for its
    shape, only for not being JSON.
    """

    model_config = ConfigDict(extra="allow")


class ChatRequest(ApiModel):
    """Chat request body."""

    message: str
    conversation_id: Optional[str] = None


class Source(ApiModel):
    """A retrieved chunk cited by an answer."""

    filename: str = ""
    text: str = ""
    chunk_id: Optional[int] = None


class ChatResponse(ApiModel):
    """Answer to a chat message."""

    response: str = ""
    sources: List[Source] = Field(default_factory=list)
    conversation_id: Optional[str] = None


class UploadResponse(ApiModel):
    """Result of ingesting an uploaded document."""

    success: bool = True
    doc_id: Optional[str] = None
    filename: str = ""
    chunks: int = 0
    message: str = ""


class DocumentInfo(ApiModel):
    """A document stored in the backend collection."""

    filename: str = ""
    file_type: str = ""
    chunks: int = 0
    doc_id: Optional[str] = None


class DocumentsListResponse(ApiModel):
    """Listing of stored documents."""

    success: bool = True
    count: int = 0
    documents: List[DocumentInfo] = Field(default_factory=list)


class StatsResponse(ApiModel):
    """Collection statistics."""

    success: bool = True
    total_chunks: int = 0
    unique_documents: int = 0
    collection_name: str = ""


class HealthResponse(ApiModel):
    """Backend liveness payload."""

    status: str = ""


@dataclass(frozen=True)
class DocumentFile:
    """A file to upload, held in memory."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        """Return the size of the file in bytes."""
        return len(self.content)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "DocumentFile":
        """Read a file from disk, guessing its MIME type from the name."""
        file_path = Path(path)
        content_type, _ = mimetypes.guess_type(file_path.name)
        return cls(
            filename=file_path.name,
            content=file_path.read_bytes(),
            content_type=content_type,
        )
