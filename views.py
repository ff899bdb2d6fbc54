"""Terminal renderings of the chat, upload and documents screens."""

from __future__ import annotations

import asyncio
import textwrap
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, TextIO

from backend_api import ResilientClient
from errors import ClientError
from models import ChatResponse, DocumentsListResponse, Source, StatsResponse, UploadResponse

EXCERPT_WIDTH = 76


def render_source(source: Source, index: int) -> List[str]:
    """Render one numbered source citation with an indented excerpt."""
    header = f"[{index + 1}] {source.filename}"
    if source.chunk_id:
        header += f" (chunk {source.chunk_id})"
    excerpt = textwrap.wrap(source.text.strip(), width=EXCERPT_WIDTH) or [""]
    return [header, *(f"    {line}" for line in excerpt)]


def render_chat(response: ChatResponse) -> List[str]:
    """Render an answer followed by its sources."""
    lines = [response.response]
    if response.sources:
        lines.append("")
        lines.append("Sources:")
        for index, source in enumerate(response.sources):
            lines.extend(render_source(source, index))
    return lines


def render_upload(response: UploadResponse) -> str:
    """Render the success line for an upload."""
    return f"Successfully uploaded {response.filename}. Created {response.chunks} chunks."


def render_stats(stats: StatsResponse) -> List[str]:
    """Render collection statistics."""
    return [
        f"Total Documents: {stats.unique_documents}",
        f"Total Chunks:    {stats.total_chunks}",
        f"Collection:      {stats.collection_name}",
    ]


def render_documents(listing: DocumentsListResponse) -> List[str]:
    """Render the uploaded documents as a table."""
    if not listing.documents:
        return ["No documents uploaded yet."]
    width = max(len("Filename"), *(len(doc.filename) for doc in listing.documents))
    lines = [f"{'Filename':<{width}}  {'Type':<6}  {'Chunks':>6}  ID"]
    for doc in listing.documents:
        lines.append(
            f"{doc.filename:<{width}}  {doc.file_type:<6}  {doc.chunks:>6}  {doc.doc_id or '-'}"
        )
    lines.append(f"{listing.count} document(s)")
    return lines


def _write(out: TextIO, lines: Iterable[str]) -> None:
    for line in lines:
        out.write(line + "\n")


@dataclass
class ChatSession:
    """A conversation whose id is carried across turns."""

    api: ResilientClient
    conversation_id: Optional[str] = None
    history: List[ChatResponse] = field(default_factory=list)

    async def ask(self, message: str) -> ChatResponse:
        """Send a message in this conversation."""
        response = await self.api.chat(message, self.conversation_id)
        self.conversation_id = response.conversation_id or self.conversation_id
        self.history.append(response)
        return response


async def chat_view(
    api: ResilientClient,
    messages: Iterable[str],
    out: TextIO,
    err: TextIO,
    *,
    conversation_id: Optional[str] = None,
    prompt: Optional[Callable[[], None]] = None,
) -> int:
    """Answer each message in turn; returns the number of failed turns."""
    session = ChatSession(api, conversation_id=conversation_id)
    failures = 0
    for message in messages:
        message = message.strip()
        if not message:
            continue
        try:
            response = await session.ask(message)
        except ClientError as exc:
            failures += 1
            err.write(f"Error: {exc.message}\n")
        else:
            _write(out, render_chat(response))
            out.write("\n")
        if prompt is not None:
            prompt()
    return failures


async def upload_view(api: ResilientClient, paths: Iterable[Path], out: TextIO, err: TextIO) -> int:
    """Upload files one by one; returns the number of failures."""
    failures = 0
    for path in paths:
        try:
            response = await api.upload_path(path)
        except ClientError as exc:
            failures += 1
            err.write(f"Error: {path.name}: {exc.message}\n")
        except OSError as exc:
            failures += 1
            err.write(f"Error: {path}: {exc.strerror or exc}\n")
        else:
            out.write(render_upload(response) + "\n")
    return failures


async def documents_view(api: ResilientClient, out: TextIO, err: TextIO) -> int:
    """Show statistics and the document table, fetched concurrently."""
    try:
        listing, stats = await asyncio.gather(api.list_documents(), api.get_stats())
    except ClientError as exc:
        err.write(f"Error: {exc.message}\n")
        return 1
    _write(out, render_stats(stats))
    out.write("\n")
    _write(out, render_documents(listing))
    return 0
