"""Tests for terminal views and the command-line entry point."""

# pylint: disable=redefined-outer-name

import io
from contextlib import asynccontextmanager
from typing import Any

import httpx
import pytest

import cli
from backend_api import ResilientClient
from client import DocumentClient
from models import (
    ChatResponse,
    DocumentFile,
    DocumentInfo,
    DocumentsListResponse,
    Source,
)
from tests.fake_backend import create_backend
from utils.retry import RetryPolicy
from views import ChatSession, chat_view, documents_view, render_chat, render_documents, upload_view


def test_render_chat_numbers_sources() -> None:
    """Sources are numbered from 1 with chunk ids when present."""
    response = ChatResponse(
        response="Answer",
        conversation_id="c1",
        sources=[
            Source(filename="a.pdf", text="first passage", chunk_id=3),
            Source(filename="b.txt", text="second passage"),
        ],
    )
    lines = render_chat(response)
    assert lines[0] == "Answer"
    assert "[1] a.pdf (chunk 3)" in lines
    assert "[2] b.txt" in lines
    assert "    first passage" in lines


def test_render_documents_empty_and_table() -> None:
    """Empty listings get a placeholder; others a table and count."""
    assert render_documents(DocumentsListResponse(count=0)) == ["No documents uploaded yet."]
    listing = DocumentsListResponse(
        count=1,
        documents=[DocumentInfo(filename="report.pdf", file_type="pdf", chunks=12, doc_id="d1")],
    )
    lines = render_documents(listing)
    assert lines[0].startswith("Filename")
    assert "report.pdf" in lines[1] and lines[1].endswith("d1")
    assert lines[-1] == "1 document(s)"


@pytest.mark.asyncio
async def test_chat_session_carries_conversation_id(api: ResilientClient, backend_app) -> None:
    """Follow-up messages reuse the conversation id returned by the backend."""
    await api.upload_document(DocumentFile("notes.txt", b"hello world", "text/plain"))
    session = ChatSession(api)

    await session.ask("first")
    await session.ask("second")

    assert session.conversation_id == "conv-1"
    assert backend_app.state.chat_requests == [
        {"message": "first", "conversation_id": None},
        {"message": "second", "conversation_id": "conv-1"},
    ]


@pytest.mark.asyncio
async def test_chat_view_reports_errors_inline(api: ResilientClient) -> None:
    """Backend errors are rendered as 'Error: <message>'."""
    out, err = io.StringIO(), io.StringIO()

    failures = await chat_view(api, ["hello", "  "], out, err)

    assert failures == 1
    assert err.getvalue() == "Error: No documents uploaded\n"
    assert out.getvalue() == ""


@pytest.mark.asyncio
async def test_upload_and_documents_views(api: ResilientClient, tmp_path) -> None:
    """Uploads print a summary and the documents view lists them."""
    good = tmp_path / "notes.txt"
    good.write_text("x" * 300)
    bad = tmp_path / "tool.exe"
    bad.write_bytes(b"MZ")
    out, err = io.StringIO(), io.StringIO()

    failures = await upload_view(api, [good, bad, tmp_path / "missing.txt"], out, err)

    assert failures == 2
    assert out.getvalue() == "Successfully uploaded notes.txt. Created 3 chunks.\n"
    assert "tool.exe: Invalid file type" in err.getvalue()
    assert "missing.txt" in err.getvalue()

    out = io.StringIO()
    assert await documents_view(api, out, err) == 0
    rendered = out.getvalue()
    assert "Total Documents: 1" in rendered
    assert "Total Chunks:    3" in rendered
    assert "notes.txt" in rendered


@pytest.fixture
def patched_session(monkeypatch: pytest.MonkeyPatch):
    """Route the CLI to an in-memory backend."""
    backend = create_backend()

    @asynccontextmanager
    async def fake_session(settings: Any):
        transport = httpx.ASGITransport(app=backend)
        async with httpx.AsyncClient(transport=transport) as http:
            yield ResilientClient(
                DocumentClient(http, "http://test", timeout=settings.request_timeout),
                RetryPolicy(max_retries=0),
            )

    monkeypatch.setattr(cli, "client_session", fake_session)
    monkeypatch.setattr("config.load_dotenv", lambda: False)
    return backend


def test_cli_health(patched_session, capsys: pytest.CaptureFixture[str]) -> None:
    """The health command prints the backend status."""
    assert cli.main(["--api-url", "http://test", "health"]) == 0
    assert capsys.readouterr().out == "Backend status: healthy\n"


def test_cli_upload_then_documents(patched_session, tmp_path, capsys) -> None:
    """Uploads persist across commands against the same backend."""
    path = tmp_path / "paper.md"
    path.write_text("# Paper\n")
    assert cli.main(["--api-url", "http://test", "upload", str(path)]) == 0
    assert cli.main(["--api-url", "http://test", "documents"]) == 0
    out = capsys.readouterr().out
    assert "Successfully uploaded paper.md" in out
    assert "paper.md" in out.splitlines()[-2]


def test_cli_delete_missing_document(patched_session, capsys) -> None:
    """Errors exit with status 1 and print the backend detail."""
    assert cli.main(["--api-url", "http://test", "delete", "nope"]) == 1
    assert capsys.readouterr().err.endswith("Error: Document not found\n")


def test_cli_invalid_configuration(capsys, monkeypatch: pytest.MonkeyPatch) -> None:
    """Invalid settings are reported before any request."""
    monkeypatch.setattr("config.load_dotenv", lambda: False)
    assert cli.main(["--retries", "-1", "health"]) == 2
    assert "invalid configuration" in capsys.readouterr().err
