"""Shared fixtures for client tests."""

from __future__ import annotations

from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from backend_api import ResilientClient
from client import DocumentClient
from tests.fake_backend import create_backend
from tests.helpers import RecordingSleep
from utils.retry import RetryPolicy

BASE_URL = "http://test"


@pytest.fixture
def sleeper() -> RecordingSleep:
    """Return a sleep recorder."""
    return RecordingSleep()


@pytest.fixture
def backend_app() -> FastAPI:
    """Return a fresh in-memory backend."""
    return create_backend()


@pytest_asyncio.fixture
async def backend_http(backend_app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client wired to the in-memory backend."""
    transport = httpx.ASGITransport(app=backend_app)
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as client:
        yield client


@pytest.fixture
def document_client(backend_http: httpx.AsyncClient) -> DocumentClient:
    """Endpoint client pointed at the in-memory backend."""
    return DocumentClient(backend_http, BASE_URL, timeout=5.0)


@pytest.fixture
def api(document_client: DocumentClient, sleeper: RecordingSleep) -> ResilientClient:
    """Retrying facade that never really sleeps."""
    return ResilientClient(document_client, RetryPolicy(max_retries=2), sleep=sleeper)
