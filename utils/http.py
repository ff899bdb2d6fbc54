"""HTTP request helpers with a per-request deadline."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional

import httpx

from errors import RequestTimeoutError
from metrics import request_count, request_latency
from utils.types import HTTPClientLike

logger = logging.getLogger(__name__)


async def fetch_with_timeout(
    client: HTTPClientLike,
    method: str,
    url: str,
    *,
    timeout: Optional[float],
    **request_kwargs: Any,
) -> httpx.Response:
    """Send one request, raising RequestTimeoutError once ``timeout`` elapses.

    The response is returned untouched whatever its status. Errors other than
    timeouts are re-raised as they are.
    """
    logger.debug("HTTP %s %s", method, url)
    started = time.perf_counter()
    try:
        response = await asyncio.wait_for(
            client.request(method, url, **request_kwargs),
            timeout=timeout,
        )
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        request_count.labels(method=method, outcome="timeout").inc()
        raise RequestTimeoutError(timeout, cause=exc) from exc
    except Exception:
        request_count.labels(method=method, outcome="error").inc()
        raise
    finally:
        request_latency.labels(method=method).observe(time.perf_counter() - started)

    request_count.labels(method=method, outcome="response").inc()
    logger.debug("HTTP %s %s -> %s", method, url, response.status_code)
    return response

