"""Authenticated request pipeline with uniform retry policy."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

import aiohttp

from ..settings import Settings
from .errors import ApiError, VoltnetError, error_for_status, is_retryable

logger = logging.getLogger(__name__)


def backoff_delay(retry: int) -> float:
    """Seconds to wait before retry number ``retry`` (1-indexed): 2, 4, 8, ..."""
    return float(2 ** retry)


def build_headers(settings: Settings) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {settings.api_key.get_secret_value()}",
        "Content-Type": "application/json",
        "X-Participant-Id": settings.participant_id,
    }


def _clean_query(query: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if not query:
        return None
    params: dict[str, Any] = {}
    for key, value in query.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, Enum):
            value = value.value
        params[key] = value
    return params or None


@dataclass
class PendingRequest:
    """One logical call; lives until final success or retries are exhausted."""

    method: str
    path: str
    query: dict[str, Any] | None = None
    body: Any = None
    retries: int = 0

    @property
    def attempt(self) -> int:
        return self.retries + 1


class RequestPipeline:
    """Executes requests against the configured API endpoint.

    Every request carries the same three headers, fixed at construction. Failed
    attempts are retried when no response arrived, or the status was 5xx or 429;
    any other failure is raised after the first attempt.
    """

    def __init__(self, settings: Settings, *, session: aiohttp.ClientSession | None = None):
        self.base_url = settings.api_url
        self.headers = build_headers(settings)
        self.max_retries = settings.network.retries
        self.timeout = aiohttp.ClientTimeout(total=settings.timeout_seconds)
        self.session = session
        self._owns_session = session is None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._closed:
            raise VoltnetError("request pipeline is closed")
        if self.session is None:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        return self.session

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, Any] | None = None,
        body: Any = None,
        as_text: bool = False,
    ) -> Any:
        """Send a request and return the decoded response body.

        Raises:
            ClientError: 4xx response other than 429, after one attempt
            ServerError | RateLimitError: once retries are exhausted
            aiohttp.ClientError | asyncio.TimeoutError: network failure, once
                retries are exhausted
            VoltnetError: the pipeline was closed
        """
        pending = PendingRequest(method.upper(), path, _clean_query(query), body)

        while True:
            try:
                return await self._send(pending, as_text=as_text)
            except (ApiError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
                if not is_retryable(exc) or pending.retries >= self.max_retries:
                    raise
                pending.retries += 1
                delay = backoff_delay(pending.retries)
                logger.warning(
                    "%s %s failed on attempt %d (%s), retrying in %.0fs",
                    pending.method,
                    pending.path,
                    pending.attempt - 1,
                    exc,
                    delay,
                )
                await asyncio.sleep(delay)

    async def _send(self, pending: PendingRequest, *, as_text: bool = False) -> Any:
        session = await self._ensure_session()
        kwargs: dict[str, Any] = {"headers": self.headers, "timeout": self.timeout}
        if pending.query:
            kwargs["params"] = pending.query
        if pending.body is not None:
            kwargs["json"] = pending.body

        async with session.request(pending.method, self.url_for(pending.path), **kwargs) as resp:
            if resp.status >= 400:
                text = await resp.text()
                detail, body = _error_detail(text)
                raise error_for_status(
                    resp.status,
                    detail,
                    method=pending.method,
                    path=pending.path,
                    body=body,
                )
            if as_text:
                return await resp.text()
            return await resp.json(content_type=None)

    async def get(self, path: str, query: Mapping[str, Any] | None = None, **kwargs: Any) -> Any:
        return await self.request("GET", path, query=query, **kwargs)

    async def post(self, path: str, body: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", path, body=body, **kwargs)

    async def patch(self, path: str, body: Any = None, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, body=body, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def close(self) -> None:
        """Close the HTTP session; later requests raise ``VoltnetError``."""
        self._closed = True
        if self.session and self._owns_session and not self.session.closed:
            await self.session.close()
        self.session = None


def _error_detail(text: str) -> tuple[str, Any]:
    if not text:
        return "Unknown error", None
    try:
        data = json.loads(text)
    except ValueError:
        return text, text
    if isinstance(data, dict):
        for key in ("detail", "message", "error"):
            if data.get(key):
                return str(data[key]), data
    return text, data
