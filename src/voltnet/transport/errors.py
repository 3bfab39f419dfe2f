"""Exception hierarchy for VOLTNET API failures.

Catch ``VoltnetError`` to handle every failure raised by the SDK itself, or a
subclass for finer control. Network failures (no response at all) are raised
as the underlying ``aiohttp`` / ``asyncio`` exception.
"""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp


class VoltnetError(Exception):
    """Base exception for the SDK."""


class ApiError(VoltnetError):
    """The API answered with an error status."""

    def __init__(
        self,
        status: int,
        detail: str,
        *,
        method: str | None = None,
        path: str | None = None,
        body: Any = None,
    ):
        self.status = status
        self.detail = detail
        self.method = method
        self.path = path
        self.body = body
        where = f" {method} {path}" if method and path else ""
        super().__init__(f"API error ({status}){where}: {detail}")


class ClientError(ApiError):
    """Request rejected by the API (4xx other than 429). Never retried."""


class AuthenticationError(ClientError):
    """Invalid API key or access forbidden (401/403)."""


class NotFoundError(ClientError):
    """Requested resource was not found (404)."""


class RateLimitError(ApiError):
    """The client exceeded the allowed request rate (429)."""


class ServerError(ApiError):
    """The API failed to process the request (5xx)."""


class ChannelError(VoltnetError):
    """Realtime connection failure, delivered to ``error`` subscribers."""


def error_for_status(
    status: int,
    detail: str,
    *,
    method: str | None = None,
    path: str | None = None,
    body: Any = None,
) -> ApiError:
    if status in (401, 403):
        cls: type[ApiError] = AuthenticationError
    elif status == 404:
        cls = NotFoundError
    elif status == 429:
        cls = RateLimitError
    elif status >= 500:
        cls = ServerError
    elif status >= 400:
        cls = ClientError
    else:
        cls = ApiError
    return cls(status, detail, method=method, path=path, body=body)


def is_retryable(exc: BaseException) -> bool:
    """Whether a failed attempt may be repeated.

    Retryable: no response received, server errors (>= 500), rate limiting (429).
    A URL aiohttp refuses to send is never retried.
    """
    if isinstance(exc, (ServerError, RateLimitError)):
        return True
    if isinstance(exc, ApiError):
        return False
    if isinstance(exc, aiohttp.InvalidURL):
        return False
    if isinstance(exc, aiohttp.ClientResponseError):
        return exc.status >= 500 or exc.status == 429
    return isinstance(exc, (aiohttp.ClientError, asyncio.TimeoutError))
