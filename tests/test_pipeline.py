"""Tests for the request pipeline and its retry policy."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from voltnet.settings import Settings
from voltnet.transport.errors import (
    AuthenticationError,
    ClientError,
    NotFoundError,
    RateLimitError,
    ServerError,
    VoltnetError,
    is_retryable,
)
from voltnet.transport.pipeline import RequestPipeline, backoff_delay, build_headers


def create_async_response(status=200, json_data=None, text=None):
    """Create a mock async response."""
    resp = AsyncMock()
    resp.status = status
    resp.json = AsyncMock(return_value=json_data if json_data is not None else {})
    resp.text = AsyncMock(return_value=text if text is not None else "")
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=None)
    return resp


def make_pipeline(settings_data, retries=None):
    if retries is not None:
        settings_data = {**settings_data, "network": {"retries": retries}}
    pipeline = RequestPipeline(Settings.model_validate(settings_data))
    session = MagicMock()
    pipeline._ensure_session = AsyncMock(return_value=session)
    return pipeline, session


class TestHeaders:
    """Tests for the fixed request headers."""

    def test_build_headers(self, settings_data):
        headers = build_headers(Settings.model_validate(settings_data))

        assert headers == {
            "Authorization": "Bearer test_api_key_123456",
            "Content-Type": "application/json",
            "X-Participant-Id": "participant-1",
        }

    def test_pipeline_keeps_headers(self, settings_data):
        pipeline = RequestPipeline(Settings.model_validate(settings_data))

        assert pipeline.headers["Authorization"] == "Bearer test_api_key_123456"
        assert pipeline.timeout.total == 30.0
        assert pipeline.url_for("/participants/p") == "https://api.voltnet.test/participants/p"

    @pytest.mark.asyncio
    async def test_external_session_gets_headers(self, settings_data):
        session = MagicMock()
        session.request = MagicMock(return_value=create_async_response(200, {"pong": True}))
        pipeline = RequestPipeline(Settings.model_validate(settings_data), session=session)

        await pipeline.get("/ping")

        headers = session.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer test_api_key_123456"
        assert headers["Content-Type"] == "application/json"
        assert headers["X-Participant-Id"] == "participant-1"


class TestBackoff:
    """Tests for the retry delay schedule."""

    def test_delays_double(self):
        assert [backoff_delay(n) for n in (1, 2, 3)] == [2.0, 4.0, 8.0]

    def test_is_retryable(self):
        assert is_retryable(ServerError(503, "down"))
        assert is_retryable(RateLimitError(429, "slow down"))
        assert is_retryable(aiohttp.ClientConnectionError("refused"))
        assert is_retryable(asyncio.TimeoutError())
        assert not is_retryable(ClientError(400, "bad"))
        assert not is_retryable(NotFoundError(404, "missing"))
        assert not is_retryable(ValueError("boom"))
        assert not is_retryable(aiohttp.InvalidURL("not a url"))


class TestRequest:
    """Tests for single requests."""

    @pytest.mark.asyncio
    async def test_get_with_query(self, settings_data):
        pipeline, session = make_pipeline(settings_data)
        session.request = MagicMock(return_value=create_async_response(200, {"ok": True}))

        result = await pipeline.request(
            "get", "/market/offers", query={"source": "solar", "maxPrice": None, "active": True}
        )

        assert result == {"ok": True}
        args, kwargs = session.request.call_args
        assert args == ("GET", "https://api.voltnet.test/market/offers")
        assert kwargs["params"] == {"source": "solar", "active": "true"}
        assert "json" not in kwargs
        assert kwargs["timeout"] is pipeline.timeout

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self, settings_data):
        pipeline, session = make_pipeline(settings_data)
        session.request = MagicMock(return_value=create_async_response(200, {"id": "x"}))

        await pipeline.post("/transactions", {"energy": 5})

        _, kwargs = session.request.call_args
        assert kwargs["json"] == {"energy": 5}
        assert "params" not in kwargs

    @pytest.mark.asyncio
    async def test_as_text(self, settings_data):
        pipeline, session = make_pipeline(settings_data)
        session.request = MagicMock(return_value=create_async_response(200, text="id,energy\n"))

        result = await pipeline.get("/transactions/export", as_text=True)

        assert result == "id,energy\n"

    @pytest.mark.asyncio
    async def test_error_detail_from_body(self, settings_data):
        pipeline, session = make_pipeline(settings_data)
        session.request = MagicMock(
            return_value=create_async_response(401, text='{"message": "invalid api key"}')
        )

        with pytest.raises(AuthenticationError) as exc_info:
            await pipeline.get("/participants/participant-1")

        assert exc_info.value.status == 401
        assert exc_info.value.detail == "invalid api key"
        assert exc_info.value.body == {"message": "invalid api key"}


class TestRetryPolicy:
    """Tests for attempts and delays on failure."""

    @pytest.mark.asyncio
    async def test_server_errors_retried_with_backoff(self, settings_data):
        pipeline, session = make_pipeline(settings_data, retries=2)
        session.request = MagicMock(side_effect=[
            create_async_response(500, text="boom"),
            create_async_response(503, text="busy"),
            create_async_response(200, {"ok": True}),
        ])

        with patch("voltnet.transport.pipeline.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await pipeline.get("/pricing/current")

        assert result == {"ok": True}
        assert session.request.call_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_server_error_raised_after_retries(self, settings_data):
        pipeline, session = make_pipeline(settings_data, retries=3)
        session.request = MagicMock(side_effect=lambda *a, **kw: create_async_response(500, text="boom"))

        with patch("voltnet.transport.pipeline.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(ServerError):
                await pipeline.get("/pricing/current")

        assert session.request.call_count == 4
        assert [c.args[0] for c in sleep.await_args_list] == [2.0, 4.0, 8.0]

    @pytest.mark.asyncio
    async def test_not_found_single_attempt(self, settings_data):
        pipeline, session = make_pipeline(settings_data)
        session.request = MagicMock(return_value=create_async_response(404, text="missing"))

        with patch("voltnet.transport.pipeline.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(NotFoundError):
                await pipeline.get("/devices/unknown")

        assert session.request.call_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rate_limit_retried(self, settings_data):
        pipeline, session = make_pipeline(settings_data)
        session.request = MagicMock(side_effect=[
            create_async_response(429, text="slow down"),
            create_async_response(200, [1, 2]),
        ])

        with patch("voltnet.transport.pipeline.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await pipeline.get("/market/offers")

        assert result == [1, 2]
        assert session.request.call_count == 2
        sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_zero_retries_means_one_attempt(self, settings_data):
        pipeline, session = make_pipeline(settings_data, retries=0)
        session.request = MagicMock(return_value=create_async_response(502, text="bad gateway"))

        with patch("voltnet.transport.pipeline.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(ServerError):
                await pipeline.get("/pricing/current")

        assert session.request.call_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_network_error_surfaced_unchanged(self, settings_data):
        pipeline, session = make_pipeline(settings_data, retries=2)
        error = aiohttp.ClientConnectionError("connection refused")
        session.request = MagicMock(side_effect=error)

        with patch("voltnet.transport.pipeline.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(aiohttp.ClientConnectionError) as exc_info:
                await pipeline.get("/participants/participant-1")

        assert exc_info.value is error
        assert session.request.call_count == 3

    @pytest.mark.asyncio
    async def test_invalid_url_not_retried(self, settings_data):
        pipeline, session = make_pipeline(settings_data)
        session.request = MagicMock(side_effect=aiohttp.InvalidURL("http://bad host/x"))

        with patch("voltnet.transport.pipeline.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(aiohttp.InvalidURL):
                await pipeline.get("/x")

        assert session.request.call_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_timeout_retried(self, settings_data):
        pipeline, session = make_pipeline(settings_data, retries=1)
        session.request = MagicMock(side_effect=[
            asyncio.TimeoutError(),
            create_async_response(200, {"ok": True}),
        ])

        with patch("voltnet.transport.pipeline.asyncio.sleep", new=AsyncMock()):
            assert await pipeline.get("/pricing/current") == {"ok": True}

    @pytest.mark.asyncio
    async def test_retry_counter_is_per_call(self, settings_data):
        pipeline, session = make_pipeline(settings_data, retries=1)
        session.request = MagicMock(side_effect=[
            create_async_response(500, text="boom"),
            create_async_response(200, {"n": 1}),
            create_async_response(500, text="boom"),
            create_async_response(200, {"n": 2}),
        ])

        with patch("voltnet.transport.pipeline.asyncio.sleep", new=AsyncMock()):
            first, second = await asyncio.gather(
                pipeline.get("/a"),
                pipeline.get("/b"),
            )

        assert {first["n"], second["n"]} == {1, 2}
        assert session.request.call_count == 4


class TestClose:
    """Tests for session ownership."""

    @pytest.mark.asyncio
    async def test_request_after_close_raises(self, settings_data):
        session = MagicMock()
        session.request = MagicMock(return_value=create_async_response(200, {}))
        pipeline = RequestPipeline(Settings.model_validate(settings_data), session=session)

        await pipeline.close()

        assert pipeline.closed
        with pytest.raises(VoltnetError, match="closed"):
            await pipeline.get("/participants/participant-1")
        session.request.assert_not_called()
        assert pipeline.session is None

    @pytest.mark.asyncio
    async def test_close_keeps_external_session(self, settings_data):
        session = MagicMock()
        session.close = AsyncMock()
        pipeline = RequestPipeline(Settings.model_validate(settings_data), session=session)

        await pipeline.close()

        session.close.assert_not_awaited()
        assert pipeline.session is None
