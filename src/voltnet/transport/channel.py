"""Self-healing realtime connection feeding the notification registry."""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from typing import Any

import aiohttp

from .errors import ChannelError
from .events import ERROR, ROUTED_KINDS, NotificationRegistry

logger = logging.getLogger(__name__)

RECONNECT_DELAY = 5.0
HEARTBEAT = 30.0


class ChannelState(Enum):
    """Realtime connection state."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class EventChannel:
    """Persistent WebSocket connection for push notifications.

    The channel reconnects ``reconnect_delay`` seconds after every failed
    handshake or lost connection, without limit, until ``close()`` is called.
    Each attempt opens a new socket. Connection failures are reported to
    ``error`` subscribers as ``ChannelError`` and never raised.
    """

    def __init__(
        self,
        url: str,
        registry: NotificationRegistry,
        *,
        reconnect_delay: float = RECONNECT_DELAY,
        heartbeat: float | None = HEARTBEAT,
        session: aiohttp.ClientSession | None = None,
    ):
        self.url = url
        self.registry = registry
        self.reconnect_delay = reconnect_delay
        self.heartbeat = heartbeat
        self.session = session
        self._owns_session = session is None
        self.state = ChannelState.DISCONNECTED
        self.connect_attempts = 0
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._task: asyncio.Task[None] | None = None
        self._reconnect_handle: asyncio.TimerHandle | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_handle is not None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        return self.session

    def start(self) -> None:
        """Begin connecting. Must be called from a running event loop."""
        if self._closed or self.state is not ChannelState.DISCONNECTED:
            return
        if self._reconnect_handle is not None:
            return
        self._connect()

    def _connect(self) -> None:
        self._reconnect_handle = None
        if self._closed:
            return
        self.state = ChannelState.CONNECTING
        self.connect_attempts += 1
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        try:
            session = await self._ensure_session()
            ws = await session.ws_connect(self.url, heartbeat=self.heartbeat)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            self._connection_lost(exc)
            return

        if self._closed:
            await ws.close()
            return

        self._ws = ws
        self.state = ChannelState.CONNECTED
        logger.info("realtime channel connected")

        error: BaseException | None = None
        try:
            async for msg in ws:
                if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                    self.handle_frame(msg.data)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    error = ws.exception() or ChannelError("WebSocket connection error")
                    break
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            error = exc
        finally:
            self._ws = None

        if not ws.closed:
            await ws.close()
        self._connection_lost(error)

    def _connection_lost(self, error: BaseException | None) -> None:
        self.state = ChannelState.DISCONNECTED
        if self._closed:
            return

        if error is None:
            logger.info(
                "realtime channel disconnected, reconnecting in %.0fs", self.reconnect_delay
            )
        else:
            logger.warning(
                "realtime channel error: %s, reconnecting in %.0fs", error, self.reconnect_delay
            )
            failure = error if isinstance(error, ChannelError) else ChannelError(
                f"WebSocket connection error: {error}"
            )
            self.registry.dispatch(ERROR, failure)

        loop = asyncio.get_running_loop()
        self._reconnect_handle = loop.call_later(self.reconnect_delay, self._connect)

    def handle_frame(self, raw: str | bytes) -> None:
        """Route one inbound frame ``{"type": ..., "payload": ...}``.

        Malformed or unknown frames are logged and dropped.
        """
        try:
            frame: Any = json.loads(raw)
        except (TypeError, ValueError) as exc:
            logger.warning("failed to parse realtime message: %s", exc)
            return

        if not isinstance(frame, dict) or not isinstance(frame.get("type"), str):
            logger.warning("dropping realtime message without a type: %.200r", raw)
            return

        kind = frame["type"]
        if kind not in ROUTED_KINDS:
            logger.warning("unknown realtime message type: %s", kind)
            return

        self.registry.dispatch(kind, frame.get("payload"))

    async def close(self) -> None:
        """Stop reconnecting and close the active connection. Idempotent."""
        if self._closed:
            return
        self._closed = True

        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

        ws = self._ws
        if ws is not None and not ws.closed:
            await ws.close()

        task = self._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        self._task = None
        self.state = ChannelState.DISCONNECTED

        if self.session is not None and self._owns_session:
            await self.session.close()
        self.session = None
        logger.info("realtime channel closed")
