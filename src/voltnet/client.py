"""VOLTNET API client."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

import aiohttp

from .config import build_settings
from .models import Balance, Participant, Statistics
from .settings import Settings
from .transport.channel import EventChannel
from .transport.events import Handler, NotificationRegistry
from .transport.pipeline import RequestPipeline

logger = logging.getLogger(__name__)


class VoltnetClient:
    """Entry point to the VOLTNET network for one participant.

    Owns the authenticated request pipeline, the notification registry, and,
    when ``enable_realtime`` is set, the realtime event channel. Resource
    modules (``EnergyMeter``, ``PricingEngine``, ...) issue their calls
    through ``request`` and subscribe through ``subscribe``.

    Example:
        >>> async with VoltnetClient({"apiUrl": "https://api.voltnet.xyz",
        ...                           "apiKey": "key", "participantId": "p-1"}) as client:
        ...     balance = await client.get_balance()
    """

    def __init__(
        self,
        settings: Settings | Mapping[str, Any],
        *,
        session: aiohttp.ClientSession | None = None,
    ):
        self.settings = build_settings(dict(settings) if isinstance(settings, Mapping) else settings)
        self.participant_id = self.settings.participant_id
        self.pipeline = RequestPipeline(self.settings, session=session)
        self.registry = NotificationRegistry()
        self.channel: EventChannel | None = None
        self._closed = False

        if self.settings.enable_realtime:
            self.channel = EventChannel(self.settings.realtime_url(), self.registry)
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                logger.debug("no running event loop, realtime channel starts on connect()")
            else:
                self.channel.start()

    @property
    def closed(self) -> bool:
        return self._closed

    async def connect(self) -> None:
        """Start the realtime channel if enabled and not already running."""
        if self.channel is not None and not self._closed:
            self.channel.start()

    async def __aenter__(self) -> "VoltnetClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    async def request(
        self,
        method: str,
        path: str,
        query: Mapping[str, Any] | None = None,
        body: Any = None,
        *,
        as_text: bool = False,
    ) -> Any:
        """Issue one API call; see ``RequestPipeline.request``."""
        return await self.pipeline.request(method, path, query=query, body=body, as_text=as_text)

    def subscribe(self, kind: str, handler: Handler) -> None:
        self.registry.subscribe(kind, handler)

    def unsubscribe(self, kind: str, handler: Handler) -> None:
        self.registry.unsubscribe(kind, handler)

    on = subscribe
    off = unsubscribe

    async def disconnect(self) -> None:
        """Tear down the channel, drop all listeners and close HTTP. Idempotent."""
        if self._closed:
            return
        self._closed = True
        # listeners go first so nothing is dispatched while the channel shuts down
        self.registry.close()
        if self.channel is not None:
            await self.channel.close()
        await self.pipeline.close()
        logger.info("voltnet client disconnected")

    # Participants

    async def get_profile(self) -> Participant:
        data = await self.request("GET", f"/participants/{self.participant_id}")
        return Participant.model_validate(data)

    async def update_profile(self, updates: Mapping[str, Any]) -> Participant:
        data = await self.request("PATCH", f"/participants/{self.participant_id}", body=dict(updates))
        return Participant.model_validate(data)

    async def get_balance(self) -> Balance:
        data = await self.request("GET", f"/participants/{self.participant_id}/balance")
        return Balance.model_validate(data)

    async def get_statistics(self, start: str, end: str) -> Statistics:
        """Statistics for the period ``start``..``end`` (ISO 8601)."""
        data = await self.request(
            "GET",
            f"/participants/{self.participant_id}/statistics",
            query={"from": start, "to": end},
        )
        return Statistics.model_validate(data)

    async def get_participant(self, participant_id: str) -> Participant:
        data = await self.request("GET", f"/participants/{participant_id}")
        return Participant.model_validate(data)

    async def search_participants(
        self,
        *,
        type: str | None = None,
        lat: float | None = None,
        lon: float | None = None,
        radius: float | None = None,
        limit: int | None = None,
    ) -> list[Participant]:
        data = await self.request(
            "GET",
            "/participants/search",
            query={"type": type, "lat": lat, "lon": lon, "radius": radius, "limit": limit},
        )
        return [Participant.model_validate(item) for item in data or []]
