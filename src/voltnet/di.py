from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Mapping

from .client import VoltnetClient
from .resources import EnergyMeter, P2PMarket, PricingEngine, TransactionManager
from .settings import Settings


@dataclass(slots=True)
class VoltnetSDK:
    client: VoltnetClient
    meter: EnergyMeter
    pricing: PricingEngine
    market: P2PMarket
    transactions: TransactionManager
    shutdown: asyncio.Event = field(default_factory=asyncio.Event)

    @property
    def settings(self) -> Settings:
        return self.client.settings

    async def disconnect(self) -> None:
        await self.client.disconnect()


def create_client(settings: Settings | Mapping[str, Any], **client_kwargs: Any) -> VoltnetSDK:
    """Build a client and the resource modules bound to it."""
    client = VoltnetClient(settings, **client_kwargs)
    return VoltnetSDK(
        client=client,
        meter=EnergyMeter(client),
        pricing=PricingEngine(client),
        market=P2PMarket(client),
        transactions=TransactionManager(client),
    )
