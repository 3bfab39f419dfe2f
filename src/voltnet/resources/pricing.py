"""Price queries and local cost calculations."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from ..models import EnergySource, PriceInfo
from ..transport.events import PRICE_UPDATE
from ..utils import current_timestamp
from .base import Resource


class PricingEngine(Resource):
    """Current, historical and forecast prices."""

    async def get_current_price(
        self,
        source: EnergySource | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
    ) -> PriceInfo:
        data = await self._get(
            "/pricing/current",
            {"source": source, "lat": latitude, "lon": longitude},
        )
        return self._parse(PriceInfo, data)

    async def get_price_history(
        self,
        start: str,
        end: str,
        source: EnergySource | None = None,
    ) -> list[PriceInfo]:
        data = await self._get("/pricing/history", {"from": start, "to": end, "source": source})
        return self._parse_list(PriceInfo, data)

    async def get_price_forecast(
        self,
        hours: int = 24,
        source: EnergySource | None = None,
    ) -> list[PriceInfo]:
        data = await self._get("/pricing/forecast", {"hours": hours, "source": source})
        return self._parse_list(PriceInfo, data)

    @staticmethod
    def calculate_cost(energy: float, price: PriceInfo) -> float:
        """Cost of ``energy`` kWh at ``price``, with any price factors applied."""
        cost = price.price_per_kwh * energy
        factors = price.factors
        if factors is not None:
            for multiplier in (factors.time_of_day, factors.demand_load, factors.green_energy):
                if multiplier:
                    cost *= multiplier
        return round(cost, 4)

    async def get_optimal_charging_time(self, hours: float, start_from: str | None = None) -> dict[str, Any]:
        """Cheapest window of ``hours`` length: ``optimalStart``, ``estimatedCost``, ``pricePerKwh``."""
        return await self._get(
            "/pricing/optimal",
            {"hours": hours, "startFrom": start_from or current_timestamp()},
        )

    async def set_custom_price(self, price_info: Mapping[str, Any]) -> PriceInfo:
        """Publish a custom price for own production, valid from now."""
        body = {**dict(price_info), "validFrom": current_timestamp()}
        data = await self._post("/pricing/custom", body)
        return self._parse(PriceInfo, data)

    async def get_pricing_model(self, participant_id: str) -> dict[str, Any]:
        return await self._get(f"/pricing/model/{participant_id}")

    async def compare_prices(self, sources: list[EnergySource]) -> dict[str, Any]:
        return await self._post("/pricing/compare", {"sources": list(sources)})

    @staticmethod
    def calculate_dynamic_price(demand: float, supply: float, base_price: float) -> float:
        """Adjust ``base_price`` by the demand/supply ratio.

        Above 1.2 the price rises by half the excess ratio; below 0.8 it falls
        to between 0.7x and 0.9x; in between it is unchanged.
        """
        if supply <= 0:
            raise ValueError(f"supply must be positive, got {supply}")
        ratio = demand / supply

        multiplier = 1.0
        if ratio > 1.2:
            multiplier = 1 + (ratio - 1) * 0.5
        elif ratio < 0.8:
            multiplier = 0.7 + ratio * 0.25

        return round(base_price * multiplier, 4)

    async def get_time_of_use_schedule(self) -> list[dict[str, Any]]:
        return await self._get("/pricing/time-of-use")

    def subscribe_to_price_updates(self, callback: Callable[[Any], Any]) -> None:
        self.client.subscribe(PRICE_UPDATE, callback)

    def unsubscribe_from_price_updates(self, callback: Callable[[Any], Any]) -> None:
        self.client.unsubscribe(PRICE_UPDATE, callback)
