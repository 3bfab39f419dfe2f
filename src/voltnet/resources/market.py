"""Peer-to-peer energy market."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping

from ..models import EnergySource, EnergyTransaction, MarketOffer
from ..transport.events import OFFER
from .base import Resource

if TYPE_CHECKING:
    from ..client import VoltnetClient

OfferCallback = Callable[[Any], Any]


class P2PMarket(Resource):
    """Offers published by producers and accepted by buyers.

    Matching and settlement happen on the VOLTNET backend; this module only
    forwards the calls.
    """

    def __init__(self, client: "VoltnetClient"):
        super().__init__(client)
        # (callback, registered wrapper) for filtered offer subscriptions
        self._offer_listeners: list[tuple[OfferCallback, OfferCallback]] = []

    async def create_offer(self, offer: Mapping[str, Any]) -> MarketOffer:
        """Publish an offer; ``id``, ``sellerId``, ``createdAt`` and ``status`` are set by the API."""
        data = await self._post("/market/offers", dict(offer))
        return self._parse(MarketOffer, data)

    async def get_offers(
        self,
        *,
        source: EnergySource | None = None,
        max_price: float | None = None,
        min_energy: float | None = None,
        lat: float | None = None,
        lon: float | None = None,
        radius: float | None = None,
    ) -> list[MarketOffer]:
        data = await self._get(
            "/market/offers",
            {
                "source": source,
                "maxPrice": max_price,
                "minEnergy": min_energy,
                "lat": lat,
                "lon": lon,
                "radius": radius,
            },
        )
        return self._parse_list(MarketOffer, data)

    async def get_offer(self, offer_id: str) -> MarketOffer:
        data = await self._get(f"/market/offers/{offer_id}")
        return self._parse(MarketOffer, data)

    async def get_my_offers(self) -> list[MarketOffer]:
        data = await self._get("/market/offers/my")
        return self._parse_list(MarketOffer, data)

    async def accept_offer(self, offer_id: str, energy_amount: float) -> EnergyTransaction:
        data = await self._post(f"/market/offers/{offer_id}/accept", {"energyAmount": energy_amount})
        return self._parse(EnergyTransaction, data)

    async def cancel_offer(self, offer_id: str) -> dict[str, Any]:
        return await self._delete(f"/market/offers/{offer_id}")

    async def update_offer(self, offer_id: str, updates: Mapping[str, Any]) -> MarketOffer:
        """Change ``pricePerKwh``, ``energyAvailable`` or ``expiresAt`` of an offer."""
        data = await self._patch(f"/market/offers/{offer_id}", dict(updates))
        return self._parse(MarketOffer, data)

    async def find_nearby_offers(self, latitude: float, longitude: float, radius_km: float = 10) -> list[MarketOffer]:
        data = await self._get(
            "/market/offers/nearby",
            {"lat": latitude, "lon": longitude, "radius": radius_km},
        )
        return self._parse_list(MarketOffer, data)

    async def get_best_offer(
        self,
        energy_needed: float,
        *,
        max_price: float | None = None,
        preferred_source: EnergySource | None = None,
        lat: float | None = None,
        lon: float | None = None,
    ) -> MarketOffer | None:
        criteria: dict[str, Any] = {"energyNeeded": energy_needed}
        if max_price is not None:
            criteria["maxPrice"] = max_price
        if preferred_source is not None:
            criteria["preferredSource"] = preferred_source
        if lat is not None and lon is not None:
            criteria["location"] = {"lat": lat, "lon": lon}

        data = await self._post("/market/offers/best", criteria)
        if not data:
            return None
        return self._parse(MarketOffer, data)

    async def get_market_stats(self) -> dict[str, Any]:
        return await self._get("/market/stats")

    async def create_recurring_offer(
        self,
        offer: Mapping[str, Any],
        schedule: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Create a repeating offer.

        ``schedule`` holds ``frequency`` (daily/weekly/monthly), ``startTime``
        (HH:MM), ``duration`` in hours and, for weekly offers, ``daysOfWeek``.
        """
        return await self._post(
            "/market/offers/recurring",
            {"offer": dict(offer), "schedule": dict(schedule)},
        )

    async def get_suggested_price(self, energy_amount: float, source: EnergySource) -> dict[str, Any]:
        return await self._get(
            "/market/price-suggestion",
            {"energyAmount": energy_amount, "source": source},
        )

    def subscribe_to_offers(
        self,
        callback: OfferCallback,
        *,
        source: EnergySource | None = None,
        max_price: float | None = None,
    ) -> None:
        """Call ``callback`` for new offers, optionally filtered by source and price."""
        if source is None and max_price is None:
            self.client.subscribe(OFFER, callback)
            return

        source_value = source.value if isinstance(source, EnergySource) else source

        def _filtered(offer: Any) -> None:
            if source_value is not None and offer.get("source") != source_value:
                return
            if max_price is not None and offer.get("pricePerKwh", 0) > max_price:
                return
            callback(offer)

        self._offer_listeners.append((callback, _filtered))
        self.client.subscribe(OFFER, _filtered)

    def unsubscribe_from_offers(self, callback: OfferCallback) -> None:
        for index, (registered, wrapper) in enumerate(self._offer_listeners):
            if registered == callback:
                del self._offer_listeners[index]
                self.client.unsubscribe(OFFER, wrapper)
                return
        self.client.unsubscribe(OFFER, callback)

    async def calculate_potential_earnings(self, energy_amount: float, source: EnergySource) -> dict[str, Any]:
        """Optimistic, realistic and conservative earnings from current market stats."""
        stats = await self.get_market_stats()
        key = source.value if isinstance(source, EnergySource) else source
        source_stats = (stats.get("bySource") or {}).get(key)

        if not source_stats:
            return {"optimistic": 0, "realistic": 0, "conservative": 0, "currency": "USD"}

        price_range = stats["priceRange"]
        return {
            "optimistic": energy_amount * price_range["max"],
            "realistic": energy_amount * source_stats["avgPrice"],
            "conservative": energy_amount * price_range["min"],
            "currency": "USD",
        }
