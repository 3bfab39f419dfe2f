"""Typed VOLTNET API resources.

Models map the API's camelCase JSON onto snake_case attributes and keep any
fields the SDK does not know about, so newer API responses still parse.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class EnergySource(str, Enum):
    SOLAR = "solar"
    WIND = "wind"
    GRID = "grid"
    HYDRO = "hydro"
    BATTERY = "battery"
    OTHER = "other"


class ParticipantType(str, Enum):
    CONSUMER = "consumer"
    PRODUCER = "producer"
    PROSUMER = "prosumer"  # both consumer and producer
    CHARGING_STATION = "charging_station"
    BATTERY_STORAGE = "battery_storage"
    GRID_OPERATOR = "grid_operator"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class PricingModel(str, Enum):
    FIXED = "fixed"
    DYNAMIC = "dynamic"
    TIME_OF_USE = "time_of_use"
    REAL_TIME = "real_time"


class ApiModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "allow",
    }

    def to_api(self) -> dict[str, Any]:
        """Request body form: camelCase keys, unset optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class GeoLocation(ApiModel):
    latitude: float
    longitude: float
    address: Optional[str] = None
    radius: Optional[float] = None  # km, offers only


class EnergyMeasurement(ApiModel):
    """A metered energy reading.

    ``energy`` is in kWh, ``power`` in kW, ``voltage`` in V, ``current`` in A.
    """

    device_id: str
    timestamp: str
    energy: float
    source: EnergySource
    power: Optional[float] = None
    voltage: Optional[float] = None
    current: Optional[float] = None
    signature: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class Participant(ApiModel):
    id: str
    type: ParticipantType
    wallet_address: str
    name: Optional[str] = None
    location: Optional[GeoLocation] = None
    devices: Optional[list[str]] = None
    metadata: Optional[dict[str, Any]] = None


class PriceFactors(ApiModel):
    time_of_day: Optional[float] = None
    demand_load: Optional[float] = None
    green_energy: Optional[float] = None


class PriceInfo(ApiModel):
    price_per_kwh: float
    currency: str
    model: PricingModel
    valid_from: str
    valid_until: Optional[str] = None
    source: Optional[EnergySource] = None
    factors: Optional[PriceFactors] = None


class SettlementRef(ApiModel):
    settlement_id: str
    settlement_time: Optional[str] = None
    tx_hash: Optional[str] = None


class EnergyTransaction(ApiModel):
    id: str
    seller_id: str
    buyer_id: str
    energy: float
    price_per_kwh: float
    total_cost: float
    currency: str
    timestamp: str
    source: EnergySource
    status: TransactionStatus
    settlement: Optional[SettlementRef] = None
    metadata: Optional[dict[str, Any]] = None


class Settlement(ApiModel):
    id: str
    participants: list[str]
    transactions: list[str]
    total_amount: float
    currency: str
    timestamp: str
    status: Literal["pending", "completed", "failed"]
    tx_hash: Optional[str] = None


class MarketOffer(ApiModel):
    id: str
    seller_id: str
    energy_available: float
    price_per_kwh: float
    currency: str
    source: EnergySource
    created_at: str
    expires_at: str
    status: Literal["active", "fulfilled", "expired", "cancelled"]
    location: Optional[GeoLocation] = None
    metadata: Optional[dict[str, Any]] = None


class DeviceCapabilities(ApiModel):
    can_produce: bool
    can_consume: bool
    max_power: Optional[float] = None  # kW
    max_energy: Optional[float] = None  # kWh, batteries


class DeviceRegistration(ApiModel):
    device_id: str
    type: Literal["meter", "charger", "solar_panel", "battery", "other"]
    owner_id: str
    capabilities: DeviceCapabilities
    location: Optional[GeoLocation] = None
    public_key: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class Balance(ApiModel):
    participant_id: str
    available: float
    pending: float
    currency: str
    last_updated: str
    energy_credit: Optional[float] = None


class StatisticsPeriod(BaseModel):
    from_: str = Field(alias="from")
    to: str

    model_config = {"populate_by_name": True}


class Statistics(ApiModel):
    participant_id: str
    period: StatisticsPeriod
    total_consumed: float
    total_produced: float
    total_spent: float
    total_earned: float
    currency: str
    avg_price_paid: Optional[float] = None
    avg_price_received: Optional[float] = None
    source_breakdown: Optional[dict[str, float]] = None
