"""voltnet: client SDK for the VOLTNET energy trading network."""

from .client import VoltnetClient
from .di import VoltnetSDK, create_client
from .models import (
    Balance,
    EnergyMeasurement,
    EnergySource,
    EnergyTransaction,
    MarketOffer,
    Participant,
    ParticipantType,
    PriceInfo,
    PricingModel,
    TransactionStatus,
)
from .resources import EnergyMeter, P2PMarket, PricingEngine, TransactionManager
from .settings import Settings
from .transport import ApiError, ChannelError, VoltnetError

__version__ = "1.0.0"

__all__ = [
    "ApiError",
    "Balance",
    "ChannelError",
    "EnergyMeasurement",
    "EnergyMeter",
    "EnergySource",
    "EnergyTransaction",
    "MarketOffer",
    "P2PMarket",
    "Participant",
    "ParticipantType",
    "PriceInfo",
    "PricingEngine",
    "PricingModel",
    "Settings",
    "TransactionManager",
    "TransactionStatus",
    "VoltnetClient",
    "VoltnetError",
    "VoltnetSDK",
    "create_client",
]
