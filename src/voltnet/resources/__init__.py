"""API resource modules built on the client transport."""

from .base import Resource
from .market import P2PMarket
from .meter import EnergyMeter
from .pricing import PricingEngine
from .transactions import TransactionManager

__all__ = [
    "Resource",
    "P2PMarket",
    "EnergyMeter",
    "PricingEngine",
    "TransactionManager",
]
