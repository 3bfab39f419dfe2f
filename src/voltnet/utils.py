"""Unit conversion, formatting and validation helpers."""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

EARTH_RADIUS_KM = 6371.0

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "RUB": "₽",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
}

# kg CO2 per kWh
EMISSION_FACTORS = {
    "solar": 0.05,
    "wind": 0.02,
    "hydro": 0.024,
    "grid": 0.5,  # average grid mix
    "battery": 0.0,  # depends on the charging source
    "other": 0.5,
}
DEFAULT_EMISSION_FACTOR = 0.5

_ENERGY_RE = re.compile(r"^([\d.]+)\s*(Wh|kWh|MWh|GWh)$", re.IGNORECASE)
_ENERGY_UNITS_KWH = {"wh": 1e-3, "kwh": 1.0, "mwh": 1e3, "gwh": 1e6}


def watts_to_kw(watts: float) -> float:
    return watts / 1000


def kw_to_watts(kw: float) -> float:
    return kw * 1000


def calculate_energy(power_kw: float, hours: float) -> float:
    """Energy in kWh delivered at ``power_kw`` for ``hours``."""
    return power_kw * hours


def calculate_power(energy_kwh: float, hours: float) -> float:
    """Average power in kW; 0 for a zero-length period."""
    if hours == 0:
        return 0.0
    return energy_kwh / hours


def format_energy(kwh: float, decimals: int = 2) -> str:
    if kwh < 1:
        return f"{kwh * 1000:.{decimals}f} Wh"
    if kwh < 1000:
        return f"{kwh:.{decimals}f} kWh"
    return f"{kwh / 1000:.{decimals}f} MWh"


def format_power(kw: float, decimals: int = 2) -> str:
    if kw < 1:
        return f"{kw * 1000:.{decimals}f} W"
    if kw < 1000:
        return f"{kw:.{decimals}f} kW"
    return f"{kw / 1000:.{decimals}f} MW"


def format_currency(amount: float, currency: str = "USD", decimals: int = 2) -> str:
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    return f"{symbol}{amount:.{decimals}f}"


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in km (haversine)."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def is_within_radius(
    point: tuple[float, float],
    center: tuple[float, float],
    radius_km: float,
) -> bool:
    """Whether ``point`` (lat, lon) lies within ``radius_km`` of ``center``."""
    return calculate_distance(point[0], point[1], center[0], center[1]) <= radius_km


def _parse_timestamp(timestamp: str) -> datetime:
    if timestamp.endswith("Z"):
        timestamp = timestamp[:-1] + "+00:00"
    return datetime.fromisoformat(timestamp)


def is_valid_timestamp(timestamp: Any) -> bool:
    if not isinstance(timestamp, str) or not timestamp:
        return False
    try:
        _parse_timestamp(timestamp)
    except ValueError:
        return False
    return True


def current_timestamp() -> str:
    """Current UTC time as ISO 8601 with millisecond precision and ``Z`` suffix."""
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return now.replace("+00:00", "Z")


def hours_between(start: str, end: str) -> float:
    delta = _parse_timestamp(end) - _parse_timestamp(start)
    return delta.total_seconds() / 3600


def parse_energy(value: str) -> float:
    """Parse ``"10 kWh"``, ``"500 Wh"`` etc. into kWh."""
    match = _ENERGY_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid energy format: {value}")
    amount, unit = match.groups()
    return float(amount) * _ENERGY_UNITS_KWH[unit.lower()]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_measurement(measurement: Mapping[str, Any]) -> list[str]:
    """Problems found in a raw measurement mapping; empty when valid."""
    errors: list[str] = []

    if not measurement.get("deviceId"):
        errors.append("deviceId is required")

    if not is_valid_timestamp(measurement.get("timestamp")):
        errors.append("valid timestamp is required")

    energy = measurement.get("energy")
    if not _is_number(energy) or energy < 0:
        errors.append("energy must be a non-negative number")

    power = measurement.get("power")
    if power is not None and (not _is_number(power) or power < 0):
        errors.append("power must be a non-negative number")

    if not measurement.get("source"):
        errors.append("source is required")

    return errors


def calculate_co2(energy_kwh: float, source: str) -> float:
    """CO2 emitted in kg for ``energy_kwh`` from ``source``."""
    key = source.value if isinstance(source, Enum) else str(source)
    factor = EMISSION_FACTORS.get(key.lower(), DEFAULT_EMISSION_FACTOR)
    return energy_kwh * factor


def calculate_green_savings(energy_kwh: float) -> float:
    """kg CO2 saved by using solar instead of grid energy."""
    return calculate_co2(energy_kwh, "grid") - calculate_co2(energy_kwh, "solar")
