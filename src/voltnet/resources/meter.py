"""Energy measurement submission and device management."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Mapping

from ..models import DeviceRegistration, EnergyMeasurement, EnergySource
from .base import Resource, to_body

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sig_"


def _signing_payload(measurement: EnergyMeasurement) -> str:
    fields: dict[str, Any] = {
        "deviceId": measurement.device_id,
        "timestamp": measurement.timestamp,
        "energy": measurement.energy,
    }
    if measurement.power is not None:
        fields["power"] = measurement.power
    return json.dumps(fields, separators=(",", ":"))


class EnergyMeter(Resource):
    """Meter readings and IoT device registry."""

    async def submit_measurement(self, measurement: EnergyMeasurement) -> EnergyMeasurement:
        data = await self._post("/measurements", measurement)
        return self._parse(EnergyMeasurement, data)

    async def submit_batch(self, measurements: list[EnergyMeasurement]) -> dict[str, Any]:
        """Submit several readings at once; returns ``{"success": ..., "count": ...}``."""
        return await self._post("/measurements/batch", {"measurements": to_body(list(measurements))})

    async def get_measurements(self, device_id: str, start: str, end: str) -> list[EnergyMeasurement]:
        data = await self._get("/measurements", {"deviceId": device_id, "from": start, "to": end})
        return self._parse_list(EnergyMeasurement, data)

    async def get_latest_measurement(self, device_id: str) -> EnergyMeasurement:
        data = await self._get(f"/measurements/{device_id}/latest")
        return self._parse(EnergyMeasurement, data)

    async def register_device(self, device: DeviceRegistration) -> DeviceRegistration:
        data = await self._post("/devices", device)
        return self._parse(DeviceRegistration, data)

    async def get_device(self, device_id: str) -> DeviceRegistration:
        data = await self._get(f"/devices/{device_id}")
        return self._parse(DeviceRegistration, data)

    async def get_devices(self) -> list[DeviceRegistration]:
        data = await self._get("/devices")
        return self._parse_list(DeviceRegistration, data)

    async def update_device(self, device_id: str, updates: Mapping[str, Any]) -> DeviceRegistration:
        data = await self._patch(f"/devices/{device_id}", dict(updates))
        return self._parse(DeviceRegistration, data)

    async def delete_device(self, device_id: str) -> dict[str, Any]:
        return await self._delete(f"/devices/{device_id}")

    async def calculate_energy_total(self, device_id: str, start: str, end: str) -> dict[str, Any]:
        """Total kWh metered by a device over a period, with the first reading's source."""
        measurements = await self.get_measurements(device_id, start, end)
        total = sum(m.energy for m in measurements)
        source = measurements[0].source if measurements else EnergySource.OTHER
        return {"total": total, "source": source}

    async def get_current_power(self, device_id: str) -> float:
        latest = await self.get_latest_measurement(device_id)
        return latest.power or 0.0

    def sign_measurement(self, measurement: EnergyMeasurement, private_key: str) -> EnergyMeasurement:
        """Attach a placeholder signature.

        Not cryptographic: the signature is the base64 encoding of the signed
        fields and ``private_key`` is not used. Real signing belongs to the
        device firmware or the backend.
        """
        encoded = base64.b64encode(_signing_payload(measurement).encode()).decode()
        return measurement.model_copy(update={"signature": f"{SIGNATURE_PREFIX}{encoded}"})

    def verify_signature(self, measurement: EnergyMeasurement, public_key: str) -> bool:
        """Check a placeholder signature produced by ``sign_measurement``.

        ``public_key`` is not used by the placeholder scheme.
        """
        if not measurement.signature:
            return False
        expected = self.sign_measurement(measurement, "").signature
        if measurement.signature != expected:
            logger.debug("signature mismatch for device %s", measurement.device_id)
            return False
        return True
