from __future__ import annotations

from typing import Any
from urllib.parse import urlencode, urlsplit

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_TIMEOUT_MS = 30000
DEFAULT_RETRIES = 3
REALTIME_PATH = "/ws"


class NetworkSettings(BaseModel):
    timeout: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    retries: int = Field(default=DEFAULT_RETRIES, ge=0)

    model_config = {"extra": "forbid", "frozen": True}


class Settings(BaseModel):
    """Connection parameters for one VOLTNET participant.

    Keys may be given in snake_case (``api_url``) or in the camelCase used by
    the VOLTNET API documentation (``apiUrl``).
    """

    api_url: str
    api_key: SecretStr
    participant_id: str = Field(min_length=1)
    network: NetworkSettings = Field(default_factory=NetworkSettings)
    enable_realtime: bool = False

    model_config = {
        "extra": "forbid",
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    @field_validator("api_url")
    @classmethod
    def _check_api_url(cls, value: str) -> str:
        parts = urlsplit(value.strip())
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            raise ValueError(f"api_url must be an http(s) URL, got: {value!r}")
        return value.strip().rstrip("/")

    @property
    def timeout_seconds(self) -> float:
        return self.network.timeout / 1000

    def realtime_url(self) -> str:
        """Socket URL for push notifications derived from ``api_url``."""
        scheme, rest = self.api_url.split("://", 1)
        ws_scheme = "wss" if scheme == "https" else "ws"
        query = urlencode({
            "apiKey": self.api_key.get_secret_value(),
            "participantId": self.participant_id,
        })
        return f"{ws_scheme}://{rest}{REALTIME_PATH}?{query}"

    def redacted(self) -> dict[str, Any]:
        data = self.model_dump(mode="json")
        data["api_key"] = "***"
        return data
