"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep VOLTNET_* variables from the host out of the tests."""
    import os

    for key in list(os.environ):
        if key.startswith("VOLTNET_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings_data():
    """Minimal valid client configuration."""
    return {
        "api_url": "https://api.voltnet.test",
        "api_key": "test_api_key_123456",
        "participant_id": "participant-1",
    }


@pytest.fixture
def mock_client():
    """Stand-in for VoltnetClient recording resource calls."""
    client = MagicMock()
    client.request = AsyncMock(return_value={})
    client.subscribe = MagicMock()
    client.unsubscribe = MagicMock()
    return client


@pytest.fixture
def sample_measurement():
    """Sample measurement response data."""
    return {
        "deviceId": "meter-1",
        "timestamp": "2024-05-01T12:00:00.000Z",
        "energy": 1.5,
        "power": 3.2,
        "source": "solar",
    }


@pytest.fixture
def sample_price():
    """Sample price response data."""
    return {
        "pricePerKwh": 0.12,
        "currency": "USD",
        "model": "dynamic",
        "validFrom": "2024-05-01T12:00:00.000Z",
        "source": "solar",
    }


@pytest.fixture
def sample_offer():
    """Sample market offer response data."""
    return {
        "id": "offer-1",
        "sellerId": "participant-2",
        "energyAvailable": 25.0,
        "pricePerKwh": 0.11,
        "currency": "USD",
        "source": "wind",
        "createdAt": "2024-05-01T10:00:00.000Z",
        "expiresAt": "2024-05-02T10:00:00.000Z",
        "status": "active",
    }


@pytest.fixture
def sample_transaction():
    """Sample transaction response data."""
    return {
        "id": "tx-1",
        "sellerId": "participant-1",
        "buyerId": "participant-2",
        "energy": 10.0,
        "pricePerKwh": 0.12,
        "totalCost": 1.2,
        "currency": "USD",
        "timestamp": "2024-05-01T12:00:00.000Z",
        "source": "solar",
        "status": "completed",
    }


@pytest.fixture
def sample_balance():
    """Sample balance response data."""
    return {
        "participantId": "participant-1",
        "available": 125.5,
        "pending": 4.25,
        "currency": "USD",
        "lastUpdated": "2024-05-01T12:00:00.000Z",
    }
