"""
Test configuration and fixtures
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from vehicle_registry.app import app
from vehicle_registry.repositories.memory_repository import InMemoryVehicleRepository
from vehicle_registry.services.vehicle_service import VehicleRegistrationService

FIXED_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class TickingClock:
    """Clock that advances one second every time it is read."""

    def __init__(self, start: datetime = FIXED_NOW):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
def fixed_clock():
    """Clock frozen at 2024-06-15 12:00 UTC."""
    return lambda: FIXED_NOW


@pytest.fixture
def ticking_clock():
    return TickingClock()


@pytest.fixture
def vehicle_data():
    """Valid vehicle fields (the Honda Civic used across tests)."""
    return {
        "plate": "ABC-1234",
        "chassis": "1HGBH41JXMN109186",
        "registration_number": "12345678901",
        "make": "Honda",
        "model": "Civic",
        "year": 2023,
        "color": "BLUE",
        "type": "CAR",
    }


@pytest.fixture
def other_vehicle_data():
    """Valid vehicle fields that collide with nothing in vehicle_data."""
    return {
        "plate": "XYZ1A23",
        "chassis": "9BWZZZ377VT004251",
        "registration_number": "98765432109",
        "make": "Volkswagen",
        "model": "Gol",
        "year": 2020,
        "color": "WHITE",
        "type": "CAR",
    }


@pytest.fixture
def memory_repo():
    return InMemoryVehicleRepository()


@pytest.fixture
def vehicle_service(memory_repo, ticking_clock):
    """Registration service over a fresh in-memory repository."""
    return VehicleRegistrationService(memory_repo, clock=ticking_clock)


@pytest.fixture
def client():
    """Test client running the app lifespan (fresh in-memory repository)."""
    with TestClient(app) as test_client:
        yield test_client
