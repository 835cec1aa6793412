"""
In-memory implementation of vehicle repository.

Keeps vehicles in a dictionary keyed by id. All access goes through a
re-entrant lock so the repository can be shared by worker threads.
"""

import threading
from typing import Callable, Dict, List, Optional

import structlog

from ..domain.entities import Vehicle
from ..domain.exceptions import VehicleNotFoundException
from .vehicle_repository import IVehicleRepository

logger = structlog.get_logger(__name__)


class InMemoryVehicleRepository(IVehicleRepository):
    """Dictionary-backed vehicle repository."""

    def __init__(self):
        self._vehicles: Dict[str, Vehicle] = {}
        self._lock = threading.RLock()

    async def save(self, vehicle: Vehicle) -> Vehicle:
        with self._lock:
            self._vehicles[vehicle.id] = vehicle
        logger.debug("Vehicle stored", vehicle_id=vehicle.id)
        return vehicle

    async def find_by_id(self, vehicle_id: str) -> Optional[Vehicle]:
        with self._lock:
            return self._vehicles.get(vehicle_id)

    async def find_by_plate(self, plate: str) -> Optional[Vehicle]:
        return self._find_first(lambda v: v.plate == plate)

    async def find_by_chassis(self, chassis: str) -> Optional[Vehicle]:
        return self._find_first(lambda v: v.chassis == chassis)

    async def find_by_registration_number(
        self, registration_number: str
    ) -> Optional[Vehicle]:
        return self._find_first(
            lambda v: v.registration_number == registration_number
        )

    async def find_all(self) -> List[Vehicle]:
        with self._lock:
            return list(self._vehicles.values())

    async def update(self, vehicle_id: str, vehicle: Vehicle) -> Vehicle:
        with self._lock:
            if vehicle_id not in self._vehicles:
                raise VehicleNotFoundException(vehicle_id)
            self._vehicles[vehicle_id] = vehicle
        logger.debug("Vehicle replaced", vehicle_id=vehicle_id)
        return vehicle

    async def delete(self, vehicle_id: str) -> None:
        with self._lock:
            if vehicle_id not in self._vehicles:
                raise VehicleNotFoundException(vehicle_id)
            del self._vehicles[vehicle_id]
        logger.debug("Vehicle removed", vehicle_id=vehicle_id)

    async def exists(self, vehicle_id: str) -> bool:
        with self._lock:
            return vehicle_id in self._vehicles

    async def count(self) -> int:
        return len(self)

    def clear(self) -> None:
        """Remove every vehicle."""
        with self._lock:
            self._vehicles.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._vehicles)

    def _find_first(self, predicate: Callable[[Vehicle], bool]) -> Optional[Vehicle]:
        with self._lock:
            for vehicle in self._vehicles.values():
                if predicate(vehicle):
                    return vehicle
        return None
