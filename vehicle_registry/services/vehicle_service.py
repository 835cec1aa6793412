"""
Business logic service layer.

Orchestrates vehicle registration workflows: entity validation against
the repository, with plate, chassis and renavam kept unique across all
registered vehicles.
"""

import asyncio
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Mapping, Optional

import structlog

from ..domain.entities import UNIQUE_FIELDS, UPDATABLE_FIELDS, Clock, Vehicle, utc_now
from ..domain.exceptions import (
    ValidationException,
    VehicleConflictException,
    VehicleNotFoundException,
)
from ..metrics import record_operation, registered_vehicles
from ..repositories.vehicle_repository import IVehicleRepository

logger = structlog.get_logger(__name__)

# Ids are always generated, never taken from the caller
CREATE_FIELDS = UPDATABLE_FIELDS

_OUTCOMES = (
    (ValidationException, "validation_error"),
    (VehicleNotFoundException, "not_found"),
    (VehicleConflictException, "conflict"),
)


@contextmanager
def _track(operation: str) -> Iterator[None]:
    """Record the outcome of one workflow call."""
    try:
        yield
    except Exception as e:
        outcome = next(
            (name for exc_type, name in _OUTCOMES if isinstance(e, exc_type)), "error"
        )
        record_operation(operation, outcome)
        raise
    else:
        record_operation(operation, "success")


class VehicleRegistrationService:
    """
    Vehicle registration workflows.

    Create, update and delete hold a write lock across their
    check-then-act sequence, so two concurrent registrations cannot both
    pass the uniqueness check for the same plate, chassis or renavam.
    """

    def __init__(self, repository: IVehicleRepository, clock: Clock = utc_now):
        """
        Initialize registration service.

        Args:
            repository: Vehicle repository
            clock: Time source for timestamps and the model-year bound
        """
        self.repository = repository
        self.clock = clock
        self._write_lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    async def create_vehicle(self, data: Mapping[str, Any]) -> Vehicle:
        """
        Register a new vehicle.

        Uniqueness is checked first (plate, then chassis, then renavam),
        then the entity is built, which validates field formats.

        Args:
            data: Vehicle fields

        Returns:
            The registered vehicle with its generated id

        Raises:
            VehicleConflictException: If plate, chassis or renavam is taken
            ValidationException: If a field is invalid or unknown
            StorageException: If the repository rejects the write
        """
        with _track("create"):
            self._reject_unknown_fields(data, CREATE_FIELDS)
            async with self._lock():
                await self._ensure_unique(data)
                vehicle = Vehicle(
                    **{name: data.get(name) for name in CREATE_FIELDS},
                    clock=self.clock,
                )
                saved = await self.repository.save(vehicle)

        await self._refresh_gauge()
        logger.info("Vehicle registered", vehicle_id=saved.id, plate=saved.plate)
        return saved

    async def update_vehicle(
        self, vehicle_id: str, changes: Mapping[str, Any]
    ) -> Vehicle:
        """
        Apply a partial update to a registered vehicle.

        A vehicle may resupply its own plate, chassis or renavam; only a
        match on a different vehicle is a conflict.

        Args:
            vehicle_id: Id of the vehicle to update
            changes: Fields to change

        Returns:
            The updated vehicle

        Raises:
            VehicleNotFoundException: If the id is not registered
            VehicleConflictException: If a unique field belongs to another vehicle
            ValidationException: If a changed field is invalid
        """
        with _track("update"):
            async with self._lock():
                existing = await self.repository.find_by_id(vehicle_id)
                if existing is None:
                    raise VehicleNotFoundException(vehicle_id)

                await self._ensure_unique(changes, current_id=vehicle_id)
                updated = existing.update(changes)
                stored = await self.repository.update(vehicle_id, updated)

        logger.info(
            "Vehicle updated", vehicle_id=vehicle_id, fields=sorted(changes)
        )
        return stored

    async def find_vehicle(self, vehicle_id: str) -> Vehicle:
        """
        Get one vehicle.

        Raises:
            VehicleNotFoundException: If the id is not registered
        """
        with _track("find"):
            vehicle = await self.repository.find_by_id(vehicle_id)
            if vehicle is None:
                logger.info("Vehicle not found", vehicle_id=vehicle_id)
                raise VehicleNotFoundException(vehicle_id)
        return vehicle

    async def list_vehicles(self) -> List[Vehicle]:
        """Get every registered vehicle; an empty list is a valid result."""
        with _track("list"):
            vehicles = await self.repository.find_all()
        logger.debug("Vehicles listed", count=len(vehicles))
        return vehicles

    async def delete_vehicle(self, vehicle_id: str) -> None:
        """
        Remove a registered vehicle.

        Raises:
            VehicleNotFoundException: If the id is not registered
        """
        with _track("delete"):
            async with self._lock():
                existing = await self.repository.find_by_id(vehicle_id)
                if existing is None:
                    raise VehicleNotFoundException(vehicle_id)
                await self.repository.delete(vehicle_id)

        await self._refresh_gauge()
        logger.info("Vehicle deleted", vehicle_id=vehicle_id)

    async def _ensure_unique(
        self, data: Mapping[str, Any], current_id: Optional[str] = None
    ) -> None:
        """
        Check plate, chassis and renavam against other vehicles, in that order.

        Args:
            data: Candidate field values; absent fields are skipped
            current_id: Id of the vehicle being updated, whose own values
                do not count as conflicts
        """
        lookups = {
            "plate": self.repository.find_by_plate,
            "chassis": self.repository.find_by_chassis,
            "registration_number": self.repository.find_by_registration_number,
        }
        for field in UNIQUE_FIELDS:
            value = data.get(field)
            if value is None:
                continue
            match = await lookups[field](value)
            if match is not None and match.id != current_id:
                logger.warning(
                    "Uniqueness conflict",
                    field=field,
                    value=value,
                    existing_id=match.id,
                )
                raise VehicleConflictException(field, value)

    @staticmethod
    def _reject_unknown_fields(data: Mapping[str, Any], allowed: tuple) -> None:
        for name in data:
            if name not in allowed:
                raise ValidationException(name, data[name], "Unknown field")

    def _lock(self) -> asyncio.Lock:
        """Write lock for the running event loop, created on first use."""
        loop = asyncio.get_running_loop()
        if self._write_lock is None or self._lock_loop is not loop:
            self._write_lock = asyncio.Lock()
            self._lock_loop = loop
        return self._write_lock

    async def _refresh_gauge(self) -> None:
        """Best-effort gauge update; the write it follows has already committed."""
        try:
            registered_vehicles.set(await self.repository.count())
        except Exception as e:
            logger.warning("Failed to refresh vehicle gauge", error=str(e))

    def describe(self) -> Dict[str, Any]:
        """Service wiring summary for the readiness probe."""
        return {
            "repository": type(self.repository).__name__,
        }
