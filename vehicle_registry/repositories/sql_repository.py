"""
SQL implementation of vehicle repository.

Persists vehicles through SQLAlchemy, one row per vehicle keyed by id.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..domain.entities import Clock, Vehicle, utc_now
from ..domain.exceptions import StorageException, VehicleNotFoundException
from ..models import VehicleRecord
from .vehicle_repository import IVehicleRepository

logger = structlog.get_logger(__name__)


class SqlVehicleRepository(IVehicleRepository):
    """SQLAlchemy implementation for vehicle persistence."""

    def __init__(self, session_factory: sessionmaker, clock: Clock = utc_now):
        """
        Initialize repository.

        Args:
            session_factory: Factory producing SQLAlchemy sessions
            clock: Time source handed to entities rebuilt from rows
        """
        self.session_factory = session_factory
        self.clock = clock

    @contextmanager
    def _session_scope(self, operation: str) -> Iterator[Session]:
        """Run one unit of work; driver errors become StorageException."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Database operation failed", operation=operation, error=str(e))
            raise StorageException(operation, str(e)) from e
        finally:
            session.close()

    async def save(self, vehicle: Vehicle) -> Vehicle:
        with self._session_scope("save") as session:
            session.add(self._to_record(vehicle))
        return vehicle

    async def find_by_id(self, vehicle_id: str) -> Optional[Vehicle]:
        with self._session_scope("find_by_id") as session:
            record = session.get(VehicleRecord, vehicle_id)
            return self._map_to_entity(record) if record else None

    async def find_by_plate(self, plate: str) -> Optional[Vehicle]:
        return self._find_first("find_by_plate", VehicleRecord.plate == plate)

    async def find_by_chassis(self, chassis: str) -> Optional[Vehicle]:
        return self._find_first("find_by_chassis", VehicleRecord.chassis == chassis)

    async def find_by_registration_number(
        self, registration_number: str
    ) -> Optional[Vehicle]:
        return self._find_first(
            "find_by_registration_number",
            VehicleRecord.registration_number == registration_number,
        )

    async def find_all(self) -> List[Vehicle]:
        with self._session_scope("find_all") as session:
            records = (
                session.query(VehicleRecord)
                .order_by(VehicleRecord.created_at, VehicleRecord.id)
                .all()
            )
            return [self._map_to_entity(record) for record in records]

    async def update(self, vehicle_id: str, vehicle: Vehicle) -> Vehicle:
        with self._session_scope("update") as session:
            record = session.get(VehicleRecord, vehicle_id)
            if record is None:
                raise VehicleNotFoundException(vehicle_id)
            self._copy_onto(record, vehicle)
        return vehicle

    async def delete(self, vehicle_id: str) -> None:
        with self._session_scope("delete") as session:
            record = session.get(VehicleRecord, vehicle_id)
            if record is None:
                raise VehicleNotFoundException(vehicle_id)
            session.delete(record)

    async def exists(self, vehicle_id: str) -> bool:
        with self._session_scope("exists") as session:
            return session.get(VehicleRecord, vehicle_id) is not None

    async def count(self) -> int:
        with self._session_scope("count") as session:
            return session.query(VehicleRecord).count()

    def _find_first(self, operation: str, criterion) -> Optional[Vehicle]:
        with self._session_scope(operation) as session:
            record = session.query(VehicleRecord).filter(criterion).first()
            return self._map_to_entity(record) if record else None

    def _to_record(self, vehicle: Vehicle) -> VehicleRecord:
        record = VehicleRecord(id=vehicle.id)
        self._copy_onto(record, vehicle)
        return record

    @staticmethod
    def _copy_onto(record: VehicleRecord, vehicle: Vehicle) -> None:
        record.plate = vehicle.plate
        record.chassis = vehicle.chassis
        record.registration_number = vehicle.registration_number
        record.make = vehicle.make
        record.model = vehicle.model
        record.year = vehicle.year
        record.color = vehicle.color
        record.type = vehicle.type.value
        record.created_at = vehicle.created_at
        record.updated_at = vehicle.updated_at

    def _map_to_entity(self, record: VehicleRecord) -> Vehicle:
        """Map database row to domain entity."""
        return Vehicle(
            id=record.id,
            plate=record.plate,
            chassis=record.chassis,
            registration_number=record.registration_number,
            make=record.make,
            model=record.model,
            year=record.year,
            color=record.color,
            type=record.type,
            created_at=record.created_at,
            updated_at=record.updated_at,
            clock=self.clock,
        )
