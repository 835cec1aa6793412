"""
Vehicle repository interface (Abstract Base Class).

Defines the contract for vehicle persistence and retrieval
independent of the underlying storage mechanism.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..domain.entities import Vehicle


class IVehicleRepository(ABC):
    """
    Abstract repository interface for vehicle data operations.

    The repository is a plain keyed container: it enforces no uniqueness
    rules. Uniqueness of plate, chassis and renavam is a policy of the
    registration service, which uses the lookup methods below.
    """

    @abstractmethod
    async def save(self, vehicle: Vehicle) -> Vehicle:
        """
        Insert a vehicle under its id.

        Args:
            vehicle: Vehicle entity to persist

        Returns:
            The saved vehicle entity
        """
        pass

    @abstractmethod
    async def find_by_id(self, vehicle_id: str) -> Optional[Vehicle]:
        """
        Find vehicle by id.

        Args:
            vehicle_id: Vehicle identifier

        Returns:
            Vehicle entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_plate(self, plate: str) -> Optional[Vehicle]:
        """
        Find vehicle by exact plate match.

        Args:
            plate: License plate, compared as given

        Returns:
            First matching vehicle, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_chassis(self, chassis: str) -> Optional[Vehicle]:
        """
        Find vehicle by exact chassis match.

        Args:
            chassis: Chassis number, compared as given

        Returns:
            First matching vehicle, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_registration_number(
        self, registration_number: str
    ) -> Optional[Vehicle]:
        """
        Find vehicle by exact renavam match.

        Args:
            registration_number: National registration number

        Returns:
            First matching vehicle, None otherwise
        """
        pass

    @abstractmethod
    async def find_all(self) -> List[Vehicle]:
        """
        Get all vehicles.

        Returns:
            List of vehicles, order unspecified
        """
        pass

    @abstractmethod
    async def update(self, vehicle_id: str, vehicle: Vehicle) -> Vehicle:
        """
        Replace the stored value for an existing id.

        Args:
            vehicle_id: Id of the stored vehicle
            vehicle: Replacement entity

        Returns:
            The stored vehicle entity

        Raises:
            VehicleNotFoundException: If the id is absent
        """
        pass

    @abstractmethod
    async def delete(self, vehicle_id: str) -> None:
        """
        Remove an existing vehicle.

        Args:
            vehicle_id: Id of the stored vehicle

        Raises:
            VehicleNotFoundException: If the id is absent
        """
        pass

    @abstractmethod
    async def exists(self, vehicle_id: str) -> bool:
        """Check whether a vehicle id is present."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of stored vehicles."""
        pass
