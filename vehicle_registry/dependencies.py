"""
Shared dependencies for the application.

Provides dependency injection functions used across routers.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .services.vehicle_service import VehicleRegistrationService

# Global service instance (set by main app)
_vehicle_service: Optional["VehicleRegistrationService"] = None


def set_vehicle_service(service: Optional["VehicleRegistrationService"]) -> None:
    """
    Set the global vehicle service instance.

    Called by main app during startup and cleared on shutdown.
    """
    global _vehicle_service
    _vehicle_service = service


async def get_vehicle_service() -> "VehicleRegistrationService":
    """
    Get vehicle service instance for dependency injection.

    Used by all routers that need the registration workflows.
    """
    if _vehicle_service is None:
        raise RuntimeError("Vehicle service not initialized")
    return _vehicle_service
