"""
Custom exceptions for the vehicle registry domain.

These exceptions represent domain-level errors and are independent
of infrastructure concerns (HTTP, database, etc.).
"""

from typing import Any, Optional


class VehicleRegistryException(Exception):
    """Base exception for all vehicle registry errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(VehicleRegistryException):
    """Raised when a vehicle field fails its format or range rule."""

    def __init__(
        self, field: str, value: Any, reason: str, extra: Optional[dict] = None
    ):
        self.field = field
        self.reason = reason
        message = f"Validation failed for {field}: {reason}"
        details = {"field": field, "value": str(value), "reason": reason}
        if extra:
            details.update(extra)
        super().__init__(message=message, details=details)


class VehicleNotFoundException(VehicleRegistryException):
    """Raised when a vehicle id is absent from the repository."""

    def __init__(self, vehicle_id: str):
        self.vehicle_id = vehicle_id
        super().__init__(
            message=f"Vehicle with id {vehicle_id} not found",
            details={"id": vehicle_id},
        )


class VehicleConflictException(VehicleRegistryException):
    """Raised when plate, chassis or renavam collides with another vehicle."""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(
            message=f"Vehicle with {field} {value} already exists",
            details={"field": field, "value": value},
        )


class StorageException(VehicleRegistryException):
    """Raised when the underlying storage fails."""

    def __init__(self, operation: str, reason: Optional[str] = None):
        message = f"Storage {operation} failed"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message, details={"operation": operation, "reason": reason}
        )
