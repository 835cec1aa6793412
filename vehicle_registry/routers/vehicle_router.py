"""
Vehicle registration API router.

Exposes the registration workflows over HTTP and translates domain
errors to status codes:

- ValidationException -> 400
- VehicleNotFoundException -> 404
- VehicleConflictException -> 409
- anything else -> 500
"""

from datetime import datetime
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, ConfigDict, Field

from ..config import Settings, get_settings
from ..dependencies import get_vehicle_service
from ..domain.entities import Vehicle, VehicleColor, VehicleType
from ..domain.exceptions import (
    ValidationException,
    VehicleConflictException,
    VehicleNotFoundException,
    VehicleRegistryException,
)
from ..services.vehicle_service import VehicleRegistrationService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


# Request/Response Models
class VehicleCreateRequest(BaseModel):
    """Vehicle registration request model."""

    model_config = ConfigDict(extra="forbid")

    plate: str = Field(
        ...,
        description="License plate, ABC-1234 (legacy) or ABC1D23 (current)",
        json_schema_extra={"example": "ABC-1234"},
    )
    chassis: str = Field(
        ...,
        description="Chassis number with 17 characters",
        json_schema_extra={"example": "1HGBH41JXMN109186"},
    )
    registration_number: str = Field(
        ...,
        description="Renavam with 11 digits",
        json_schema_extra={"example": "12345678901"},
    )
    make: str = Field(..., min_length=1, json_schema_extra={"example": "Honda"})
    model: str = Field(..., min_length=1, json_schema_extra={"example": "Civic"})
    year: int = Field(..., description="Model year", json_schema_extra={"example": 2023})
    color: str = Field(..., min_length=1, json_schema_extra={"example": "BLUE"})
    type: VehicleType = Field(..., json_schema_extra={"example": "CAR"})


class VehicleUpdateRequest(BaseModel):
    """Partial update request model; only the fields sent are changed."""

    model_config = ConfigDict(extra="forbid")

    plate: Optional[str] = None
    chassis: Optional[str] = None
    registration_number: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    color: Optional[str] = None
    type: Optional[VehicleType] = None


class VehicleResponse(BaseModel):
    """Vehicle data response model."""

    id: str
    plate: str
    chassis: str
    registration_number: str
    make: str
    model: str
    year: int
    color: Optional[str] = None
    type: VehicleType
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, vehicle: Vehicle) -> "VehicleResponse":
        return cls(**vehicle.to_dict())


class ErrorResponse(BaseModel):
    """Error response model."""

    success: bool = False
    error: str
    message: str
    details: dict = {}


def _error_status(exc: VehicleRegistryException) -> tuple[int, str]:
    if isinstance(exc, ValidationException):
        return status.HTTP_400_BAD_REQUEST, "validation_error"
    if isinstance(exc, VehicleNotFoundException):
        return status.HTTP_404_NOT_FOUND, "not_found"
    if isinstance(exc, VehicleConflictException):
        return status.HTTP_409_CONFLICT, "conflict"
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error"


def _http_error(exc: VehicleRegistryException) -> HTTPException:
    """Translate a domain exception into an HTTP error."""
    status_code, error = _error_status(exc)
    if status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Vehicle operation failed", error=exc.message, details=exc.details)
        return HTTPException(
            status_code=status_code,
            detail={
                "success": False,
                "error": error,
                "message": "An unexpected error occurred",
                "details": {},
            },
        )
    return HTTPException(
        status_code=status_code,
        detail={
            "success": False,
            "error": error,
            "message": exc.message,
            "details": exc.details,
        },
    )


def _check_color(color: Optional[str], settings: Settings) -> Optional[str]:
    """Enforce the color palette when restriction is enabled."""
    if color is None or not settings.RESTRICT_COLORS:
        return color
    normalized = color.strip().upper()
    if normalized not in VehicleColor.__members__:
        raise ValidationException(
            "color",
            color,
            "Color is not in the palette",
            extra={"allowed": [c.value for c in VehicleColor]},
        )
    return normalized


@router.post(
    "",
    response_model=VehicleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid data", "model": ErrorResponse},
        409: {"description": "Vehicle already exists", "model": ErrorResponse},
    },
    summary="Register a vehicle",
)
async def create_vehicle(
    request: VehicleCreateRequest,
    service: VehicleRegistrationService = Depends(get_vehicle_service),
    settings: Settings = Depends(get_settings),
):
    """Register a new vehicle; plate, chassis and renavam must be unique."""
    try:
        data = request.model_dump()
        data["color"] = _check_color(data["color"], settings)
        vehicle = await service.create_vehicle(data)
    except VehicleRegistryException as e:
        raise _http_error(e)
    return VehicleResponse.from_entity(vehicle)


@router.get(
    "",
    response_model=List[VehicleResponse],
    summary="List vehicles",
)
async def list_vehicles(
    service: VehicleRegistrationService = Depends(get_vehicle_service),
):
    """List every registered vehicle."""
    try:
        vehicles = await service.list_vehicles()
    except VehicleRegistryException as e:
        raise _http_error(e)
    return [VehicleResponse.from_entity(vehicle) for vehicle in vehicles]


@router.get(
    "/{vehicle_id}",
    response_model=VehicleResponse,
    responses={404: {"description": "Vehicle not found", "model": ErrorResponse}},
    summary="Get vehicle by id",
)
async def get_vehicle(
    vehicle_id: str,
    service: VehicleRegistrationService = Depends(get_vehicle_service),
):
    try:
        vehicle = await service.find_vehicle(vehicle_id)
    except VehicleRegistryException as e:
        raise _http_error(e)
    return VehicleResponse.from_entity(vehicle)


@router.patch(
    "/{vehicle_id}",
    response_model=VehicleResponse,
    responses={
        400: {"description": "Invalid data", "model": ErrorResponse},
        404: {"description": "Vehicle not found", "model": ErrorResponse},
        409: {"description": "Unique field conflict", "model": ErrorResponse},
    },
    summary="Update vehicle",
)
async def update_vehicle(
    vehicle_id: str,
    request: VehicleUpdateRequest,
    service: VehicleRegistrationService = Depends(get_vehicle_service),
    settings: Settings = Depends(get_settings),
):
    """Change only the fields present in the request body."""
    try:
        changes = request.model_dump(exclude_unset=True)
        if "color" in changes:
            changes["color"] = _check_color(changes["color"], settings)
        vehicle = await service.update_vehicle(vehicle_id, changes)
    except VehicleRegistryException as e:
        raise _http_error(e)
    return VehicleResponse.from_entity(vehicle)


@router.delete(
    "/{vehicle_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Vehicle not found", "model": ErrorResponse}},
    summary="Delete vehicle",
)
async def delete_vehicle(
    vehicle_id: str,
    service: VehicleRegistrationService = Depends(get_vehicle_service),
):
    try:
        await service.delete_vehicle(vehicle_id)
    except VehicleRegistryException as e:
        raise _http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
