"""
Domain entities for vehicle registration.

Core business objects representing registered vehicles.
These entities are framework-agnostic and contain only business logic.
"""

import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from .exceptions import ValidationException

Clock = Callable[[], datetime]

# Earliest motor-vehicle year; the upper bound is next year
MIN_VEHICLE_YEAR = 1886
CHASSIS_LENGTH = 17
REGISTRATION_NUMBER_LENGTH = 11

UNIQUE_FIELDS = ("plate", "chassis", "registration_number")
UPDATABLE_FIELDS = (
    "plate",
    "chassis",
    "registration_number",
    "make",
    "model",
    "year",
    "color",
    "type",
)


def utc_now() -> datetime:
    """Default clock: current time in UTC."""
    return datetime.now(timezone.utc)


class VehicleType(str, Enum):
    """Supported vehicle categories."""

    CAR = "CAR"
    MOTORCYCLE = "MOTORCYCLE"
    TRUCK = "TRUCK"


class VehicleColor(str, Enum):
    """Palette accepted when color restriction is enabled."""

    WHITE = "WHITE"
    BLACK = "BLACK"
    SILVER = "SILVER"
    GRAY = "GRAY"
    RED = "RED"
    BLUE = "BLUE"
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    ORANGE = "ORANGE"
    PURPLE = "PURPLE"
    BROWN = "BROWN"
    PINK = "PINK"


class PlateFormat(str, Enum):
    """National license plate layouts."""

    LEGACY = "legacy"
    CURRENT = "current"


PLATE_PATTERNS = {
    PlateFormat.LEGACY: re.compile(r"[A-Z]{3}-[0-9]{4}"),
    PlateFormat.CURRENT: re.compile(r"[A-Z]{3}[0-9][A-Z][0-9]{2}"),
}
REGISTRATION_NUMBER_PATTERN = re.compile(r"[0-9]{%d}" % REGISTRATION_NUMBER_LENGTH)


def plate_format(plate: Any) -> Optional[PlateFormat]:
    """
    Detect which plate layout a value follows.

    Args:
        plate: Candidate plate (e.g. ``ABC-1234`` or ``ABC1D23``)

    Returns:
        The matching PlateFormat, or None if the value is not a valid plate
    """
    if not isinstance(plate, str):
        return None
    for fmt, pattern in PLATE_PATTERNS.items():
        if pattern.fullmatch(plate):
            return fmt
    return None


def is_valid_plate(plate: Any) -> bool:
    return plate_format(plate) is not None


def _validate_plate(plate: Any) -> None:
    if not is_valid_plate(plate):
        raise ValidationException("plate", plate, "Invalid plate format")


def _validate_chassis(chassis: Any) -> None:
    if not isinstance(chassis, str) or len(chassis) != CHASSIS_LENGTH:
        raise ValidationException(
            "chassis", chassis, f"Chassis must have {CHASSIS_LENGTH} characters"
        )


def _validate_registration_number(registration_number: Any) -> None:
    if not isinstance(
        registration_number, str
    ) or not REGISTRATION_NUMBER_PATTERN.fullmatch(registration_number):
        raise ValidationException(
            "registration_number",
            registration_number,
            f"Renavam must have {REGISTRATION_NUMBER_LENGTH} digits",
        )


def _validate_year(year: Any, current_year: int) -> None:
    max_year = current_year + 1
    # bool is an int subclass; True/False are not years
    if (
        isinstance(year, bool)
        or not isinstance(year, int)
        or not MIN_VEHICLE_YEAR <= year <= max_year
    ):
        raise ValidationException(
            "year",
            year,
            "Invalid year",
            extra={"min": MIN_VEHICLE_YEAR, "max": max_year},
        )


def _validate_text(name: str, value: Any) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationException(name, value, "must not be empty")


def _coerce_type(value: Any) -> VehicleType:
    if isinstance(value, VehicleType):
        return value
    try:
        return VehicleType(value)
    except (ValueError, TypeError):
        raise ValidationException(
            "type",
            value,
            "Invalid vehicle type",
            extra={"allowed": [t.value for t in VehicleType]},
        ) from None


def _as_utc(moment: datetime) -> datetime:
    # Naive timestamps (e.g. read back from SQLite) are taken as UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass(frozen=True)
class Vehicle:
    """
    Registered vehicle aggregate.

    Immutable: fields are set by the constructor and changed only through
    ``update``, which validates and returns a new instance. Validation runs
    in a fixed order (plate, chassis, renavam, year, make, model, type,
    color) and the first failure is raised.

    Attributes:
        plate: License plate, ``ABC-1234`` (legacy) or ``ABC1D23`` (current)
        chassis: 17-character chassis number, stored as given
        registration_number: 11-digit national registration number (renavam)
        make: Manufacturer
        model: Model name
        year: Model year in [1886, current year + 1]
        type: Vehicle category
        color: Free-form color
        id: Opaque identifier, generated when absent
        created_at: Creation timestamp, never changes
        updated_at: Refreshed on every successful update
        clock: Time source used for timestamps and the year bound
    """

    plate: str
    chassis: str
    registration_number: str
    make: str
    model: str
    year: int
    type: VehicleType
    color: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    clock: Clock = field(default=utc_now, repr=False, compare=False)

    def __post_init__(self):
        """Validate invariants and fill generated fields."""
        _validate_plate(self.plate)
        _validate_chassis(self.chassis)
        _validate_registration_number(self.registration_number)
        _validate_year(self.year, self.clock().year)
        _validate_text("make", self.make)
        _validate_text("model", self.model)
        object.__setattr__(self, "type", _coerce_type(self.type))
        if self.color is not None and not isinstance(self.color, str):
            raise ValidationException("color", self.color, "must be a string")

        if not self.id:
            object.__setattr__(self, "id", str(uuid.uuid4()))

        created_at = _as_utc(self.created_at or self.clock())
        object.__setattr__(self, "created_at", created_at)
        updated_at = _as_utc(self.updated_at) if self.updated_at else created_at
        object.__setattr__(self, "updated_at", updated_at)

    def update(self, changes: Mapping[str, Any]) -> "Vehicle":
        """
        Apply a partial change set.

        Only the supplied fields are replaced; each is validated by the same
        rule as construction. The receiver is never modified, so a failed
        update leaves it exactly as it was.

        Args:
            changes: Mapping of field name to new value (subset of UPDATABLE_FIELDS)

        Returns:
            New Vehicle with the changes applied and ``updated_at`` refreshed

        Raises:
            ValidationException: If a field is unknown, immutable or invalid
        """
        for name in changes:
            if name not in UPDATABLE_FIELDS:
                raise ValidationException(name, changes[name], "Field cannot be updated")

        updated_at = max(_as_utc(self.clock()), self.updated_at)
        return replace(self, **dict(changes), updated_at=updated_at)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary for transport."""
        return {
            "id": self.id,
            "plate": self.plate,
            "chassis": self.chassis,
            "registration_number": self.registration_number,
            "make": self.make,
            "model": self.model,
            "year": self.year,
            "color": self.color,
            "type": self.type.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
