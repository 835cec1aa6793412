"""
Unit tests for domain entities.

Tests for Vehicle construction, field rules, partial updates and
plate format detection.
"""

from datetime import datetime, timedelta, timezone
from itertools import chain, repeat

import pytest

from vehicle_registry.domain.entities import (
    MIN_VEHICLE_YEAR,
    PlateFormat,
    Vehicle,
    VehicleType,
    is_valid_plate,
    plate_format,
)
from vehicle_registry.domain.exceptions import ValidationException

from .conftest import FIXED_NOW


def build(clock, **overrides):
    data = {
        "plate": "ABC-1234",
        "chassis": "1HGBH41JXMN109186",
        "registration_number": "12345678901",
        "make": "Honda",
        "model": "Civic",
        "year": 2023,
        "color": "BLUE",
        "type": VehicleType.CAR,
    }
    data.update(overrides)
    return Vehicle(**data, clock=clock)


class TestPlateFormat:
    """Tests for plate format detection."""

    @pytest.mark.parametrize("plate", ["ABC-1234", "XYZ-0000"])
    def test_legacy_plate(self, plate):
        assert plate_format(plate) == PlateFormat.LEGACY

    @pytest.mark.parametrize("plate", ["ABC1D23", "BRA2E19"])
    def test_current_plate(self, plate):
        assert plate_format(plate) == PlateFormat.CURRENT

    @pytest.mark.parametrize(
        "plate",
        ["abc-1234", "ABC1234", "AB-1234", "ABC-12345", "ABC1d23", "ABC-1234\n", "", None, 1234],
    )
    def test_invalid_plate(self, plate):
        assert plate_format(plate) is None
        assert not is_valid_plate(plate)


class TestVehicleConstruction:
    """Tests for Vehicle creation and invariants."""

    def test_valid_vehicle_keeps_input_fields(self, fixed_clock):
        vehicle = build(fixed_clock)

        assert vehicle.plate == "ABC-1234"
        assert vehicle.chassis == "1HGBH41JXMN109186"
        assert vehicle.registration_number == "12345678901"
        assert vehicle.make == "Honda"
        assert vehicle.model == "Civic"
        assert vehicle.year == 2023
        assert vehicle.color == "BLUE"
        assert vehicle.type == VehicleType.CAR

    def test_generated_fields(self, fixed_clock):
        vehicle = build(fixed_clock)

        assert vehicle.id
        assert vehicle.created_at == FIXED_NOW
        assert vehicle.updated_at == FIXED_NOW

    def test_ids_are_unique(self, fixed_clock):
        assert build(fixed_clock).id != build(fixed_clock).id

    def test_given_id_and_timestamps_are_kept(self, fixed_clock):
        created = datetime(2020, 1, 1, tzinfo=timezone.utc)
        vehicle = build(fixed_clock, id="vehicle-1", created_at=created)

        assert vehicle.id == "vehicle-1"
        assert vehicle.created_at == created
        assert vehicle.updated_at == created

    def test_naive_timestamps_are_utc(self, fixed_clock):
        vehicle = build(fixed_clock, created_at=datetime(2020, 1, 1))
        assert vehicle.created_at.tzinfo == timezone.utc

    def test_type_string_is_coerced(self, fixed_clock):
        vehicle = build(fixed_clock, type="MOTORCYCLE")
        assert vehicle.type is VehicleType.MOTORCYCLE

    def test_current_plate_format_accepted(self, fixed_clock):
        assert build(fixed_clock, plate="ABC1D23").plate == "ABC1D23"

    def test_chassis_stored_as_given(self, fixed_clock):
        assert build(fixed_clock, chassis="1hgbh41jxmn109186").chassis == "1hgbh41jxmn109186"

    def test_color_is_optional(self, fixed_clock):
        assert build(fixed_clock, color=None).color is None

    def test_invalid_plate(self, fixed_clock):
        with pytest.raises(ValidationException, match="Invalid plate format") as exc_info:
            build(fixed_clock, plate="INVALID")
        assert exc_info.value.field == "plate"

    @pytest.mark.parametrize("chassis", ["1HGBH41JXMN10918", "1HGBH41JXMN1091860", ""])
    def test_invalid_chassis_length(self, fixed_clock, chassis):
        with pytest.raises(ValidationException, match="Chassis must have 17 characters"):
            build(fixed_clock, chassis=chassis)

    @pytest.mark.parametrize("renavam", ["1234567890", "123456789012", "1234567890A"])
    def test_invalid_renavam(self, fixed_clock, renavam):
        with pytest.raises(ValidationException, match="Renavam must have 11 digits"):
            build(fixed_clock, registration_number=renavam)

    def test_invalid_type(self, fixed_clock):
        with pytest.raises(ValidationException, match="Invalid vehicle type"):
            build(fixed_clock, type="BOAT")

    @pytest.mark.parametrize("field", ["make", "model"])
    def test_empty_text_fields(self, fixed_clock, field):
        with pytest.raises(ValidationException, match="must not be empty"):
            build(fixed_clock, **{field: "  "})

    def test_first_failure_wins(self, fixed_clock):
        """Plate is checked before chassis, renavam and year."""
        with pytest.raises(ValidationException) as exc_info:
            build(fixed_clock, plate="bad", chassis="short", registration_number="x", year=1)
        assert exc_info.value.field == "plate"

        with pytest.raises(ValidationException) as exc_info:
            build(fixed_clock, chassis="short", registration_number="x", year=1)
        assert exc_info.value.field == "chassis"

        with pytest.raises(ValidationException) as exc_info:
            build(fixed_clock, registration_number="x", year=1)
        assert exc_info.value.field == "registration_number"


class TestYearBounds:
    """Model year must lie in [1886, current year + 1]."""

    def test_year_before_first_motor_vehicle(self, fixed_clock):
        with pytest.raises(ValidationException, match="Invalid year"):
            build(fixed_clock, year=MIN_VEHICLE_YEAR - 1)

    def test_first_motor_vehicle_year(self, fixed_clock):
        assert build(fixed_clock, year=1886).year == 1886

    def test_next_model_year(self, fixed_clock):
        assert build(fixed_clock, year=FIXED_NOW.year + 1).year == 2025

    def test_two_years_ahead(self, fixed_clock):
        with pytest.raises(ValidationException, match="Invalid year") as exc_info:
            build(fixed_clock, year=FIXED_NOW.year + 2)
        assert exc_info.value.details["max"] == 2025

    def test_bound_follows_clock(self):
        later = lambda: datetime(2030, 1, 1, tzinfo=timezone.utc)  # noqa: E731
        assert build(later, year=2031).year == 2031

    @pytest.mark.parametrize("year", [True, "2023", 2023.0])
    def test_non_integer_year(self, fixed_clock, year):
        with pytest.raises(ValidationException, match="Invalid year"):
            build(fixed_clock, year=year)


class TestVehicleUpdate:
    """Tests for partial updates."""

    def test_update_changes_only_supplied_fields(self, ticking_clock):
        vehicle = build(ticking_clock)

        updated = vehicle.update({"color": "RED", "year": 2024})

        assert updated.color == "RED"
        assert updated.year == 2024
        assert updated.plate == vehicle.plate
        assert updated.chassis == vehicle.chassis
        assert updated.registration_number == vehicle.registration_number
        assert updated.make == vehicle.make
        assert updated.id == vehicle.id
        assert updated.created_at == vehicle.created_at

    def test_update_advances_updated_at(self, ticking_clock):
        vehicle = build(ticking_clock)
        updated = vehicle.update({"model": "Fit"})
        assert updated.updated_at > vehicle.updated_at

    def test_updated_at_never_moves_backwards(self):
        # Construction reads the clock twice; later reads go back an hour
        moments = chain([FIXED_NOW, FIXED_NOW], repeat(FIXED_NOW - timedelta(hours=1)))
        vehicle = build(lambda: next(moments))

        updated = vehicle.update({"model": "Fit"})

        assert updated.updated_at == vehicle.updated_at == FIXED_NOW

    def test_failed_update_leaves_vehicle_unchanged(self, ticking_clock):
        vehicle = build(ticking_clock)
        before = vehicle.to_dict()

        with pytest.raises(ValidationException, match="Invalid plate format"):
            vehicle.update({"color": "RED", "plate": "nope"})

        assert vehicle.to_dict() == before

    def test_update_revalidates_year(self, ticking_clock):
        vehicle = build(ticking_clock)
        with pytest.raises(ValidationException, match="Invalid year"):
            vehicle.update({"year": 1885})

    @pytest.mark.parametrize("field", ["id", "created_at", "updated_at", "owner"])
    def test_immutable_or_unknown_fields_rejected(self, ticking_clock, field):
        vehicle = build(ticking_clock)
        with pytest.raises(ValidationException, match="Field cannot be updated"):
            vehicle.update({field: "x"})

    def test_direct_assignment_is_not_allowed(self, fixed_clock):
        vehicle = build(fixed_clock)
        with pytest.raises(AttributeError):
            vehicle.plate = "XYZ-9876"


class TestVehicleSerialization:
    def test_to_dict(self, fixed_clock):
        data = build(fixed_clock, id="v-1").to_dict()

        assert data == {
            "id": "v-1",
            "plate": "ABC-1234",
            "chassis": "1HGBH41JXMN109186",
            "registration_number": "12345678901",
            "make": "Honda",
            "model": "Civic",
            "year": 2023,
            "color": "BLUE",
            "type": "CAR",
            "created_at": FIXED_NOW,
            "updated_at": FIXED_NOW,
        }

    def test_equality_ignores_clock(self, fixed_clock):
        a = build(fixed_clock, id="v-1")
        b = build(lambda: FIXED_NOW, id="v-1")
        assert a == b
