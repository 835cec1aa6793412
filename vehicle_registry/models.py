"""
Database models for the vehicle registry.

This module defines the SQLAlchemy ORM model backing the durable
vehicle repository.
"""

from typing import Any

from sqlalchemy import Column, DateTime, Index, Integer, String
from sqlalchemy.orm import declarative_base

Base: Any = declarative_base()


class VehicleRecord(Base):
    """
    One row per registered vehicle.

    Plate, chassis and registration number carry unique indexes so the
    database rejects duplicates even if two writers bypass the service.

    Attributes:
        id: Vehicle identifier (UUID string)
        plate: License plate (legacy or current format)
        chassis: 17-character chassis number
        registration_number: 11-digit renavam
        make: Manufacturer
        model: Model name
        year: Model year
        color: Free-form color
        type: Vehicle category (CAR, MOTORCYCLE, TRUCK)
        created_at: Timestamp of registration
        updated_at: Timestamp of last update
    """

    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True)

    # Unique identifiers
    plate = Column(String(8), unique=True, index=True, nullable=False)
    chassis = Column(String(17), unique=True, index=True, nullable=False)
    registration_number = Column(String(11), unique=True, index=True, nullable=False)

    # Vehicle information
    make = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    color = Column(String(50), nullable=True)
    type = Column(String(20), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("idx_vehicle_make_model", "make", "model"),)

    def __repr__(self):
        return f"<VehicleRecord(id={self.id}, plate={self.plate})>"
