"""Vehicle Domain Entity"""

from datetime import datetime
from enum import Enum
from typing import Optional
from sqlmodel import Field, Index
from src.domain.base import BaseModel, Timestamp, generate_uuid, utc_now


class VehicleStatus(str, Enum):
    """Fleet availability states"""
    AVAILABLE = "Available"
    RENTED = "Rented"
    MAINTENANCE = "Maintenance"


class Vehicle(BaseModel, table=True):
    """
    Vehicle - Fleet unit owned by a tenant

    Domain Rules:
    - RENTED exactly while an Active rental holds it
    - Disposed vehicles are excluded from fleet utilisation
    """

    __tablename__ = "vehicles"
    __table_args__ = (
        Index("ix_vehicles_tenant_status", "tenant_id", "status"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    tenant_id: Optional[str] = Field(default=None)
    make: Optional[str] = Field(default=None)
    model: Optional[str] = Field(default=None)
    registration_number: Optional[str] = Field(default=None)
    status: VehicleStatus = Field(default=VehicleStatus.AVAILABLE)
    is_disposed: bool = Field(default=False)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)

    @property
    def display_name(self) -> str:
        name = " ".join(part for part in (self.make, self.model) if part)
        return name or "Vehicle"
