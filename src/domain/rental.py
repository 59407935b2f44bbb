"""Rental Domain Entity

A booking of one vehicle by one customer, together with its e-signature
agreement lifecycle.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric
from src.domain.base import BaseModel, Timestamp, generate_uuid, utc_now


class RentalStatus(str, Enum):
    """Rental lifecycle states"""
    PENDING = "Pending"
    ACTIVE = "Active"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class DocumentStatus(str, Enum):
    """
    Internal e-signature document states

    Provider vocabularies are mapped onto these; anything unrecognised
    becomes UNKNOWN.
    """
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    SIGNED = "signed"
    COMPLETED = "completed"
    DECLINED = "declined"
    VOIDED = "voided"
    EXPIRED = "expired"
    UNKNOWN = "unknown"


class Rental(BaseModel, table=True):
    """
    Rental - Vehicle booking

    Domain Rules:
    - status ACTIVE implies the vehicle is RENTED
    - status CANCELLED implies the vehicle is back to AVAILABLE
    - Both facts are written in the same transaction as the rental status
    - Cancellation notes are appended, never overwritten
    """

    __tablename__ = "rentals"
    __table_args__ = (
        Index("ix_rentals_tenant_status", "tenant_id", "status"),
        Index("ix_rentals_envelope_id", "docusign_envelope_id"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    tenant_id: Optional[str] = Field(default=None)

    customer_id: str = Field(foreign_key="customers.id", index=True)

    vehicle_id: Optional[str] = Field(default=None, foreign_key="vehicles.id")

    start_date: Optional[date] = Field(default=None)

    end_date: Optional[date] = Field(default=None)

    status: RentalStatus = Field(default=RentalStatus.PENDING)

    monthly_amount: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(12, 2), nullable=True),
        description="Recurring amount for monthly rentals"
    )

    document_status: DocumentStatus = Field(default=DocumentStatus.PENDING)

    docusign_envelope_id: Optional[str] = Field(
        default=None,
        description="External envelope/document id at the signing provider"
    )

    signed_document_id: Optional[str] = Field(
        default=None,
        description="CustomerDocument holding the signed agreement"
    )

    envelope_completed_at: Optional[datetime] = Field(default=None, sa_type=Timestamp)

    notes: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)

    updated_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)

    @property
    def booking_reference(self) -> str:
        return f"RNT-{self.id[:8].upper()}"

    @property
    def duration_days(self) -> Optional[int]:
        if self.start_date is None or self.end_date is None:
            return None
        return (self.end_date - self.start_date).days

    def append_note(self, note: str) -> None:
        self.notes = f"{self.notes}\n\n{note}" if self.notes else note
