"""Ledger Entry Domain Entity

Charges (money owed) and payment entries (money received) per customer.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Numeric
from src.domain.base import BaseModel, Timestamp, generate_uuid, utc_now


class EntryType(str, Enum):
    """Ledger entry types"""
    CHARGE = "Charge"
    PAYMENT = "Payment"
    REFUND = "Refund"


class ChargeCategory:
    """
    Charge categories

    Stored as plain strings so tenants can introduce their own; the ones
    below drive allocation order and dashboard metrics.
    """
    INITIAL_FEE = "InitialFee"
    EXTENSION = "Extension"
    RENTAL = "Rental"
    FINES = "Fines"
    OTHER = "Other"

    # Order in which a payment settles outstanding charges
    ALLOCATION_ORDER = (INITIAL_FEE, EXTENSION, RENTAL, FINES, OTHER)


class LedgerEntry(BaseModel, table=True):
    """
    LedgerEntry - One line of a customer's account

    Domain Rules:
    - Charges carry a positive amount and 0 <= remaining_amount <= amount
    - remaining_amount only decreases, and only through PaymentApplications
    - Payment entries store a negative amount with remaining_amount 0
    - Rental charges due in the future do not count as outstanding
    """

    __tablename__ = "ledger_entries"
    __table_args__ = (
        CheckConstraint("remaining_amount >= 0", name="remaining_non_negative"),
        Index("ix_ledger_entries_customer_type", "customer_id", "type"),
        Index("ix_ledger_entries_rental_id", "rental_id"),
        Index("ix_ledger_entries_due_date", "due_date"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    tenant_id: Optional[str] = Field(default=None)

    customer_id: str = Field(foreign_key="customers.id")

    rental_id: Optional[str] = Field(default=None, foreign_key="rentals.id")

    payment_id: Optional[str] = Field(
        default=None,
        unique=True,
        description="Payment this entry records (payment entries only)"
    )

    type: EntryType = Field(description="Charge, Payment or Refund")

    category: str = Field(default=ChargeCategory.OTHER)

    amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Signed amount; charges positive, payment entries negative"
    )

    remaining_amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
        description="Unpaid portion of a charge"
    )

    due_date: Optional[date] = Field(default=None)

    entry_date: date = Field(default_factory=date.today)

    reference: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)

    @property
    def is_settled(self) -> bool:
        return self.type == EntryType.CHARGE and self.remaining_amount == 0
