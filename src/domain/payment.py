"""Payment Domain Entities

Payments received from customers and the allocation records tying them to
the charges they settle.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Numeric, UniqueConstraint
from src.domain.base import BaseModel, Timestamp, generate_uuid, utc_now
from src.domain.ledger_entry import ChargeCategory


class PaymentStatus(str, Enum):
    """Payment bookkeeping states"""
    PENDING = "Pending"
    APPLIED = "Applied"
    PARTIAL = "Partial"
    CREDIT = "Credit"
    REFUNDED = "Refunded"
    PARTIAL_REFUND = "Partial Refund"
    CANCELLED = "Cancelled"


class CaptureStatus(str, Enum):
    """Processor capture states recorded on the payment"""
    REQUIRES_CAPTURE = "requires_capture"
    CAPTURED = "captured"
    REFUNDED = "refunded"
    PARTIAL_REFUND = "partial_refund"
    CANCELLED = "cancelled"


class PaymentType(str, Enum):
    PAYMENT = "Payment"
    INITIAL_FEE = "InitialFee"
    FINE = "Fine"

    @property
    def ledger_category(self) -> str:
        """Category of the ledger entry that records this payment"""
        return {
            PaymentType.PAYMENT: ChargeCategory.RENTAL,
            PaymentType.INITIAL_FEE: ChargeCategory.INITIAL_FEE,
            PaymentType.FINE: ChargeCategory.FINES,
        }.get(self, ChargeCategory.OTHER)


class Payment(BaseModel, table=True):
    """
    Payment - Money received (or held) from a customer

    Domain Rules:
    - remaining_amount is the unallocated credit: 0 <= remaining_amount <= amount
    - Pre-authorisations (capture_status=requires_capture) are not collected
      money and never count as paid
    - Refund and cancellation outcomes are recorded on status/capture_status
    """

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="payment_amount_positive"),
        CheckConstraint("remaining_amount >= 0", name="payment_remaining_non_negative"),
        Index("ix_payments_customer_id", "customer_id"),
        Index("ix_payments_rental_id", "rental_id"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    tenant_id: Optional[str] = Field(default=None)

    customer_id: str = Field(foreign_key="customers.id")

    rental_id: Optional[str] = Field(default=None, foreign_key="rentals.id")

    amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Gross amount received"
    )

    remaining_amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
        description="Unallocated credit"
    )

    payment_type: PaymentType = Field(default=PaymentType.PAYMENT)

    method: Optional[str] = Field(default=None)

    payment_date: date = Field(default_factory=date.today)

    status: PaymentStatus = Field(default=PaymentStatus.PENDING)

    capture_status: Optional[CaptureStatus] = Field(default=None)

    stripe_payment_intent_id: Optional[str] = Field(default=None, index=True)

    stripe_refund_id: Optional[str] = Field(default=None)

    refund_amount: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(12, 2), nullable=True)
    )

    created_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)

    updated_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)

    @property
    def is_collected(self) -> bool:
        """True unless the payment is an uncaptured pre-authorisation"""
        return self.capture_status != CaptureStatus.REQUIRES_CAPTURE


class PaymentApplication(BaseModel, table=True):
    """
    PaymentApplication - Allocation of part of a payment to one charge

    Domain Rules:
    - Insert-only; written in the same transaction as the remaining_amount
      decrements it records
    - sum(amount_applied) per charge == charge.amount - charge.remaining_amount
    - sum(amount_applied) per payment == payment.amount - payment.remaining_amount
    """

    __tablename__ = "payment_applications"
    __table_args__ = (
        CheckConstraint("amount_applied > 0", name="amount_applied_positive"),
        UniqueConstraint("payment_id", "charge_entry_id", name="uq_payment_charge"),
        Index("ix_payment_applications_charge", "charge_entry_id"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    tenant_id: Optional[str] = Field(default=None)

    payment_id: str = Field(foreign_key="payments.id", index=True)

    charge_entry_id: str = Field(foreign_key="ledger_entries.id")

    amount_applied: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False)
    )

    created_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)
