"""Invoice Domain Entity

Rental invoice with its price breakdown. Payment status is never stored; it
is derived from captured payment applications.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String
from src.domain.base import BaseModel, Timestamp, generate_uuid, utc_now


class InvoiceStatus(str, Enum):
    """Computed invoice payment status"""
    PAID = "paid"
    PARTIAL = "partial"
    PENDING = "pending"
    OVERDUE = "overdue"


def _money_column(nullable: bool = False) -> Column:
    return Column(Numeric(12, 2), nullable=nullable, default=0)


class Invoice(BaseModel, table=True):
    """
    Invoice - Bill for a rental

    Domain Rules:
    - invoice_number must be unique
    - total_amount covers every line of the breakdown
    - Paid amount counts only applications from collected payments
    """

    __tablename__ = "invoices"
    __table_args__ = (
        Index("ix_invoices_tenant_id", "tenant_id"),
        Index("ix_invoices_rental_id", "rental_id"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    tenant_id: Optional[str] = Field(default=None)

    rental_id: Optional[str] = Field(default=None, foreign_key="rentals.id")

    customer_id: Optional[str] = Field(default=None, foreign_key="customers.id")

    invoice_number: str = Field(
        sa_column=Column(String(50), nullable=False, unique=True),
        description="Unique invoice number (e.g., INV-2024-000123)"
    )

    invoice_date: date = Field(default_factory=date.today)

    due_date: Optional[date] = Field(default=None)

    rental_fee: Decimal = Field(default=Decimal("0"), sa_column=_money_column())
    tax_amount: Decimal = Field(default=Decimal("0"), sa_column=_money_column())
    service_fee: Decimal = Field(default=Decimal("0"), sa_column=_money_column())
    security_deposit: Decimal = Field(default=Decimal("0"), sa_column=_money_column())
    insurance_premium: Decimal = Field(default=Decimal("0"), sa_column=_money_column())
    delivery_fee: Decimal = Field(default=Decimal("0"), sa_column=_money_column())
    extras_total: Decimal = Field(default=Decimal("0"), sa_column=_money_column())

    total_amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=_money_column(),
        description="Invoice total"
    )

    currency: str = Field(default="USD", max_length=3)

    created_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)

    def breakdown(self) -> list[tuple[str, Decimal]]:
        """Non-zero breakdown lines in display order"""
        lines = [
            ("Rental fee", self.rental_fee),
            ("Tax", self.tax_amount),
            ("Service fee", self.service_fee),
            ("Security deposit", self.security_deposit),
            ("Insurance premium", self.insurance_premium),
            ("Delivery fee", self.delivery_fee),
            ("Extras", self.extras_total),
        ]
        return [(label, amount) for label, amount in lines if amount]
