"""Installment Domain Entities

Tenant installment policy, per-rental installment plans and the schedule of
individual installment charges.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, Numeric, UniqueConstraint
from src.domain.base import BaseModel, Timestamp, generate_uuid, utc_now


class PlanType(str, Enum):
    FULL = "full"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class SplitBasis(str, Enum):
    """Which price components are divided across installments"""
    RENTAL_ONLY = "rental_only"
    RENTAL_TAX = "rental_tax"
    RENTAL_TAX_EXTRAS = "rental_tax_extras"


class PlanStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    OVERDUE = "overdue"


class InstallmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    PROCESSING = "processing"
    PAID = "paid"
    FAILED = "failed"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class InstallmentConfig(BaseModel, table=True):
    """
    InstallmentConfig - Tenant installment policy

    Domain Rules:
    - One config per tenant
    - Monthly cadence takes precedence when both thresholds are met
    - Security deposit and one-time fees are never split
    """

    __tablename__ = "installment_configs"
    __table_args__ = (
        CheckConstraint("min_days_for_weekly > 0", name="min_days_weekly_positive"),
        CheckConstraint("min_days_for_monthly > 0", name="min_days_monthly_positive"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    tenant_id: Optional[str] = Field(default=None, unique=True)
    enabled: bool = Field(default=True)
    min_days_for_weekly: int = Field(default=7)
    min_days_for_monthly: int = Field(default=30)
    max_installments_weekly: int = Field(default=4)
    max_installments_monthly: int = Field(default=6)
    charge_first_upfront: bool = Field(default=True)
    what_gets_split: SplitBasis = Field(default=SplitBasis.RENTAL_TAX)
    grace_period_days: int = Field(default=3)
    max_retry_attempts: int = Field(default=3)
    retry_interval_days: int = Field(default=1)


class InstallmentPlan(BaseModel, table=True):
    """
    InstallmentPlan - Payment cadence chosen for one rental

    Domain Rules:
    - total_installable_amount == sum of scheduled installment amounts
    - paid_installments/total_paid only move forward
    - COMPLETED once every installment is paid
    """

    __tablename__ = "installment_plans"
    __table_args__ = (
        Index("ix_installment_plans_rental_id", "rental_id"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    tenant_id: Optional[str] = Field(default=None)

    rental_id: str = Field(foreign_key="rentals.id")

    customer_id: str = Field(foreign_key="customers.id")

    plan_type: PlanType

    total_installable_amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False)
    )

    number_of_installments: int = Field(default=1)

    installment_amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False)
    )

    upfront_amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0),
        description="Deposit and one-time fees billed at booking"
    )

    upfront_paid: bool = Field(default=False)

    stripe_customer_id: Optional[str] = Field(default=None)

    stripe_payment_method_id: Optional[str] = Field(default=None)

    status: PlanStatus = Field(default=PlanStatus.ACTIVE)

    paid_installments: int = Field(default=0)

    total_paid: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False, default=0)
    )

    next_due_date: Optional[date] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)

    updated_at: datetime = Field(default_factory=utc_now, sa_type=Timestamp)


class ScheduledInstallment(BaseModel, table=True):
    """
    ScheduledInstallment - One installment charge of a plan

    Domain Rules:
    - failure_count never exceeds the tenant's max_retry_attempts + 1
    - Unpaid past due_date + grace_period_days is OVERDUE
    """

    __tablename__ = "scheduled_installments"
    __table_args__ = (
        UniqueConstraint("installment_plan_id", "installment_number", name="uq_plan_installment_number"),
        Index("ix_scheduled_installments_status_due", "status", "due_date"),
    )

    id: str = Field(default_factory=generate_uuid, primary_key=True)

    tenant_id: Optional[str] = Field(default=None)

    installment_plan_id: str = Field(foreign_key="installment_plans.id")

    installment_number: int

    amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False)
    )

    due_date: date

    status: InstallmentStatus = Field(default=InstallmentStatus.SCHEDULED)

    ledger_entry_id: Optional[str] = Field(default=None, foreign_key="ledger_entries.id")

    stripe_payment_intent_id: Optional[str] = Field(default=None)

    payment_id: Optional[str] = Field(default=None)

    failure_count: int = Field(default=0)

    last_failure_reason: Optional[str] = Field(default=None)

    last_attempted_at: Optional[datetime] = Field(default=None, sa_type=Timestamp)

    next_retry_date: Optional[date] = Field(default=None)

    paid_at: Optional[datetime] = Field(default=None, sa_type=Timestamp)
