"""Data Transfer Objects for Installment Use Cases"""

from datetime import date
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field
from src.domain.installment import PlanType, PlanStatus, InstallmentStatus


class PriceBreakdownDTO(BaseModel):
    """
    Booking price components

    Which of these are split into installments depends on the tenant's
    split basis; deposit and one-time fees are always billed upfront.
    """

    rental_fee: Decimal = Field(default=Decimal("0"), ge=0)
    tax_amount: Decimal = Field(default=Decimal("0"), ge=0)
    extras_total: Decimal = Field(default=Decimal("0"), ge=0)
    security_deposit: Decimal = Field(default=Decimal("0"), ge=0)
    service_fee: Decimal = Field(default=Decimal("0"), ge=0)
    delivery_fee: Decimal = Field(default=Decimal("0"), ge=0)
    collection_fee: Decimal = Field(default=Decimal("0"), ge=0)
    insurance_premium: Decimal = Field(default=Decimal("0"), ge=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "rental_fee": "1200.00",
                "tax_amount": "240.00",
                "extras_total": "60.00",
                "security_deposit": "500.00",
                "service_fee": "25.00"
            }
        }
    )


class GetInstallmentOptionsCommandDTO(BaseModel):
    tenant_id: Optional[str] = None
    rental_days: int = Field(..., ge=1, description="Rental duration in days")
    breakdown: PriceBreakdownDTO


class InstallmentOptionDTO(BaseModel):
    plan_type: PlanType
    number_of_installments: int
    installment_amount: Decimal
    installable_amount: Decimal
    upfront_amount: Decimal
    total_amount: Decimal
    recommended: bool = False


class InstallmentOptionsDTO(BaseModel):
    rental_days: int
    eligible_plan_type: Optional[PlanType] = Field(
        default=None,
        description="Cadence the policy selects (monthly wins when both thresholds are met)"
    )
    options: List[InstallmentOptionDTO]


class CreateInstallmentPlanCommandDTO(BaseModel):
    """
    Command DTO for creating an installment plan

    Used as input to CreateInstallmentPlan use case.
    """

    rental_id: str
    plan_type: PlanType
    breakdown: PriceBreakdownDTO
    stripe_customer_id: Optional[str] = None
    stripe_payment_method_id: Optional[str] = None
    booking_date: Optional[date] = Field(
        default=None,
        description="Booking confirmation date (default: today)"
    )


class ScheduledInstallmentDTO(BaseModel):
    id: str
    installment_number: int
    amount: Decimal
    due_date: date
    status: InstallmentStatus
    failure_count: int = 0
    next_retry_date: Optional[date] = None
    ledger_entry_id: Optional[str] = None


class InstallmentPlanDTO(BaseModel):
    id: str
    rental_id: str
    plan_type: PlanType
    status: PlanStatus
    total_installable_amount: Decimal
    number_of_installments: int
    installment_amount: Decimal
    upfront_amount: Decimal
    next_due_date: Optional[date] = None
    installments: List[ScheduledInstallmentDTO] = Field(default_factory=list)


class ProcessInstallmentResultDTO(BaseModel):
    """Outcome of one installment charge attempt"""

    installment_id: str
    outcome: str = Field(..., description="paid, failed, processing, released or skipped")
    status: InstallmentStatus
    payment_id: Optional[str] = None
    failure_reason: Optional[str] = None
    failure_count: int = 0
    next_retry_date: Optional[date] = None


class MarkOverdueResultDTO(BaseModel):
    checked: int
    marked_overdue: int


class InstallmentRunResultDTO(BaseModel):
    """
    Summary of one installment processor run

    Returned from InstallmentProcessorWorker.run_once.
    """

    reconciled: int = Field(default=0, description="Pending charges settled as paid or failed")
    released: int = Field(default=0, description="Stale charge claims returned to the queue")
    marked_overdue: int = 0
    processed: int = 0
    paid: int = 0
    failed: int = 0
    pending: int = Field(default=0, description="Charges the processor has not settled yet")
    skipped: int = 0
    errors: int = 0
    run_date: date
    execution_time_ms: int = 0
