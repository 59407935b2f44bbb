"""Data Transfer Objects for Billing Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field
from src.domain.invoice import InvoiceStatus
from .ledger_rules import BalanceStatus


class ApplyPaymentCommandDTO(BaseModel):
    """
    Command DTO for allocating a payment

    Used as input to ApplyPayment use case.
    """

    payment_id: str = Field(
        ...,
        description="Payment to allocate"
    )

    target_categories: Optional[List[str]] = Field(
        default=None,
        description="Charge categories to settle, in priority order (default: standard FIFO order)"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "payment_id": "0b6f8c1e-2f0e-4a8e-9d55-3a5f4f0d8a11",
                "target_categories": ["Rental", "Fines"]
            }
        }
    )


class AllocationDTO(BaseModel):
    """One allocation made by ApplyPayment"""

    charge_entry_id: str
    category: str
    amount_applied: Decimal
    charge_remaining: Decimal


class ApplyPaymentResponseDTO(BaseModel):
    """
    Response DTO for payment allocation

    Returned from ApplyPayment use case.
    """

    payment_id: str = Field(..., description="Allocated payment")

    payment_status: str = Field(..., description="Applied, Partial or Credit")

    total_allocated: Decimal = Field(
        ...,
        description="Amount allocated in this call"
    )

    remaining_credit: Decimal = Field(
        ...,
        description="Unallocated amount left on the payment"
    )

    allocations: List[AllocationDTO] = Field(default_factory=list)


class OutstandingBalanceDTO(BaseModel):
    customer_id: str
    outstanding: Decimal
    as_of: date


class CustomerBalanceDTO(BaseModel):
    """
    Response DTO for a customer's classified balance

    ``balance`` is the display amount and is never negative; ``status``
    says which way it points.
    """

    customer_id: str = Field(..., description="Customer identifier")

    balance: Decimal = Field(..., description="Display balance (>= 0)")

    status: BalanceStatus = Field(..., description="Settled, In Debt or In Credit")

    total_charges: Decimal

    total_payments: Decimal

    outstanding_debt: Decimal

    available_credit: Decimal

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "customer_id": "cus_123",
                "balance": "120.00",
                "status": "In Debt",
                "total_charges": "900.00",
                "total_payments": "780.00",
                "outstanding_debt": "150.00",
                "available_credit": "30.00"
            }
        }
    )


class InvoiceStatusDTO(BaseModel):
    """Paid amount and computed status of an invoice"""

    invoice_id: str
    invoice_number: str
    total_amount: Decimal
    paid_amount: Decimal
    balance_due: Decimal
    computed_status: InvoiceStatus
    due_date: Optional[date] = None


class InvoicePdfDTO(BaseModel):
    invoice_id: str
    invoice_number: str
    pdf_base64: str = Field(..., description="PDF document encoded as base64")


class AllocationDiscrepancyDTO(BaseModel):
    """
    A charge or payment whose recorded balance disagrees with its allocations
    """

    entity_type: str = Field(..., description="'charge' or 'payment'")

    entity_id: str

    expected_applied: Decimal = Field(
        ...,
        description="amount - remaining_amount as recorded on the row"
    )

    recorded_applied: Decimal = Field(
        ...,
        description="Sum of amount_applied across allocation records"
    )

    discrepancy: Decimal

    detail: Optional[str] = None


class ReconciliationResultDTO(BaseModel):
    """Result of an allocation reconciliation run"""

    charges_checked: int
    payments_checked: int
    discrepancies_found: int
    discrepancies: List[AllocationDiscrepancyDTO] = Field(default_factory=list)
    reconciliation_time: datetime
    execution_time_ms: int
