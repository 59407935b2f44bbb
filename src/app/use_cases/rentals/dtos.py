"""Data Transfer Objects for Rental Use Cases

Cancellation payloads travel in camelCase on the wire; fields are declared in
snake_case and aliased.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from src.app.services.notification_service import CancellationNotice


class RefundType(str, Enum):
    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"


class RefundOutcomeType(str, Enum):
    """What actually happened at the payment processor"""
    FULL = "full"
    PARTIAL = "partial"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"
    ERROR = "error"


class CancelRentalCommandDTO(BaseModel):
    """
    Command DTO for cancelling a rental

    Used as input to CancelRental use case.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "rentalId": "5c1b2f7a-8d0e-4e8f-a1f4-77a3c1d9e001",
                "refundType": "partial",
                "refundAmount": 120.00,
                "reason": "Customer changed travel plans",
                "cancelledBy": "admin-42",
            }
        },
    )

    rental_id: str = Field(..., min_length=1)

    payment_id: Optional[str] = Field(
        default=None,
        description="Payment to refund; defaults to the latest processor-backed payment on the rental"
    )

    refund_type: RefundType = Field(default=RefundType.NONE)

    refund_amount: Optional[Decimal] = Field(
        default=None,
        description="Required for partial refunds; 0 < amount <= payment amount"
    )

    reason: str = Field(default="")

    cancelled_by: str = Field(default="admin")

    tenant_id: Optional[str] = None


class RefundOutcomeDTO(BaseModel):
    """Processor outcome recorded in the rental notes"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: RefundOutcomeType
    message: Optional[str] = None
    refund_id: Optional[str] = None
    amount: Optional[Decimal] = None
    status: Optional[str] = None


class CancelRentalResponseDTO(BaseModel):
    """
    Response DTO for a cancellation

    Returned from CancelRental use case.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    message: str = "Rental cancelled successfully"
    refund: Optional[RefundOutcomeDTO] = None
    notification_data: CancellationNotice
