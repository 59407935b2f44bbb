"""Request schemas for Billing API

Pydantic models for validating incoming HTTP requests.
"""

from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApplyPaymentRequestSchema(BaseModel):
    """
    Request schema for allocating a payment

    Used for POST /billing/payments/{payment_id}/apply endpoint.
    """

    target_categories: Optional[List[str]] = Field(
        default=None,
        description="Charge categories to settle, in priority order (default: InitialFee, Extension, Rental, Fines, Other)"
    )

    @field_validator("target_categories")
    @classmethod
    def validate_categories(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        """Non-empty list of non-blank category names when given"""
        if v is None:
            return v
        cleaned = [c.strip() for c in v if c and c.strip()]
        if not cleaned:
            raise ValueError("target_categories must name at least one category")
        return cleaned

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "target_categories": ["Rental", "Fines"]
            }
        }
    )
