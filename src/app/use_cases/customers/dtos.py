"""Data Transfer Objects for Customer Use Cases"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class CustomerSignupCommandDTO(BaseModel):
    """
    Command DTO for creating a customer portal account

    Used as input to CustomerSignup use case.
    """

    email: str = Field(..., description="Login email")

    password: str = Field(..., description="Plain password, hashed before storage")

    customer_id: Optional[str] = Field(
        default=None,
        description="Existing customer record to link (e.g. created at booking)"
    )

    tenant_id: Optional[str] = None

    customer_name: Optional[str] = None

    customer_phone: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "jane@example.com",
                "password": "correct-horse-battery",
                "tenant_id": "7d9f3c2a-1b4e-4c8a-9f00-5e6d7c8b9a01",
                "customer_name": "Jane Doe"
            }
        }
    )


class CustomerSignupResponseDTO(BaseModel):
    success: bool = True
    user_id: str
    customer_user_id: str
    customer_id: str
    message: str = "Account created successfully"
